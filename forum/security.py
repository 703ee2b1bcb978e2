"""
Identity resolution from bearer credentials.

The service layer only depends on ``IdentityResolver``; the JWT-backed
implementation verifies the token signature, expiry and type, and hands
back the member id carried in the ``sub`` claim.  The identity is *not*
trusted as current member state: services re-fetch the member by id.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from forum.config import settings
from forum.errors import ErrorKind, Result, ServiceError

logger = logging.getLogger(__name__)

_ACCESS_TOKEN_TYPE = "access"


@dataclass(frozen=True)
class MemberIdentity:
    """Who the credential says the caller is, as of token issue time."""

    id: int
    nickname: str | None = None


class IdentityResolver(ABC):
    """Maps an inbound request credential to a member identity."""

    @abstractmethod
    def resolve_member(self, credential: str | None) -> Result[MemberIdentity]:
        """Return the identity, or an ``UNAUTHENTICATED`` error."""
        ...


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from an ``Authorization: Bearer <token>`` value."""
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


class JwtIdentityResolver(IdentityResolver):
    """Resolves identities from HS256-signed access tokens."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        access_token_expire_minutes: int = 60,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._access_token_expire_minutes = access_token_expire_minutes

    def create_access_token(
        self,
        member_id: int,
        nickname: str | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self._access_token_expire_minutes))
        payload: dict[str, Any] = {
            "sub": str(member_id),
            "iat": now,
            "exp": expire,
            "type": _ACCESS_TOKEN_TYPE,
        }
        if nickname:
            payload["nickname"] = nickname
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def resolve_member(self, credential: str | None) -> Result[MemberIdentity]:
        token = extract_bearer_token(credential)
        if token is None:
            return ServiceError(ErrorKind.UNAUTHENTICATED, "Access token not provided")

        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except JWTError as exc:
            logger.debug("Rejected access token: %s", exc)
            return ServiceError(ErrorKind.UNAUTHENTICATED, "Invalid or expired access token")

        if payload.get("type") != _ACCESS_TOKEN_TYPE:
            return ServiceError(ErrorKind.UNAUTHENTICATED, "Invalid token type")

        try:
            member_id = int(payload["sub"])
        except (KeyError, TypeError, ValueError):
            return ServiceError(ErrorKind.UNAUTHENTICATED, "Token has no member subject")

        return MemberIdentity(id=member_id, nickname=payload.get("nickname"))


def get_token_provider() -> JwtIdentityResolver:
    """Resolver configured from application settings."""
    return JwtIdentityResolver(
        secret_key=settings.SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
        access_token_expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    )
