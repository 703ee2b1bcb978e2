"""
Typed failure values returned by the service layer.

Services never raise for business-rule failures.  They return a
``ServiceError`` and the caller branches on ``error.kind``; the router
layer is the only place that turns one into an HTTP response.
"""
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar, Union

from fastapi import HTTPException, status


class ErrorKind(str, Enum):
    ARTICLE_NOT_FOUND = "NOT_FOUND_ARTICLE"
    COMMENT_NOT_FOUND = "NOT_FOUND_COMMENT"
    REPLY_NOT_FOUND = "NOT_FOUND_REPLY"
    MEMBER_NOT_FOUND = "NOT_FOUND_MEMBER"
    NO_AUTHORITY = "NO_AUTHORITY"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    DUPLICATE_MEMBER = "DUPLICATE_MEMBER"


_DEFAULT_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.ARTICLE_NOT_FOUND: "Article not found",
    ErrorKind.COMMENT_NOT_FOUND: "Comment not found",
    ErrorKind.REPLY_NOT_FOUND: "Reply not found",
    ErrorKind.MEMBER_NOT_FOUND: "Member not found",
    ErrorKind.NO_AUTHORITY: "Only the author can modify this resource",
    ErrorKind.UNAUTHENTICATED: "A valid access token is required",
    ErrorKind.DUPLICATE_MEMBER: "A member with this email or nickname already exists",
}

_HTTP_STATUS: dict[ErrorKind, int] = {
    ErrorKind.ARTICLE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.COMMENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.REPLY_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.MEMBER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.NO_AUTHORITY: status.HTTP_403_FORBIDDEN,
    ErrorKind.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.DUPLICATE_MEMBER: status.HTTP_409_CONFLICT,
}


@dataclass(frozen=True)
class ServiceError:
    kind: ErrorKind
    detail: str | None = None

    @property
    def message(self) -> str:
        return self.detail or _DEFAULT_MESSAGES[self.kind]

    @property
    def status_code(self) -> int:
        return _HTTP_STATUS[self.kind]


T = TypeVar("T")

# A service outcome: the success value or the reason it failed.
Result = Union[T, ServiceError]


def unwrap(result: Result[T]) -> T:
    """
    Return the success value of *result*, or raise the matching
    ``HTTPException`` when it is a ``ServiceError``.

    Only the router layer should call this.
    """
    if isinstance(result, ServiceError):
        headers = None
        if result.kind is ErrorKind.UNAUTHENTICATED:
            headers = {"WWW-Authenticate": "Bearer"}
        raise HTTPException(
            status_code=result.status_code,
            detail={"code": result.kind.value, "message": result.message},
            headers=headers,
        )
    return result
