"""
Member service — registration and lookup for the Member aggregate.

Credential issuance is handled outside this service; members are only
created and read here.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from forum.errors import ErrorKind, Result, ServiceError
from forum.models import Member, new_member
from forum.repositories import MemberRepository
from forum.schemas import MemberCreate, MemberResponse

logger = logging.getLogger(__name__)


def _member_to_response(member: Member) -> MemberResponse:
    return MemberResponse(
        id=member.id,
        email=member.email,
        nickname=member.nickname,
        created_at=member.created_at,
    )


async def create_member(db: AsyncSession, data: MemberCreate) -> Result[MemberResponse]:
    """
    Create a new member.

    Email and nickname are checked up front so the common conflict comes
    back as DUPLICATE_MEMBER; the unique constraints still guard races.
    """
    members = MemberRepository(db)
    if await members.exists_with_email_or_nickname(data.email, data.nickname):
        return ServiceError(ErrorKind.DUPLICATE_MEMBER)

    member = await members.save(new_member(data.email, data.nickname))
    logger.info("Registered member %s (%s)", member.id, member.nickname)
    return _member_to_response(member)


async def get_member(db: AsyncSession, member_id: int) -> Result[MemberResponse]:
    member = await MemberRepository(db).find_by_id(member_id)
    if member is None:
        return ServiceError(ErrorKind.MEMBER_NOT_FOUND)
    return _member_to_response(member)
