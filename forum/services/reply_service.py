"""
Reply service — one level of threaded replies under a comment.

Same rules as comments: the acting member is re-read from the store on
every write, and only a reply's author may edit or delete it.
"""
import logging

from forum.errors import ErrorKind, Result, ServiceError
from forum.models import ArticleCommentReply, new_reply
from forum.repositories import CommentRepository, MemberRepository, PageRequest, ReplyRepository
from forum.schemas import PaginatedResponse, ReplyRequest, ReplyResponse
from forum.security import IdentityResolver
from forum.services.comment_service import resolve_current_member

logger = logging.getLogger(__name__)


def _reply_to_response(reply: ArticleCommentReply, nickname: str | None = None) -> ReplyResponse:
    return ReplyResponse(
        id=reply.id,
        comment_id=reply.article_comment_id,
        member_id=reply.member_id,
        nickname=nickname,
        content=reply.content,
        created_at=reply.created_at,
        modified_at=reply.modified_at,
    )


class ReplyService:
    def __init__(
        self,
        comments: CommentRepository,
        replies: ReplyRepository,
        members: MemberRepository,
        identity: IdentityResolver,
    ) -> None:
        self._comments = comments
        self._replies = replies
        self._members = members
        self._identity = identity

    async def create(
        self, credential: str | None, comment_id: int, data: ReplyRequest
    ) -> Result[ReplyResponse]:
        comment = await self._comments.find_by_id(comment_id)
        if comment is None:
            return ServiceError(ErrorKind.COMMENT_NOT_FOUND)

        member = await resolve_current_member(self._identity, self._members, credential)
        if isinstance(member, ServiceError):
            return member

        reply = await self._replies.save(new_reply(data.content, comment, member))
        logger.info("Member %s replied to comment %s (reply %s)", member.id, comment.id, reply.id)
        return _reply_to_response(reply, member.nickname)

    async def get_replies_by_comment(
        self, page: PageRequest, comment_id: int
    ) -> Result[PaginatedResponse]:
        comment = await self._comments.find_by_id(comment_id)
        if comment is None:
            return ServiceError(ErrorKind.COMMENT_NOT_FOUND)

        result = await self._replies.find_all_by_comment_ordered(comment, page)
        nicknames = await self._members.find_nicknames({r.member_id for r in result.items})
        return PaginatedResponse(
            items=[_reply_to_response(r, nicknames.get(r.member_id)) for r in result.items],
            total=result.total,
            page=page.page,
            page_size=page.page_size,
            pages=result.pages,
        )

    async def update(
        self, credential: str | None, reply_id: int, data: ReplyRequest
    ) -> Result[ReplyResponse]:
        reply = await self._replies.find_by_id(reply_id)
        if reply is None:
            return ServiceError(ErrorKind.REPLY_NOT_FOUND)

        member = await resolve_current_member(self._identity, self._members, credential)
        if isinstance(member, ServiceError):
            return member

        if member.id != reply.member_id:
            logger.warning("Member %s tried to edit reply %s", member.id, reply.id)
            return ServiceError(ErrorKind.NO_AUTHORITY)

        reply.update_content(data.content)
        reply = await self._replies.save(reply)
        return _reply_to_response(reply, member.nickname)

    async def delete(self, credential: str | None, reply_id: int) -> Result[None]:
        reply = await self._replies.find_by_id(reply_id)
        if reply is None:
            return ServiceError(ErrorKind.REPLY_NOT_FOUND)

        member = await resolve_current_member(self._identity, self._members, credential)
        if isinstance(member, ServiceError):
            return member

        if member.id != reply.member_id:
            logger.warning("Member %s tried to delete reply %s", member.id, reply.id)
            return ServiceError(ErrorKind.NO_AUTHORITY)

        await self._replies.delete_by_id(reply_id)
        logger.info("Member %s deleted reply %s", member.id, reply_id)
        return None
