"""
Comment service — comments on articles, with ownership enforcement.

Every operation that needs the acting member resolves it from the
request credential *and* re-reads the member row, so a token issued to
a member who has since been removed is rejected with NOT_FOUND_MEMBER.

Existence and ownership checks always run before any write, so a failed
call leaves the store untouched.  Reply counts are fresh COUNT queries
on every call and are never cached.
"""
import logging

from forum.errors import ErrorKind, Result, ServiceError
from forum.models import Article, ArticleComment, Member, new_comment
from forum.repositories import (
    ArticleRepository,
    CommentRepository,
    MemberRepository,
    PageRequest,
    ReplyRepository,
)
from forum.schemas import CommentRequest, CommentResponse, PaginatedResponse
from forum.security import IdentityResolver

logger = logging.getLogger(__name__)


def _comment_to_response(
    comment: ArticleComment, reply_count: int, nickname: str | None = None
) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        article_id=comment.article_id,
        member_id=comment.member_id,
        nickname=nickname,
        content=comment.content,
        created_at=comment.created_at,
        modified_at=comment.modified_at,
        reply_count=reply_count,
    )


class CommentService:
    def __init__(
        self,
        articles: ArticleRepository,
        comments: CommentRepository,
        replies: ReplyRepository,
        members: MemberRepository,
        identity: IdentityResolver,
    ) -> None:
        self._articles = articles
        self._comments = comments
        self._replies = replies
        self._members = members
        self._identity = identity

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def create(
        self, credential: str | None, article_id: int, data: CommentRequest
    ) -> Result[CommentResponse]:
        article = await self._articles.find_by_id(article_id)
        if article is None:
            return ServiceError(ErrorKind.ARTICLE_NOT_FOUND)

        member = await self.member_from_credential(credential)
        if isinstance(member, ServiceError):
            return member

        comment = await self._comments.save(new_comment(data.content, article, member))
        logger.info(
            "Member %s commented on article %s (comment %s)", member.id, article.id, comment.id
        )
        # A new comment has no replies yet.
        return _comment_to_response(comment, 0, member.nickname)

    async def get_comments_by_article(
        self, page: PageRequest, article_id: int
    ) -> Result[PaginatedResponse]:
        """
        Return one page of the article's comments, oldest first, each
        carrying its live reply count.
        """
        article = await self._articles.find_by_id(article_id)
        if article is None:
            return ServiceError(ErrorKind.ARTICLE_NOT_FOUND)

        result = await self._comments.find_all_by_article_ordered(article, page)
        nicknames = await self._members.find_nicknames({c.member_id for c in result.items})

        items = []
        for comment in result.items:
            reply_count = await self.reply_count(comment)
            items.append(
                _comment_to_response(comment, reply_count, nicknames.get(comment.member_id))
            )

        return PaginatedResponse(
            items=items,
            total=result.total,
            page=page.page,
            page_size=page.page_size,
            pages=result.pages,
        )

    async def update(
        self,
        credential: str | None,
        comment_id: int,
        data: CommentRequest,
        article_id: int | None = None,
    ) -> Result[CommentResponse]:
        comment = await self._find_comment(comment_id, article_id)
        if comment is None:
            return ServiceError(ErrorKind.COMMENT_NOT_FOUND)

        member = await self.member_from_credential(credential)
        if isinstance(member, ServiceError):
            return member

        if member.id != comment.member_id:
            logger.warning(
                "Member %s tried to edit comment %s owned by member %s",
                member.id, comment.id, comment.member_id,
            )
            return ServiceError(ErrorKind.NO_AUTHORITY)

        comment.update_content(data.content)
        comment = await self._comments.save(comment)
        logger.info("Member %s updated comment %s", member.id, comment.id)
        return _comment_to_response(comment, await self.reply_count(comment), member.nickname)

    async def delete(
        self, credential: str | None, comment_id: int, article_id: int | None = None
    ) -> Result[None]:
        """
        Delete a comment owned by the acting member.

        Replies under the comment are removed in the same transaction;
        they are never left pointing at a missing parent.
        """
        comment = await self._find_comment(comment_id, article_id)
        if comment is None:
            return ServiceError(ErrorKind.COMMENT_NOT_FOUND)

        member = await self.member_from_credential(credential)
        if isinstance(member, ServiceError):
            return member

        if member.id != comment.member_id:
            logger.warning(
                "Member %s tried to delete comment %s owned by member %s",
                member.id, comment.id, comment.member_id,
            )
            return ServiceError(ErrorKind.NO_AUTHORITY)

        removed_replies = await self._replies.delete_by_comment_id(comment_id)
        await self._comments.delete_by_id(comment_id)
        logger.info(
            "Member %s deleted comment %s (%d replies removed)",
            member.id, comment_id, removed_replies,
        )
        return None

    async def get_comment_count(self, article: Article) -> int:
        return await self._comments.count_by_article(article)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _find_comment(
        self, comment_id: int, article_id: int | None
    ) -> ArticleComment | None:
        """Load the comment, treating one filed under another article as missing."""
        comment = await self._comments.find_by_id(comment_id)
        if comment is None or (article_id is not None and comment.article_id != article_id):
            return None
        return comment

    async def reply_count(self, comment: ArticleComment) -> int:
        return await self._replies.count_by_comment_id(comment.id)

    async def member_from_credential(self, credential: str | None) -> Result[Member]:
        return await resolve_current_member(self._identity, self._members, credential)


async def resolve_current_member(
    identity: IdentityResolver, members: MemberRepository, credential: str | None
) -> Result[Member]:
    """
    Resolve the credential to an identity, then load that member's
    current row.  The token's own claims are never used as member state.
    """
    resolved = identity.resolve_member(credential)
    if isinstance(resolved, ServiceError):
        return resolved

    member = await members.find_by_id(resolved.id)
    if member is None:
        logger.warning("Credential refers to missing member %s", resolved.id)
        return ServiceError(ErrorKind.MEMBER_NOT_FOUND)
    return member
