"""
Repositories — the persistence operations the services are allowed to use.

Each repository wraps the request's ``AsyncSession`` and issues explicit
queries.  Relations on the ORM models are ``noload``; whenever a service
needs related data it calls a loader here instead of touching a relation
attribute.  Writes are flushed, never committed: the transaction belongs
to the ``get_db`` dependency.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, Sequence, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from forum.database import after_commit
from forum.models import Article, ArticleComment, ArticleCommentReply, Member, Reaction

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Paging value objects
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PageRequest:
    """1-based page number and page size."""

    page: int = 1
    page_size: int = 20

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if self.page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {self.page_size}")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass
class Page(Generic[T]):
    items: Sequence[T]
    total: int
    request: PageRequest = field(default_factory=PageRequest)

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.request.page_size) if self.total > 0 else 0


async def _count(db: AsyncSession, stmt) -> int:
    return (await db.execute(stmt)).scalar_one()


# ---------------------------------------------------------------------------
# Member
# ---------------------------------------------------------------------------

class MemberRepository:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def find_by_id(self, member_id: int) -> Member | None:
        result = await self._db.execute(select(Member).where(Member.id == member_id))
        return result.scalar_one_or_none()

    async def find_nicknames(self, member_ids: set[int]) -> dict[int, str]:
        """Batch-load display names for the given member ids."""
        if not member_ids:
            return {}
        result = await self._db.execute(
            select(Member.id, Member.nickname).where(Member.id.in_(member_ids))
        )
        return {row.id: row.nickname for row in result}

    async def exists_with_email_or_nickname(self, email: str, nickname: str) -> bool:
        stmt = (
            select(func.count())
            .select_from(Member)
            .where((Member.email == email) | (Member.nickname == nickname))
        )
        return await _count(self._db, stmt) > 0

    async def save(self, member: Member) -> Member:
        self._db.add(member)
        await self._db.flush()
        return member


# ---------------------------------------------------------------------------
# Article
# ---------------------------------------------------------------------------

class ArticleRepository:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def find_by_id(self, article_id: int) -> Article | None:
        result = await self._db.execute(select(Article).where(Article.id == article_id))
        return result.scalar_one_or_none()

    async def find_page(self, page: PageRequest) -> Page[Article]:
        """Newest articles first."""
        total = await _count(self._db, select(func.count()).select_from(Article))
        result = await self._db.execute(
            select(Article)
            .order_by(Article.created_at.desc(), Article.id.desc())
            .offset(page.offset)
            .limit(page.page_size)
        )
        return Page(items=result.scalars().all(), total=total, request=page)

    async def save(self, article: Article) -> Article:
        self._db.add(article)
        await self._db.flush()
        return article


# ---------------------------------------------------------------------------
# ArticleComment
# ---------------------------------------------------------------------------

class CommentRepository:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def find_by_id(self, comment_id: int) -> ArticleComment | None:
        result = await self._db.execute(
            select(ArticleComment).where(ArticleComment.id == comment_id)
        )
        return result.scalar_one_or_none()

    async def find_all_by_article_ordered(
        self, article: Article, page: PageRequest
    ) -> Page[ArticleComment]:
        """Comments of *article* oldest first; ties keep insertion order."""
        total = await self.count_by_article(article)
        result = await self._db.execute(
            select(ArticleComment)
            .where(ArticleComment.article_id == article.id)
            .order_by(ArticleComment.created_at.asc(), ArticleComment.id.asc())
            .offset(page.offset)
            .limit(page.page_size)
        )
        return Page(items=result.scalars().all(), total=total, request=page)

    async def count_by_article(self, article: Article) -> int:
        stmt = (
            select(func.count())
            .select_from(ArticleComment)
            .where(ArticleComment.article_id == article.id)
        )
        return await _count(self._db, stmt)

    async def save(self, comment: ArticleComment) -> ArticleComment:
        self._db.add(comment)
        await self._db.flush()
        return comment

    async def delete_by_id(self, comment_id: int) -> None:
        await self._db.execute(delete(ArticleComment).where(ArticleComment.id == comment_id))


# ---------------------------------------------------------------------------
# ArticleCommentReply
# ---------------------------------------------------------------------------

class ReplyRepository:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def find_by_id(self, reply_id: int) -> ArticleCommentReply | None:
        result = await self._db.execute(
            select(ArticleCommentReply).where(ArticleCommentReply.id == reply_id)
        )
        return result.scalar_one_or_none()

    async def find_all_by_comment_ordered(
        self, comment: ArticleComment, page: PageRequest
    ) -> Page[ArticleCommentReply]:
        total = await self.count_by_comment_id(comment.id)
        result = await self._db.execute(
            select(ArticleCommentReply)
            .where(ArticleCommentReply.article_comment_id == comment.id)
            .order_by(ArticleCommentReply.created_at.asc(), ArticleCommentReply.id.asc())
            .offset(page.offset)
            .limit(page.page_size)
        )
        return Page(items=result.scalars().all(), total=total, request=page)

    async def count_by_comment_id(self, comment_id: int) -> int:
        stmt = (
            select(func.count())
            .select_from(ArticleCommentReply)
            .where(ArticleCommentReply.article_comment_id == comment_id)
        )
        return await _count(self._db, stmt)

    async def save(self, reply: ArticleCommentReply) -> ArticleCommentReply:
        self._db.add(reply)
        await self._db.flush()
        return reply

    async def delete_by_id(self, reply_id: int) -> None:
        await self._db.execute(
            delete(ArticleCommentReply).where(ArticleCommentReply.id == reply_id)
        )

    async def delete_by_comment_id(self, comment_id: int) -> int:
        """Remove every reply under *comment_id*; returns how many went."""
        result = await self._db.execute(
            delete(ArticleCommentReply).where(
                ArticleCommentReply.article_comment_id == comment_id
            )
        )
        return result.rowcount or 0


# ---------------------------------------------------------------------------
# Reaction
# ---------------------------------------------------------------------------

class ReactionRepository:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def find_by_member_and_article(
        self, member: Member, article: Article
    ) -> Reaction | None:
        result = await self._db.execute(
            select(Reaction).where(
                Reaction.member_id == member.id,
                Reaction.article_id == article.id,
            )
        )
        return result.scalar_one_or_none()

    async def count_by_article_id(self, article_id: int) -> int:
        stmt = (
            select(func.count())
            .select_from(Reaction)
            .where(Reaction.article_id == article_id)
        )
        return await _count(self._db, stmt)

    async def save_if_absent(self, reaction: Reaction) -> bool:
        """
        Insert *reaction* under a savepoint.

        Returns False when the (member, article) pair already has a row,
        i.e. a concurrent request inserted it first.  Only the savepoint is
        rolled back, so the request transaction stays usable.
        """
        try:
            async with self._db.begin_nested():
                self._db.add(reaction)
                await self._db.flush()
        except IntegrityError:
            logger.info(
                "Reaction by member %s on article %s already exists",
                reaction.member_id, reaction.article_id,
            )
            return False
        return True

    def on_commit(self, callback: Callable[[], Awaitable[None]]) -> None:
        after_commit(self._db, callback)

    async def delete(self, reaction: Reaction) -> None:
        await self._db.delete(reaction)
        await self._db.flush()
