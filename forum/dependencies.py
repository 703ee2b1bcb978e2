from fastapi import Depends, Header, Query
from sqlalchemy.ext.asyncio import AsyncSession

from forum.config import settings
from forum.database import get_db
from forum.repositories import (
    ArticleRepository,
    CommentRepository,
    MemberRepository,
    PageRequest,
    ReactionRepository,
    ReplyRepository,
)
from forum.security import IdentityResolver, get_token_provider
from forum.services.article_service import ArticleService
from forum.services.comment_service import CommentService
from forum.services.reaction_service import ReactionService
from forum.services.reply_service import ReplyService


class PaginationParams:
    """
    Reusable FastAPI dependency that parses pagination query parameters.

    Attributes
    ----------
    page:
        1-based page number (minimum 1).
    page_size:
        Items per page, clamped to ``settings.MAX_PAGE_SIZE`` regardless of
        the value supplied by the caller.
    """

    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number (1-based)."),
        page_size: int = Query(
            settings.DEFAULT_PAGE_SIZE,
            ge=1,
            le=100,
            description="Number of items returned per page (max 100).",
        ),
    ) -> None:
        self.page = page
        self.page_size = min(page_size, settings.MAX_PAGE_SIZE)

    def to_page_request(self) -> PageRequest:
        return PageRequest(page=self.page, page_size=self.page_size)


def get_credential(authorization: str | None = Header(None)) -> str | None:
    """Raw ``Authorization`` header; the identity resolver interprets it."""
    return authorization


def get_identity_resolver() -> IdentityResolver:
    return get_token_provider()


# ---------------------------------------------------------------------------
# Service wiring: every collaborator shares the request's session
# ---------------------------------------------------------------------------

def get_article_repository(db: AsyncSession = Depends(get_db)) -> ArticleRepository:
    return ArticleRepository(db)


def get_comment_service(
    db: AsyncSession = Depends(get_db),
    identity: IdentityResolver = Depends(get_identity_resolver),
) -> CommentService:
    return CommentService(
        articles=ArticleRepository(db),
        comments=CommentRepository(db),
        replies=ReplyRepository(db),
        members=MemberRepository(db),
        identity=identity,
    )


def get_reply_service(
    db: AsyncSession = Depends(get_db),
    identity: IdentityResolver = Depends(get_identity_resolver),
) -> ReplyService:
    return ReplyService(
        comments=CommentRepository(db),
        replies=ReplyRepository(db),
        members=MemberRepository(db),
        identity=identity,
    )


def get_reaction_service(
    db: AsyncSession = Depends(get_db),
    identity: IdentityResolver = Depends(get_identity_resolver),
) -> ReactionService:
    return ReactionService(
        articles=ArticleRepository(db),
        reactions=ReactionRepository(db),
        members=MemberRepository(db),
        identity=identity,
    )


def get_article_service(
    db: AsyncSession = Depends(get_db),
    identity: IdentityResolver = Depends(get_identity_resolver),
    comment_service: CommentService = Depends(get_comment_service),
    reaction_service: ReactionService = Depends(get_reaction_service),
) -> ArticleService:
    return ArticleService(
        articles=ArticleRepository(db),
        members=MemberRepository(db),
        identity=identity,
        comment_service=comment_service,
        reaction_service=reaction_service,
    )
