"""
Article service — posting and reading articles.

The detail view is assembled from the collaborators that own each
number: the comment count comes from ``CommentService`` (a live COUNT)
and the reaction count from ``ReactionService`` (cache-aside).
"""
import logging

from forum.errors import ErrorKind, Result, ServiceError
from forum.models import Article, new_article
from forum.repositories import ArticleRepository, MemberRepository, PageRequest
from forum.schemas import ArticleCreate, ArticleDetail, ArticleResponse, PaginatedResponse
from forum.security import IdentityResolver
from forum.services.comment_service import CommentService, resolve_current_member
from forum.services.reaction_service import ReactionService

logger = logging.getLogger(__name__)


def _article_to_response(article: Article) -> ArticleResponse:
    return ArticleResponse(
        id=article.id,
        member_id=article.member_id,
        content=article.content,
        created_at=article.created_at,
        modified_at=article.modified_at,
    )


class ArticleService:
    def __init__(
        self,
        articles: ArticleRepository,
        members: MemberRepository,
        identity: IdentityResolver,
        comment_service: CommentService,
        reaction_service: ReactionService,
    ) -> None:
        self._articles = articles
        self._members = members
        self._identity = identity
        self._comment_service = comment_service
        self._reaction_service = reaction_service

    async def create_article(
        self, credential: str | None, data: ArticleCreate
    ) -> Result[ArticleDetail]:
        member = await resolve_current_member(self._identity, self._members, credential)
        if isinstance(member, ServiceError):
            return member

        article = await self._articles.save(new_article(data.content, member))
        logger.info("Member %s posted article %s", member.id, article.id)
        return ArticleDetail(**_article_to_response(article).model_dump())

    async def get_article(self, article_id: int) -> Result[ArticleDetail]:
        article = await self._articles.find_by_id(article_id)
        if article is None:
            return ServiceError(ErrorKind.ARTICLE_NOT_FOUND)

        return ArticleDetail(
            **_article_to_response(article).model_dump(),
            comment_count=await self._comment_service.get_comment_count(article),
            reaction_count=await self._reaction_service.count(article.id),
        )

    async def get_articles(self, page: PageRequest) -> PaginatedResponse:
        """Newest articles first."""
        result = await self._articles.find_page(page)
        return PaginatedResponse(
            items=[_article_to_response(a) for a in result.items],
            total=result.total,
            page=page.page,
            page_size=page.page_size,
            pages=result.pages,
        )
