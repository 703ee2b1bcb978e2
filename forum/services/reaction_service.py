"""
Reaction service — likes on articles.

A member holds at most one reaction per article.  ``toggle`` adds the
reaction when absent and removes it when present; reactions are never
updated in place.  Reaction counts are served cache-aside from Redis and
the cached value is dropped on every toggle and again once it commits.
"""
import logging
from functools import partial

from forum.cache import cache
from forum.errors import ErrorKind, Result, ServiceError
from forum.models import new_reaction
from forum.repositories import ArticleRepository, MemberRepository, ReactionRepository
from forum.schemas import ReactionCountResponse, ReactionResponse
from forum.security import IdentityResolver
from forum.services.comment_service import resolve_current_member

logger = logging.getLogger(__name__)


class ReactionService:
    def __init__(
        self,
        articles: ArticleRepository,
        reactions: ReactionRepository,
        members: MemberRepository,
        identity: IdentityResolver,
    ) -> None:
        self._articles = articles
        self._reactions = reactions
        self._members = members
        self._identity = identity

    async def toggle(self, credential: str | None, article_id: int) -> Result[ReactionResponse]:
        article = await self._articles.find_by_id(article_id)
        if article is None:
            return ServiceError(ErrorKind.ARTICLE_NOT_FOUND)

        member = await resolve_current_member(self._identity, self._members, credential)
        if isinstance(member, ServiceError):
            return member

        existing = await self._reactions.find_by_member_and_article(member, article)
        if existing is None:
            # Losing an insert race to a concurrent toggle still leaves the member reacted.
            await self._reactions.save_if_absent(new_reaction(member, article))
            reacted = True
        else:
            await self._reactions.delete(existing)
            reacted = False
        await cache.invalidate_reactions(article.id)
        # Evict again after commit so a count read before commit cannot stay cached.
        self._reactions.on_commit(partial(cache.invalidate_reactions, article.id))

        logger.info(
            "Member %s %s article %s", member.id, "reacted to" if reacted else "unreacted", article.id
        )
        return ReactionResponse(
            article_id=article.id,
            reacted=reacted,
            reaction_count=await self._reactions.count_by_article_id(article.id),
        )

    async def get_my_reaction(
        self, credential: str | None, article_id: int
    ) -> Result[ReactionResponse]:
        article = await self._articles.find_by_id(article_id)
        if article is None:
            return ServiceError(ErrorKind.ARTICLE_NOT_FOUND)

        member = await resolve_current_member(self._identity, self._members, credential)
        if isinstance(member, ServiceError):
            return member

        existing = await self._reactions.find_by_member_and_article(member, article)
        return ReactionResponse(
            article_id=article.id,
            reacted=existing is not None,
            reaction_count=await self.count(article.id),
        )

    async def get_reaction_count(self, article_id: int) -> Result[ReactionCountResponse]:
        article = await self._articles.find_by_id(article_id)
        if article is None:
            return ServiceError(ErrorKind.ARTICLE_NOT_FOUND)
        return ReactionCountResponse(article_id=article.id, reaction_count=await self.count(article.id))

    async def count(self, article_id: int) -> int:
        cached = await cache.get_reaction_count(article_id)
        if cached is not None:
            return cached
        count = await self._reactions.count_by_article_id(article_id)
        await cache.set_reaction_count(article_id, count)
        return count
