from fastapi import APIRouter, Depends
from forum.dependencies import get_credential, get_reaction_service
from forum.errors import unwrap
from forum.schemas import ReactionCountResponse, ReactionResponse
from forum.services.reaction_service import ReactionService

router = APIRouter(prefix="/api/v1/articles/{article_id}/reactions", tags=["reactions"])

@router.post("", response_model=ReactionResponse)
async def toggle_reaction(
    article_id: int,
    credential: str | None = Depends(get_credential),
    service: ReactionService = Depends(get_reaction_service),
):
    return unwrap(await service.toggle(credential, article_id))

@router.get("/me", response_model=ReactionResponse)
async def my_reaction(
    article_id: int,
    credential: str | None = Depends(get_credential),
    service: ReactionService = Depends(get_reaction_service),
):
    return unwrap(await service.get_my_reaction(credential, article_id))

@router.get("/count", response_model=ReactionCountResponse)
async def reaction_count(article_id: int, service: ReactionService = Depends(get_reaction_service)):
    return unwrap(await service.get_reaction_count(article_id))
