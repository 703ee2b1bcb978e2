from fastapi import APIRouter, Depends
from forum.dependencies import PaginationParams, get_credential, get_reply_service
from forum.errors import unwrap
from forum.schemas import PaginatedResponse, ReplyRequest, ReplyResponse
from forum.services.reply_service import ReplyService

router = APIRouter(prefix="/api/v1", tags=["replies"])

@router.get("/comments/{comment_id}/replies", response_model=PaginatedResponse)
async def list_replies(
    comment_id: int,
    pagination: PaginationParams = Depends(),
    service: ReplyService = Depends(get_reply_service),
):
    return unwrap(await service.get_replies_by_comment(pagination.to_page_request(), comment_id))

@router.post("/comments/{comment_id}/replies", status_code=201, response_model=ReplyResponse)
async def create_reply(
    comment_id: int,
    data: ReplyRequest,
    credential: str | None = Depends(get_credential),
    service: ReplyService = Depends(get_reply_service),
):
    return unwrap(await service.create(credential, comment_id, data))

@router.put("/replies/{reply_id}", response_model=ReplyResponse)
async def update_reply(
    reply_id: int,
    data: ReplyRequest,
    credential: str | None = Depends(get_credential),
    service: ReplyService = Depends(get_reply_service),
):
    return unwrap(await service.update(credential, reply_id, data))

@router.delete("/replies/{reply_id}", status_code=204)
async def delete_reply(
    reply_id: int,
    credential: str | None = Depends(get_credential),
    service: ReplyService = Depends(get_reply_service),
):
    unwrap(await service.delete(credential, reply_id))
