from fastapi import APIRouter, Depends
from forum.dependencies import (
    PaginationParams,
    get_article_repository,
    get_comment_service,
    get_credential,
)
from forum.errors import ErrorKind, ServiceError, unwrap
from forum.repositories import ArticleRepository
from forum.schemas import CommentCountResponse, CommentRequest, CommentResponse, PaginatedResponse
from forum.services.comment_service import CommentService

router = APIRouter(prefix="/api/v1/articles/{article_id}/comments", tags=["comments"])

@router.get("", response_model=PaginatedResponse)
async def list_comments(
    article_id: int,
    pagination: PaginationParams = Depends(),
    service: CommentService = Depends(get_comment_service),
):
    return unwrap(await service.get_comments_by_article(pagination.to_page_request(), article_id))

@router.post("", status_code=201, response_model=CommentResponse)
async def create_comment(
    article_id: int,
    data: CommentRequest,
    credential: str | None = Depends(get_credential),
    service: CommentService = Depends(get_comment_service),
):
    return unwrap(await service.create(credential, article_id, data))

@router.get("/count", response_model=CommentCountResponse)
async def count_comments(
    article_id: int,
    service: CommentService = Depends(get_comment_service),
    articles: ArticleRepository = Depends(get_article_repository),
):
    article = await articles.find_by_id(article_id)
    if article is None:
        unwrap(ServiceError(ErrorKind.ARTICLE_NOT_FOUND))
    return CommentCountResponse(
        article_id=article_id,
        comment_count=await service.get_comment_count(article),
    )

@router.put("/{comment_id}", response_model=CommentResponse)
async def update_comment(
    article_id: int,
    comment_id: int,
    data: CommentRequest,
    credential: str | None = Depends(get_credential),
    service: CommentService = Depends(get_comment_service),
):
    return unwrap(await service.update(credential, comment_id, data, article_id=article_id))

@router.delete("/{comment_id}", status_code=204)
async def delete_comment(
    article_id: int,
    comment_id: int,
    credential: str | None = Depends(get_credential),
    service: CommentService = Depends(get_comment_service),
):
    unwrap(await service.delete(credential, comment_id, article_id=article_id))
