from fastapi import APIRouter, Depends
from forum.dependencies import PaginationParams, get_article_service, get_credential
from forum.errors import unwrap
from forum.schemas import ArticleCreate, ArticleDetail, PaginatedResponse
from forum.services.article_service import ArticleService

router = APIRouter(prefix="/api/v1/articles", tags=["articles"])

@router.get("", response_model=PaginatedResponse)
async def list_articles(
    pagination: PaginationParams = Depends(),
    service: ArticleService = Depends(get_article_service),
):
    return await service.get_articles(pagination.to_page_request())

@router.get("/{article_id}", response_model=ArticleDetail)
async def get_article(article_id: int, service: ArticleService = Depends(get_article_service)):
    return unwrap(await service.get_article(article_id))

@router.post("", status_code=201, response_model=ArticleDetail)
async def create_article(
    data: ArticleCreate,
    credential: str | None = Depends(get_credential),
    service: ArticleService = Depends(get_article_service),
):
    return unwrap(await service.create_article(credential, data))
