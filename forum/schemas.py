from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


# --- Member ---

class MemberCreate(BaseModel):
    email: str = Field(max_length=255)
    nickname: str = Field(min_length=1, max_length=50)


class MemberResponse(BaseModel):
    id: int
    email: str
    nickname: str
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


# --- Article ---

class ArticleCreate(BaseModel):
    content: str = Field(min_length=1)


class ArticleResponse(BaseModel):
    id: int
    member_id: int
    content: str
    created_at: datetime
    modified_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True)


class ArticleDetail(ArticleResponse):
    comment_count: int = 0
    reaction_count: int = 0


# --- Comment ---

class CommentRequest(BaseModel):
    content: str = Field(min_length=1)


class CommentResponse(BaseModel):
    id: int
    article_id: int
    member_id: int
    nickname: str | None = None
    content: str
    created_at: datetime
    modified_at: datetime | None = None
    reply_count: int = 0
    model_config = ConfigDict(from_attributes=True)


class CommentCountResponse(BaseModel):
    article_id: int
    comment_count: int


# --- Reply ---

class ReplyRequest(BaseModel):
    content: str = Field(min_length=1)


class ReplyResponse(BaseModel):
    id: int
    comment_id: int
    member_id: int
    nickname: str | None = None
    content: str
    created_at: datetime
    modified_at: datetime | None = None


# --- Reaction ---

class ReactionResponse(BaseModel):
    article_id: int
    reacted: bool
    reaction_count: int


class ReactionCountResponse(BaseModel):
    article_id: int
    reaction_count: int


# --- Pagination ---

class PaginatedResponse(BaseModel):
    items: list  # Will be typed in router
    total: int
    page: int
    page_size: int
    pages: int
