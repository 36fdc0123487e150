from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime

# Largest value an INTEGER primary/foreign key column can hold.
MAX_ID = 2_147_483_647


# --- Category ---

class CategoryResponse(BaseModel):
    id: int
    name: str
    user_id: int
    model_config = ConfigDict(from_attributes=True)


# --- Article ---

class ArticleCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
    user_id: int = Field(gt=0, le=MAX_ID)
    category_id: int | None = Field(None, gt=0, le=MAX_ID)
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class ArticleUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    content: str | None = Field(None, min_length=1)
    category_id: int | None = Field(None, gt=0, le=MAX_ID)
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    @field_validator("title", "content", mode="before")
    @classmethod
    def not_null(cls, value):
        # Omit the key to leave the column unchanged; null would clear a NOT NULL column.
        # category_id is exempt: null detaches the category.
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class ArticleResponse(BaseModel):
    id: int
    title: str
    content: str
    user_id: int
    category_id: int | None
    created_at: datetime | None
    updated_at: datetime | None
    model_config = ConfigDict(from_attributes=True)


# --- Pagination ---

class PaginatedResponse(BaseModel):
    items: list  # Will be typed in router
    total: int
    page: int
    page_size: int
    pages: int


# --- Errors ---

class ErrorDetail(BaseModel):
    loc: list[str | int]
    msg: str
    type: str


class ValidationErrorResponse(BaseModel):
    detail: list[ErrorDetail]
