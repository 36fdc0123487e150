from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.repositories import ArticleRepository, CategoryRepository
from app.services.article_service import ArticleService
from app.services.category_service import CategoryService


# ---------------------------------------------------------------------------
# Repositories and services
#
# Services receive their repositories through the constructor.  Tests swap
# in faulty collaborators by overriding the repository factories.
# ---------------------------------------------------------------------------

def get_category_repository(db: AsyncSession = Depends(get_db)) -> CategoryRepository:
    return CategoryRepository(db)


def get_article_repository(db: AsyncSession = Depends(get_db)) -> ArticleRepository:
    return ArticleRepository(db)


def get_category_service(
    categories: CategoryRepository = Depends(get_category_repository),
) -> CategoryService:
    return CategoryService(categories)


def get_article_service(
    articles: ArticleRepository = Depends(get_article_repository),
    categories: CategoryRepository = Depends(get_category_repository),
) -> ArticleService:
    return ArticleService(articles, categories)


# ---------------------------------------------------------------------------
# Query parameters
# ---------------------------------------------------------------------------

class PaginationParams:
    """
    Pagination / sorting query parameters for list endpoints.

    ``page_size`` is clamped to ``settings.MAX_PAGE_SIZE`` on top of the
    query validation, so lowering the setting is enough to tighten it.
    ``sort_by`` is passed through untouched; the repository maps it to a
    whitelisted column.
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
        sort_by: str = Query("created_at", description="Column name to sort results by."),
        sort_order: str = Query(
            "desc",
            pattern="^(asc|desc)$",
            description="Sort direction: 'asc' or 'desc'.",
        ),
    ) -> None:
        self.page = page
        self.page_size = min(page_size, settings.MAX_PAGE_SIZE)
        self.sort_by = sort_by
        self.sort_order = sort_order
