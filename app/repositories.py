"""
Repositories — the persistence collaborator behind the services.

Each repository wraps the request-scoped ``AsyncSession`` handed in by the
``get_db`` dependency.  Repositories flush but never commit; the
transaction boundary stays with ``get_db``.  Any driver or constraint
failure surfaces unchanged as a ``SQLAlchemyError`` subclass.
"""
from sqlalchemy import asc, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Article, Category, User

# Columns that are safe to sort by; guards against arbitrary attribute access.
_SORTABLE_COLUMNS: frozenset[str] = frozenset({"id", "created_at", "updated_at", "title"})


def _resolve_sort_column(sort_by: str):
    """Return the column for *sort_by*, falling back to ``Article.created_at``."""
    if sort_by in _SORTABLE_COLUMNS:
        return getattr(Article, sort_by)
    return Article.created_at


class CategoryRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def find_categories_by_user(self, user_id: int) -> list[Category]:
        """Return every category owned by *user_id*, ordered by id."""
        q = select(Category).where(Category.user_id == user_id).order_by(Category.id)
        result = await self.db.execute(q)
        return list(result.scalars().all())

    async def get(self, category_id: int) -> Category | None:
        result = await self.db.execute(select(Category).where(Category.id == category_id))
        return result.scalar_one_or_none()


class ArticleRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get(self, article_id: int) -> Article | None:
        result = await self.db.execute(select(Article).where(Article.id == article_id))
        return result.scalar_one_or_none()

    async def list_page(
        self,
        offset: int = 0,
        limit: int = 20,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> list[Article]:
        sort_col = _resolve_sort_column(sort_by)
        order_expr = desc(sort_col) if sort_order == "desc" else asc(sort_col)
        # Secondary key keeps pages stable when the sort column has ties.
        q = select(Article).order_by(order_expr, Article.id).offset(offset).limit(limit)
        result = await self.db.execute(q)
        return list(result.scalars().all())

    async def count(self) -> int:
        return (await self.db.execute(select(func.count()).select_from(Article))).scalar_one()

    async def user_exists(self, user_id: int) -> bool:
        result = await self.db.execute(select(User.id).where(User.id == user_id))
        return result.scalar_one_or_none() is not None

    async def add(self, article: Article) -> Article:
        self.db.add(article)
        await self.db.flush()
        # Load server-side defaults (created_at) without a lazy load later.
        await self.db.refresh(article)
        return article

    async def delete(self, article: Article) -> None:
        await self.db.delete(article)
        await self.db.flush()

    async def flush(self) -> None:
        await self.db.flush()

    async def rollback(self) -> None:
        await self.db.rollback()
