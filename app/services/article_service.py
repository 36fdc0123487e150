"""
Article service — business logic for the Article aggregate.

Design notes
------------
- Payloads arrive as raw JSON values and are validated here with the
  ``ArticleCreate`` / ``ArticleUpdate`` models, so the router never sees a
  half-parsed body.  Rejections come back as ``Invalid``.
- Ownership rules: an article's ``user_id`` must reference an existing
  user, and its ``category_id`` (when set) must reference a category owned
  by that same user.
- List pages and detail views go through the cache-aside pattern (Redis
  first, database on a miss).  Every write invalidates all list pages and
  the affected detail entry.
- Persistence faults (``SQLAlchemyError``) are returned as ``Failure``.
  Write paths roll the session back first so ``get_db`` does not try to
  commit a broken transaction.
- Service methods flush but do not commit; the transaction boundary is
  owned by the ``get_db`` dependency in the router layer.
"""
import math
from typing import Any

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from app.cache import cache
from app.config import settings
from app.models import Article
from app.repositories import ArticleRepository, CategoryRepository
from app.results import Absent, Failure, Invalid, Lookup, Present, Write
from app.schemas import ArticleCreate, ArticleUpdate, PaginatedResponse

# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def _article_to_dict(article: Article) -> dict:
    """Serialise an Article ORM instance to a JSON-ready dict."""
    return {
        "id": article.id,
        "title": article.title,
        "content": article.content,
        "user_id": article.user_id,
        "category_id": article.category_id,
        "created_at": article.created_at.isoformat() if article.created_at else None,
        "updated_at": article.updated_at.isoformat() if article.updated_at else None,
    }


def _validation_errors(exc: ValidationError) -> list[dict]:
    return [
        {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
        for err in exc.errors()
    ]


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class ArticleService:
    def __init__(self, articles: ArticleRepository, categories: CategoryRepository) -> None:
        self.articles = articles
        self.categories = categories

    async def _check_category(self, category_id: int | None, user_id: int) -> Invalid | None:
        if category_id is None:
            return None
        category = await self.categories.get(category_id)
        if category is None:
            return Invalid.single("category_id", "Category does not exist")
        if category.user_id != user_id:
            return Invalid.single("category_id", "Category belongs to another user")
        return None

    async def list_articles(
        self,
        page: int = 1,
        page_size: int = 20,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> Lookup[PaginatedResponse]:
        """
        Return one page of articles.  An empty page is still ``Present``;
        only single-record lookups report ``Absent``.
        """
        cache_key = f"articles:list:{page}:{page_size}:{sort_by}:{sort_order}"
        cached = await cache.get(cache_key)
        if cached:
            return Present(PaginatedResponse(**cached))

        try:
            total = await self.articles.count()
            rows = await self.articles.list_page(
                offset=(page - 1) * page_size,
                limit=page_size,
                sort_by=sort_by,
                sort_order=sort_order,
            )
        except SQLAlchemyError as exc:
            return Failure(exc)

        response = PaginatedResponse(
            items=[_article_to_dict(a) for a in rows],
            total=total,
            page=page,
            page_size=page_size,
            pages=math.ceil(total / page_size) if total > 0 else 0,
        )
        await cache.set(cache_key, response.model_dump(), ttl=settings.CACHE_TTL_LIST)
        return Present(response)

    async def get_article(self, article_id: int) -> Lookup[dict]:
        cache_key = f"articles:detail:{article_id}"
        cached = await cache.get(cache_key)
        if cached:
            return Present(cached)

        try:
            article = await self.articles.get(article_id)
        except SQLAlchemyError as exc:
            return Failure(exc)
        if article is None:
            return Absent()

        data = _article_to_dict(article)
        await cache.set(cache_key, data, ttl=settings.CACHE_TTL_DETAIL)
        return Present(data)

    async def create_article(self, payload: Any) -> Write[dict]:
        """Validate *payload*, persist a new article and return it."""
        try:
            data = ArticleCreate.model_validate(payload)
        except ValidationError as exc:
            return Invalid(_validation_errors(exc))

        try:
            if not await self.articles.user_exists(data.user_id):
                return Invalid.single("user_id", "User does not exist")
            rejected = await self._check_category(data.category_id, data.user_id)
            if rejected is not None:
                return rejected
            article = await self.articles.add(Article(**data.model_dump()))
        except SQLAlchemyError as exc:
            await self.articles.rollback()
            return Failure(exc)

        await cache.invalidate_articles()
        return Present(_article_to_dict(article))

    async def update_article(self, article_id: int, payload: Any) -> Write[dict]:
        """
        Apply a partial update.  Only keys present in *payload* change;
        an explicit ``"category_id": null`` detaches the category.
        """
        try:
            data = ArticleUpdate.model_validate(payload)
        except ValidationError as exc:
            return Invalid(_validation_errors(exc))
        changes = data.model_dump(exclude_unset=True)

        try:
            article = await self.articles.get(article_id)
            if article is None:
                return Absent()
            if "category_id" in changes:
                rejected = await self._check_category(changes["category_id"], article.user_id)
                if rejected is not None:
                    return rejected
            for field, value in changes.items():
                setattr(article, field, value)
            await self.articles.flush()
        except SQLAlchemyError as exc:
            await self.articles.rollback()
            return Failure(exc)

        await cache.invalidate_articles(article_id)
        return Present(_article_to_dict(article))

    async def delete_article(self, article_id: int) -> Write[None]:
        try:
            article = await self.articles.get(article_id)
            if article is None:
                return Absent()
            await self.articles.delete(article)
        except SQLAlchemyError as exc:
            await self.articles.rollback()
            return Failure(exc)

        await cache.invalidate_articles(article_id)
        return Present(None)
