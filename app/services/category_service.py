"""
Category service — read access to a user's categories.

Categories are created and maintained outside this service; the only
operation here is the per-user lookup behind ``GET /api/category/{user_id}``.
Lists are not cached because nothing in this service could invalidate them.
"""
from sqlalchemy.exc import SQLAlchemyError

from app.models import Category
from app.repositories import CategoryRepository
from app.results import Absent, Failure, Lookup, Present


def _category_to_dict(category: Category) -> dict:
    return {
        "id": category.id,
        "name": category.name,
        "user_id": category.user_id,
    }


class CategoryService:
    def __init__(self, categories: CategoryRepository) -> None:
        self.categories = categories

    async def get_category_list(self, user_id: int) -> Lookup[list[dict]]:
        """
        Return the categories owned by *user_id*.

        ``Absent`` when the user has none (including unknown users); this
        is an ordinary outcome, not an error.  Rows whose owner does not
        match are dropped so a misbehaving query can never leak another
        user's categories.
        """
        try:
            categories = await self.categories.find_categories_by_user(user_id)
        except SQLAlchemyError as exc:
            return Failure(exc)

        owned = [_category_to_dict(c) for c in categories if c.user_id == user_id]
        if not owned:
            return Absent()
        return Present(owned)
