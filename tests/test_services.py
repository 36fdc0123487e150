"""
Direct service-layer tests — exercise the services with real repositories
over the test session, without HTTP, and check the result variants they
return.
"""
import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Category, User
from app.repositories import ArticleRepository, CategoryRepository
from app.results import Absent, Failure, Invalid, Present
from app.services.article_service import ArticleService
from app.services.category_service import CategoryService


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _create_user(db: AsyncSession, username: str = "svcuser") -> User:
    user = User(username=username)
    db.add(user)
    await db.flush()
    return user


def _article_service(db: AsyncSession) -> ArticleService:
    return ArticleService(ArticleRepository(db), CategoryRepository(db))


class _LeakyCategoryRepository:
    """Returns every category regardless of owner, like a query missing its WHERE."""

    def __init__(self, categories: list[Category]) -> None:
        self._categories = categories

    async def find_categories_by_user(self, user_id: int) -> list[Category]:
        return self._categories


# ---------------------------------------------------------------------------
# CategoryService
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_category_list_present(db_session: AsyncSession):
    user = await _create_user(db_session)
    db_session.add_all([Category(name="Cardio", user_id=user.id), Category(name="Strength", user_id=user.id)])
    await db_session.flush()

    result = await CategoryService(CategoryRepository(db_session)).get_category_list(user.id)
    assert isinstance(result, Present)
    assert [c["name"] for c in result.value] == ["Cardio", "Strength"]


@pytest.mark.asyncio
async def test_category_list_absent(db_session: AsyncSession):
    user = await _create_user(db_session)
    result = await CategoryService(CategoryRepository(db_session)).get_category_list(user.id)
    assert result == Absent()


@pytest.mark.asyncio
async def test_category_list_failure(broken_categories):
    result = await CategoryService(broken_categories).get_category_list(7)
    assert isinstance(result, Failure)
    assert result.error is broken_categories.error


@pytest.mark.asyncio
async def test_category_list_drops_foreign_rows():
    repo = _LeakyCategoryRepository([
        Category(id=1, name="Mine", user_id=1),
        Category(id=2, name="Theirs", user_id=2),
    ])
    result = await CategoryService(repo).get_category_list(1)
    assert isinstance(result, Present)
    assert [c["name"] for c in result.value] == ["Mine"]


@pytest.mark.asyncio
async def test_category_list_all_foreign_is_absent():
    repo = _LeakyCategoryRepository([Category(id=2, name="Theirs", user_id=2)])
    assert await CategoryService(repo).get_category_list(1) == Absent()


# ---------------------------------------------------------------------------
# ArticleService
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_article_via_service(db_session: AsyncSession):
    user = await _create_user(db_session)
    result = await _article_service(db_session).create_article(
        {"title": "  Hill Sprints  ", "content": "Ten reps.", "user_id": user.id}
    )
    assert isinstance(result, Present)
    assert result.value["title"] == "Hill Sprints"
    assert result.value["id"] is not None


@pytest.mark.asyncio
async def test_create_article_invalid_payload(db_session: AsyncSession):
    result = await _article_service(db_session).create_article({"title": ""})
    assert isinstance(result, Invalid)
    locs = {tuple(err["loc"]) for err in result.errors}
    assert ("title",) in locs
    assert ("content",) in locs
    assert ("user_id",) in locs


@pytest.mark.asyncio
async def test_create_article_unknown_category(db_session: AsyncSession):
    user = await _create_user(db_session)
    result = await _article_service(db_session).create_article(
        {"title": "T", "content": "C", "user_id": user.id, "category_id": 999}
    )
    assert result == Invalid.single("category_id", "Category does not exist")


@pytest.mark.asyncio
async def test_get_article_present_and_absent(db_session: AsyncSession):
    user = await _create_user(db_session)
    service = _article_service(db_session)
    created = await service.create_article({"title": "T", "content": "C", "user_id": user.id})

    found = await service.get_article(created.value["id"])
    assert isinstance(found, Present)
    assert found.value == created.value
    assert await service.get_article(99999) == Absent()


@pytest.mark.asyncio
async def test_update_article_partial(db_session: AsyncSession):
    user = await _create_user(db_session)
    service = _article_service(db_session)
    created = await service.create_article({"title": "Before", "content": "Keep me", "user_id": user.id})

    updated = await service.update_article(created.value["id"], {"title": "After"})
    assert isinstance(updated, Present)
    assert updated.value["title"] == "After"
    assert updated.value["content"] == "Keep me"


@pytest.mark.asyncio
async def test_update_validates_before_lookup(db_session: AsyncSession):
    result = await _article_service(db_session).update_article(99999, {"title": 42})
    assert isinstance(result, Invalid)


@pytest.mark.asyncio
async def test_update_rejects_null_title_but_allows_null_category(db_session: AsyncSession):
    user = await _create_user(db_session)
    service = _article_service(db_session)
    created = await service.create_article({"title": "Keep", "content": "c", "user_id": user.id})

    rejected = await service.update_article(created.value["id"], {"title": None})
    assert isinstance(rejected, Invalid)
    assert rejected.errors[0]["loc"] == ["title"]

    detached = await service.update_article(created.value["id"], {"category_id": None})
    assert isinstance(detached, Present)
    assert detached.value["title"] == "Keep"


@pytest.mark.asyncio
async def test_update_nonexistent_article(db_session: AsyncSession):
    result = await _article_service(db_session).update_article(99999, {"title": "Ghost"})
    assert result == Absent()


@pytest.mark.asyncio
async def test_delete_article_via_service(db_session: AsyncSession):
    user = await _create_user(db_session)
    service = _article_service(db_session)
    created = await service.create_article({"title": "T", "content": "C", "user_id": user.id})

    assert await service.delete_article(created.value["id"]) == Present(None)
    assert await service.delete_article(created.value["id"]) == Absent()


@pytest.mark.asyncio
async def test_list_articles_pages(db_session: AsyncSession):
    user = await _create_user(db_session)
    service = _article_service(db_session)
    for i in range(3):
        await service.create_article({"title": f"Article {i}", "content": "C", "user_id": user.id})

    result = await service.list_articles(page=1, page_size=2)
    assert isinstance(result, Present)
    assert result.value.total == 3
    assert len(result.value.items) == 2
    assert result.value.pages == 2


@pytest.mark.asyncio
async def test_list_articles_invalid_sort_column_falls_back(db_session: AsyncSession):
    user = await _create_user(db_session)
    service = _article_service(db_session)
    await service.create_article({"title": "Fallback", "content": "C", "user_id": user.id})

    result = await service.list_articles(sort_by="content; DROP TABLE articles")
    assert isinstance(result, Present)
    assert result.value.total == 1


@pytest.mark.asyncio
async def test_write_failure_rolls_back(db_session: AsyncSession, broken_articles):
    broken_articles.error = IntegrityError("INSERT INTO articles", {}, Exception("fk violation"))
    service = ArticleService(broken_articles, CategoryRepository(db_session))

    result = await service.create_article({"title": "T", "content": "C", "user_id": 1})
    assert isinstance(result, Failure)
    assert isinstance(result.error, IntegrityError)
    assert broken_articles.rolled_back is True


@pytest.mark.asyncio
async def test_read_failure_does_not_roll_back(db_session: AsyncSession, broken_articles):
    service = ArticleService(broken_articles, CategoryRepository(db_session))
    assert isinstance(await service.get_article(1), Failure)
    assert broken_articles.rolled_back is False
