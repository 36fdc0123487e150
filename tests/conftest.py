"""
Test infrastructure for the FitQuest API.

Strategy
--------
- SQLite in-memory via aiosqlite, so no Postgres instance is needed.
- StaticPool makes every session share the one in-memory connection;
  a second connection would see an empty database.
- ``get_db`` is overridden so requests use the test session factory.
- Tables are created before and dropped after each test.
- Redis is disabled with ``cache._redis = None``; the CacheManager treats
  that as a permanent miss, so service code always hits the database.
- ``override`` swaps any FastAPI dependency for one test and restores the
  previous state afterwards; it is how faulty repositories are injected.
"""
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import StaticPool

from app.cache import cache
from app.database import Base, build_engine, build_session_factory, get_db
from app.main import app
from app.models import Category, User

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = build_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

async_session_test = build_session_factory(engine_test)


async def override_get_db():
    async with async_session_test() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = override_get_db


# ---------------------------------------------------------------------------
# Faulty collaborators
# ---------------------------------------------------------------------------

def db_outage() -> OperationalError:
    return OperationalError(
        "SELECT categories.id FROM categories",
        {},
        ConnectionRefusedError("connection refused by db-primary:5432"),
    )


class BrokenCategoryRepository:
    """Category repository whose every call fails like a lost connection."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error or db_outage()
        self.calls = 0

    async def find_categories_by_user(self, user_id: int):
        self.calls += 1
        raise self.error

    async def get(self, category_id: int):
        self.calls += 1
        raise self.error


class BrokenArticleRepository:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error or db_outage()
        self.rolled_back = False

    async def _fail(self, *args, **kwargs):
        raise self.error

    get = list_page = count = user_exists = add = delete = flush = _fail

    async def rollback(self) -> None:
        self.rolled_back = True


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    async with async_session_test() as session:
        yield session


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    cache._redis = None
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def override():
    """Replace a FastAPI dependency for the duration of one test."""
    saved = dict(app.dependency_overrides)

    def _override(dependency, replacement):
        app.dependency_overrides[dependency] = lambda: replacement

    yield _override
    app.dependency_overrides.clear()
    app.dependency_overrides.update(saved)


@pytest.fixture
def broken_categories() -> BrokenCategoryRepository:
    return BrokenCategoryRepository()


@pytest.fixture
def broken_articles() -> BrokenArticleRepository:
    return BrokenArticleRepository()


# ---------------------------------------------------------------------------
# Seeding (commits so request sessions see the rows)
# ---------------------------------------------------------------------------

class Seeder:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def user(self, user_id: int | None = None, username: str | None = None) -> User:
        user = User(id=user_id, username=username or f"athlete_{user_id}")
        self.db.add(user)
        await self.db.commit()
        return user

    async def categories(self, user_id: int, *names: str) -> list[Category]:
        categories = [Category(name=name, user_id=user_id) for name in names]
        self.db.add_all(categories)
        await self.db.commit()
        return categories


@pytest.fixture
def seed(db_session: AsyncSession) -> Seeder:
    return Seeder(db_session)
