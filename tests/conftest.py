"""
Test infrastructure for the service catalog.

Strategy
--------
- SQLite in-memory via aiosqlite stands in for the relational store, so
  the SQL backend is exercised without a database server.
- StaticPool forces every session to share one connection, which is
  required because SQLite in-memory databases are connection-scoped; a new
  connection would see an empty database.
- The ``services`` table is created fresh before each test and dropped
  after, so each test starts from an empty catalog unless it
  seeds rows itself.
- HTTP tests build an app around whichever repository the test wants via
  ``create_app(repository=...)``; the app only borrows it.
"""
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from catalog.cache import cache
from catalog.database import Base, create_engine
from catalog.main import create_app
from catalog.middleware import request_stats
from catalog.models import ServiceRecord
from catalog.repositories import InMemoryRepository, SqlRepository
from catalog.schemas import Service

# ---------------------------------------------------------------------------
# Test database engine: SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# A file inside a directory that does not exist: SQLite cannot open it, so
# every connection attempt fails.
UNREACHABLE_DATABASE_URL = "sqlite+aiosqlite:////nonexistent-catalog-dir/services.db"

engine_test = create_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)

LOCATE_US = Service(id=1, name="Locate Us", description="Awesomeness is HERE!", versions=3)
CONTACT_US = Service(id=2, name="Contact Us", description="How can I find you?!", versions=2)


async def insert_services(*services: Service) -> None:
    """Write *services* straight into the test database."""
    async with async_session_test() as session:
        session.add_all(ServiceRecord(**s.model_dump()) for s in services)
        await session.commit()


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


@pytest.fixture(autouse=True)
def reset_counters():
    """Start every test with empty request counters and the cache disabled."""
    request_stats.reset()
    cache._redis = None
    yield


@pytest.fixture
def memory_repo() -> InMemoryRepository:
    return InMemoryRepository([LOCATE_US, CONTACT_US])


@pytest.fixture
def sql_repo() -> SqlRepository:
    # The shared test engine outlives the repository, so it is not closed here.
    return SqlRepository(engine_test)


@pytest_asyncio.fixture
async def seeded_sql_repo(sql_repo: SqlRepository) -> SqlRepository:
    await insert_services(LOCATE_US, CONTACT_US)
    return sql_repo


@pytest_asyncio.fixture
async def unreachable_repo():
    repo = SqlRepository.from_url(UNREACHABLE_DATABASE_URL)
    yield repo
    await repo.close()


@pytest.fixture
def client_for():
    """
    Return a factory producing an httpx.AsyncClient for an app built around
    the given repository.
    """

    def _client(repository) -> AsyncClient:
        app = create_app(repository=repository)
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")

    return _client


@pytest_asyncio.fixture
async def async_client(memory_repo: InMemoryRepository) -> AsyncClient:
    """Client for an app serving the two-service in-memory catalog."""
    app = create_app(repository=memory_repo)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
