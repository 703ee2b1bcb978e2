"""
Test infrastructure for the Forum API.

Strategy
--------
- SQLite in-memory via aiosqlite, so no Postgres is needed in CI.
- StaticPool keeps a single connection; an in-memory SQLite database is
  connection-scoped and a second connection would see an empty schema.
- The app's get_db dependency is overridden with the test session factory.
- Tables are created before and dropped after every test.
- Redis is disabled by setting cache._redis = None; the CacheManager
  treats that as a permanent miss, so reaction counts come from SQL.
- Bearer tokens are minted with the same JwtIdentityResolver the app uses.
"""
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from forum.cache import cache
from forum.database import Base, discard_after_commit, get_db, run_after_commit
from forum.main import app
from forum.middleware import install_query_counter
from forum.repositories import (
    ArticleRepository,
    CommentRepository,
    MemberRepository,
    ReactionRepository,
    ReplyRepository,
)
from forum.security import JwtIdentityResolver, get_token_provider
from forum.services.comment_service import CommentService
from forum.services.reaction_service import ReactionService
from forum.services.reply_service import ReplyService

# ---------------------------------------------------------------------------
# Test database engine: SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

install_query_counter(engine_test)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def override_get_db():
    async with async_session_test() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            discard_after_commit(session)
            await session.rollback()
            raise
        await run_after_commit(session)


app.dependency_overrides[get_db] = override_get_db


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    cache._redis = None
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """A live session for seeding data and asserting ORM state directly."""
    async with async_session_test() as session:
        yield session


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    """httpx.AsyncClient wired to the FastAPI app via ASGITransport."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def token_provider() -> JwtIdentityResolver:
    return get_token_provider()


@pytest.fixture
def bearer(token_provider: JwtIdentityResolver):
    """Return a function building an ``Authorization`` value for a member."""

    def _bearer(member_id: int) -> str:
        return f"Bearer {token_provider.create_access_token(member_id)}"

    return _bearer


@pytest.fixture
def comment_service(db_session: AsyncSession, token_provider: JwtIdentityResolver) -> CommentService:
    return CommentService(
        articles=ArticleRepository(db_session),
        comments=CommentRepository(db_session),
        replies=ReplyRepository(db_session),
        members=MemberRepository(db_session),
        identity=token_provider,
    )


@pytest.fixture
def reply_service(db_session: AsyncSession, token_provider: JwtIdentityResolver) -> ReplyService:
    return ReplyService(
        comments=CommentRepository(db_session),
        replies=ReplyRepository(db_session),
        members=MemberRepository(db_session),
        identity=token_provider,
    )


@pytest.fixture
def reaction_service(
    db_session: AsyncSession, token_provider: JwtIdentityResolver
) -> ReactionService:
    return ReactionService(
        articles=ArticleRepository(db_session),
        reactions=ReactionRepository(db_session),
        members=MemberRepository(db_session),
        identity=token_provider,
    )
