"""Shared pytest fixtures for backend tests."""

import os
import sys
from typing import AsyncGenerator

# Point the application at in-memory SQLite BEFORE importing it
os.environ["DATABASE_URL_OVERRIDE"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("JWT_SECRET", "test-secret")

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import bcrypt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from knowledge_base.database import Base, get_db
from knowledge_base.main import app
from knowledge_base.models import Document, DocumentShare, DocumentVersion, User, UserRole
from knowledge_base.services.auth_service import create_token_for_user

TEST_PASSWORD = "TestPassword123!"

SQLALCHEMY_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def get_test_password_hash(password: str) -> str:
    """
    Generate a password hash for testing.

    Uses bcrypt directly to avoid passlib version detection issues.
    """
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


# ============================================================================
# Database and client
# ============================================================================


@pytest_asyncio.fixture
async def engine():
    """Create a test database engine with in-memory SQLite."""
    engine = create_async_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Enable foreign key support for SQLite so ON DELETE CASCADE applies
    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session shared with the application."""
    session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database dependency override."""

    async def override_get_db():
        yield db_session
        await db_session.commit()

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ============================================================================
# Users and tokens
# ============================================================================


async def make_user(
    db_session: AsyncSession,
    name: str,
    email: str,
    role: str = UserRole.USER,
) -> User:
    user = User(
        name=name,
        email=email,
        password_hash=get_test_password_hash(TEST_PASSWORD),
        role=role,
    )
    db_session.add(user)
    await db_session.commit()
    return user


def bearer(user: User) -> dict:
    """Authorization headers for a user."""
    return {"Authorization": f"Bearer {create_token_for_user(user)}"}


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user (document author in most tests)."""
    return await make_user(db_session, "Alice Author", "alice@example.com")


@pytest_asyncio.fixture
async def test_user_2(db_session: AsyncSession) -> User:
    """Create a second test user."""
    return await make_user(db_session, "Bob Reader", "bob@example.com")


@pytest_asyncio.fixture
async def test_user_3(db_session: AsyncSession) -> User:
    """Create a third test user with no relation to anything."""
    return await make_user(db_session, "Carol Stranger", "carol@example.com")


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    """Create an admin user."""
    return await make_user(db_session, "Ada Admin", "admin@example.com", role=UserRole.ADMIN)


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    """Create authorization headers."""
    return bearer(test_user)


@pytest.fixture
def auth_headers_2(test_user_2: User) -> dict:
    """Create authorization headers for second user."""
    return bearer(test_user_2)


@pytest.fixture
def auth_headers_3(test_user_3: User) -> dict:
    """Create authorization headers for third user."""
    return bearer(test_user_3)


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    """Create authorization headers for the admin."""
    return bearer(admin_user)


# ============================================================================
# Documents
# ============================================================================


async def make_document(
    db_session: AsyncSession,
    author: User,
    title: str = "Test Document",
    content: str = "<p>Hello world</p>",
    is_public: bool = False,
) -> Document:
    """Insert a document with its first version, bypassing the API."""
    document = Document(
        title=title,
        content=content,
        is_public=is_public,
        author_id=author.id,
    )
    document.author = author
    db_session.add(document)
    await db_session.flush()
    db_session.add(
        DocumentVersion(
            document_id=document.id,
            content=content,
            version=1,
            author_id=author.id,
        )
    )
    await db_session.commit()
    return document


async def make_share(
    db_session: AsyncSession,
    document: Document,
    user: User,
    permission: str = "VIEW",
) -> DocumentShare:
    share = DocumentShare(document_id=document.id, user_id=user.id, permission=permission)
    db_session.add(share)
    await db_session.commit()
    return share


@pytest_asyncio.fixture
async def private_document(db_session: AsyncSession, test_user: User) -> Document:
    """A private document authored by test_user."""
    return await make_document(
        db_session,
        test_user,
        title="Private Plans",
        content="<p>Secret roadmap</p>",
    )


@pytest_asyncio.fixture
async def public_document(db_session: AsyncSession, test_user: User) -> Document:
    """A public document authored by test_user."""
    return await make_document(
        db_session,
        test_user,
        title="Public Handbook",
        content="<p>Welcome to the team</p>",
        is_public=True,
    )
