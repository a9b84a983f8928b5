"""
FAST Finder - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment before anything reads Settings
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test_fastfinder.db'
os.environ['ENVIRONMENT'] = 'test'
os.environ['DATABASE_URL'] = TEST_DATABASE_URL
os.environ['JWT_SECRET'] = 'test-jwt-secret-for-testing-only'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['LOG_FILE'] = ''
os.environ['EMAIL_USER'] = ''
os.environ['EMAIL_PASS'] = ''
os.environ['EXPOSE_CODES_IN_RESPONSE'] = 'true'

from fastfinder.main import app
from fastfinder.core.database import Base, get_db
from fastfinder.core.security import token_codec
from fastfinder.models.user import User
from fastfinder.services.credential_store import CredentialStore

fake = Faker()

DEFAULT_PASSWORD = 'Passw0rd!'

test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


async def make_user(db_session: AsyncSession, verified: bool = True, password: str = DEFAULT_PASSWORD, **fields) -> User:
    user = await CredentialStore(db_session).create(
        name=fields.pop('name', fake.name()),
        email=fields.pop('email', fake.unique.email()),
        raw_password=password,
        contact_number=fields.pop('contact_number', '+92 300 1234567'),
        **fields,
    )
    user.is_verified = verified
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
def user_factory(db_session: AsyncSession):
    """Create users with custom fields inside a test"""
    async def _make(**kwargs) -> User:
        return await make_user(db_session, **kwargs)
    return _make


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """A verified user with DEFAULT_PASSWORD"""
    return await make_user(db_session)


@pytest.fixture
async def other_user(db_session: AsyncSession) -> User:
    """A second verified user, for ownership checks"""
    return await make_user(db_session)


@pytest.fixture
async def unverified_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, verified=False)


def bearer_headers(user: User) -> dict:
    return {'Authorization': f'Bearer {token_codec.issue(user.id)}'}


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    """Authentication headers for test user"""
    return bearer_headers(test_user)


@pytest.fixture
def other_auth_headers(other_user: User) -> dict:
    return bearer_headers(other_user)
