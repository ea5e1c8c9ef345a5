"""Fixtures: per-test SQLite database, API client, users and shops."""
import os

# Must be set before cointrace is imported: settings and the engine are module level.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./cointrace-test.db")
os.environ.setdefault("IDENTITY_JWT_SECRET", "test-secret")

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from cointrace.core.database import Base, get_db
from cointrace.main import app
from cointrace.models import Shop, StaffMembership, User
from cointrace.services.auth_service import create_identity_token
from cointrace.services.invalidation import ViewInvalidator, get_invalidator


class RecordingInvalidator(ViewInvalidator):
    def __init__(self):
        self.stale_shop_ids = []

    async def shop_view_stale(self, shop_id: str) -> None:
        self.stale_shop_ids.append(shop_id)


@pytest_asyncio.fixture
async def engine(tmp_path):
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def invalidator():
    return RecordingInvalidator()


@pytest_asyncio.fixture
async def client(session_maker, invalidator):
    """API client bound to the test database."""

    async def _get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_invalidator] = lambda: invalidator
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Bearer headers for a user, as the identity provider would issue them."""

    def _headers(user: User) -> dict:
        token = create_identity_token(subject=user.id, email=user.email, name=user.name)
        return {"Authorization": f"Bearer {token}"}

    return _headers


async def _add_user(db, user_id: str, email: str, name: str) -> User:
    user = User(id=user_id, email=email, name=name)
    db.add(user)
    await db.commit()
    return user


@pytest_asyncio.fixture
async def owner(db):
    return await _add_user(db, "user_owner", "owner@example.com", "Owner")


@pytest_asyncio.fixture
async def staff_user(db):
    return await _add_user(db, "user_staff", "staff@example.com", "Staff")


@pytest_asyncio.fixture
async def outsider(db):
    return await _add_user(db, "user_outsider", "outsider@example.com", "Outsider")


@pytest_asyncio.fixture
async def shop(db, owner):
    s = Shop(name="Corner Store", owner_id=owner.id)
    db.add(s)
    await db.commit()
    return s


@pytest_asyncio.fixture
async def staffed_shop(db, shop, staff_user):
    """The shop with staff_user as a member."""
    db.add(StaffMembership(shop_id=shop.id, user_id=staff_user.id))
    await db.commit()
    return shop
