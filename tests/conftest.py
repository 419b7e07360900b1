"""
Test configuration and fixtures
"""

import os
from decimal import Decimal
from typing import AsyncGenerator
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["REDIS_URL"] = "redis://localhost:6379/1"
os.environ["JWT_SECRET_KEY"] = "shutterbook-test-secret-key-0123456789abcdef"
os.environ["LOG_FORMAT"] = "text"

# Import all models BEFORE creating fixtures (create_all needs them registered)
from shutterbook.core.database import Base
from shutterbook.core.security import create_access_token
from shutterbook.models import Package, Photographer, Promo, Role, Service
from shutterbook.models.catalog import DiscountType
from shutterbook.models.transaction import TransactionStatus
from tests.factories import create_booking, create_customer, create_transaction, create_user


@pytest_asyncio.fixture(scope="function")
async def test_db():
    """In-memory database shared by every connection of one test"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_db) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for tests"""
    async_session_maker = async_sessionmaker(
        test_db,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        try:
            yield session
        finally:
            if session.in_transaction():
                await session.rollback()


@pytest.fixture
def redis_client():
    """Dict-backed stand-in for the few Redis calls the app makes"""
    store = {}

    async def setex(key, ttl, value):
        store[key] = value
        return True

    async def exists(key):
        return int(key in store)

    client = AsyncMock()
    client.setex.side_effect = setex
    client.exists.side_effect = exists
    client.ping.return_value = True
    client.store = store
    return client


@pytest_asyncio.fixture
async def client(db_session, redis_client):
    """Create test client with dependency overrides"""
    from shutterbook.main import app
    from shutterbook.core.database import get_session
    from shutterbook.core.redis import get_redis

    async def override_get_session():
        yield db_session

    async def override_get_redis():
        return redis_client

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_redis] = override_get_redis

    try:
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


# Accounts

@pytest_asyncio.fixture
async def admin_role(db_session):
    role = Role(name="Administrator", description="Full access", permissions=["*"])
    db_session.add(role)
    await db_session.commit()
    return role


@pytest_asyncio.fixture
async def viewer_role(db_session):
    role = Role(name="Viewer", description="Read only", permissions=["transaction:read"])
    db_session.add(role)
    await db_session.commit()
    return role


@pytest_asyncio.fixture
async def admin_user(db_session, admin_role):
    return await create_user(db_session, admin_role)


@pytest_asyncio.fixture
async def viewer_user(db_session, viewer_role):
    return await create_user(db_session, viewer_role, first_name="Vic")


@pytest_asyncio.fixture
async def customer(db_session):
    return await create_customer(db_session)


@pytest_asyncio.fixture
async def other_customer(db_session):
    return await create_customer(db_session, first_name="Jose", last_name="Cruz")


@pytest.fixture
def admin_headers(admin_user):
    token = create_access_token(str(admin_user.id), "user")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def viewer_headers(viewer_user):
    token = create_access_token(str(viewer_user.id), "user")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer_headers(customer):
    token = create_access_token(str(customer.id), "customer")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_customer_headers(other_customer):
    token = create_access_token(str(other_customer.id), "customer")
    return {"Authorization": f"Bearer {token}"}


# Catalog and bookings

@pytest_asyncio.fixture
async def catalog(db_session):
    photographer = Photographer(
        name="Lea Navarro",
        email=f"lea_{uuid4().hex[:6]}@example.com",
        mobile_number="09170001111",
        specialties=["Wedding", "Portrait"],
    )
    package = Package(
        name=f"Golden Hour {uuid4().hex[:4]}",
        description="Two hour outdoor session",
        package_price=Decimal("4500.00"),
    )
    promo = Promo(
        promo_code=f"SAVE{uuid4().hex[:4].upper()}",
        name="Launch promo",
        discount_type=DiscountType.FIXED,
        discount_value=Decimal("500.00"),
    )
    service = Service(
        name=f"Extra prints {uuid4().hex[:4]}",
        category="Add-on",
        price=Decimal("1000.00"),
        duration_minutes=30,
    )
    db_session.add_all([photographer, package, promo, service])
    await db_session.commit()
    return {
        "photographer": photographer,
        "package": package,
        "promo": promo,
        "service": service,
    }


@pytest_asyncio.fixture
async def booking(db_session, customer, catalog):
    return await create_booking(db_session, customer, catalog)


@pytest_asyncio.fixture
async def other_booking(db_session, other_customer, catalog):
    return await create_booking(db_session, other_customer, catalog)


@pytest_asyncio.fixture
async def pending_payment(db_session, booking):
    return await create_transaction(db_session, booking, status=TransactionStatus.PENDING)


@pytest_asyncio.fixture
async def completed_payment(db_session, booking):
    return await create_transaction(db_session, booking)
