import os
import tempfile

# Settings are read when app.config is imported
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SEED_DEMO_DATA", "false")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="listing-uploads-"))

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from app.dependencies.storage import get_storage
from app.main import app
from app.schemas.property import PropertyCreate
from app.schemas.user import UserCreate
from app.storage import DatabaseStorage, MemoryStorage

HOUSE = dict(
    title="Modern Family Home",
    description="Quiet street, close to schools.",
    price="425000",
    address="123 Main St",
    city="Austin",
    state="TX",
    zip_code="78701",
    property_type="House",
    listing_type="For Sale",
    bedrooms=3,
    bathrooms="2",
    square_feet=1850,
    year_built=2018,
    status="active",
)

APARTMENT = dict(
    title="Luxury Apartment",
    description="Views over the park.",
    price="2850",
    address="456 Park Ave",
    city="New York",
    state="NY",
    zip_code="10022",
    property_type="Apartment",
    listing_type="For Rent",
    bedrooms=2,
    bathrooms="2.5",
    square_feet=1100,
    year_built=None,
    status="active",
)


def sqlite_engine():
    """In-memory SQLite engine that enforces foreign keys like Postgres does."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)

    @event.listens_for(engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


async def make_database_storage() -> DatabaseStorage:
    storage = DatabaseStorage(sqlite_engine(), auto_create=True)
    await storage.startup()
    return storage


@pytest_asyncio.fixture(params=["memory", "database"])
async def store(request):
    """Each backend, with user 1 ("owner") already registered."""
    if request.param == "memory":
        storage = MemoryStorage()
    else:
        storage = await make_database_storage()
    await storage.create_user(UserCreate(username="owner", password="owner"))
    yield storage
    await storage.close()


@pytest_asyncio.fixture
async def sqlite_storage():
    storage = await make_database_storage()
    await storage.create_user(UserCreate(username="owner", password="owner"))
    yield storage
    await storage.close()


@pytest.fixture
def listing():
    """Build a PropertyCreate from the "house" or "apartment" template."""
    templates = {"house": HOUSE, "apartment": APARTMENT}

    def build(kind="house", **overrides):
        data = dict(templates[kind])
        data.setdefault("seller_id", 1)
        data.update(overrides)
        return PropertyCreate(**data)
    return build


@pytest_asyncio.fixture
async def memory_store():
    """Memory store with sellers 1 ("owner") and 2 ("other-owner")."""
    storage = MemoryStorage()
    await storage.create_user(UserCreate(username="owner", password="owner"))
    await storage.create_user(UserCreate(username="other-owner", password="owner"))
    return storage


@pytest_asyncio.fixture
async def client(memory_store):
    app.dependency_overrides[get_storage] = lambda: memory_store
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides = {}
