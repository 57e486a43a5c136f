import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock
from httpx import AsyncClient, ASGITransport

from storefront.main import app
from storefront.db.database import Database, db
from storefront.schemas.catalog import BrandRecord, CategoryRecord, ProductRecord

BASE_TIME = datetime(2024, 6, 1, 12, 0, 0)


@pytest.fixture
def make_product():
    """Factory for denormalized product records."""

    def _make(
        id: int,
        name: str = None,
        price: str = "100.00",
        brand: tuple[str, str] = ("Generic", "generic"),
        category: tuple[str, str] = ("Supercars", "supercars"),
        days_old: int = 0,
        **fields
    ) -> ProductRecord:
        return ProductRecord(
            id=id,
            name=name or f"Model {id}",
            slug=fields.pop("slug", f"model-{id}"),
            price=Decimal(price),
            created_at=BASE_TIME - timedelta(days=days_old),
            brand=BrandRecord(id=abs(hash(brand[1])) % 1000, name=brand[0], slug=brand[1]),
            category=CategoryRecord(id=abs(hash(category[1])) % 1000, name=category[0], slug=category[1]),
            **fields
        )

    return _make


@pytest.fixture
async def sqlite_db(tmp_path):
    """File-backed SQLite catalog store with the schema created."""
    database = Database(url=f"sqlite:///{tmp_path}/catalog.db", db_type="sqlite")
    await database.connect()
    await database.create_schema()
    yield database
    await database.disconnect()


@pytest.fixture
async def client():
    """Async test client with the lifespan database calls mocked."""
    original_connect = db.connect
    original_disconnect = db.disconnect
    db.connect = AsyncMock()
    db.disconnect = AsyncMock()

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    # Restore
    db.connect = original_connect
    db.disconnect = original_disconnect
