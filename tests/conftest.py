"""Pytest bootstrap configuration.

Ensure mandatory environment variables are set before test collection
and module imports that depend on application settings.
"""
import os

# Mandatory secret key for settings validation
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("DATABASE__URL", "sqlite+aiosqlite:///:memory:")

from decimal import Decimal  # noqa: E402
from functools import partial  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from domain.catalog.entity import Product, ProductStatus  # noqa: E402
from infrastructure.models import Base  # noqa: E402
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork  # noqa: E402


ADDRESS = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "email": "ada@example.com",
    "phone": "+44 20 7946 0000",
    "address": "12 Analytical Engine Street",
    "city": "London",
    "state": "Greater London",
    "zip_code": "NW1 6XE",
    "country": "United Kingdom",
}


class RecordingPublisher:
    """Collects published events instead of dispatching them."""

    def __init__(self):
        self.events = []

    def publish(self, event):
        self.events.append(event)


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def uow_factory(session_factory):
    return partial(SQLAlchemyUnitOfWork, session_factory=session_factory)


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def checkout_data():
    from application.dto import CheckoutDTO

    return CheckoutDTO(shipping_address=ADDRESS, payment_method="stripe")


@pytest.fixture
def make_product(uow_factory):
    """Insert a catalog product and return the stored entity."""

    async def _make(
        name: str = "Widget",
        price: str = "10.00",
        status: ProductStatus = ProductStatus.AVAILABLE,
        category: str = "gadgets",
    ) -> Product:
        async with uow_factory() as uow:
            return await uow.product_repository.create(
                Product(id=None, name=name, price=Decimal(price), status=status, category=category)
            )

    return _make


@pytest.fixture
def address():
    return dict(ADDRESS)
