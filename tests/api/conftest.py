import time

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from api import dependencies
from application.services.cart_service import CartApplicationService
from application.services.catalog_service import CatalogApplicationService
from application.services.order_service import OrderApplicationService
from application.services.payment_service import PaymentApplicationService
from core.config import settings
from infrastructure.external.payments.simulated import SimulatedStripeGateway


def make_token(sub: str = "u1", role: str = "USER", expires_in: int = 3600) -> str:
    payload = {"sub": sub, "role": role, "email": f"{sub}@example.com", "exp": int(time.time()) + expires_in}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def auth(sub: str = "u1", role: str = "USER") -> dict:
    return {"Authorization": f"Bearer {make_token(sub, role)}"}


@pytest.fixture
def user_headers():
    return auth("u1")


@pytest.fixture
def other_headers():
    return auth("u2")


@pytest.fixture
def admin_headers():
    return auth("admin-1", "ADMIN")


@pytest_asyncio.fixture
async def client(uow_factory, publisher):
    from main import app

    app.dependency_overrides[dependencies.get_catalog_service] = lambda: CatalogApplicationService(uow_factory)
    app.dependency_overrides[dependencies.get_cart_service] = lambda: CartApplicationService(uow_factory)
    app.dependency_overrides[dependencies.get_order_service] = lambda: OrderApplicationService(
        uow_factory, event_publisher=publisher
    )
    app.dependency_overrides[dependencies.get_payment_service] = lambda: PaymentApplicationService(
        uow_factory, gateway=SimulatedStripeGateway()
    )
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
