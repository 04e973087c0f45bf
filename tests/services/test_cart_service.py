from decimal import Decimal

import pytest

from application.services.cart_service import CartApplicationService
from domain.common.exceptions import CartItemNotFoundException, ProductNotFoundException


@pytest.mark.asyncio
async def test_add_same_product_merges_quantity(uow_factory, make_product):
    product = await make_product(price="10.00")
    service = CartApplicationService(uow_factory=uow_factory)

    await service.add_item("u1", product.id, 2)
    line = await service.add_item("u1", product.id, 3)

    cart = await service.get_cart("u1")
    assert line.quantity == 5
    assert cart.item_count == 1
    assert cart.items[0].quantity == 5


@pytest.mark.asyncio
async def test_cart_total_is_exact(uow_factory, make_product):
    first = await make_product(name="First", price="10.00")
    second = await make_product(name="Second", price="5.50")
    service = CartApplicationService(uow_factory=uow_factory)

    await service.add_item("u1", first.id, 2)
    await service.add_item("u1", second.id, 3)

    cart = await service.get_cart("u1")
    assert cart.total == Decimal("36.50")
    assert cart.item_count == 2


@pytest.mark.asyncio
async def test_cart_total_follows_current_price(uow_factory, make_product):
    from application.dto import ProductUpdateDTO
    from application.services.catalog_service import CatalogApplicationService

    product = await make_product(price="10.00")
    service = CartApplicationService(uow_factory=uow_factory)
    await service.add_item("u1", product.id, 2)

    await CatalogApplicationService(uow_factory=uow_factory).update_product(
        product.id, ProductUpdateDTO(price=Decimal("12.00"))
    )

    cart = await service.get_cart("u1")
    assert cart.total == Decimal("24.00")


@pytest.mark.asyncio
async def test_add_unknown_product(uow_factory):
    service = CartApplicationService(uow_factory=uow_factory)
    with pytest.raises(ProductNotFoundException):
        await service.add_item("u1", 999, 1)


@pytest.mark.asyncio
async def test_update_quantity_to_zero_removes_line(uow_factory, make_product):
    product = await make_product()
    service = CartApplicationService(uow_factory=uow_factory)
    await service.add_item("u1", product.id, 2)

    assert await service.update_quantity("u1", product.id, 0) is None
    assert not await service.is_in_cart("u1", product.id)
    assert await service.get_item_count("u1") == 0


@pytest.mark.asyncio
async def test_update_quantity_sets_value(uow_factory, make_product):
    product = await make_product()
    service = CartApplicationService(uow_factory=uow_factory)
    await service.add_item("u1", product.id, 2)

    line = await service.update_quantity("u1", product.id, 7)
    assert line.quantity == 7


@pytest.mark.asyncio
async def test_update_quantity_missing_line(uow_factory, make_product):
    product = await make_product()
    service = CartApplicationService(uow_factory=uow_factory)
    with pytest.raises(CartItemNotFoundException):
        await service.update_quantity("u1", product.id, 3)


@pytest.mark.asyncio
async def test_remove_item_is_idempotent(uow_factory, make_product):
    product = await make_product()
    service = CartApplicationService(uow_factory=uow_factory)
    await service.add_item("u1", product.id, 1)

    assert await service.remove_item("u1", product.id) is True
    assert await service.remove_item("u1", product.id) is False


@pytest.mark.asyncio
async def test_clear_cart_only_touches_owner(uow_factory, make_product):
    product = await make_product()
    service = CartApplicationService(uow_factory=uow_factory)
    await service.add_item("u1", product.id, 1)
    await service.add_item("u2", product.id, 4)

    assert await service.clear_cart("u1") == 1
    assert (await service.get_cart("u1")).item_count == 0
    assert (await service.get_cart("u2")).item_count == 1


@pytest.mark.asyncio
async def test_cart_stats(uow_factory, make_product):
    first = await make_product(name="First", price="10.00")
    second = await make_product(name="Second", price="5.50")
    service = CartApplicationService(uow_factory=uow_factory)
    await service.add_item("u1", first.id, 2)
    await service.add_item("u2", second.id, 2)

    stats = await service.cart_stats()
    assert stats.total_lines == 2
    assert stats.total_quantity == 4
    assert stats.total_value == Decimal("31.00")
    assert stats.active_carts == 2
    assert stats.average_cart_value == Decimal("15.50")
