from decimal import Decimal

import pytest


async def _create_product(client, admin_headers, name="Widget", price="10.00", status="AVAILABLE"):
    resp = await client.post(
        "/api/v1/products",
        json={"name": name, "category": "gadgets", "price": price, "status": status},
        headers=admin_headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


async def _checkout(client, headers, address):
    resp = await client.post(
        "/api/v1/orders/from-cart",
        json={"shipping_address": address, "payment_method": "stripe"},
        headers=headers,
    )
    return resp


@pytest.mark.asyncio
async def test_product_admin_and_public_reads(client, admin_headers, user_headers):
    product = await _create_product(client, admin_headers, price="12.50")
    assert Decimal(product["price"]) == Decimal("12.50")

    forbidden = await client.post(
        "/api/v1/products",
        json={"name": "Nope", "category": "gadgets", "price": "1.00"},
        headers=user_headers,
    )
    assert forbidden.status_code == 403

    listed = await client.get("/api/v1/products", params={"category": "gadgets"})
    assert listed.status_code == 200
    assert listed.json()["data"]["total"] == 1

    patched = await client.patch(
        f"/api/v1/products/{product['id']}",
        json={"status": "NOT_AVAILABLE"},
        headers=admin_headers,
    )
    assert patched.json()["data"]["status"] == "NOT_AVAILABLE"

    missing = await client.get("/api/v1/products/999")
    assert missing.status_code == 404
    assert missing.json()["error"]["type"] == "ProductNotFound"


@pytest.mark.asyncio
async def test_cart_routes(client, admin_headers, user_headers):
    first = await _create_product(client, admin_headers, name="First", price="10.00")
    second = await _create_product(client, admin_headers, name="Second", price="5.50")

    await client.post("/api/v1/cart/items", json={"product_id": first["id"], "quantity": 2}, headers=user_headers)
    await client.post("/api/v1/cart/items", json={"product_id": second["id"], "quantity": 1}, headers=user_headers)
    merged = await client.post(
        "/api/v1/cart/items", json={"product_id": second["id"], "quantity": 2}, headers=user_headers
    )
    assert merged.json()["data"]["quantity"] == 3

    cart = (await client.get("/api/v1/cart", headers=user_headers)).json()["data"]
    assert Decimal(cart["total"]) == Decimal("36.50")
    assert cart["item_count"] == 2

    count = await client.get("/api/v1/cart/count", headers=user_headers)
    assert count.json()["data"] == {"count": 2}

    removed = await client.put(f"/api/v1/cart/items/{first['id']}", json={"quantity": 0}, headers=user_headers)
    assert removed.status_code == 200
    assert removed.json()["data"] is None

    exists = await client.get(f"/api/v1/cart/items/{first['id']}/exists", headers=user_headers)
    assert exists.json()["data"] == {"in_cart": False}

    cleared = await client.delete("/api/v1/cart", headers=user_headers)
    assert cleared.json()["data"] == {"removed": 1}


@pytest.mark.asyncio
async def test_add_to_cart_validation(client, user_headers):
    resp = await client.post("/api/v1/cart/items", json={"product_id": 1, "quantity": 0}, headers=user_headers)
    assert resp.status_code == 422
    assert resp.json()["error"]["type"] == "ValidationError"


@pytest.mark.asyncio
async def test_checkout_over_http(client, admin_headers, user_headers, other_headers, address, publisher):
    product = await _create_product(client, admin_headers, price="100.00")
    await client.post("/api/v1/cart/items", json={"product_id": product["id"], "quantity": 1}, headers=user_headers)

    resp = await _checkout(client, user_headers, address)
    assert resp.status_code == 201, resp.text
    order = resp.json()["data"]
    assert Decimal(order["total_amount"]) == Decimal("100.00")
    assert order["status"] == "PENDING"
    assert len(publisher.events) == 1

    again = await _checkout(client, user_headers, address)
    assert again.status_code == 400
    assert again.json()["error"]["type"] == "EmptyCart"

    mine = await client.get("/api/v1/orders/me", headers=user_headers)
    assert mine.json()["data"]["total"] == 1

    by_number = await client.get(f"/api/v1/orders/number/{order['order_number']}", headers=user_headers)
    assert by_number.json()["data"]["id"] == order["id"]

    foreign = await client.get(f"/api/v1/orders/{order['id']}", headers=other_headers)
    assert foreign.status_code == 403

    illegal = await client.patch(
        f"/api/v1/orders/{order['id']}/status", json={"status": "DELIVERED"}, headers=admin_headers
    )
    assert illegal.status_code == 400
    assert illegal.json()["error"]["type"] == "InvalidState"

    stats = await client.get("/api/v1/orders/stats", headers=admin_headers)
    assert stats.json()["data"]["total_orders"] == 1


@pytest.mark.asyncio
async def test_my_order_stats(client, admin_headers, user_headers, other_headers, address):
    product = await _create_product(client, admin_headers, price="40.00")
    await client.post("/api/v1/cart/items", json={"product_id": product["id"], "quantity": 2}, headers=user_headers)
    assert (await _checkout(client, user_headers, address)).status_code == 201

    mine = await client.get("/api/v1/orders/stats/me", headers=user_headers)
    assert mine.status_code == 200, mine.text
    assert mine.json()["data"]["total_orders"] == 1
    assert mine.json()["data"]["pending_orders"] == 1

    theirs = await client.get("/api/v1/orders/stats/me", headers=other_headers)
    assert theirs.json()["data"]["total_orders"] == 0

    assert (await client.get("/api/v1/orders/stats", headers=user_headers)).status_code == 403
    assert (await client.get("/api/v1/orders/stats/me")).status_code == 401


@pytest.mark.asyncio
async def test_checkout_rejects_bad_address(client, user_headers, address):
    address["phone"] = "call me maybe"
    resp = await _checkout(client, user_headers, address)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_pay_and_refund_over_http(client, admin_headers, user_headers, other_headers, address):
    product = await _create_product(client, admin_headers, price="100.00")
    await client.post("/api/v1/cart/items", json={"product_id": product["id"], "quantity": 1}, headers=user_headers)
    order = (await _checkout(client, user_headers, address)).json()["data"]

    foreign = await client.post(
        "/api/v1/payments",
        json={"order_id": order["id"], "amount": "100.00", "payment_method": "stripe"},
        headers=other_headers,
    )
    assert foreign.status_code == 403

    created = await client.post(
        "/api/v1/payments",
        json={"order_id": order["id"], "amount": "100.00", "payment_method": "stripe"},
        headers=user_headers,
    )
    assert created.status_code == 201, created.text
    payment = created.json()["data"]
    assert payment["status"] == "PENDING"

    completed = await client.patch(
        f"/api/v1/payments/{payment['id']}/status",
        json={"status": "COMPLETED", "transaction_id": "txn_http"},
        headers=admin_headers,
    )
    assert completed.json()["data"]["status"] == "COMPLETED"

    too_much = await client.post(
        f"/api/v1/payments/{payment['id']}/refund", json={"refund_amount": "150.00"}, headers=admin_headers
    )
    assert too_much.status_code == 400
    assert too_much.json()["error"]["type"] == "InvalidAmount"

    refunded = await client.post(
        f"/api/v1/payments/{payment['id']}/refund",
        json={"refund_amount": "100.00", "reason": "changed mind"},
        headers=admin_headers,
    )
    assert refunded.status_code == 200, refunded.text
    result = refunded.json()["data"]
    assert result["full_refund"] is True
    assert Decimal(result["refund"]["amount"]) == Decimal("-100.00")
    assert result["refund"]["transaction_id"] == "REFUND-txn_http"

    final = (await client.get(f"/api/v1/orders/{order['id']}", headers=user_headers)).json()["data"]
    assert final["status"] == "REFUNDED"
    assert final["payment_status"] == "REFUNDED"

    ledger = await client.get(f"/api/v1/payments/order/{order['id']}", headers=user_headers)
    assert len(ledger.json()["data"]) == 2

    by_txn = await client.get("/api/v1/payments/transaction/txn_http", headers=user_headers)
    assert by_txn.json()["data"]["id"] == payment["id"]


@pytest.mark.asyncio
async def test_stripe_stub_and_webhook(client, admin_headers, user_headers, address):
    product = await _create_product(client, admin_headers, price="20.00")
    await client.post("/api/v1/cart/items", json={"product_id": product["id"], "quantity": 1}, headers=user_headers)
    order = (await _checkout(client, user_headers, address)).json()["data"]

    processed = await client.post(
        "/api/v1/payments/stripe/process",
        json={"order_id": order["id"], "amount": "20.00"},
        headers=user_headers,
    )
    assert processed.status_code == 200, processed.text
    assert processed.json()["data"]["status"] == "COMPLETED"
    assert processed.json()["data"]["transaction_id"].startswith("stripe_")

    webhook = await client.post(
        "/api/v1/payments/stripe/webhook",
        content=b'{"id": "evt_1", "type": "charge.succeeded"}',
        headers={"Content-Type": "application/json"},
    )
    assert webhook.status_code == 200
    assert webhook.json() == {"received": True}

    stats = await client.get("/api/v1/payments/stats", headers=admin_headers)
    assert stats.json()["data"]["completed_payments"] == 1
