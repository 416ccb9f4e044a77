"""End-to-end: cart to paid, stock-adjusted order through the HTTP API."""

from storefront.order.order import OrderStatus


def test_cart_to_confirmed_order(client, gateway, store, shop, buyer_headers):
    # Cart: A x2 @ 500, B x1 @ 1000, total 2000, discounted 1800
    response = client.post("/orders/checkout", json={"address_id": shop.address}, headers=buyer_headers)
    assert response.status_code == 201
    intent = response.json()["data"]

    assert gateway.calls[0]["amount"] == 180000
    order = store.get_order(payment_reference=intent["id"])
    assert order.status == OrderStatus.PENDING.value
    assert order.payment_confirmed is False
    assert (order.order_price, order.discounted_order_price) == (2000.0, 1800.0)

    payment = gateway.complete_payment(intent["id"])
    callback = {
        "razorpay_order_id": payment.gateway_order_ref,
        "razorpay_payment_id": payment.gateway_payment_ref,
        "razorpay_signature": payment.signature,
    }
    response = client.post("/orders/verify", json=callback, follow_redirects=False)
    assert response.status_code == 302

    order = store.get_order(payment_reference=intent["id"])
    assert order.status == OrderStatus.CONFIRMED.value
    assert order.payment_confirmed is True
    assert store.stock(shop.product_a) == 8
    assert store.stock(shop.product_b) == 4
    assert store.get_cart(shop.buyer).items == []

    # The gateway retries the callback
    response = client.post("/orders/verify", json=callback, follow_redirects=False)
    assert response.status_code == 302
    assert store.stock(shop.product_a) == 8
    assert store.stock(shop.product_b) == 4

    detail = client.get(f"/orders/{order.id}", headers=buyer_headers).json()["data"]
    assert detail["status"] == "CONFIRMED"
    assert detail["gateway_payment_ref"] == payment.gateway_payment_ref

    response = client.patch(
        f"/orders/{order.id}/status",
        json={"status": "DELIVERED"},
        headers={"X-User-Id": shop.seller, "X-User-Role": "SELLER"},
    )
    assert response.status_code == 200
    assert store.get_order(order.id).status == OrderStatus.DELIVERED.value
