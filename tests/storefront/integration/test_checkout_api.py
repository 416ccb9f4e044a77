"""Integration tests for POST /orders/checkout."""

from storefront.order.order import OrderStatus


class TestCheckoutAPI:
    def test_checkout_returns_201_with_gateway_payload(self, client, buyer_headers, shop):
        response = client.post("/orders/checkout", json={"address_id": shop.address}, headers=buyer_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["amount"] == 180000
        assert body["data"]["currency"] == "INR"
        assert body["data"]["id"].startswith("order_")

    def test_checkout_persists_pending_order(self, client, buyer_headers, store, shop):
        response = client.post("/orders/checkout", json={"address_id": shop.address}, headers=buyer_headers)

        order = store.get_order(payment_reference=response.json()["data"]["id"])
        assert order.status == OrderStatus.PENDING.value
        assert order.discounted_order_price == 1800.0

    def test_missing_customer_header(self, client, shop):
        response = client.post("/orders/checkout", json={"address_id": shop.address})
        assert response.status_code == 401

    def test_foreign_address_is_forbidden(self, client, store, shop):
        stranger = store.customer()
        response = client.post(
            "/orders/checkout", json={"address_id": shop.address}, headers={"X-Customer-Id": stranger}
        )

        assert response.status_code == 403
        body = response.json()
        assert body["status_code"] == 403
        assert "address_id" in body["errors"]
        assert body["success"] is False

    def test_empty_cart(self, client, store):
        customer = store.customer()
        address = store.address(customer)

        response = client.post("/orders/checkout", json={"address_id": address}, headers={"X-Customer-Id": customer})

        assert response.status_code == 400
        assert response.json()["errors"] == {"cart": ["Cart is empty"]}

    def test_gateway_failure_uses_gateway_status(self, client, gateway, buyer_headers, store, shop):
        gateway.configure(should_succeed=False, failure_reason="Authentication failed", status_code=401)

        response = client.post("/orders/checkout", json={"address_id": shop.address}, headers=buyer_headers)

        assert response.status_code == 401
        assert response.json()["message"] == "Authentication failed"
        assert store.orders() == []

    def test_gateway_timeout(self, client, gateway, buyer_headers, store, shop):
        gateway.configure(should_succeed=False, failure_reason="Payment gateway timed out", status_code=504)

        response = client.post("/orders/checkout", json={"address_id": shop.address}, headers=buyer_headers)

        assert response.status_code == 504
        assert store.orders() == []

    def test_gateway_secret_is_never_echoed(self, client, container, buyer_headers, shop):
        response = client.post("/orders/checkout", json={"address_id": shop.address}, headers=buyer_headers)
        assert container.settings.gateway_key_secret not in response.text

    def test_missing_address_id_is_rejected(self, client, buyer_headers):
        response = client.post("/orders/checkout", json={}, headers=buyer_headers)
        assert response.status_code == 422
        assert response.json()["errors"] == {"address_id": ["Field required"]}
        assert response.json()["success"] is False
