"""Integration tests for the application factory's own endpoints and middleware."""


def test_health_reports_gateway_and_currency(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "domain": "storefront", "gateway": "fake", "currency": "INR"}


def test_secret_is_not_exposed_on_health(client, container):
    assert container.settings.gateway_key_secret not in client.get("/health").text


def test_cors_allows_the_frontend(client):
    response = client.options(
        "/orders/my-orders",
        headers={"Origin": "https://shop.example.com", "Access-Control-Request-Method": "GET"},
    )
    assert response.headers["access-control-allow-origin"] == "https://shop.example.com"
