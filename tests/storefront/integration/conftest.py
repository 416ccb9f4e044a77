import pytest
from fastapi.testclient import TestClient

from storefront.api.application import create_app


@pytest.fixture()
def client(container):
    return TestClient(create_app(container))


@pytest.fixture()
def buyer_headers(shop):
    return {"X-Customer-Id": shop.buyer}


@pytest.fixture()
def seller_headers(shop):
    return {"X-User-Id": shop.seller, "X-User-Role": "SELLER"}


@pytest.fixture()
def admin_headers():
    return {"X-User-Id": "admin-1", "X-User-Role": "ADMIN"}
