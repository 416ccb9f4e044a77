"""Tests for pricing the stored cart into a snapshot."""

import pytest
from structlog.testing import capture_logs

from storefront.cart.snapshot import RepositoryCartSnapshotProvider


@pytest.fixture()
def provider():
    return RepositoryCartSnapshotProvider()


class TestResolve:
    def test_prices_lines_from_products(self, provider, shop):
        snapshot = provider.resolve(shop.buyer)
        assert [(line.product_id, line.unit_price, line.quantity) for line in snapshot.lines] == [
            (shop.product_a, 500.0, 2),
            (shop.product_b, 1000.0, 1),
        ]
        assert all(line.seller_id == shop.seller for line in snapshot.lines)

    def test_totals_and_discount(self, provider, shop):
        snapshot = provider.resolve(shop.buyer)
        assert snapshot.cart_total == 2000.0
        assert snapshot.discount_cart_value == 1800.0
        assert snapshot.amount_due == 1800.0

    def test_coupon_summary(self, provider, shop):
        coupon = provider.resolve(shop.buyer).coupon
        assert coupon.id == shop.coupon
        assert coupon.code == "SAVE200"

    def test_no_cart_resolves_to_none(self, provider, store):
        assert provider.resolve(store.customer()) is None

    def test_without_coupon_discounted_value_equals_total(self, provider, store, shop):
        other = store.customer()
        store.cart(other, [(shop.product_b, 3)])
        snapshot = provider.resolve(other)
        assert snapshot.cart_total == 3000.0
        assert snapshot.discount_cart_value == 3000.0
        assert snapshot.coupon is None

    def test_discount_is_floored_at_zero(self, provider, store, shop):
        other = store.customer()
        big = store.coupon(discount_value=10_000.0, code="HUGE")
        store.cart(other, [(shop.product_a, 1)], coupon_id=big)
        assert provider.resolve(other).discount_cart_value == 0.0

    def test_missing_product_is_dropped(self, provider, store, shop):
        store.delete_product(shop.product_b)

        with capture_logs() as logs:
            snapshot = provider.resolve(shop.buyer)

        assert [line.product_id for line in snapshot.lines] == [shop.product_a]
        assert snapshot.cart_total == 1000.0
        assert any(log["event"] == "Dropping cart line for missing product" for log in logs)

    def test_uses_live_price(self, provider, store, shop):
        store.set_price(shop.product_a, 450.0)

        assert provider.resolve(shop.buyer).cart_total == 1900.0
