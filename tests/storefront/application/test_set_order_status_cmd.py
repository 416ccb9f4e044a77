"""Tests for the SetOrderStatus command handler."""

import pytest
from protean.utils.globals import current_domain
from structlog.testing import capture_logs

from storefront.errors import OrderNotFoundError, ValidationError
from storefront.order.order import OrderStatus
from storefront.order.status import SetOrderStatus


def _set_status(order_id, status, requester_id="admin-1"):
    command = SetOrderStatus(order_id=order_id, status=status, requester_id=requester_id)
    return current_domain.process(command, asynchronous=False)


@pytest.fixture()
def order_id(store, shop):
    return store.pending_order(
        shop.buyer,
        shop.address,
        [(shop.product_a, 500.0, 2)],
        payment_reference="order_status_001",
    )


class TestSetOrderStatus:
    def test_confirmed_order_can_be_delivered(self, store, order_id):
        store.set_status(order_id, OrderStatus.CONFIRMED)

        order = _set_status(order_id, "DELIVERED")

        assert order.status == OrderStatus.DELIVERED.value
        assert store.get_order(order_id).status == OrderStatus.DELIVERED.value

    def test_confirmed_order_can_be_cancelled(self, store, order_id):
        store.set_status(order_id, OrderStatus.CONFIRMED)
        _set_status(order_id, "cancelled")
        assert store.get_order(order_id).status == OrderStatus.CANCELLED.value

    def test_pending_order_cannot_skip_payment(self, store, order_id):
        with pytest.raises(ValidationError):
            _set_status(order_id, "DELIVERED")
        assert store.get_order(order_id).status == OrderStatus.PENDING.value

    def test_confirmed_cannot_be_set_by_hand(self, store, order_id):
        with pytest.raises(ValidationError):
            _set_status(order_id, "CONFIRMED")
        order = store.get_order(order_id)
        assert order.status == OrderStatus.PENDING.value
        assert order.payment_confirmed is False

    def test_terminal_order_stays_put(self, store, order_id):
        store.set_status(order_id, OrderStatus.DELIVERED)
        with pytest.raises(ValidationError):
            _set_status(order_id, "CANCELLED")
        assert store.get_order(order_id).status == OrderStatus.DELIVERED.value

    def test_unknown_status_value(self, order_id):
        with pytest.raises(ValidationError):
            _set_status(order_id, "SHIPPED")

    def test_unknown_order(self):
        with pytest.raises(OrderNotFoundError):
            _set_status("ord-missing", "DELIVERED")

    def test_logs_transition(self, store, order_id):
        store.set_status(order_id, OrderStatus.CONFIRMED)
        with capture_logs() as logs:
            _set_status(order_id, "DELIVERED")

        [log] = [entry for entry in logs if entry["event"] == "Order status changed"]
        assert log["from_status"] == "CONFIRMED"
        assert log["to_status"] == "DELIVERED"
        assert log["requester_id"] == "admin-1"
