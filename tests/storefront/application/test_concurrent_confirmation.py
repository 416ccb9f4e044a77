"""Concurrent callbacks for the same payment reference apply side effects once."""

from concurrent.futures import ThreadPoolExecutor

from storefront.container import Container
from storefront.domain import storefront
from storefront.gateway.fake_adapter import FakeGateway
from storefront.order.order import OrderStatus


def _confirm_in_worker(container, payment):
    """Worker threads push their own domain context."""
    with storefront.domain_context():
        return container.fulfillment.confirm_payment(
            payment.gateway_order_ref,
            payment.gateway_payment_ref,
            payment.signature,
        )


class TestConcurrentConfirmation:
    def test_parallel_duplicates_decrement_once(self, container, store):
        seller = store.customer()
        buyer = store.customer()
        address = store.address(buyer)
        product = store.product(seller, price=250.0, stock=20)
        store.cart(buyer, [(product, 4)])

        payload = container.checkout.initiate_checkout(buyer, address)
        payment = container.gateway.complete_payment(payload["id"])

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: _confirm_in_worker(container, payment), range(16)))

        assert sum(1 for r in results if not r.already_confirmed) == 1
        assert store.stock(product) == 16
        order = store.get_order(payment_reference=payment.gateway_order_ref)
        assert order.status == OrderStatus.CONFIRMED.value

    def test_independent_coordinators_share_the_compare_and_swap(self, container, settings, store, verifier):
        seller = store.customer()
        buyer = store.customer()
        address = store.address(buyer)
        product = store.product(seller, price=100.0, stock=5)
        store.cart(buyer, [(product, 2)])
        payload = container.checkout.initiate_checkout(buyer, address)
        payment = container.gateway.complete_payment(payload["id"])

        # A second process: same database, its own locks
        other = Container.build(settings, gateway=FakeGateway(verifier))

        first = container.fulfillment.confirm_payment(
            payment.gateway_order_ref, payment.gateway_payment_ref, payment.signature
        )
        second = other.fulfillment.confirm_payment(
            payment.gateway_order_ref, payment.gateway_payment_ref, payment.signature
        )

        assert first.already_confirmed is False
        assert second.already_confirmed is True
        assert store.stock(product) == 3

    def test_different_orders_confirm_independently(self, container, store):
        seller = store.customer()
        product = store.product(seller, price=10.0, stock=100)

        payments = []
        for _ in range(6):
            buyer = store.customer()
            address = store.address(buyer)
            store.cart(buyer, [(product, 3)])
            payload = container.checkout.initiate_checkout(buyer, address)
            payments.append(container.gateway.complete_payment(payload["id"]))

        # sqlite takes one writer at a time
        with ThreadPoolExecutor(max_workers=1) as pool:
            results = list(pool.map(lambda payment: _confirm_in_worker(container, payment), payments))

        assert all(not r.already_confirmed for r in results)
        assert store.stock(product) == 100 - 6 * 3
