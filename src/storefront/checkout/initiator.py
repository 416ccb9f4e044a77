"""Checkout initiation.

Turns the customer's priced cart into a gateway payment intent and a PENDING
order bound to it. The intent is requested first; the order is written only
once the gateway has answered, so a failed or timed-out gateway call never
leaves an order behind. The opposite gap (intent created, order not
persisted) is logged as an orphaned intent for the reconciliation job.
"""

import json
from uuid import uuid4

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from sqlalchemy.exc import SQLAlchemyError

from storefront.cart.snapshot import CartSnapshot, CartSnapshotProvider
from storefront.customer.customer import Customer
from storefront.errors import (
    AddressNotOwnedError,
    ConsistencyError,
    EmptyCartError,
    PaymentGatewayError,
)
from storefront.gateway.port import PaymentGateway
from storefront.order.placement import PlaceOrder

logger = structlog.get_logger(__name__)


def to_minor_units(amount: float) -> int:
    """Major currency units to the gateway's integer minor units (1800.0 -> 180000)."""
    return round(amount * 100)


def new_receipt() -> str:
    return f"rcpt_{uuid4().hex[:10]}"


def place_order_command(
    customer_id: str,
    address_id: str,
    snapshot: CartSnapshot,
    payment_reference: str,
    receipt: str,
    currency: str,
) -> PlaceOrder:
    return PlaceOrder(
        customer_id=customer_id,
        address_id=address_id,
        coupon_id=snapshot.coupon.id if snapshot.coupon else None,
        items=json.dumps(
            [
                {"product_id": line.product_id, "unit_price": line.unit_price, "quantity": line.quantity}
                for line in snapshot.lines
            ]
        ),
        order_price=snapshot.cart_total,
        discounted_order_price=snapshot.amount_due,
        payment_reference=payment_reference,
        receipt=receipt,
        currency=currency,
    )


class CheckoutInitiator:
    def __init__(
        self,
        cart_snapshots: CartSnapshotProvider,
        gateway: PaymentGateway,
        currency: str = "INR",
    ) -> None:
        self._cart_snapshots = cart_snapshots
        self._gateway = gateway
        self._currency = currency

    def initiate_checkout(self, customer_id: str, address_id: str) -> dict:
        """Open a payment intent for the customer's cart and record the pending order.

        Returns the gateway's intent payload, which the client needs to start
        the hosted payment flow.
        """
        self._assert_address_owned(customer_id, address_id)

        snapshot = self._cart_snapshots.resolve(customer_id)
        if snapshot is None or snapshot.is_empty:
            raise EmptyCartError()

        amount = to_minor_units(snapshot.amount_due)
        receipt = new_receipt()
        logger.info(
            "Checkout initiated",
            customer_id=customer_id,
            amount=amount,
            currency=self._currency,
            receipt=receipt,
        )

        result = self._gateway.create_intent(amount, self._currency, receipt)
        if not result.success:
            logger.warning(
                "Payment intent failed",
                customer_id=customer_id,
                receipt=receipt,
                status_code=result.status_code,
                reason=result.failure_reason,
            )
            raise PaymentGatewayError(result.failure_reason or "Payment gateway error", status_code=result.status_code)

        command = place_order_command(
            customer_id, address_id, snapshot, result.gateway_order_ref, receipt, self._currency
        )
        try:
            order_id = current_domain.process(command, asynchronous=False)
        except SQLAlchemyError as exc:
            logger.error(
                "Payment intent orphaned",
                gateway_order_ref=result.gateway_order_ref,
                customer_id=customer_id,
                amount=amount,
                currency=self._currency,
                error=type(exc).__name__,
            )
            raise ConsistencyError(
                {"order": ["Payment was opened but the order could not be saved; please retry checkout"]}
            ) from exc

        logger.info(
            "Order placed",
            order_id=order_id,
            customer_id=customer_id,
            payment_reference=result.gateway_order_ref,
            discounted_order_price=snapshot.amount_due,
        )
        return result.payload

    def _assert_address_owned(self, customer_id: str, address_id: str) -> None:
        try:
            customer = current_domain.repository_for(Customer).get(customer_id)
        except ObjectNotFoundError:
            raise AddressNotOwnedError(address_id) from None
        if customer.address(address_id) is None:
            raise AddressNotOwnedError(address_id)
