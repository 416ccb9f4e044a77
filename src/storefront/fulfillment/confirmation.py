"""Payment confirmation: command and handler.

One unit of work flips the order to CONFIRMED, decrements stock for every
frozen order item and empties the customer's cart. The flip is a
compare-and-swap on ``payment_confirmed``, so of any number of confirmations
for the same payment reference exactly one applies the side effects.
"""

from dataclasses import dataclass

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.catalog.product import Product
from storefront.domain import storefront
from storefront.errors import OrderNotFoundError
from storefront.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class ConfirmPayment:
    gateway_order_ref = String(required=True, max_length=255)
    gateway_payment_ref = String(required=True, max_length=255)
    customer_id = Identifier()


@dataclass(frozen=True)
class ConfirmationResult:
    order_id: str
    gateway_order_ref: str
    gateway_payment_ref: str
    status: str
    already_confirmed: bool = False


@storefront.command_handler(part_of=Order)
class ConfirmPaymentHandler:
    @handle(ConfirmPayment)
    def confirm_payment(self, command):
        orders = current_domain.repository_for(Order)
        order = orders.by_payment_reference(command.gateway_order_ref)
        if order is None:
            raise OrderNotFoundError(command.gateway_order_ref)

        if command.customer_id and str(command.customer_id) != str(order.customer_id):
            raise ValidationError({"customer_id": ["Order does not belong to this customer"]})

        if not order.is_confirmable:
            return _duplicate(order, command)

        changes = order.confirm_payment(command.gateway_payment_ref)
        if not orders.apply_confirmation(order.id, changes):
            # Another confirmation for this reference committed first
            return _duplicate(order, command)

        products = current_domain.repository_for(Product)
        for item in order.sorted_items:
            remaining = products.decrement_stock(item.product_id, item.quantity)
            if remaining is None:
                logger.warning(
                    "Skipping stock decrement for missing product",
                    order_id=str(order.id),
                    product_id=str(item.product_id),
                    quantity=item.quantity,
                )
            elif remaining < 0:
                logger.warning(
                    "Product oversold",
                    order_id=str(order.id),
                    product_id=str(item.product_id),
                    quantity=item.quantity,
                    stock=remaining,
                )

        carts = current_domain.repository_for(Cart)
        cart = carts.for_customer(order.customer_id)
        if cart is not None:
            cart.clear()
            carts.add(cart)

        return ConfirmationResult(
            order_id=str(order.id),
            gateway_order_ref=command.gateway_order_ref,
            gateway_payment_ref=command.gateway_payment_ref,
            status=OrderStatus.CONFIRMED.value,
        )


def _duplicate(order: Order, command: ConfirmPayment) -> ConfirmationResult:
    logger.info(
        "Duplicate payment confirmation ignored",
        order_id=str(order.id),
        gateway_order_ref=command.gateway_order_ref,
        gateway_payment_ref=command.gateway_payment_ref,
    )
    return ConfirmationResult(
        order_id=str(order.id),
        gateway_order_ref=command.gateway_order_ref,
        gateway_payment_ref=order.gateway_payment_ref or command.gateway_payment_ref,
        status=order.status,
        already_confirmed=True,
    )
