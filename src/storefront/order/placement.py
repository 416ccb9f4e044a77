"""Order placement: command and handler."""

import json

from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order


@storefront.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    address_id = Identifier(required=True)
    coupon_id = Identifier()
    items = Text(required=True)  # JSON: list of {product_id, unit_price, quantity}
    order_price = Float(required=True)
    discounted_order_price = Float(required=True)
    payment_reference = String(required=True, max_length=255)  # gateway order id
    receipt = String(required=True, max_length=64)
    currency = String(required=True, max_length=3)


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        lines = json.loads(command.items) if isinstance(command.items, str) else command.items

        order = Order.place(
            customer_id=command.customer_id,
            address_id=command.address_id,
            lines=lines,
            order_price=command.order_price,
            discounted_order_price=command.discounted_order_price,
            payment_reference=command.payment_reference,
            receipt=command.receipt,
            currency=command.currency,
            coupon_id=command.coupon_id,
        )
        current_domain.repository_for(Order).add(order)
        return str(order.id)
