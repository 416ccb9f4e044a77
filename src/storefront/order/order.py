"""Order aggregate: a frozen copy of the cart bound to one gateway payment.

An order is created PENDING at checkout with its line items, prices and coupon
copied from the cart snapshot; none of those change afterwards. The gateway's
order id is stored as ``payment_reference`` and is the idempotency key for
payment confirmation.

State Machine:
    PENDING → CONFIRMED            (verified payment callback only)
    CONFIRMED → CANCELLED/DELIVERED (manual admin transition)
    CANCELLED, DELIVERED            terminal
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String

from storefront.domain import storefront


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    DELIVERED = "DELIVERED"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED},
    OrderStatus.CONFIRMED: {OrderStatus.CANCELLED, OrderStatus.DELIVERED},
    OrderStatus.CANCELLED: set(),  # Terminal
    OrderStatus.DELIVERED: set(),  # Terminal
}

# CONFIRMED is reachable only through a verified payment
MANUAL_TARGET_STATES = {OrderStatus.CANCELLED, OrderStatus.DELIVERED}

# Column values an order must still hold for a payment confirmation to apply
CONFIRMABLE = {"status": OrderStatus.PENDING.value, "payment_confirmed": False}


def parse_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(str(value).upper())
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError({"status": [f"Unknown order status {value!r}. Allowed: {allowed}"]}) from None


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A line item frozen at checkout: product, price paid per unit, and quantity."""

    position = Integer(required=True)
    product_id = Identifier(required=True)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    customer_id = Identifier(required=True)
    address_id = Identifier(required=True)
    coupon_id = Identifier()
    items = HasMany(OrderItem)
    order_price = Float(required=True)
    discounted_order_price = Float(required=True)
    currency = String(required=True, max_length=3)
    payment_reference = String(required=True, max_length=255, unique=True)
    receipt = String(required=True, max_length=64)
    payment_confirmed = Boolean(default=False)
    gateway_payment_ref = String(max_length=255)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        customer_id: str,
        address_id: str,
        lines: list[dict],
        order_price: float,
        discounted_order_price: float,
        payment_reference: str,
        receipt: str,
        currency: str,
        coupon_id: str | None = None,
    ) -> "Order":
        """Create a PENDING order from priced cart lines.

        Each line is a mapping with ``product_id``, ``unit_price`` and
        ``quantity``. Lines and totals are copied by value; later cart or
        catalogue changes never reach the order.
        """
        if not lines:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = datetime.now(UTC)
        return cls(
            customer_id=customer_id,
            address_id=address_id,
            coupon_id=coupon_id,
            items=[
                OrderItem(
                    position=position,
                    product_id=line["product_id"],
                    unit_price=line["unit_price"],
                    quantity=line["quantity"],
                )
                for position, line in enumerate(lines)
            ],
            order_price=order_price,
            discounted_order_price=discounted_order_price,
            currency=currency,
            payment_reference=payment_reference,
            receipt=receipt,
            payment_confirmed=False,
            status=OrderStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status: OrderStatus) -> None:
        """Validate that the current state allows transition to target."""
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    @property
    def total_items(self) -> int:
        return len(self.items)

    @property
    def sorted_items(self) -> list[OrderItem]:
        return sorted(self.items, key=lambda item: item.position)

    @property
    def is_confirmable(self) -> bool:
        return all(getattr(self, field) == value for field, value in CONFIRMABLE.items())

    # -------------------------------------------------------------------
    # Payment confirmation
    # -------------------------------------------------------------------
    def confirm_payment(self, gateway_payment_ref: str) -> dict:
        """Mark the order paid and return the changed values.

        Only a PENDING, unconfirmed order can be confirmed. The returned
        mapping is what the repository writes, guarded by ``CONFIRMABLE``, so
        that of two racing confirmations only one lands.
        """
        if self.payment_confirmed:
            raise ValidationError({"payment": ["Payment already confirmed"]})
        self._assert_can_transition(OrderStatus.CONFIRMED)

        self.payment_confirmed = True
        self.gateway_payment_ref = gateway_payment_ref
        self.status = OrderStatus.CONFIRMED.value
        self.updated_at = datetime.now(UTC)
        return {
            "payment_confirmed": self.payment_confirmed,
            "gateway_payment_ref": self.gateway_payment_ref,
            "status": self.status,
            "updated_at": self.updated_at,
        }

    # -------------------------------------------------------------------
    # Manual transitions
    # -------------------------------------------------------------------
    def set_status(self, new_status: OrderStatus) -> OrderStatus:
        """Apply an admin-requested status change. Returns the previous status."""
        if new_status not in MANUAL_TARGET_STATES:
            raise ValidationError(
                {"status": [f"{new_status.value} cannot be set manually; it is reached through payment confirmation"]}
            )
        self._assert_can_transition(new_status)

        previous = OrderStatus(self.status)
        self.status = new_status.value
        self.updated_at = datetime.now(UTC)
        return previous


@storefront.repository(part_of=Order)
class OrderRepository:
    def by_payment_reference(self, payment_reference: str) -> Order | None:
        return self._dao.query.filter(payment_reference=payment_reference).all().first

    def apply_confirmation(self, order_id: str, changes: dict) -> bool:
        """Write a confirmation only if the stored order is still ``CONFIRMABLE``.

        A compare-and-swap: False means another confirmation for the same
        order committed first and nothing was written.
        """
        updated = self._dao.query.filter(id=order_id, **CONFIRMABLE).update_all(**changes)
        return updated == 1

    def stale_pending(self, cutoff: datetime, limit: int = 100) -> list[Order]:
        """Unconfirmed PENDING orders created before ``cutoff``, oldest first."""
        return (
            self._dao.query.filter(created_at__lt=cutoff, **CONFIRMABLE)
            .order_by("created_at")
            .limit(limit)
            .all()
            .items
        )
