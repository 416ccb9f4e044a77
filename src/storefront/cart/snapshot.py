"""Priced cart snapshots, the checkout's only source of pricing.

Checkout never prices anything itself. It asks a :class:`CartSnapshotProvider`
for the customer's cart with resolved product prices, totals and the
discounted amount, and freezes that snapshot into the order.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.cart.coupon import Coupon
from storefront.catalog.product import Product

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CartLine:
    product_id: str
    unit_price: float
    quantity: int
    seller_id: str | None = None

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class CouponSummary:
    id: str
    code: str
    name: str


@dataclass(frozen=True)
class CartSnapshot:
    """A customer's cart, priced at the moment it was read."""

    customer_id: str
    lines: tuple[CartLine, ...]
    cart_total: float
    discount_cart_value: float | None = None
    coupon: CouponSummary | None = None

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def amount_due(self) -> float:
        """The discounted total, or the full total when no discount applies."""
        if self.discount_cart_value is None:
            return self.cart_total
        return self.discount_cart_value


class CartSnapshotProvider(ABC):
    """Contract of the cart-pricing collaborator."""

    @abstractmethod
    def resolve(self, customer_id: str) -> CartSnapshot | None:
        """Return the customer's priced cart, or None if the customer has no cart."""
        ...


class RepositoryCartSnapshotProvider(CartSnapshotProvider):
    """Prices the stored cart against live product prices and the coupon's precomputed discount."""

    def resolve(self, customer_id: str) -> CartSnapshot | None:
        cart = current_domain.repository_for(Cart).for_customer(customer_id)
        if cart is None:
            return None

        products = current_domain.repository_for(Product)
        lines = []
        for item in sorted(cart.items, key=lambda i: i.position):
            product = products.find(item.product_id)
            if product is None:
                logger.warning(
                    "Dropping cart line for missing product",
                    customer_id=customer_id,
                    product_id=item.product_id,
                )
                continue
            lines.append(
                CartLine(
                    product_id=str(product.id),
                    unit_price=product.price,
                    quantity=item.quantity,
                    seller_id=str(product.owner_id),
                )
            )

        cart_total = sum(line.line_total for line in lines)

        coupon = self._coupon(cart.coupon_id)
        if coupon is None:
            return CartSnapshot(
                customer_id=customer_id,
                lines=tuple(lines),
                cart_total=cart_total,
                discount_cart_value=cart_total,
            )

        return CartSnapshot(
            customer_id=customer_id,
            lines=tuple(lines),
            cart_total=cart_total,
            discount_cart_value=max(cart_total - coupon.discount_value, 0.0),
            coupon=CouponSummary(id=str(coupon.id), code=coupon.code, name=coupon.name),
        )

    def _coupon(self, coupon_id: str | None) -> Coupon | None:
        if not coupon_id:
            return None
        try:
            return current_domain.repository_for(Coupon).get(coupon_id)
        except ObjectNotFoundError:
            return None
