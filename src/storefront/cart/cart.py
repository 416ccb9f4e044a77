"""Shopping cart aggregate: one live cart per customer.

The cart belongs to the cart service. Checkout only reads it (through a
:class:`~storefront.cart.snapshot.CartSnapshotProvider`) and fulfillment only
empties it once an order has been paid.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, HasMany, Identifier, Integer

from storefront.domain import storefront


@storefront.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    position = Integer(default=0)


@storefront.aggregate
class Cart:
    owner_id = Identifier(required=True)
    coupon_id = Identifier()
    items = HasMany(CartItem)
    updated_at = DateTime(default=lambda: datetime.now(UTC))

    def add_item(self, product_id: str, quantity: int) -> None:
        existing = next((i for i in self.items if str(i.product_id) == str(product_id)), None)
        if existing:
            existing.quantity += quantity
        else:
            self.add_items(CartItem(product_id=product_id, quantity=quantity, position=len(self.items)))
        self.updated_at = datetime.now(UTC)

    def clear(self) -> None:
        """Empty the cart and drop its coupon."""
        for item in list(self.items):
            self.remove_items(item)
        self.coupon_id = None
        self.updated_at = datetime.now(UTC)


@storefront.repository(part_of=Cart)
class CartRepository:
    def for_customer(self, customer_id: str) -> Cart | None:
        return self._dao.query.filter(owner_id=customer_id).all().first
