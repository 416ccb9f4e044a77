"""Customer aggregate root with its Address book.

Customers belong to the identity service. The checkout pipeline reads them
for order summaries and checks that a checkout address is one of the buyer's
own.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, HasMany, String

from storefront.domain import storefront


@storefront.entity(part_of="Customer")
class Address:
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


@storefront.aggregate
class Customer:
    email = String(required=True, max_length=254)
    username = String(required=True, max_length=100)
    addresses = HasMany(Address)
    created_at = DateTime(default=lambda: datetime.now(UTC))

    def address(self, address_id: str) -> Address | None:
        """One of this customer's own addresses, or None."""
        return next((a for a in self.addresses if str(a.id) == str(address_id)), None)
