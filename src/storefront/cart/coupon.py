"""Coupon aggregate. ``discount_value`` is precomputed by the pricing service."""

from protean.fields import Float, String

from storefront.domain import storefront


@storefront.aggregate
class Coupon:
    code = String(required=True, max_length=100)
    name = String(required=True, max_length=255)
    discount_value = Float(default=0.0, min_value=0.0)
