"""Read models returned by the order queries.

Each view is a plain, frozen snapshot assembled from the aggregates, so
callers can hold on to it without touching the repositories again.
"""

from dataclasses import dataclass
from datetime import datetime

from storefront.cart.coupon import Coupon
from storefront.catalog.product import Product
from storefront.customer.customer import Address, Customer
from storefront.order.order import Order, OrderItem


# ---------------------------------------------------------------------------
# Embedded summaries
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class AddressView:
    id: str
    street: str
    city: str
    state: str | None
    postal_code: str
    country: str

    @classmethod
    def of(cls, address: Address | None) -> "AddressView | None":
        if address is None:
            return None
        return cls(
            id=str(address.id),
            street=address.street,
            city=address.city,
            state=address.state,
            postal_code=address.postal_code,
            country=address.country,
        )


@dataclass(frozen=True)
class CouponView:
    id: str
    code: str
    name: str

    @classmethod
    def of(cls, coupon: Coupon | None) -> "CouponView | None":
        if coupon is None:
            return None
        return cls(id=str(coupon.id), code=coupon.code, name=coupon.name)


@dataclass(frozen=True)
class CustomerView:
    id: str
    email: str
    username: str

    @classmethod
    def of(cls, customer: Customer | None) -> "CustomerView | None":
        if customer is None:
            return None
        return cls(id=str(customer.id), email=customer.email, username=customer.username)


@dataclass(frozen=True)
class SellerCustomerView:
    """What a seller gets to see about the buyer."""

    id: str
    username: str

    @classmethod
    def of(cls, customer: Customer | None) -> "SellerCustomerView | None":
        if customer is None:
            return None
        return cls(id=str(customer.id), username=customer.username)


@dataclass(frozen=True)
class ProductView:
    id: str
    name: str
    price: float
    stock: int
    owner_id: str

    @classmethod
    def of(cls, product: Product | None) -> "ProductView | None":
        if product is None:
            return None
        return cls(
            id=str(product.id),
            name=product.name,
            price=product.price,
            stock=product.stock,
            owner_id=str(product.owner_id),
        )


@dataclass(frozen=True)
class OrderLineView:
    product_id: str
    unit_price: float
    quantity: int
    line_total: float
    product: ProductView | None

    @classmethod
    def of(cls, item: OrderItem, product: Product | None) -> "OrderLineView":
        return cls(
            product_id=str(item.product_id),
            unit_price=item.unit_price,
            quantity=item.quantity,
            line_total=item.line_total,
            product=ProductView.of(product),
        )


@dataclass(frozen=True)
class OrderContext:
    """The records an order points at, looked up once per order."""

    customer: Customer | None
    address: Address | None
    coupon: Coupon | None
    products: dict  # product id -> Product | None


# ---------------------------------------------------------------------------
# Order rows
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class CustomerOrderRow:
    id: str
    status: str
    order_price: float
    discounted_order_price: float
    currency: str
    payment_confirmed: bool
    created_at: datetime
    total_order_items: int
    items: tuple[OrderLineView, ...]
    address: AddressView | None
    coupon: CouponView | None
    customer: CustomerView | None

    @classmethod
    def of(cls, order: Order, context: OrderContext) -> "CustomerOrderRow":
        return cls(**_order_fields(order, context))


@dataclass(frozen=True)
class OrderDetail(CustomerOrderRow):
    payment_reference: str
    gateway_payment_ref: str | None
    receipt: str
    updated_at: datetime

    @classmethod
    def of(cls, order: Order, context: OrderContext) -> "OrderDetail":
        return cls(
            **_order_fields(order, context),
            payment_reference=order.payment_reference,
            gateway_payment_ref=order.gateway_payment_ref,
            receipt=order.receipt,
            updated_at=order.updated_at,
        )


@dataclass(frozen=True)
class SellerOrderRow:
    """An order as one seller sees it: only the lines for products they own.

    ``order_price`` and ``discounted_order_price`` are the whole order's
    totals; ``seller_subtotal`` covers the seller's own lines.
    """

    id: str
    status: str
    order_price: float
    discounted_order_price: float
    currency: str
    payment_confirmed: bool
    created_at: datetime
    items: tuple[OrderLineView, ...]
    seller_subtotal: float
    address: AddressView | None
    customer: SellerCustomerView | None

    @classmethod
    def of(cls, order: Order, context: OrderContext, seller_id: str) -> "SellerOrderRow":
        lines = []
        for item in order.sorted_items:
            product = context.products.get(str(item.product_id))
            if product is not None and str(product.owner_id) == str(seller_id):
                lines.append(OrderLineView.of(item, product))
        return cls(
            id=str(order.id),
            status=order.status,
            order_price=order.order_price,
            discounted_order_price=order.discounted_order_price,
            currency=order.currency,
            payment_confirmed=order.payment_confirmed,
            created_at=order.created_at,
            items=tuple(lines),
            seller_subtotal=sum(line.line_total for line in lines),
            address=AddressView.of(context.address),
            customer=SellerCustomerView.of(context.customer),
        )


def _order_fields(order: Order, context: OrderContext) -> dict:
    return {
        "id": str(order.id),
        "status": order.status,
        "order_price": order.order_price,
        "discounted_order_price": order.discounted_order_price,
        "currency": order.currency,
        "payment_confirmed": order.payment_confirmed,
        "created_at": order.created_at,
        "total_order_items": order.total_items,
        "items": tuple(
            OrderLineView.of(item, context.products.get(str(item.product_id))) for item in order.sorted_items
        ),
        "address": AddressView.of(context.address),
        "coupon": CouponView.of(context.coupon),
        "customer": CustomerView.of(context.customer),
    }
