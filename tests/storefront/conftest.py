"""Seeding helpers for the checkout pipeline tests."""

from datetime import UTC, datetime, timedelta
from types import SimpleNamespace

import pytest
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.cart.coupon import Coupon
from storefront.catalog.product import Product
from storefront.customer.customer import Address, Customer
from storefront.order.order import Order, OrderStatus


class Store:
    """Writes collaborator records through the repositories and reads them back."""

    def __init__(self) -> None:
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    @staticmethod
    def _repo(cls):
        return current_domain.repository_for(cls)

    def customer(self, username: str | None = None) -> str:
        username = username or f"user{self._next()}"
        customer = Customer(email=f"{username}@example.com", username=username)
        self._repo(Customer).add(customer)
        return str(customer.id)

    def address(self, owner_id: str, city: str = "Pune") -> str:
        customer = self._repo(Customer).get(owner_id)
        address = Address(street="12 MG Road", city=city, state="MH", postal_code="411001", country="IN")
        customer.add_addresses(address)
        self._repo(Customer).add(customer)
        return str(address.id)

    def product(self, owner_id: str, price: float, stock: int = 10, name: str | None = None) -> str:
        product = Product(name=name or f"Product {self._next()}", price=price, stock=stock, owner_id=owner_id)
        self._repo(Product).add(product)
        return str(product.id)

    def coupon(self, discount_value: float, code: str = "SAVE200") -> str:
        coupon = Coupon(code=code, name=f"{code} coupon", discount_value=discount_value)
        self._repo(Coupon).add(coupon)
        return str(coupon.id)

    def cart(self, owner_id: str, items: list[tuple[str, int]], coupon_id: str | None = None) -> str:
        carts = self._repo(Cart)
        cart = carts.for_customer(owner_id) or Cart(owner_id=owner_id)
        for product_id, quantity in items:
            cart.add_item(product_id, quantity)
        cart.coupon_id = coupon_id
        carts.add(cart)
        return str(cart.id)

    def pending_order(
        self,
        customer_id: str,
        address_id: str,
        lines: list[tuple[str, float, int]],
        payment_reference: str,
        age: timedelta = timedelta(0),
        coupon_id: str | None = None,
    ) -> str:
        cart_total = sum(price * quantity for _, price, quantity in lines)
        order = Order.place(
            customer_id=customer_id,
            address_id=address_id,
            lines=[{"product_id": p, "unit_price": price, "quantity": q} for p, price, q in lines],
            order_price=cart_total,
            discounted_order_price=cart_total,
            payment_reference=payment_reference,
            receipt="rcpt_seeded",
            currency="INR",
            coupon_id=coupon_id,
        )
        order.created_at = datetime.now(UTC) - age
        self._repo(Order).add(order)
        return str(order.id)

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def get_order(self, order_id: str | None = None, payment_reference: str | None = None) -> Order | None:
        if order_id:
            return self._repo(Order).get(order_id)
        return self._repo(Order).by_payment_reference(payment_reference)

    def orders(self) -> list[Order]:
        return self._repo(Order)._dao.query.all().items

    def stock(self, product_id: str) -> int:
        return self._repo(Product).get(product_id).stock

    def get_cart(self, owner_id: str) -> Cart | None:
        return self._repo(Cart).for_customer(owner_id)

    # -------------------------------------------------------------------
    # Out-of-band changes
    # -------------------------------------------------------------------
    def set_status(self, order_id: str, status: OrderStatus, payment_confirmed: bool = True) -> None:
        order = self._repo(Order).get(order_id)
        order.status = status.value
        order.payment_confirmed = payment_confirmed
        self._repo(Order).add(order)

    def set_price(self, product_id: str, price: float) -> None:
        product = self._repo(Product).get(product_id)
        product.price = price
        self._repo(Product).add(product)

    def transfer_product(self, product_id: str, new_owner_id: str) -> None:
        product = self._repo(Product).get(product_id)
        product.owner_id = new_owner_id
        self._repo(Product).add(product)

    def delete_product(self, product_id: str) -> None:
        products = self._repo(Product)
        products._dao.delete(products.get(product_id))


@pytest.fixture()
def store():
    return Store()


@pytest.fixture()
def shop(store):
    """A seller with products A (500, stock 10) and B (1000, stock 5) and a buyer with an address and a cart.

    The buyer's cart holds A x2 and B x1 (total 2000) with a coupon worth 200
    off, so the amount due is 1800.
    """
    seller = store.customer("seller")
    buyer = store.customer("buyer")
    address = store.address(buyer)
    product_a = store.product(seller, price=500.0, stock=10, name="Product A")
    product_b = store.product(seller, price=1000.0, stock=5, name="Product B")
    coupon = store.coupon(discount_value=200.0)
    store.cart(buyer, [(product_a, 2), (product_b, 1)], coupon_id=coupon)

    return SimpleNamespace(
        seller=seller,
        buyer=buyer,
        address=address,
        product_a=product_a,
        product_b=product_b,
        coupon=coupon,
    )
