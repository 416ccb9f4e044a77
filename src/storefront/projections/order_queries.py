"""Order lookups for customers, sellers and admins.

Single orders load through the repositories. The listings filter, count and
page in SQL over the tables Protean maps the aggregates to, then load each
order on the page through the repository.
"""

from functools import lru_cache

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from sqlalchemy import create_engine, exists, func, select
from sqlalchemy.engine import Engine

from storefront.cart.coupon import Coupon
from storefront.catalog.product import Product
from storefront.customer.customer import Customer
from storefront.errors import OrderNotFoundError
from storefront.order.order import Order, OrderItem, parse_status
from storefront.projections.views import CustomerOrderRow, OrderContext, OrderDetail, SellerOrderRow
from storefront.utils.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, Page, PageRequest


@lru_cache
def _engine(database_uri: str) -> Engine:
    return create_engine(database_uri)


def _model(cls):
    return current_domain.repository_for(cls)._dao.database_model_cls


def _find(cls, identifier):
    if not identifier:
        return None
    try:
        return current_domain.repository_for(cls).get(identifier)
    except ObjectNotFoundError:
        return None


class OrderQueryService:
    def get_order_by_id(self, order_id: str, customer_id: str | None = None) -> OrderDetail:
        """One order in full. With ``customer_id``, only that customer's order is found."""
        order = _find(Order, order_id)
        if order is None or (customer_id is not None and str(order.customer_id) != str(customer_id)):
            raise OrderNotFoundError(order_id)
        return OrderDetail.of(order, self._context(order))

    def my_orders(
        self,
        customer_id: str,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_LIMIT,
        status: str | None = None,
    ) -> Page:
        """A customer's own orders, newest first."""
        request = PageRequest(page=page, limit=limit)
        orders = _model(Order)
        criteria = [orders.customer_id == customer_id]
        if status:
            criteria.append(orders.status == parse_status(status).value)

        total, page_orders = self._fetch_page(criteria, request)
        return Page.build([CustomerOrderRow.of(order, self._context(order)) for order in page_orders], total, request)

    def order_list_admin(
        self,
        seller_id: str,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_LIMIT,
        status: str | None = None,
    ) -> Page:
        """Orders containing at least one product the seller currently owns.

        Ownership is read from the live product, so a product that changed
        hands shows up under its new owner.
        """
        request = PageRequest(page=page, limit=limit)
        orders, items, products = _model(Order), _model(OrderItem), _model(Product)
        owns_a_line = exists().where(
            items.order_id == orders.id,
            items.product_id == products.id,
            products.owner_id == seller_id,
        )
        criteria = [owns_a_line]
        if status:
            criteria.append(orders.status == parse_status(status).value)

        total, page_orders = self._fetch_page(criteria, request)
        return Page.build(
            [SellerOrderRow.of(order, self._context(order), seller_id) for order in page_orders],
            total,
            request,
        )

    def _fetch_page(self, criteria: list, request: PageRequest) -> tuple[int, list[Order]]:
        orders = _model(Order)
        provider = current_domain.providers["default"]
        with _engine(provider.conn_info["database_uri"]).connect() as conn:
            total = conn.scalar(select(func.count()).select_from(orders).where(*criteria))
            ids = conn.scalars(
                select(orders.id)
                .where(*criteria)
                .order_by(orders.created_at.desc(), orders.id.desc())
                .offset(request.offset)
                .limit(request.limit)
            ).all()

        repo = current_domain.repository_for(Order)
        return total or 0, [repo.get(order_id) for order_id in ids]

    def _context(self, order: Order) -> OrderContext:
        customer = _find(Customer, order.customer_id)
        products = current_domain.repository_for(Product)
        return OrderContext(
            customer=customer,
            address=customer.address(order.address_id) if customer else None,
            coupon=_find(Coupon, order.coupon_id),
            products={str(item.product_id): products.find(item.product_id) for item in order.items},
        )
