"""Product aggregate with its stock counter.

The catalogue owns products. The checkout pipeline only ever touches
``stock``, and only through :meth:`ProductRepository.decrement_stock`, a
relative update that is safe under concurrent fulfillments.
"""

from protean.fields import Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.aggregate
class Product:
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0)  # may go negative on oversell
    owner_id = Identifier(required=True)  # the selling customer


@storefront.repository(part_of=Product)
class ProductRepository:
    def find(self, product_id: str) -> Product | None:
        return self._dao.query.filter(id=product_id).all().first

    def decrement_stock(self, product_id: str, quantity: int) -> int | None:
        """``UPDATE product SET stock = stock - :quantity WHERE id = :product_id``.

        Returns the remaining stock, or None when the product no longer exists.
        """
        model = self._dao.database_model_cls
        updated = self._dao.query.filter(id=product_id).update_all(stock=model.stock - quantity)
        if not updated:
            return None
        return self._dao.query.filter(id=product_id).all().first.stock
