"""Manual order status changes: command and handler."""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import OrderNotFoundError
from storefront.order.order import Order, parse_status

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class SetOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    requester_id = Identifier(required=True)


@storefront.command_handler(part_of=Order)
class SetOrderStatusHandler:
    @handle(SetOrderStatus)
    def set_status(self, command):
        new_status = parse_status(command.status)

        repo = current_domain.repository_for(Order)
        try:
            order = repo.get(command.order_id)
        except ObjectNotFoundError:
            raise OrderNotFoundError(command.order_id) from None

        previous = order.set_status(new_status)
        repo.add(order)

        logger.info(
            "Order status changed",
            order_id=str(order.id),
            from_status=previous.value,
            to_status=new_status.value,
            requester_id=command.requester_id,
        )
        return order
