"""Order cancellation and removal: commands, handler and the cancel_order entry point."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from commerce.domain import commerce
from commerce.order.access import actor_from, ensure_admin, ensure_can_access
from commerce.order.order import Order
from commerce.order.stock import release_order_stock

logger = structlog.get_logger(__name__)


@commerce.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = String(max_length=500)
    actor_id = Identifier()
    actor_role = String(max_length=20)


@commerce.command(part_of="Order")
class DeleteOrder:
    """Remove a cancelled order from the store. Admin only."""

    order_id = Identifier(required=True)
    actor_id = Identifier()
    actor_role = String(max_length=20)


@commerce.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        ensure_can_access(order, actor_from(command.actor_id, command.actor_role))

        if not order.cancel(reason=command.reason):
            logger.info("order already cancelled", order_id=str(order.id))
            return False

        repo.add(order)
        logger.info("order cancelled", order_id=str(order.id), reason=command.reason)
        return True

    @handle(DeleteOrder)
    def delete_order(self, command):
        ensure_admin(actor_from(command.actor_id, command.actor_role))
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if not order.is_cancelled:
            raise ValidationError({"status": ["Can only delete cancelled orders"]})

        repo._dao.delete(order)
        logger.info("order deleted", order_id=str(order.id))


def cancel_order(order_id, reason=None, actor_id=None, actor_role=None):
    """Cancel an order and return its reserved units to stock.

    Stock is released only once the cancellation has been committed, so a
    failed commit leaves the reservation with the still-active order. The
    release runs whenever the order ends up cancelled, which lets a repeated
    call finish a release an earlier call never reached.
    """
    cancelled = current_domain.process(
        CancelOrder(order_id=order_id, reason=reason, actor_id=actor_id, actor_role=actor_role),
        asynchronous=False,
    )

    order = current_domain.repository_for(Order).get(order_id)
    if order.is_cancelled:
        release_order_stock(order.id, [item.product_id for item in order.items])
    return bool(cancelled)
