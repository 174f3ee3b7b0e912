"""Order fulfilment — processing, shipping and delivery. Admin only."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from commerce.domain import commerce
from commerce.order.access import actor_from, ensure_admin
from commerce.order.order import Order

logger = structlog.get_logger(__name__)


@commerce.command(part_of="Order")
class MarkOrderProcessing:
    order_id = Identifier(required=True)
    actor_id = Identifier()
    actor_role = String(max_length=20)


@commerce.command(part_of="Order")
class ShipOrder:
    order_id = Identifier(required=True)
    actor_id = Identifier()
    actor_role = String(max_length=20)


@commerce.command(part_of="Order")
class DeliverOrder:
    order_id = Identifier(required=True)
    actor_id = Identifier()
    actor_role = String(max_length=20)


@commerce.command_handler(part_of=Order)
class FulfilOrderHandler:
    def _transition(self, command, transition):
        ensure_admin(actor_from(command.actor_id, command.actor_role))
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        getattr(order, transition)()
        repo.add(order)
        logger.info("order status changed", order_id=str(order.id), status=order.status)

    @handle(MarkOrderProcessing)
    def mark_processing(self, command):
        self._transition(command, "mark_processing")

    @handle(ShipOrder)
    def ship(self, command):
        self._transition(command, "ship")

    @handle(DeliverOrder)
    def deliver(self, command):
        self._transition(command, "deliver")
