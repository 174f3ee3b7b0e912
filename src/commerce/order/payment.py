"""Order payment — records the result reported by the payment provider."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from commerce.domain import commerce
from commerce.order.access import actor_from, ensure_can_access
from commerce.order.order import Order

logger = structlog.get_logger(__name__)


@commerce.command(part_of="Order")
class MarkOrderPaid:
    order_id = Identifier(required=True)
    payment_id = String(max_length=255)
    status = String(max_length=50)
    update_time = String(max_length=50)
    email_address = String(max_length=254)
    actor_id = Identifier()
    actor_role = String(max_length=20)


@commerce.command_handler(part_of=Order)
class OrderPaymentHandler:
    @handle(MarkOrderPaid)
    def mark_paid(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        ensure_can_access(order, actor_from(command.actor_id, command.actor_role))

        order.mark_paid(
            payment_id=command.payment_id,
            status=command.status,
            update_time=command.update_time,
            email_address=command.email_address,
        )
        repo.add(order)
        logger.info("order paid", order_id=str(order.id), payment_id=command.payment_id)
