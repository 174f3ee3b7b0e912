"""BDD tests for order cancellation."""

from commerce.exceptions import OrderTransitionError
from commerce.order.cancellation import cancel_order
from commerce.order.queries import orders_for_customer
from pytest_bdd import parsers, scenarios, when

scenarios("features/order_cancellation.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the order of customer "{customer}" is cancelled'))
def _(customer, error):
    order = orders_for_customer(customer)[0]
    try:
        cancel_order(str(order.id), reason="Customer request", actor_id=customer)
    except OrderTransitionError as exc:
        error["exc"] = exc
