"""Mixed storefront workload scenario.

Combines the shopper and fulfilment journeys with weights that model
realistic storefront traffic. This is the recommended scenario for load
baseline testing.
"""

from locust import HttpUser, between

from loadtests.scenarios.fulfilment import OrderFulfilmentJourney
from loadtests.scenarios.shopping import (
    BrowseAndAbandonJourney,
    CheckoutAndCancelJourney,
    CouponCheckoutJourney,
)


class MixedWorkloadUser(HttpUser):
    """Realistic mixed workload.

    - Browsing and abandonment: most common
    - Discounted checkout and payment: the conversion path
    - Fulfilment by admins: follows a share of conversions
    - Cancellation: the unhappy path
    """

    wait_time = between(1, 5)
    tasks = {
        BrowseAndAbandonJourney: 10,
        CouponCheckoutJourney: 6,
        OrderFulfilmentJourney: 3,
        CheckoutAndCancelJourney: 2,
    }
