"""Coupon queries shared by the cart, checkout and admin surfaces."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from commerce.coupon.coupon import Coupon, normalize_code
from commerce.coupon.redemption import get_redemption_ledger


def find_coupon_by_code(code):
    """Return the coupon with ``code`` (any case). Raises ``ObjectNotFoundError``."""
    normalized = normalize_code(code)
    results = current_domain.repository_for(Coupon)._dao.query.filter(code=normalized).all()
    if not results or not results.items:
        raise ObjectNotFoundError({"code": [f"No coupon found with code {normalized}"]})
    return results.first


def code_in_use(code, exclude_id=None):
    results = current_domain.repository_for(Coupon)._dao.query.filter(code=normalize_code(code)).all()
    return any(str(c.id) != str(exclude_id) for c in results.items)


def coupon_for_cart(snapshot):
    """The live coupon behind a cart's applied coupon. Raises ``ObjectNotFoundError``."""
    if snapshot.coupon_id:
        return current_domain.repository_for(Coupon).get(snapshot.coupon_id)
    return find_coupon_by_code(snapshot.code)


def coupon_terms(coupon):
    """Validator input for ``coupon`` with its live usage count."""
    return coupon.terms(usage_count=get_redemption_ledger().usage_count(str(coupon.id)))


def coupon_details(coupon):
    """Admin representation of a coupon, including its usage count."""
    return {
        "id": str(coupon.id),
        "code": coupon.code,
        "description": coupon.description,
        "discount_percentage": coupon.discount_percentage,
        "min_purchase": coupon.min_purchase,
        "is_active": coupon.is_active,
        "start_date": coupon.start_date,
        "expiry_date": coupon.expiry_date,
        "usage_limit": coupon.usage_limit,
        "usage_count": get_redemption_ledger().usage_count(str(coupon.id)),
    }


def list_coupons():
    results = current_domain.repository_for(Coupon)._dao.query.all()
    return sorted(results.items, key=lambda c: c.code)
