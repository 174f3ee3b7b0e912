"""Request-scoped dependencies for the Commerce API."""

from fastapi import Depends, Header, HTTPException

from commerce.order.access import ADMIN, CUSTOMER, Actor


def current_actor(
    x_user_id: str = Header(default=""),
    x_user_role: str = Header(default=CUSTOMER),
) -> Actor:
    """The authenticated user, as asserted by the upstream auth layer."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Not authorized to access this route")
    return Actor(user_id=x_user_id, role=x_user_role or CUSTOMER)


def admin_actor(actor: Actor = Depends(current_actor)) -> Actor:
    if actor.role != ADMIN:
        raise HTTPException(status_code=403, detail=f"User role {actor.role} is not authorized to access this route")
    return actor
