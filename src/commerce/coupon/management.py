"""Coupon administration — commands and handler."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from commerce.coupon.coupon import Coupon
from commerce.coupon.lookup import code_in_use
from commerce.domain import commerce

logger = structlog.get_logger(__name__)


@commerce.command(part_of="Coupon")
class CreateCoupon:
    code = String(required=True, max_length=50)
    description = Text()
    discount_percentage = Float(required=True)
    min_purchase = Float(default=0.0)
    is_active = Boolean(default=True)
    start_date = DateTime()
    expiry_date = DateTime(required=True)
    usage_limit = Integer()


@commerce.command(part_of="Coupon")
class UpdateCoupon:
    """Change coupon terms. Fields left unset keep their current value."""

    coupon_id = Identifier(required=True)
    code = String(max_length=50)
    description = Text()
    discount_percentage = Float()
    min_purchase = Float()
    is_active = Boolean()
    start_date = DateTime()
    expiry_date = DateTime()
    usage_limit = Integer()
    clear_usage_limit = Boolean(default=False)  # Makes the coupon unlimited


@commerce.command(part_of="Coupon")
class DeactivateCoupon:
    coupon_id = Identifier(required=True)


@commerce.command(part_of="Coupon")
class DeleteCoupon:
    coupon_id = Identifier(required=True)


@commerce.command_handler(part_of=Coupon)
class ManageCouponHandler:
    @handle(CreateCoupon)
    def create_coupon(self, command):
        if code_in_use(command.code):
            raise ValidationError({"code": [f"Coupon with code {command.code.strip().upper()} already exists"]})

        coupon = Coupon.create(
            code=command.code,
            description=command.description,
            discount_percentage=command.discount_percentage,
            min_purchase=command.min_purchase,
            is_active=command.is_active if command.is_active is not None else True,
            start_date=command.start_date,
            expiry_date=command.expiry_date,
            usage_limit=command.usage_limit,
        )
        current_domain.repository_for(Coupon).add(coupon)
        logger.info("coupon created", coupon_id=str(coupon.id), code=coupon.code)
        return str(coupon.id)

    @handle(UpdateCoupon)
    def update_coupon(self, command):
        repo = current_domain.repository_for(Coupon)
        coupon = repo.get(command.coupon_id)

        changes = {
            field_name: getattr(command, field_name)
            for field_name in (
                "code",
                "description",
                "discount_percentage",
                "min_purchase",
                "is_active",
                "start_date",
                "expiry_date",
                "usage_limit",
            )
            if getattr(command, field_name) is not None
        }
        if command.clear_usage_limit:
            changes["usage_limit"] = None

        if "code" in changes and code_in_use(changes["code"], exclude_id=coupon.id):
            raise ValidationError({"code": [f"Coupon with code {changes['code'].strip().upper()} already exists"]})

        coupon.update(**changes)
        repo.add(coupon)
        logger.info("coupon updated", coupon_id=str(coupon.id), fields=sorted(changes))

    @handle(DeactivateCoupon)
    def deactivate_coupon(self, command):
        repo = current_domain.repository_for(Coupon)
        coupon = repo.get(command.coupon_id)
        coupon.deactivate()
        repo.add(coupon)

    @handle(DeleteCoupon)
    def delete_coupon(self, command):
        repo = current_domain.repository_for(Coupon)
        coupon = repo.get(command.coupon_id)
        repo._dao.delete(coupon)
        logger.info("coupon deleted", coupon_id=str(coupon.id), code=coupon.code)
