"""DiscountCode aggregate (CQRS): promo codes that take a percentage off an order.

A code is valid while it is active and not past its optional expiry. Which
ticket types a code may discount is decided by the order's pricing edition,
not by the code.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Integer, String

from registration.domain import registration


@registration.aggregate
class DiscountCode:
    code = String(required=True, max_length=100, unique=True)
    discount_percentage = Integer(required=True, min_value=0, max_value=100)
    active = Boolean(default=True)
    valid_until = DateTime()
    created_at = DateTime()

    @classmethod
    def create(cls, code, discount_percentage, valid_until=None):
        code = (code or "").strip()
        if not code:
            raise ValidationError({"code": ["Discount code cannot be blank"]})
        return cls(
            code=code,
            discount_percentage=discount_percentage,
            active=True,
            valid_until=valid_until,
            created_at=datetime.now(UTC),
        )

    def is_valid(self, at=None):
        """Active and not expired at ``at`` (defaults to now)."""
        if not self.active:
            return False
        if self.valid_until is None:
            return True
        moment = at or datetime.now(UTC)
        valid_until = self.valid_until
        if valid_until.tzinfo is None:
            valid_until = valid_until.replace(tzinfo=UTC)
        return moment <= valid_until

    def deactivate(self):
        if not self.active:
            raise ValidationError({"active": ["Discount code is already inactive"]})
        self.active = False


@registration.repository(part_of=DiscountCode)
class DiscountCodeRepository:
    def find_by_code(self, code: str) -> DiscountCode | None:
        results = self._dao.query.filter(code=code).all().items
        return results[0] if results else None

    def find_active_by_code(self, code: str) -> DiscountCode | None:
        """Exact, case-sensitive match on a code that is currently valid."""
        discount = self.find_by_code(code)
        if discount is None or not discount.is_valid():
            return None
        return discount
