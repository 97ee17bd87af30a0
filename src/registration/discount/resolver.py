"""Promo code resolution.

The resolver reads valid codes through the DiscountStore port so the
validation rules can run against the domain repository or an in-memory stand-in.
"""

from abc import ABC, abstractmethod

from protean.utils.globals import current_domain

from registration.discount.discount import DiscountCode
from registration.domain import logger

INVALID_PROMO_CODE = "is not a valid promo code."


class DiscountStore(ABC):
    """Read access to discount codes that are currently valid."""

    @abstractmethod
    def find_active_by_code(self, code: str) -> DiscountCode | None:
        """Return the valid discount with exactly this code, or None."""
        ...


class RepositoryDiscountStore(DiscountStore):
    """DiscountStore backed by the DiscountCode repository of the active domain."""

    def find_active_by_code(self, code: str) -> DiscountCode | None:
        return current_domain.repository_for(DiscountCode).find_active_by_code(code)


def resolve_promo_code(order, store: DiscountStore) -> list[str]:
    """Attach the order's promo code if it is valid.

    Returns the ``promo_code`` messages: none for a blank code or a valid one,
    one message for a code that does not resolve.
    """
    code = (order.promo_code or "").strip()
    if not code:
        return []

    discount = store.find_active_by_code(code)
    if discount is None:
        logger.info("promo_code_rejected", identifier=order.identifier, promo_code=code)
        return [INVALID_PROMO_CODE]

    if str(order.discount_code_id) != str(discount.id):
        logger.info(
            "discount_applied",
            identifier=order.identifier,
            promo_code=code,
            discount_percentage=discount.discount_percentage,
        )
    order.apply_discount(discount)
    return []
