"""Payment gateway port (abstract interface).

Defines the contract that all payment gateway adapters must implement.
This enables swapping between FakeGateway (dev/test) and MollieGateway
(production) without changing any domain or application code.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

PAID_STATUSES = frozenset({"paid"})
# The transaction can no longer be paid; a new one may replace it
FINISHED_STATUSES = frozenset({"failed", "canceled", "expired"})


class GatewayError(Exception):
    """The gateway could not be reached or rejected the request."""


@dataclass(frozen=True)
class GatewayPayment:
    """A gateway transaction as seen by the ordering code."""

    id: str
    status: str
    amount: float | None = None
    checkout_url: str | None = None
    metadata: dict = field(default_factory=dict)

    @property
    def is_paid(self) -> bool:
        return self.status in PAID_STATUSES

    @property
    def is_finished(self) -> bool:
        return self.status in FINISHED_STATUSES


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_payment(
        self,
        amount: float,
        description: str,
        metadata: dict,
        **options,
    ) -> GatewayPayment:
        """Create a transaction. Raises GatewayError on failure."""
        ...

    @abstractmethod
    def get_payment(self, payment_id: str) -> GatewayPayment:
        """Look up a transaction. Raises GatewayError on failure."""
        ...
