"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- MollieGateway when MOLLIE_API_KEY is configured
- FakeGateway for development and testing
"""

import os

from registration.gateway.fake_adapter import FakeGateway
from registration.gateway.port import PaymentGateway

_current_gateway: PaymentGateway | None = None


def _default_gateway() -> PaymentGateway:
    api_key = os.getenv("MOLLIE_API_KEY")
    if api_key:
        from registration.gateway.mollie_adapter import MollieGateway

        return MollieGateway(api_key=api_key, currency=os.getenv("PAYMENT_CURRENCY", "EUR"))
    return FakeGateway()


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _default_gateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
