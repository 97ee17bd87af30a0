"""Mollie payment gateway adapter (production).

Wraps the mollie-api-python client. Amounts are sent as fixed two-decimal
strings in the configured currency; Mollie hosts the checkout page and
reports the transaction status (open, pending, authorized, paid, failed,
canceled, expired).
"""

from mollie.api.client import Client
from mollie.api.error import Error as MollieError

from registration.gateway.port import GatewayError, GatewayPayment, PaymentGateway

# Keyword options accepted by create_payment and their Mollie request names
_OPTION_NAMES = {
    "redirect_url": "redirectUrl",
    "webhook_url": "webhookUrl",
    "cancel_url": "cancelUrl",
    "locale": "locale",
    "method": "method",
}


def _amount_value(amount) -> float | None:
    if isinstance(amount, dict) and "value" in amount:
        return float(amount["value"])
    return None


class MollieGateway(PaymentGateway):
    """Production Mollie gateway adapter."""

    def __init__(self, api_key: str, currency: str = "EUR", client: Client | None = None) -> None:
        self.currency = currency
        self.client = client or Client()
        try:
            self.client.set_api_key(api_key)
        except MollieError as exc:
            raise GatewayError(f"Invalid Mollie configuration: {exc}") from exc

    def _to_gateway_payment(self, payment) -> GatewayPayment:
        return GatewayPayment(
            id=payment.id,
            status=payment.status,
            amount=_amount_value(payment.amount),
            checkout_url=payment.checkout_url,
            metadata=payment.metadata or {},
        )

    def create_payment(self, amount: float, description: str, metadata: dict, **options) -> GatewayPayment:
        unknown = sorted(set(options) - set(_OPTION_NAMES))
        if unknown:
            raise ValueError(f"Unsupported Mollie payment options: {', '.join(unknown)}")

        data = {
            "amount": {"currency": self.currency, "value": f"{amount:.2f}"},
            "description": description,
            "metadata": metadata,
        }
        data.update({_OPTION_NAMES[name]: value for name, value in options.items() if value is not None})

        try:
            payment = self.client.payments.create(data)
        except MollieError as exc:
            raise GatewayError(str(exc)) from exc
        return self._to_gateway_payment(payment)

    def get_payment(self, payment_id: str) -> GatewayPayment:
        try:
            payment = self.client.payments.get(payment_id)
        except MollieError as exc:
            raise GatewayError(str(exc)) from exc
        return self._to_gateway_payment(payment)
