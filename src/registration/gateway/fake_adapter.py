"""Configurable fake payment gateway for development and testing.

This adapter simulates the payment gateway without any external calls.
Transactions live in memory; tests can change their status, make creation
fail, or make lookups fail to mimic a gateway outage.
"""

from uuid import uuid4

from registration.gateway.port import GatewayError, GatewayPayment, PaymentGateway


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.lookups_fail: bool = False
        self.failure_reason: str = "Gateway unavailable"
        self.payments: dict[str, GatewayPayment] = {}
        self.calls: list[dict] = []

    def configure(
        self,
        should_succeed: bool = True,
        lookups_fail: bool = False,
        failure_reason: str = "Gateway unavailable",
    ) -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.lookups_fail = lookups_fail
        self.failure_reason = failure_reason

    def set_status(self, payment_id: str, status: str) -> None:
        """Simulate the customer finishing (or abandoning) the hosted checkout."""
        payment = self.payments[payment_id]
        self.payments[payment_id] = GatewayPayment(
            id=payment.id,
            status=status,
            amount=payment.amount,
            checkout_url=payment.checkout_url,
            metadata=payment.metadata,
        )

    def create_payment(self, amount: float, description: str, metadata: dict, **options) -> GatewayPayment:
        self.calls.append(
            {
                "method": "create_payment",
                "amount": amount,
                "description": description,
                "metadata": metadata,
                "options": options,
            }
        )
        if not self.should_succeed:
            raise GatewayError(self.failure_reason)

        payment_id = f"tr_fake{uuid4().hex[:10]}"
        payment = GatewayPayment(
            id=payment_id,
            status="open",
            amount=amount,
            checkout_url=f"https://gateway.test/checkout/{payment_id}",
            metadata=dict(metadata),
        )
        self.payments[payment_id] = payment
        return payment

    def get_payment(self, payment_id: str) -> GatewayPayment:
        self.calls.append({"method": "get_payment", "payment_id": payment_id})
        if self.lookups_fail:
            raise GatewayError(self.failure_reason)
        try:
            return self.payments[payment_id]
        except KeyError:
            raise GatewayError(f"No payment exists with token {payment_id}") from None
