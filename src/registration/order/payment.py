"""Payment reconciliation between orders and the payment gateway.

Creating a payment is a checkout step and fails loudly when the gateway
does. Looking a payment up is done whenever an order page renders, so
gateway failures there are logged and reported as an unknown status
instead of being raised.
"""

from dataclasses import dataclass
from enum import Enum

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String
from protean.utils.globals import current_domain

from registration.domain import logger, registration
from registration.gateway import get_gateway
from registration.gateway.port import GatewayError, GatewayPayment, PaymentGateway
from registration.order.order import Order, PaidBy

PAYMENT_DESCRIPTION = "Development Bootcamp tuition fee"


class PaymentState(Enum):
    PAID = "paid"
    UNPAID = "unpaid"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class PaymentLookup:
    """Outcome of asking the gateway about an order's transaction."""

    state: PaymentState
    payment: GatewayPayment | None = None
    cause: Exception | None = None

    @property
    def is_paid(self) -> bool:
        return self.state == PaymentState.PAID


def payment_status(order, gateway: PaymentGateway | None = None) -> PaymentLookup:
    """Query the gateway for the order's transaction. Never raises GatewayError."""
    if not order.payment_id:
        return PaymentLookup(state=PaymentState.UNPAID)

    try:
        gateway = gateway or get_gateway()
        payment = gateway.get_payment(order.payment_id)
    except GatewayError as exc:
        logger.warning(
            "payment_lookup_failed",
            identifier=order.identifier,
            payment_id=order.payment_id,
            error=str(exc),
        )
        return PaymentLookup(state=PaymentState.UNKNOWN, cause=exc)

    state = PaymentState.PAID if payment.is_paid else PaymentState.UNPAID
    return PaymentLookup(state=state, payment=payment)


def fetch_payment(order, gateway: PaymentGateway | None = None) -> GatewayPayment | None:
    """The order's gateway transaction, or None when there is none or it cannot be read."""
    return payment_status(order, gateway).payment


def is_paid(order, gateway: PaymentGateway | None = None) -> bool:
    """Manual and card marks win; otherwise the gateway is asked on every call."""
    if order.is_marked_paid():
        return True
    return payment_status(order, gateway).is_paid


def create_payment(order, gateway: PaymentGateway | None = None, **options) -> GatewayPayment:
    """Create a gateway transaction for the order total and link it to the order.

    An existing transaction blocks a new one unless it has definitively
    finished without being paid. Gateway errors propagate.
    """
    gateway = gateway or get_gateway()

    if order.payment_id:
        existing = payment_status(order, gateway)
        if existing.state == PaymentState.UNKNOWN or not existing.payment.is_finished:
            raise ValidationError({"payment_id": ["A payment for this order is already in progress"]})

    amount = float(order.sum_total())
    payment = gateway.create_payment(
        amount=amount,
        description=PAYMENT_DESCRIPTION,
        metadata={"identifier": order.identifier},
        **options,
    )
    order.record_payment(payment.id, amount)
    logger.info("payment_created", identifier=order.identifier, payment_id=payment.id, amount=amount)
    return payment


@registration.command(part_of="Order")
class CreateOrderPayment:
    """Start paying a confirmed order through the gateway."""

    identifier = String(required=True, max_length=36)
    redirect_url = String(max_length=2000)
    webhook_url = String(max_length=2000)


@registration.command(part_of="Order")
class MarkOrderPaid:
    """Record a payment received outside the gateway."""

    identifier = String(required=True, max_length=36)
    method = String(required=True, choices=PaidBy)


@registration.command_handler(part_of=Order)
class OrderPaymentHandler:
    @handle(CreateOrderPayment)
    def create_order_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get_by_identifier(command.identifier)
        if not order.is_confirmed():
            raise ValidationError({"confirmed_at": ["Order must be confirmed before payment"]})

        payment = create_payment(
            order,
            redirect_url=command.redirect_url,
            webhook_url=command.webhook_url,
        )
        repo.add(order)
        return {"payment_id": payment.id, "checkout_url": payment.checkout_url}

    @handle(MarkOrderPaid)
    def mark_order_paid(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get_by_identifier(command.identifier)
        order.mark_paid(command.method)
        repo.add(order)
