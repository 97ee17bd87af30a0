"""Domain events for the Order aggregate.

Events are immutable facts raised as an order moves through checkout.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String

from registration.domain import registration


@registration.event(part_of="Order")
class OrderStarted:
    """A visitor opened a new order."""

    __version__ = 1

    order_id = Identifier(required=True)
    identifier = String(required=True)
    edition = String(required=True)
    started_at = DateTime(required=True)


@registration.event(part_of="Order")
class DiscountCodeApplied:
    """A promo code resolved to a discount and was attached to the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    identifier = String(required=True)
    discount_code_id = Identifier(required=True)
    code = String(required=True)
    discount_percentage = Integer(required=True)


@registration.event(part_of="Order")
class OrderConfirmed:
    """The visitor completed every step and confirmed the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    identifier = String(required=True)
    tickets = Integer(required=True)
    total = Float(required=True)
    confirmed_at = DateTime(required=True)


@registration.event(part_of="Order")
class PaymentCreated:
    """A gateway transaction was created for the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    identifier = String(required=True)
    payment_id = String(required=True)
    previous_payment_id = String()
    amount = Float(required=True)


@registration.event(part_of="Order")
class OrderMarkedPaid:
    """The order was marked paid outside the gateway (bank transfer or card terminal)."""

    __version__ = 1

    order_id = Identifier(required=True)
    identifier = String(required=True)
    method = String(required=True)
    marked_at = DateTime(required=True)
