"""Cart pricing: ticket counts, totals and discount math for one order.

A Cart is a read-only view over an order's requested quantities, priced
against the order's edition. Validity problems are reported as messages so
the wizard can show them next to the ticket form.
"""

from collections.abc import Mapping

from registration.pricing import PricingTable

SELECT_TICKETS = "Please select 1 or more tickets."
POSITIVE_AMOUNTS = "You can only order amounts of 1 or more tickets."
UNKNOWN_TICKET_TYPES = "Please select a quantity for every ticket type."


class Cart:
    """Requested quantities per ticket type, with an optional discount percentage."""

    def __init__(
        self,
        quantities: Mapping[str, int],
        pricing: PricingTable,
        discount_percentage: int | float | None = None,
    ) -> None:
        self.quantities = dict(quantities)
        self.pricing = pricing
        self.discount_percentage = discount_percentage

    @property
    def has_discount(self) -> bool:
        return self.discount_percentage is not None

    def quantity(self, ticket_type: str) -> int:
        return self.quantities.get(ticket_type, 0)

    def sum_tickets(self) -> int:
        return sum(self.quantity(ticket_type) for ticket_type in self.pricing.ticket_types)

    def gross_total(self) -> int:
        return sum(
            self.quantity(ticket_type) * self.pricing.price_for(ticket_type) for ticket_type in self.pricing.ticket_types
        )

    def discount_amount(self) -> float:
        if not self.has_discount:
            return 0
        discountable = sum(
            self.quantity(ticket_type) * self.pricing.price_for(ticket_type)
            for ticket_type in self.pricing.ticket_types
            if self.pricing.is_discountable(ticket_type)
        )
        return discountable * (self.discount_percentage / 100.0)

    def sum_total(self) -> int | float:
        total = self.gross_total()
        if not self.has_discount:
            return total
        return round(total - self.discount_amount(), 2)

    def min_ticket_price(self) -> int | float:
        # The floor is scaled by the percentage itself, not by its complement
        minimum = self.pricing.min_price
        if not self.has_discount:
            return minimum
        return minimum * (self.discount_percentage / 100.0)

    def has_valid_ticket_types(self) -> bool:
        return set(self.quantities) == set(self.pricing.ticket_types)

    def validation_errors(self) -> list[str]:
        """Return user-facing messages for everything wrong with the cart."""
        errors = []
        if not self.has_valid_ticket_types():
            errors.append(UNKNOWN_TICKET_TYPES)
        if any(quantity < 0 for quantity in self.quantities.values()):
            errors.append(POSITIVE_AMOUNTS)
        if self.sum_tickets() <= 0 or self.sum_total() < self.min_ticket_price():
            errors.append(SELECT_TICKETS)
        return errors

    def is_valid(self) -> bool:
        return not self.validation_errors()
