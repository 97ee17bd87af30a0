"""Ticket pricing tables, one per deployment edition.

Prices are whole currency units, the same units handed to the payment
gateway. Each edition also names the ticket types that promo codes never
discount.

Provides get_pricing_table() / set_default_edition() to pick the edition:
- REGISTRATION_EDITION environment variable selects the default
- Orders remember their edition, so an order keeps its prices
"""

import os
from dataclasses import dataclass, field

DEFAULT_EDITION = "bootcamp"


@dataclass(frozen=True)
class PricingTable:
    """Immutable mapping of ticket type to unit price."""

    name: str
    prices: dict[str, int]
    discount_exempt: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if not self.prices:
            raise ValueError("A pricing table needs at least one ticket type")
        if any(price < 0 for price in self.prices.values()):
            raise ValueError("Ticket prices cannot be negative")
        unknown = set(self.discount_exempt) - set(self.prices)
        if unknown:
            raise ValueError(f"Discount exemptions for unknown ticket types: {sorted(unknown)}")

    @property
    def ticket_types(self) -> tuple[str, ...]:
        return tuple(self.prices)

    @property
    def min_price(self) -> int:
        return min(self.prices.values())

    def price_for(self, ticket_type: str) -> int:
        try:
            return self.prices[ticket_type]
        except KeyError:
            raise KeyError(f"Unknown ticket type {ticket_type!r} in edition {self.name!r}") from None

    def is_discountable(self, ticket_type: str) -> bool:
        return ticket_type not in self.discount_exempt


_EDITIONS: dict[str, PricingTable] = {
    "bootcamp": PricingTable(
        name="bootcamp",
        prices={"community": 699, "normal": 1499, "supporter": 1999},
        discount_exempt=frozenset({"community"}),
    ),
    "conference": PricingTable(
        name="conference",
        prices={"early_bird": 1499, "normal": 1999, "supporter": 2499},
    ),
}

_default_edition: str | None = None


def register_edition(table: PricingTable) -> None:
    """Add or replace an edition's pricing table."""
    _EDITIONS[table.name] = table


def default_edition() -> str:
    """Return the active default edition name."""
    if _default_edition is not None:
        return _default_edition
    return os.getenv("REGISTRATION_EDITION", DEFAULT_EDITION)


def set_default_edition(name: str) -> None:
    """Override the default edition (useful for tests)."""
    global _default_edition
    if name not in _EDITIONS:
        raise ValueError(f"Unknown edition {name!r}")
    _default_edition = name


def reset_default_edition() -> None:
    """Fall back to the environment-configured edition."""
    global _default_edition
    _default_edition = None


def get_pricing_table(name: str | None = None) -> PricingTable:
    """Return the pricing table for an edition, or for the default edition."""
    edition = name or default_edition()
    try:
        return _EDITIONS[edition]
    except KeyError:
        raise ValueError(f"Unknown edition {edition!r}") from None
