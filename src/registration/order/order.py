"""Order aggregate (CQRS): a visitor's registration for one or more bootcamp seats.

The order carries everything the checkout wizard collects: the ticket cart,
billing details, the accepted terms, an attached promo code and one Student
per purchased ticket. Derived state (pricing, the step sequence) is computed
on demand from the persisted fields and never stored.

Payment state comes from three sources, any one of which makes the order
paid: a manual mark (bank transfer), a card-terminal mark, or the gateway
transaction referenced by ``payment_id``.
"""

import json
from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, DateTime, HasMany, Identifier, Integer, String, Text

from registration.domain import registration
from registration.order.cart import Cart
from registration.order.events import (
    DiscountCodeApplied,
    OrderConfirmed,
    OrderMarkedPaid,
    OrderStarted,
    PaymentCreated,
)
from registration.order.steps import build_steps
from registration.pricing import PricingTable, get_pricing_table
from registration.shared.email import is_valid_email

BILLING_FIELDS = (
    "billing_name",
    "billing_email",
    "billing_address",
    "billing_postal",
    "billing_city",
    "billing_country",
    "billing_phone",
)

STUDENT_FIELDS = ("first_name", "last_name", "email", "phone", "experience")
REQUIRED_STUDENT_FIELDS = ("first_name", "last_name", "email")


class PaidBy(Enum):
    MANUAL = "manual"
    CREDITCARD = "creditcard"


def _to_quantity(ticket_type, value):
    if isinstance(value, bool):
        raise ValidationError({"cart": [f"Amount for {ticket_type} must be a whole number"]})
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text == "":
            return 0
        if text.lstrip("-").isdigit():
            return int(text)
    if value is None:
        return 0
    raise ValidationError({"cart": [f"Amount for {ticket_type} must be a whole number"]})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@registration.entity(part_of="Order")
class Student:
    """Personal details for the attendee occupying one ticket slot."""

    position = Integer(required=True, min_value=0)
    first_name = String(max_length=100)
    last_name = String(max_length=100)
    email = String(max_length=254)
    phone = String(max_length=50)
    experience = String(max_length=1000)

    def missing_details(self):
        return [name for name in REQUIRED_STUDENT_FIELDS if not (getattr(self, name) or "").strip()]

    def validation_errors(self):
        errors = [f"{name.replace('_', ' ').capitalize()} can't be blank" for name in self.missing_details()]
        if self.email and not is_valid_email(self.email):
            errors.append("Email is not a valid email address")
        return errors

    def is_valid(self):
        return not self.validation_errors()


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@registration.aggregate
class Order:
    identifier = String(max_length=36, unique=True)
    edition = String(required=True, max_length=50)
    cart = Text()  # JSON: {ticket_type: quantity}
    promo_code = String(max_length=100)
    discount_code_id = Identifier()
    discount_code = String(max_length=100)
    discount_percentage = Integer(min_value=0, max_value=100)
    billing_name = String(max_length=255)
    billing_email = String(max_length=254)
    billing_address = String(max_length=255)
    billing_postal = String(max_length=20)
    billing_city = String(max_length=100)
    billing_country = String(max_length=100)
    billing_phone = String(max_length=50)
    terms_and_conditions = Boolean(default=False)
    students = HasMany(Student)
    confirmed_at = DateTime()
    payment_id = String(max_length=255)
    manually_paid = Boolean(default=False)
    paid_by_creditcard = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, edition=None, identifier=None):
        """Open an order with every ticket type at zero."""
        pricing = get_pricing_table(edition)
        now = datetime.now(UTC)
        order = cls(
            identifier=identifier or str(uuid4()),
            edition=pricing.name,
            cart=json.dumps({ticket_type: 0 for ticket_type in pricing.ticket_types}),
            terms_and_conditions=False,
            manually_paid=False,
            paid_by_creditcard=False,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderStarted(
                order_id=str(order.id),
                identifier=order.identifier,
                edition=order.edition,
                started_at=now,
            )
        )
        return order

    def to_param(self):
        return self.identifier

    def _touch(self):
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Pricing
    # -------------------------------------------------------------------
    def pricing_table(self) -> PricingTable:
        return get_pricing_table(self.edition)

    def ticket_types(self):
        return self.pricing_table().ticket_types

    def cart_quantities(self) -> dict:
        return json.loads(self.cart) if self.cart else {}

    def has_discount(self):
        return self.discount_code_id is not None

    def ticket_cart(self) -> Cart:
        return Cart(
            self.cart_quantities(),
            self.pricing_table(),
            discount_percentage=self.discount_percentage if self.has_discount() else None,
        )

    def sum_tickets(self):
        return self.ticket_cart().sum_tickets()

    def sum_total(self):
        return self.ticket_cart().sum_total()

    def cart_discount(self):
        return self.ticket_cart().discount_amount()

    def min_ticket_price(self):
        return self.ticket_cart().min_ticket_price()

    def steps(self):
        """The wizard sequence for the current cart; rebuilt on every call."""
        return build_steps(self.sum_tickets())

    # -------------------------------------------------------------------
    # Wizard input
    # -------------------------------------------------------------------
    def update_cart(self, quantities):
        """Replace the cart with the submitted quantities.

        Keys are stored as given; an incomplete or unknown key set is reported
        by cart validation rather than rejected here.
        """
        if not isinstance(quantities, dict):
            raise ValidationError({"cart": ["Cart must map ticket types to amounts"]})
        self.cart = json.dumps(
            {str(ticket_type): _to_quantity(ticket_type, value) for ticket_type, value in quantities.items()}
        )
        self._touch()

    def update_billing(self, **details):
        unknown = sorted(set(details) - set(BILLING_FIELDS))
        if unknown:
            raise ValidationError({name: ["Unknown billing field"] for name in unknown})
        for name, value in details.items():
            setattr(self, name, value.strip() if isinstance(value, str) else value)
        self._touch()

    def accept_terms(self, accepted=True):
        self.terms_and_conditions = bool(accepted)
        self._touch()

    def enter_promo_code(self, code):
        self.promo_code = code.strip() if isinstance(code, str) else code
        self._touch()

    def apply_discount(self, discount):
        """Attach a resolved discount code. Re-applying the same code is a no-op."""
        if self.discount_code_id is not None and str(self.discount_code_id) == str(discount.id):
            return
        self.discount_code_id = str(discount.id)
        self.discount_code = discount.code
        self.discount_percentage = discount.discount_percentage
        self._touch()
        self.raise_(
            DiscountCodeApplied(
                order_id=str(self.id),
                identifier=self.identifier,
                discount_code_id=str(discount.id),
                code=discount.code,
                discount_percentage=discount.discount_percentage,
            )
        )

    def ordered_students(self):
        return sorted(self.students or [], key=lambda student: student.position)

    def student_at(self, position):
        return next((s for s in (self.students or []) if s.position == position), None)

    def assign_students(self, records):
        """Create or update students from nested form data.

        Each record is a dict of student fields; ``position`` defaults to the
        record's place in the list. An existing student in that slot is
        updated in place, otherwise a new one is added.
        """
        for place, record in enumerate(records):
            unknown = sorted(set(record) - set(STUDENT_FIELDS) - {"position", "id"})
            if unknown:
                raise ValidationError({"students": [f"Unknown student fields: {', '.join(unknown)}"]})

            position = record.get("position", place)
            details = {name: record[name] for name in STUDENT_FIELDS if name in record}

            existing = self.student_at(position)
            if existing is not None:
                for name, value in details.items():
                    setattr(existing, name, value)
            else:
                self.add_students(Student(position=position, **details))
        self._touch()

    def remove_surplus_students(self):
        """Drop students whose slot no longer exists after the cart shrank."""
        surplus = [s for s in (self.students or []) if s.position >= self.sum_tickets()]
        for student in surplus:
            self.remove_students(student)
        if surplus:
            self._touch()
        return len(surplus)

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def is_confirmed(self):
        return self.confirmed_at is not None

    def confirm(self):
        if self.is_confirmed():
            raise ValidationError({"confirmed_at": ["Order is already confirmed"]})
        now = datetime.now(UTC)
        self.confirmed_at = now
        self.updated_at = now
        self.raise_(
            OrderConfirmed(
                order_id=str(self.id),
                identifier=self.identifier,
                tickets=self.sum_tickets(),
                total=float(self.sum_total()),
                confirmed_at=now,
            )
        )

    def record_payment(self, payment_id, amount):
        """Link the order to a freshly created gateway transaction."""
        previous = self.payment_id
        self.payment_id = payment_id
        self._touch()
        self.raise_(
            PaymentCreated(
                order_id=str(self.id),
                identifier=self.identifier,
                payment_id=payment_id,
                previous_payment_id=previous,
                amount=float(amount),
            )
        )

    def mark_paid(self, method):
        try:
            method = PaidBy(method)
        except ValueError as exc:
            raise ValidationError({"method": [f"Unknown payment method {method!r}"]}) from exc
        if method == PaidBy.MANUAL:
            self.manually_paid = True
        else:
            self.paid_by_creditcard = True
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            OrderMarkedPaid(
                order_id=str(self.id),
                identifier=self.identifier,
                method=method.value,
                marked_at=now,
            )
        )

    def is_marked_paid(self):
        return bool(self.manually_paid) or bool(self.paid_by_creditcard)


@registration.repository(part_of=Order)
class OrderRepository:
    def find_by_identifier(self, identifier: str) -> Order | None:
        results = self._dao.query.filter(identifier=identifier).all().items
        return results[0] if results else None

    def get_by_identifier(self, identifier: str) -> Order:
        order = self.find_by_identifier(identifier)
        if order is None:
            raise ObjectNotFoundError(f"Order with identifier `{identifier}` does not exist")
        return order

    def identifier_exists(self, identifier: str) -> bool:
        return self.find_by_identifier(identifier) is not None
