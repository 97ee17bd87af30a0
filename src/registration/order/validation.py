"""Step-gated order validation.

The same order validates differently depending on which wizard step it is
checked at: billing details only matter from ``details`` onwards, student
records only at ``confirmation``. ``validate_order`` takes the step as an
argument, so a full pre-flight check is a plain fold over the sequence.
"""

from collections import defaultdict

from registration.discount.resolver import DiscountStore, resolve_promo_code
from registration.order.order import BILLING_FIELDS
from registration.order.steps import CONFIRMATION, DETAILS, InvalidStepError, Step, is_at_or_after
from registration.shared.email import is_valid_email

BLANK = "can't be blank"
TERMS_NOT_ACCEPTED = "must be accepted."
INVALID_EMAIL = "is not a valid email address"


def _students_message(count):
    return f"You need to provide details for all {count} students."


def validate_order(order, step: Step | str, discounts: DiscountStore) -> dict[str, list[str]]:
    """Return every validation message for ``order`` as seen from ``step``.

    ``step`` must belong to ``order.steps()``. An attached discount may be
    added to the order as a side effect of checking its promo code.
    """
    steps = order.steps()
    current = Step.parse(step)
    if current not in steps:
        raise InvalidStepError(f"Step {current} does not exist!")
    errors = defaultdict(list)

    if not order.identifier:
        errors["identifier"].append(BLANK)

    # Resolve the promo code first: the cart floor depends on the discount
    errors["promo_code"].extend(resolve_promo_code(order, discounts))
    errors["cart"].extend(order.ticket_cart().validation_errors())

    if is_at_or_after(steps, current, DETAILS):
        for name in BILLING_FIELDS:
            if not (getattr(order, name) or "").strip():
                errors[name].append(BLANK)
        if order.billing_email and not is_valid_email(order.billing_email):
            errors["billing_email"].append(INVALID_EMAIL)
        if order.terms_and_conditions is not True:
            errors["terms_and_conditions"].append(TERMS_NOT_ACCEPTED)

    tickets = order.sum_tickets()
    if tickets > 0 and is_at_or_after(steps, current, CONFIRMATION):
        students = order.ordered_students()
        if len(students) != tickets or not all(student.is_valid() for student in students):
            errors["students"].append(_students_message(tickets))

    return {field: messages for field, messages in errors.items() if messages}


def is_valid_at(order, step: Step | str, discounts: DiscountStore) -> bool:
    return not validate_order(order, step, discounts)


def all_valid(order, discounts: DiscountStore) -> bool:
    """True when the order passes validation at every step of its sequence."""
    return all(is_valid_at(order, step, discounts) for step in order.steps())


def full_report(order, discounts: DiscountStore) -> dict[str, dict[str, list[str]]]:
    """Messages per step name, for steps that have any."""
    report = {}
    for step in order.steps():
        errors = validate_order(order, step, discounts)
        if errors:
            report[str(step)] = errors
    return report
