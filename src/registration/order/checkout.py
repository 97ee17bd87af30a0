"""Checkout wizard — commands and handler.

Each wizard page submits the attributes it collected together with the step
it was rendered for. The handler applies them, validates the order at that
step and only persists (and moves on) when nothing is wrong.
"""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, String, Text
from protean.utils.globals import current_domain

from registration.domain import logger, registration
from registration.order.identifier import unique_identifier
from registration.order.order import BILLING_FIELDS, Order
from registration.order.validation import full_report
from registration.order.wizard import CheckoutWizard

FORWARD = "next"
BACKWARD = "previous"


def _json(value):
    return json.loads(value) if isinstance(value, str) else value


def _merged_errors(report):
    merged = {}
    for errors in report.values():
        for field, messages in errors.items():
            known = merged.setdefault(field, [])
            known.extend(message for message in messages if message not in known)
    return merged


@registration.command(part_of="Order")
class StartOrder:
    """Open a new, empty order."""

    edition = String(max_length=50)


@registration.command(part_of="Order")
class SubmitOrderStep:
    """Submit one wizard page."""

    identifier = String(required=True, max_length=36)
    step = String(required=True, max_length=50)
    direction = String(choices=[FORWARD, BACKWARD], default=FORWARD)
    cart = Text()  # JSON: {ticket_type: quantity}
    promo_code = String(max_length=100)
    billing_name = String(max_length=255)
    billing_email = String(max_length=254)
    billing_address = String(max_length=255)
    billing_postal = String(max_length=20)
    billing_city = String(max_length=100)
    billing_country = String(max_length=100)
    billing_phone = String(max_length=50)
    terms_and_conditions = Boolean()
    students = Text()  # JSON: list of student detail dicts


@registration.command(part_of="Order")
class ConfirmOrder:
    """Finalize an order once every step validates."""

    identifier = String(required=True, max_length=36)


@registration.command_handler(part_of=Order)
class CheckoutHandler:
    @handle(StartOrder)
    def start_order(self, command):
        repo = current_domain.repository_for(Order)
        identifier = unique_identifier(repo.identifier_exists)
        order = Order.create(edition=command.edition, identifier=identifier)
        repo.add(order)
        logger.info("order_started", identifier=order.identifier, edition=order.edition)
        return order.identifier

    @handle(SubmitOrderStep)
    def submit_step(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get_by_identifier(command.identifier)
        if order.is_confirmed():
            raise ValidationError({"confirmed_at": ["Order is already confirmed"]})

        if command.cart is not None:
            order.update_cart(_json(command.cart))
            order.remove_surplus_students()
        if command.promo_code is not None:
            order.enter_promo_code(command.promo_code)
        billing = {name: getattr(command, name) for name in BILLING_FIELDS if getattr(command, name) is not None}
        if billing:
            order.update_billing(**billing)
        if command.terms_and_conditions is not None:
            order.accept_terms(command.terms_and_conditions)
        if command.students is not None:
            order.assign_students(_json(command.students))

        wizard = CheckoutWizard(order, current_step=command.step)
        if command.direction == BACKWARD:
            repo.add(order)
            return str(wizard.previous_step())

        if not wizard.is_valid():
            logger.info("order_step_rejected", identifier=order.identifier, step=command.step, errors=wizard.errors)
            raise ValidationError(wizard.errors)

        repo.add(order)
        next_step = wizard.next_step()
        logger.info("order_step_submitted", identifier=order.identifier, step=command.step, next_step=str(next_step))
        return str(next_step)

    @handle(ConfirmOrder)
    def confirm_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get_by_identifier(command.identifier)

        wizard = CheckoutWizard(order)
        if not wizard.all_valid():
            raise ValidationError(_merged_errors(full_report(order, wizard.discounts)))

        order.confirm()
        repo.add(order)
        logger.info("order_confirmed", identifier=order.identifier, total=order.sum_total())
        return order.identifier
