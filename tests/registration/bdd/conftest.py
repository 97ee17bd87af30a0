"""Shared BDD fixtures and step definitions for the checkout wizard."""

import pytest
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then
from registration.discount.discount import DiscountCode
from registration.order.order import Order
from registration.order.wizard import CheckoutWizard


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@pytest.fixture()
def wizard(order, discounts):
    return CheckoutWizard(order, discounts=discounts)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a new "{edition}" order'), target_fixture="order")
def new_order(edition):
    return Order.create(edition=edition)


@given(parsers.cfparse('a promo code "{code}" worth {percentage:d}%'))
def promo_code_exists(discounts, code, percentage):
    discounts.add(DiscountCode.create(code=code, discount_percentage=percentage))


@given(parsers.cfparse("the cart holds {quantity:d} {ticket_type} tickets"))
@given(parsers.cfparse("the cart holds {quantity:d} {ticket_type} ticket"))
def cart_holds(order, quantity, ticket_type):
    quantities = {name: 0 for name in order.ticket_types()}
    quantities[ticket_type] = quantity
    order.update_cart(quantities)


@given("complete billing details")
def complete_billing_details(order):
    order.update_billing(
        billing_name="Ada Lovelace",
        billing_email="ada@example.com",
        billing_address="12 St James's Square",
        billing_postal="SW1Y 4JH",
        billing_city="London",
        billing_country="United Kingdom",
        billing_phone="+44 20 7946 0000",
    )
    order.accept_terms()


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the steps are "{names}"'))
def steps_are(wizard, names):
    assert wizard.step_names == [name.strip() for name in names.split(",")]


@then(parsers.cfparse('the current step is "{name}"'))
def current_step_is(wizard, name):
    assert str(wizard.current_step) == name


@then(parsers.cfparse("the order total is {total:g}"))
def order_total_is(order, total):
    assert order.sum_total() == pytest.approx(total)


@then("the step is valid")
def step_is_valid(wizard):
    assert wizard.is_valid(), wizard.errors


@then(parsers.cfparse('the step is invalid with "{message}" on {field}'))
def step_is_invalid(wizard, message, field):
    assert not wizard.is_valid()
    assert message in wizard.errors[field]


@then("the order cannot be confirmed")
def order_cannot_be_confirmed(error):
    assert isinstance(error["exc"], ValidationError)


@then("the order is confirmed")
def order_is_confirmed(order, error):
    assert error["exc"] is None
    assert order.is_confirmed()
