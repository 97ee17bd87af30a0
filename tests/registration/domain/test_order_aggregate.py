"""Tests for the Order aggregate."""

import json

import pytest
from protean.exceptions import ValidationError
from registration.discount.discount import DiscountCode
from registration.order.events import DiscountCodeApplied, OrderConfirmed, OrderMarkedPaid, OrderStarted
from registration.order.order import Order, Student
from registration.order.steps import step_names


def _make_order(edition="bootcamp", **quantities):
    order = Order.create(edition=edition)
    if quantities:
        cart = {ticket_type: 0 for ticket_type in order.ticket_types()}
        cart.update(quantities)
        order.update_cart(cart)
    order._events.clear()
    return order


class TestCreateOrder:
    def test_cart_starts_with_every_type_at_zero(self):
        order = Order.create(edition="bootcamp")
        assert order.cart_quantities() == {"community": 0, "normal": 0, "supporter": 0}

    def test_identifier_is_generated(self):
        order = Order.create()
        assert order.identifier
        assert order.to_param() == order.identifier

    def test_identifier_can_be_supplied(self):
        assert Order.create(identifier="abc").identifier == "abc"

    def test_identifiers_differ(self):
        assert Order.create().identifier != Order.create().identifier

    def test_records_edition(self):
        assert Order.create(edition="conference").edition == "conference"

    def test_defaults(self):
        order = Order.create()
        assert order.terms_and_conditions is False
        assert order.manually_paid is False
        assert order.paid_by_creditcard is False
        assert order.confirmed_at is None
        assert order.payment_id is None

    def test_raises_started_event(self):
        order = Order.create()
        assert len(order._events) == 1
        assert isinstance(order._events[0], OrderStarted)
        assert order._events[0].identifier == order.identifier


class TestUpdateCart:
    def test_replaces_quantities(self):
        order = _make_order(normal=2)
        assert order.cart_quantities()["normal"] == 2
        assert order.sum_tickets() == 2

    def test_coerces_numeric_strings(self):
        order = _make_order()
        order.update_cart({"community": "1", "normal": " 2 ", "supporter": ""})
        assert order.cart_quantities() == {"community": 1, "normal": 2, "supporter": 0}

    def test_keeps_unknown_keys_for_validation(self):
        order = _make_order()
        order.update_cart({"normal": 1, "vip": 1})
        assert json.loads(order.cart) == {"normal": 1, "vip": 1}

    def test_rejects_non_numeric_amounts(self):
        order = _make_order()
        with pytest.raises(ValidationError) as exc_info:
            order.update_cart({"community": 0, "normal": "lots", "supporter": 0})
        assert "cart" in exc_info.value.messages

    def test_rejects_non_mapping(self):
        with pytest.raises(ValidationError):
            _make_order().update_cart([1, 2])

    def test_steps_follow_cart(self):
        order = _make_order(normal=1)
        assert step_names(order.steps()) == ["tickets", "details", "students-0", "confirmation"]
        order.update_cart({"community": 0, "normal": 3, "supporter": 0})
        assert len(order.steps()) == 6


class TestPricing:
    def test_totals_without_discount(self):
        order = _make_order(community=1, supporter=1)
        assert order.sum_total() == 699 + 1999
        assert order.cart_discount() == 0
        assert order.min_ticket_price() == 699

    def test_conference_scenario(self):
        order = _make_order(edition="conference", early_bird=2)
        assert order.sum_tickets() == 2
        assert len(order.steps()) == 5
        assert order.sum_total() == 2998


class TestApplyDiscount:
    def test_attaches_discount(self):
        order = _make_order(normal=1)
        discount = DiscountCode.create(code="EARLY", discount_percentage=10)
        order.apply_discount(discount)
        assert order.has_discount()
        assert order.discount_code == "EARLY"
        assert order.discount_percentage == 10
        assert order.sum_total() < 1499

    def test_raises_event_once(self):
        order = _make_order(normal=1)
        discount = DiscountCode.create(code="EARLY", discount_percentage=10)
        order.apply_discount(discount)
        order.apply_discount(discount)
        applied = [e for e in order._events if isinstance(e, DiscountCodeApplied)]
        assert len(applied) == 1
        assert applied[0].code == "EARLY"


class TestBilling:
    def test_update_billing(self):
        order = _make_order()
        order.update_billing(billing_name=" Ada Lovelace ", billing_city="London")
        assert order.billing_name == "Ada Lovelace"
        assert order.billing_city == "London"

    def test_rejects_unknown_fields(self):
        with pytest.raises(ValidationError):
            _make_order().update_billing(billing_planet="Mars")

    def test_accept_terms(self):
        order = _make_order()
        order.accept_terms()
        assert order.terms_and_conditions is True
        order.accept_terms(False)
        assert order.terms_and_conditions is False


class TestStudents:
    def test_assign_creates_students_by_position(self):
        order = _make_order(normal=2)
        order.assign_students(
            [
                {"first_name": "Ada", "last_name": "Lovelace", "email": "ada@example.com"},
                {"first_name": "Alan", "last_name": "Turing", "email": "alan@example.com"},
            ]
        )
        assert [s.first_name for s in order.ordered_students()] == ["Ada", "Alan"]
        assert order.student_at(1).last_name == "Turing"

    def test_assign_updates_existing_slot(self):
        order = _make_order(normal=1)
        order.assign_students([{"first_name": "Ada"}])
        order.assign_students([{"position": 0, "last_name": "Lovelace"}])
        assert len(order.students) == 1
        assert order.student_at(0).first_name == "Ada"
        assert order.student_at(0).last_name == "Lovelace"

    def test_assign_rejects_unknown_fields(self):
        with pytest.raises(ValidationError):
            _make_order(normal=1).assign_students([{"shoe_size": 44}])

    def test_remove_surplus_students(self):
        order = _make_order(normal=2)
        order.assign_students([{"first_name": "Ada"}, {"first_name": "Alan"}])
        order.update_cart({"community": 0, "normal": 1, "supporter": 0})
        assert order.remove_surplus_students() == 1
        assert [s.first_name for s in order.students] == ["Ada"]

    def test_student_validity(self):
        student = Student(position=0, first_name="Ada", last_name="Lovelace", email="ada@example.com")
        assert student.is_valid()

    def test_student_missing_details(self):
        student = Student(position=0, first_name="Ada", email="not-an-email")
        assert student.missing_details() == ["last_name"]
        assert "Email is not a valid email address" in student.validation_errors()


class TestConfirm:
    def test_confirm_sets_timestamp_and_raises_event(self):
        order = _make_order(normal=1)
        order.confirm()
        assert order.is_confirmed()
        assert isinstance(order._events[-1], OrderConfirmed)
        assert order._events[-1].total == 1499.0

    def test_cannot_confirm_twice(self):
        order = _make_order(normal=1)
        order.confirm()
        with pytest.raises(ValidationError):
            order.confirm()


class TestMarkPaid:
    def test_manual(self):
        order = _make_order(normal=1)
        order.mark_paid("manual")
        assert order.manually_paid is True
        assert order.is_marked_paid()
        assert isinstance(order._events[-1], OrderMarkedPaid)

    def test_creditcard(self):
        order = _make_order(normal=1)
        order.mark_paid("creditcard")
        assert order.paid_by_creditcard is True
        assert order.is_marked_paid()

    def test_unknown_method(self):
        with pytest.raises(ValidationError):
            _make_order().mark_paid("seashells")
