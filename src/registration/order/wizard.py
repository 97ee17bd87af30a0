"""Checkout wizard: the transient step cursor over an Order.

The cursor is never persisted. It defaults to the first step and can only be
moved to steps that exist for the order's current cart; navigation clamps
at both ends.
"""

from registration.discount.resolver import DiscountStore, RepositoryDiscountStore
from registration.order import validation
from registration.order.steps import InvalidStepError, Step, is_after, is_at_or_after, step_names


class CheckoutWizard:
    def __init__(self, order, discounts: DiscountStore | None = None, current_step=None) -> None:
        self.order = order
        self.discounts = discounts or RepositoryDiscountStore()
        self.errors: dict[str, list[str]] = {}
        self._current_step: Step | None = None
        self.current_step = current_step

    @property
    def steps(self) -> tuple[Step, ...]:
        return self.order.steps()

    @property
    def step_names(self) -> list[str]:
        return step_names(self.steps)

    @property
    def current_step(self) -> Step:
        return self._current_step or self.steps[0]

    @current_step.setter
    def current_step(self, step) -> None:
        if step is None:
            self._current_step = None
            return
        target = Step.parse(step)
        if target not in self.steps:
            raise InvalidStepError(f"Step {step} does not exist!")
        self._current_step = target

    def _position(self) -> int:
        steps = self.steps
        try:
            return steps.index(self.current_step)
        except ValueError:
            raise InvalidStepError(
                f"Step {self.current_step} no longer exists; the cart now holds {self.order.sum_tickets()} tickets"
            ) from None

    def next_step(self) -> Step:
        steps = self.steps
        self.current_step = steps[min(self._position() + 1, len(steps) - 1)]
        return self.current_step

    def previous_step(self) -> Step:
        steps = self.steps
        self.current_step = steps[max(self._position() - 1, 0)]
        return self.current_step

    def is_first_step(self) -> bool:
        return self.current_step == self.steps[0]

    def is_last_step(self) -> bool:
        return self.current_step == self.steps[-1]

    def at_step_or_after(self, step) -> bool:
        return is_at_or_after(self.steps, self.current_step, step)

    def after_step(self, step) -> bool:
        return is_after(self.steps, self.current_step, step)

    def validate(self) -> dict[str, list[str]]:
        """Validate the order at the current step and remember the messages."""
        self.errors = validation.validate_order(self.order, self.current_step, self.discounts)
        return self.errors

    def is_valid(self) -> bool:
        return not self.validate()

    def all_valid(self) -> bool:
        """Check every step without moving the cursor."""
        return validation.all_valid(self.order, self.discounts)
