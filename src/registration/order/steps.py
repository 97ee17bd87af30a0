"""Wizard step sequence.

The sequence is rebuilt from the ticket count every time it is asked for:

    tickets → details → students-0 … students-(N-1) → confirmation

Student steps are positional, so editing the cart shifts or removes them.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

_STUDENT_STEP = re.compile(r"students-(0|[1-9][0-9]*)")


class InvalidStepError(ValueError):
    """Raised when a step is not part of the current sequence."""


class StepKind(Enum):
    TICKETS = "tickets"
    DETAILS = "details"
    STUDENT = "students"
    CONFIRMATION = "confirmation"


@dataclass(frozen=True)
class Step:
    kind: StepKind
    index: int | None = None

    def __post_init__(self) -> None:
        if self.kind == StepKind.STUDENT:
            if self.index is None or self.index < 0:
                raise ValueError("Student steps need a non-negative index")
        elif self.index is not None:
            raise ValueError(f"{self.kind.value} steps take no index")

    def __str__(self) -> str:
        if self.is_student:
            return f"{self.kind.value}-{self.index}"
        return self.kind.value

    @property
    def is_student(self) -> bool:
        return self.kind == StepKind.STUDENT

    @classmethod
    def parse(cls, value: "Step | str") -> "Step":
        """Build a Step from its name (``"details"``, ``"students-2"``, …)."""
        if isinstance(value, Step):
            return value
        if not isinstance(value, str):
            raise InvalidStepError(f"Step {value!r} does not exist!")

        match = _STUDENT_STEP.fullmatch(value)
        if match:
            return cls(StepKind.STUDENT, int(match.group(1)))
        if value in (StepKind.TICKETS.value, StepKind.DETAILS.value, StepKind.CONFIRMATION.value):
            return cls(StepKind(value))
        raise InvalidStepError(f"Step {value!r} does not exist!")


TICKETS = Step(StepKind.TICKETS)
DETAILS = Step(StepKind.DETAILS)
CONFIRMATION = Step(StepKind.CONFIRMATION)


def student_step(index: int) -> Step:
    return Step(StepKind.STUDENT, index)


def build_steps(ticket_count: int) -> tuple[Step, ...]:
    """Return the full ordered sequence for an order holding ``ticket_count`` tickets."""
    students = tuple(student_step(i) for i in range(max(ticket_count, 0)))
    return (TICKETS, DETAILS, *students, CONFIRMATION)


def step_names(steps: Sequence[Step]) -> list[str]:
    return [str(step) for step in steps]


def _position(steps: Sequence[Step], step: Step | str) -> int | None:
    try:
        target = Step.parse(step)
    except InvalidStepError:
        return None
    try:
        return steps.index(target)
    except ValueError:
        return None


def is_at_or_after(steps: Sequence[Step], current: Step, target: Step | str) -> bool:
    """True when ``current`` is at or past ``target``.

    A target missing from ``steps`` counts as reached, so gated rules stay
    active when the sequence shrinks underneath them.
    """
    target_position = _position(steps, target)
    if target_position is None:
        return True
    return steps.index(current) >= target_position


def is_after(steps: Sequence[Step], current: Step, target: Step | str) -> bool:
    """True when ``current`` is strictly past ``target`` (missing targets count as passed)."""
    target_position = _position(steps, target)
    if target_position is None:
        return True
    return steps.index(current) > target_position
