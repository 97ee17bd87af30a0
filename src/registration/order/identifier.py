"""Order identifier generation.

Identifiers are the external key for an order (URLs, gateway metadata).
They are random UUID4 strings, checked against persisted orders and
regenerated on collision a bounded number of times.
"""

from collections.abc import Callable
from uuid import uuid4

from registration.domain import logger

MAX_IDENTIFIER_ATTEMPTS = 5


class IdentifierExhaustedError(RuntimeError):
    """Raised when no unused identifier was found within the attempt budget."""


def unique_identifier(
    exists: Callable[[str], bool],
    generate: Callable[[], object] = uuid4,
    max_attempts: int = MAX_IDENTIFIER_ATTEMPTS,
) -> str:
    """Return an identifier that ``exists`` does not know about yet."""
    candidate = str(generate())
    for attempt in range(1, max_attempts + 1):
        if not exists(candidate):
            return candidate
        logger.warning("order_identifier_collision", identifier=candidate, attempt=attempt)
        candidate = str(generate())
    raise IdentifierExhaustedError(f"Could not find an unused order identifier after {max_attempts} attempts")
