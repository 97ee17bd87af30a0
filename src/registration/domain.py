"""Registration bounded context: bootcamp checkout and payment.

Handles the multi-step order wizard (tickets, billing details, one student
per ticket, confirmation), cart pricing with promo codes, and payment
reconciliation against the external payment gateway.
"""

from protean.domain import Domain

from registration.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

registration = Domain(name="registration")
