import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture
from registration.discount.resolver import DiscountStore
from registration.gateway import reset_gateway, set_gateway
from registration.gateway.fake_adapter import FakeGateway
from registration.pricing import reset_default_edition


class InMemoryDiscountStore(DiscountStore):
    """Discount store over a plain dict of DiscountCode objects keyed by code."""

    def __init__(self, *discounts):
        self.discounts = {discount.code: discount for discount in discounts}
        self.lookups = []

    def add(self, discount):
        self.discounts[discount.code] = discount

    def find_active_by_code(self, code):
        self.lookups.append(code)
        discount = self.discounts.get(code)
        if discount is None or not discount.is_valid():
            return None
        return discount


@pytest.fixture(scope="session")
def registration_bed():
    from registration.domain import registration

    bed = DomainFixture(registration)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(registration_bed):
    with registration_bed.domain_context():
        yield

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()


@pytest.fixture(autouse=True)
def _reset_configuration():
    yield
    reset_gateway()
    reset_default_edition()


@pytest.fixture
def gateway():
    fake = FakeGateway()
    set_gateway(fake)
    return fake


@pytest.fixture
def discounts():
    return InMemoryDiscountStore()
