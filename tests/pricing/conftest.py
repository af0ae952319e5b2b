import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def pricing_bed():
    from pricing.domain import pricing

    bed = DomainFixture(pricing)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(pricing_bed):
    with pricing_bed.domain_context():
        yield

        # Clear all databases and drain the event store
        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture()
def india_rate():
    from pricing.shipping.calculator import ShippingCalculator

    ShippingCalculator().seed_rates(
        [
            {"countryCode": "IN", "countryName": "India", "baseRate": 50.0, "freeShippingThreshold": 1000.0},
            {"countryCode": "US", "countryName": "United States", "baseRate": 1500.0},
        ]
    )
