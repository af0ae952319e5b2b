import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield

        # Clear all databases and drain the event store
        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture()
def catalog():
    """In-memory catalog with a couple of products, installed as the active catalog."""
    from ordering.catalog import set_catalog
    from ordering.catalog.fake_adapter import InMemoryCatalog

    catalog = InMemoryCatalog()
    catalog.add_product("prod-001", "Hex Key Set", base_price=450.0, offer_price=399.0, colors=("Black", "Silver"))
    catalog.add_product("prod-002", "Crimping Tool", base_price=1200.0)
    set_catalog(catalog)
    return catalog


@pytest.fixture()
def notifier():
    from ordering.notifier import set_notifier
    from ordering.notifier.fake_email import FakeEmailNotifier

    notifier = FakeEmailNotifier()
    set_notifier(notifier)
    return notifier
