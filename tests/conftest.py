import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the config overlay before any domain is imported and initialized."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
        elif "/bdd/" in str(test_path):
            item.add_marker(pytest.mark.bdd)


@pytest.fixture(autouse=True)
def reset_adapters():
    """Put every process-wide adapter back to its default after each test."""
    yield

    from ordering.catalog import reset_catalog
    from ordering.notifier import reset_notifier
    from pricing.currency import reset_converter
    from pricing.currency.sources import reset_rate_source

    reset_notifier()
    reset_catalog()
    reset_rate_source()
    reset_converter()


@pytest.fixture()
def rate_source():
    from pricing.currency.sources.fake_source import FakeExchangeRateSource

    return FakeExchangeRateSource()


@pytest.fixture()
def converter(rate_source):
    """Converter over a fake source, installed as the process-wide converter."""
    from pricing.currency import set_converter
    from pricing.currency.converter import CurrencyConverter

    converter = CurrencyConverter(source=rate_source, canonical="INR", max_age_seconds=3600)
    set_converter(converter)
    return converter
