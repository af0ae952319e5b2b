"""Tests for the structlog context helpers."""

import pytest
import structlog
from shared.logging import add_context, clear_context, get_log_level, log_context


@pytest.fixture(autouse=True)
def _clean_context():
    clear_context()
    yield
    clear_context()


def test_add_and_clear_context():
    add_context(request_id="req-1", path="/cart")
    assert structlog.contextvars.get_contextvars() == {"request_id": "req-1", "path": "/cart"}

    clear_context()
    assert structlog.contextvars.get_contextvars() == {}


def test_log_context_is_scoped_to_the_block():
    add_context(request_id="req-1")

    with log_context(quote_id="q-1"):
        assert structlog.contextvars.get_contextvars() == {"request_id": "req-1", "quote_id": "q-1"}

    assert structlog.contextvars.get_contextvars() == {"request_id": "req-1"}


def test_log_context_unbinds_when_the_block_raises():
    with pytest.raises(RuntimeError):
        with log_context(quote_id="q-1"):
            raise RuntimeError("boom")
    assert structlog.contextvars.get_contextvars() == {}


@pytest.mark.parametrize(
    "env, expected",
    [("production", "INFO"), ("development", "DEBUG"), ("test", "WARNING")],
)
def test_log_level_follows_environment(monkeypatch, env, expected):
    for key in ("ENV", "ENVIRONMENT", "LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("PROTEAN_ENV", env)
    assert get_log_level() == expected
