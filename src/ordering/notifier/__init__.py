"""Notifier registry.

Uses the fake email notifier by default; a real SMTP or API-backed adapter
can be installed with set_notifier() at startup.
"""

from ordering.notifier.fake_email import FakeEmailNotifier
from ordering.notifier.port import EmailNotifier

_current_notifier: EmailNotifier | None = None


def get_notifier() -> EmailNotifier:
    global _current_notifier
    if _current_notifier is None:
        _current_notifier = FakeEmailNotifier()
    return _current_notifier


def set_notifier(notifier: EmailNotifier) -> None:
    global _current_notifier
    _current_notifier = notifier


def reset_notifier() -> None:
    global _current_notifier
    _current_notifier = None
