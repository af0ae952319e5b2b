"""Email notifier port: abstract interface for admin notifications about quotes."""

from abc import ABC, abstractmethod


class EmailNotifier(ABC):
    """Abstract interface for email dispatch adapters."""

    @abstractmethod
    def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
        quote_id: str | None = None,
        timeout_seconds: float | None = None,
    ) -> dict:
        """Send an email message about `quote_id`.

        Adapters must give up once `timeout_seconds` has passed and report a
        failed status instead of blocking the caller's worker.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...
