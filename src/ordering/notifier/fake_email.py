"""Fake email notifier: keeps quote notifications in memory."""

import time
from uuid import uuid4

from ordering.notifier.port import EmailNotifier


class FakeEmailNotifier(EmailNotifier):
    """Notifier that records quote emails for test assertions.

    Failures can be forced for every quote or only for selected quote ids,
    and a simulated delivery delay is cut short at the caller's timeout the
    way a real SMTP client's socket timeout would.
    """

    def __init__(self):
        self.sent_emails: list[dict] = []
        self.attempts: dict[str, int] = {}
        self.should_succeed = True
        self.failing_quote_ids: set[str] = set()
        self.failure_reason = "Email delivery failed"
        self.delay_seconds = 0.0

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Email delivery failed",
        delay_seconds: float = 0.0,
        failing_quote_ids=(),
    ):
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.delay_seconds = delay_seconds
        self.failing_quote_ids = {str(q) for q in failing_quote_ids}

    def emails_for(self, quote_id) -> list[dict]:
        return [email for email in self.sent_emails if email["quote_id"] == str(quote_id)]

    def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
        quote_id: str | None = None,
        timeout_seconds: float | None = None,
    ) -> dict:
        quote_id = str(quote_id) if quote_id else None
        if quote_id:
            self.attempts[quote_id] = self.attempts.get(quote_id, 0) + 1

        if self.delay_seconds:
            if timeout_seconds is not None and self.delay_seconds > timeout_seconds:
                time.sleep(timeout_seconds)
                return {"message_id": None, "status": "failed", "error": f"Delivery timed out after {timeout_seconds}s"}
            time.sleep(self.delay_seconds)

        if not self.should_succeed or quote_id in self.failing_quote_ids:
            return {
                "message_id": None,
                "status": "failed",
                "error": self.failure_reason,
            }

        message_id = f"quote-{quote_id or 'none'}-{uuid4().hex[:8]}"
        self.sent_emails.append(
            {
                "message_id": message_id,
                "quote_id": quote_id,
                "to": to,
                "subject": subject,
                "body": body,
                "html_body": html_body,
            }
        )
        return {"message_id": message_id, "status": "sent"}

    def reset(self):
        self.sent_emails.clear()
        self.attempts.clear()
        self.should_succeed = True
        self.failing_quote_ids = set()
        self.failure_reason = "Email delivery failed"
        self.delay_seconds = 0.0
