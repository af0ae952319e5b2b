"""Error taxonomy shared by the Ordering and Pricing domains.

Validation failures and missing records use Protean's own exceptions
(``ValidationError`` and ``ObjectNotFoundError``). The two errors below cover
what Protean has no name for: illegal state transitions / lost races, and
failures of outbound collaborators (notifier, exchange-rate feed).
"""


class ConflictError(Exception):
    """A write collided with the persisted state (illegal transition, stale version)."""

    def __init__(self, messages: dict | str) -> None:
        self.messages = messages
        super().__init__(messages)


class ExternalServiceError(Exception):
    """An outbound collaborator failed or timed out.

    Always handled as a soft failure: logged, never allowed to abort the
    primary write it is attached to.
    """

    def __init__(self, service: str, reason: str) -> None:
        self.service = service
        self.reason = reason
        super().__init__(f"{service}: {reason}")
