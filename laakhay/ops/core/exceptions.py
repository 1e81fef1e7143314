"""Custom exception hierarchy."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .enums import HttpVerb, PollStatus


class OperationsError(Exception):
    """Base exception for all library errors.

    Pager and Poller annotate errors passing through them with the number of
    pages fetched or status checks issued before the failure.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.pages_fetched: int | None = None
        self.poll_count: int | None = None


class RegistryError(OperationsError):
    """Operation registry could not be built from the given descriptors."""

    pass


class OperationNotFound(OperationsError):
    """No descriptor matches the requested operation/group pair."""

    def __init__(self, message: str, *, operation: str, group: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation
        self.group = group


class InvalidOperationVerb(OperationsError):
    """Long-running operation declared with a verb that cannot be polled."""

    def __init__(self, message: str, verb: HttpVerb | str | None = None) -> None:
        super().__init__(message)
        self.verb = verb


class TransportError(OperationsError):
    """Network or transport failure reported by the Transport."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class OperationFailed(OperationsError):
    """Long-running operation reached the Failed or Canceled state."""

    def __init__(
        self,
        message: str,
        *,
        status: PollStatus,
        body: Any = None,
        poll_count: int | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.body = body
        self.poll_count = poll_count


class MissingPollingHeader(OperationsError):
    """Long-running response names no status URL and is not yet terminal."""

    def __init__(self, message: str, *, status_code: int, body: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class Cancelled(OperationsError):
    """Caller requested cancellation."""

    pass


class InterruptedPoll(Cancelled):
    """Cancellation observed while polling a long-running operation."""

    def __init__(self, message: str, poll_count: int | None = None) -> None:
        super().__init__(message)
        self.poll_count = poll_count


class PageLimitExceeded(Cancelled):
    """Caller-supplied maximum page count was reached before the last page."""

    def __init__(self, message: str, max_pages: int) -> None:
        super().__init__(message)
        self.max_pages = max_pages
