"""Client configuration defaults.

Module constants hold the defaults; `ClientConfig` bundles the values a
client is constructed with so tests and callers can override them per client.
"""

from __future__ import annotations

from dataclasses import dataclass

# Seconds between status checks when the service sends no Retry-After
DEFAULT_POLL_INTERVAL = 30.0

# Total HTTP timeout used by the aiohttp transport
DEFAULT_HTTP_TIMEOUT = 30.0

# Response headers consulted while polling
ASYNC_OPERATION_HEADER = "Azure-AsyncOperation"
LOCATION_HEADER = "Location"
RETRY_AFTER_HEADER = "Retry-After"


@dataclass(frozen=True)
class ClientConfig:
    """Per-client execution settings.

    Attributes:
        poll_interval: Default wait between status checks (seconds)
        poll_timeout: Optional bound on total polling time; None polls until a
            terminal state or cancellation
        max_pages: Optional page ceiling for paged operations; None is unbounded
        http_timeout: Total timeout for the bundled HTTP transport
    """

    poll_interval: float = DEFAULT_POLL_INTERVAL
    poll_timeout: float | None = None
    max_pages: int | None = None
    http_timeout: float = DEFAULT_HTTP_TIMEOUT

    def __post_init__(self) -> None:
        if self.poll_interval < 0:
            raise ValueError("poll_interval must be >= 0")
        if self.poll_timeout is not None and self.poll_timeout <= 0:
            raise ValueError("poll_timeout must be > 0 when set")
        if self.max_pages is not None and self.max_pages < 1:
            raise ValueError("max_pages must be >= 1 when set")
