"""Transport abstraction consumed by the runtime.

The runtime never encodes requests or decodes bytes itself: a Transport
receives the verb, the fully expanded URL and the remaining arguments, and
hands back an already-decoded Response.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class Response:
    """Decoded response of one HTTP exchange."""

    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None


@dataclass(frozen=True)
class ServiceResponse:
    """Body plus headers, returned for operations declared `with_headers`."""

    body: Any
    headers: Mapping[str, str]
    status_code: int

    @classmethod
    def from_response(cls, response: Response) -> ServiceResponse:
        return cls(
            body=response.body,
            headers=dict(response.headers),
            status_code=response.status_code,
        )


@runtime_checkable
class Transport(Protocol):
    """Anything able to perform one HTTP exchange.

    Implementations raise `TransportError` for network failures; retry
    policy belongs to the transport, not to the runtime.
    """

    async def call(self, verb: str, url: str, args: Mapping[str, Any]) -> Response: ...
