"""I/O layer: transport interface and the bundled HTTP transport."""

from .http_client import HTTPTransport
from .transport import Response, ServiceResponse, Transport

__all__ = [
    "HTTPTransport",
    "Response",
    "ServiceResponse",
    "Transport",
]
