"""Laakhay Ops - schema-driven execution of paged and long-running operations."""

from .client import OperationHandle, ServiceClient
from .core import (
    Cancelled,
    ClientConfig,
    GroupedParameterSpec,
    HttpVerb,
    InterruptedPoll,
    InvalidOperationVerb,
    MissingPollingHeader,
    NextOperationRef,
    OperationDescriptor,
    OperationFailed,
    OperationNotFound,
    OperationsError,
    PageLimitExceeded,
    PagingBehavior,
    PollingFamily,
    PollStatus,
    RegistryError,
    ResponseBodyKind,
    TransportError,
)
from .io import HTTPTransport, Response, ServiceResponse, Transport
from .runtime import (
    CancellationToken,
    Invoker,
    Operation,
    OperationGroup,
    OperationRegistry,
    Page,
    Pager,
    Poller,
    transform_grouped_parameter,
)

__version__ = "0.1.0"

__all__ = [
    "ServiceClient",
    "OperationHandle",
    "ClientConfig",
    # Descriptors
    "OperationDescriptor",
    "NextOperationRef",
    "GroupedParameterSpec",
    "HttpVerb",
    "ResponseBodyKind",
    "PollStatus",
    "PollingFamily",
    "PagingBehavior",
    # Transport
    "Transport",
    "HTTPTransport",
    "Response",
    "ServiceResponse",
    # Runtime
    "CancellationToken",
    "Invoker",
    "Operation",
    "OperationGroup",
    "OperationRegistry",
    "Page",
    "Pager",
    "Poller",
    "transform_grouped_parameter",
    # Errors
    "OperationsError",
    "RegistryError",
    "OperationNotFound",
    "InvalidOperationVerb",
    "MissingPollingHeader",
    "TransportError",
    "OperationFailed",
    "Cancelled",
    "InterruptedPoll",
    "PageLimitExceeded",
]
