"""Core components."""

from .config import ClientConfig
from .descriptor import (
    GroupedParameterSpec,
    NextOperationRef,
    OperationDescriptor,
)
from .enums import (
    HttpVerb,
    PagingBehavior,
    PollingFamily,
    PollStatus,
    ResponseBodyKind,
)
from .exceptions import (
    Cancelled,
    InterruptedPoll,
    InvalidOperationVerb,
    MissingPollingHeader,
    OperationFailed,
    OperationNotFound,
    OperationsError,
    PageLimitExceeded,
    RegistryError,
    TransportError,
)

__all__ = [
    "ClientConfig",
    "OperationDescriptor",
    "NextOperationRef",
    "GroupedParameterSpec",
    "HttpVerb",
    "ResponseBodyKind",
    "PollStatus",
    "PollingFamily",
    "PagingBehavior",
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
