"""Core enumerations shared by the registry, pager and poller.

Architecture:
    String enums keep values identical to what services send on the wire
    (HTTP verbs, LRO status strings), so payloads can be validated straight
    into them without a translation table.

Key Types:
    - HttpVerb: Verbs an operation descriptor may declare
    - ResponseBodyKind: Shape of an operation's response body
    - PollStatus: Long-running operation lifecycle states
    - PollingFamily: Status-check strategy selected from the verb
    - PagingBehavior: Caller decision returned from a paging progress callback
"""

from enum import Enum


class HttpVerb(str, Enum):
    """HTTP verbs supported by operation descriptors."""

    GET = "GET"
    PUT = "PUT"
    PATCH = "PATCH"
    POST = "POST"
    DELETE = "DELETE"

    @classmethod
    def from_value(cls, value: "HttpVerb | str") -> "HttpVerb":
        """Parse a verb, accepting any casing."""
        if isinstance(value, cls):
            return value
        return cls(str(value).upper())


class ResponseBodyKind(str, Enum):
    """Shape of an operation's response body."""

    SCALAR = "scalar"
    SEQUENCE = "sequence"
    NONE = "none"


class PollStatus(str, Enum):
    """Long-running operation states.

    Services spell these with varying case; `parse` normalizes them and maps
    the provisioning states that mean "still working" (Accepted, Creating,
    Updating, Deleting, Running, ...) to IN_PROGRESS.
    """

    IN_PROGRESS = "InProgress"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    CANCELED = "Canceled"

    @property
    def is_terminal(self) -> bool:
        return self is not PollStatus.IN_PROGRESS

    @classmethod
    def parse(cls, value: "PollStatus | str | None") -> "PollStatus":
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.IN_PROGRESS
        lowered = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == lowered:
                return member
        if lowered == "cancelled":
            return cls.CANCELED
        return cls.IN_PROGRESS


class PollingFamily(str, Enum):
    """Status-check strategy for a long-running operation.

    RESOURCE: PUT/PATCH, status is read from the original resource URL and the
    final result is the resource itself.
    OPERATION: POST/DELETE, status is read from an operation-status URL
    returned by the initiating call.
    """

    RESOURCE = "resource"
    OPERATION = "operation"


class PagingBehavior(str, Enum):
    """Returned by a paging progress callback to continue or stop traversal."""

    CONTINUE = "continue"
    STOP = "stop"
