"""Operation descriptors: static metadata for one remote operation.

Descriptors are produced by an external schema parser and consumed read-only.
They carry no behavior beyond a few derived flags; binding to a group and a
transport happens in the operation registry.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from string import Formatter
from types import MappingProxyType
from typing import Any

from .enums import HttpVerb, ResponseBodyKind

LONG_RUNNING_EXTENSION = "x-ms-long-running-operation"
PAGEABLE_EXTENSION = "x-ms-pageable"

DEFAULT_NEXT_LINK_NAME = "nextLink"
DEFAULT_ITEM_NAME = "value"

# URL template of a next-page operation: the continuation link is the URL
NEXT_LINK_URL = "{nextLink}"
NEXT_LINK_PARAMETER = "nextLink"


@dataclass(frozen=True)
class NextOperationRef:
    """Reference to the operation that fetches subsequent pages."""

    name: str
    group: str | None = None


@dataclass(frozen=True)
class GroupedParameterSpec:
    """Describes one argument that bundles several individually-declared fields.

    Attributes:
        name: Argument key under which the group value is passed
        fields: Field names belonging to the group
        model: Optional class (usually a pydantic model) used to build
            instances; derived groups are plain dicts when omitted
    """

    name: str
    fields: tuple[str, ...]
    model: type | None = None


@dataclass(frozen=True)
class OperationDescriptor:
    """Immutable description of one remote call."""

    name: str
    http_verb: HttpVerb
    url: str
    parameters: tuple[str, ...] = ()
    extensions: Mapping[str, Any] = field(default_factory=dict)
    response_body_kind: ResponseBodyKind = ResponseBodyKind.SCALAR
    next_operation: NextOperationRef | None = None
    grouped_parameter: GroupedParameterSpec | None = None
    with_headers: bool = False

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Operation descriptor requires a name")
        object.__setattr__(self, "http_verb", HttpVerb.from_value(self.http_verb))
        object.__setattr__(self, "parameters", tuple(self.parameters))
        object.__setattr__(self, "extensions", MappingProxyType(dict(self.extensions)))
        if self.next_operation is not None and not self.is_pageable:
            raise ValueError(
                f"Operation '{self.name}' declares a next operation but is not pageable"
            )

    @property
    def is_long_running(self) -> bool:
        return bool(self.extensions.get(LONG_RUNNING_EXTENSION))

    @property
    def is_pageable(self) -> bool:
        return PAGEABLE_EXTENSION in self.extensions

    @property
    def next_link_name(self) -> str:
        """Response field holding the continuation link."""
        return self._pageable_setting("nextLinkName", DEFAULT_NEXT_LINK_NAME)

    @property
    def item_name(self) -> str:
        """Response field holding the page items."""
        return self._pageable_setting("itemName", DEFAULT_ITEM_NAME)

    @property
    def path_parameters(self) -> tuple[str, ...]:
        """Names substituted into the URL template."""
        return tuple(
            name for _, name, _, _ in Formatter().parse(self.url) if name
        )

    def _pageable_setting(self, key: str, default: str) -> str:
        settings = self.extensions.get(PAGEABLE_EXTENSION)
        if isinstance(settings, Mapping) and settings.get(key):
            return str(settings[key])
        return default
