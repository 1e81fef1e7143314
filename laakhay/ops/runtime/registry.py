"""Operation registry: binds descriptors to groups and resolves them by name.

Architecture:
    The registry is the client's routing table. It is built once from
    `{group_name: [descriptors]}` and is read-only afterwards, so concurrent
    invokes can resolve without locking.

    - Group names are normalized at registration (`normalize_group_name`);
      lookups are exact dictionary reads keyed by `(group, name)`.
    - Every bound Operation holds an explicit reference to its group, and
      every group to the registry. Nothing is looked up through ambient state.
    - Next-operation references are normalized and checked structurally at
      registration: an operation referenced as another operation's next page
      is flagged `is_next_page_operation`.
    - The polling family of a long-running operation is chosen here, once.

Resolution:
    `OperationGroup.resolve(name)` and `resolve(name, own_group)` stay inside
    the group; any other group name is routed through the registry.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from ..core.descriptor import (
    NEXT_LINK_PARAMETER,
    NEXT_LINK_URL,
    NextOperationRef,
    OperationDescriptor,
)
from ..core.enums import PollingFamily
from ..core.exceptions import Cancelled, OperationNotFound, RegistryError
from ..io.transport import Response, Transport
from .cancellation import CancellationToken
from .grouping import group_values
from .poller import select_polling_family

logger = logging.getLogger(__name__)

# Group holding operations declared directly on the client
ROOT_GROUP = ""

_SEPARATORS = re.compile(r"[\s_\-.]+")
_OPERATIONS_SUFFIX = "operations"


def normalize_group_name(name: str | None) -> str:
    """Normalize a group name for registration.

    `WidgetsOperations`, `widgets_operations`, `Widgets` and `widgets` all
    map to `widgets`. None maps to the root group.
    """
    if not name:
        return ROOT_GROUP
    normalized = _SEPARATORS.sub("", name).lower()
    if normalized.endswith(_OPERATIONS_SUFFIX) and normalized != _OPERATIONS_SUFFIX:
        normalized = normalized[: -len(_OPERATIONS_SUFFIX)]
    return normalized


@dataclass(frozen=True, eq=False)
class Operation:
    """A descriptor bound to its group and the client transport."""

    descriptor: OperationDescriptor
    group: OperationGroup
    next_operation: NextOperationRef | None = None
    is_next_page_operation: bool = False
    polling_family: PollingFamily | None = None

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def group_name(self) -> str:
        return self.group.name

    @property
    def is_paging_entry(self) -> bool:
        """Pageable and callable as an entry point (not itself a next-page call)."""
        return self.descriptor.is_pageable and not self.is_next_page_operation

    def resolve_next(self) -> Operation | None:
        """Resolve the operation fetching this operation's next pages.

        None means the continuation link is fetched directly with a GET.
        """
        if self.next_operation is None:
            return None
        return self.group.resolve(self.next_operation.name, self.next_operation.group)

    def build_url(self, args: Mapping[str, Any]) -> str:
        template = self.descriptor.url
        if template == NEXT_LINK_URL:
            link = args.get(NEXT_LINK_PARAMETER)
            if not link:
                raise ValueError(f"Operation '{self.name}' requires '{NEXT_LINK_PARAMETER}'")
            return str(link)

        values = {}
        for param in self.descriptor.path_parameters:
            if args.get(param) is None:
                raise ValueError(f"Operation '{self.name}' requires path parameter '{param}'")
            values[param] = quote(str(args[param]), safe="")
        return template.format_map(values)

    def build_args(self, args: Mapping[str, Any]) -> dict[str, Any]:
        """Arguments forwarded to the transport.

        Path parameters are consumed by the URL; a grouped parameter is
        flattened into its individual fields.
        """
        consumed = set(self.descriptor.path_parameters)
        if self.descriptor.url == NEXT_LINK_URL:
            consumed.add(NEXT_LINK_PARAMETER)

        spec = self.descriptor.grouped_parameter
        call_args: dict[str, Any] = {}
        for key, value in args.items():
            if key in consumed:
                continue
            if spec is not None and key == spec.name:
                if value is not None:
                    call_args.update(group_values(value, spec.fields))
                continue
            call_args[key] = value
        return call_args

    async def __call__(
        self,
        args: Mapping[str, Any] | None = None,
        *,
        cancellation: CancellationToken | None = None,
    ) -> Response:
        args = args or {}
        url = self.build_url(args)
        call = self.group.transport.call(
            self.descriptor.http_verb.value, url, self.build_args(args)
        )
        if cancellation is None:
            return await call

        cancelled, response = await cancellation.run(call)
        if cancelled:
            raise Cancelled(f"Call to '{self.name}' was cancelled")
        return response

    async def call_url(
        self, url: str, *, cancellation: CancellationToken | None = None
    ) -> Response:
        """GET an absolute URL (a continuation link) through this operation's transport."""
        call = self.group.transport.call("GET", url, {})
        if cancellation is None:
            return await call

        cancelled, response = await cancellation.run(call)
        if cancelled:
            raise Cancelled(f"Link fetch for '{self.name}' was cancelled")
        return response


class OperationGroup:
    """Named collection of bound operations with a back-reference to the registry."""

    def __init__(self, name: str, registry: OperationRegistry) -> None:
        self.name = name
        self.registry = registry
        self._operations: dict[str, Operation] = {}

    @property
    def transport(self) -> Transport:
        return self.registry.transport

    def resolve(self, operation_name: str, group_name: str | None = None) -> Operation:
        if group_name is not None and group_name != self.name:
            return self.registry.resolve(operation_name, group_name)
        try:
            return self._operations[operation_name]
        except KeyError:
            raise OperationNotFound(
                f"Operation '{operation_name}' not found in group '{self.name}'",
                operation=operation_name,
                group=self.name,
            ) from None

    def list_operations(self) -> list[str]:
        return list(self._operations)

    def __contains__(self, operation_name: object) -> bool:
        return operation_name in self._operations

    def __repr__(self) -> str:
        return f"OperationGroup(name={self.name!r}, operations={len(self._operations)})"


class OperationRegistry:
    """Flat `(group, name) -> Operation` mapping built once per client."""

    def __init__(
        self,
        groups: Mapping[str | None, Iterable[OperationDescriptor]],
        transport: Transport,
    ) -> None:
        """Bind every descriptor to its group.

        Args:
            groups: Descriptors keyed by group name; None or "" is the root group
            transport: Transport shared by all operations

        Raises:
            RegistryError: On duplicate group or operation names
            InvalidOperationVerb: If a long-running descriptor uses a verb
                that cannot be polled
        """
        self.transport = transport
        self._groups: dict[str, OperationGroup] = {}
        self._operations: dict[tuple[str, str], Operation] = {}

        pending: list[tuple[str, OperationDescriptor]] = []
        for raw_name, descriptors in groups.items():
            group_name = normalize_group_name(raw_name)
            if group_name in self._groups:
                raise RegistryError(
                    f"Group '{raw_name}' collides with an existing group '{group_name}'"
                )
            self._groups[group_name] = OperationGroup(group_name, self)
            seen: set[str] = set()
            for descriptor in descriptors:
                if descriptor.name in seen:
                    raise RegistryError(
                        f"Operation '{descriptor.name}' is declared twice in group '{group_name}'"
                    )
                seen.add(descriptor.name)
                pending.append((group_name, descriptor))

        next_refs: dict[tuple[str, str], NextOperationRef] = {}
        for group_name, descriptor in pending:
            ref = descriptor.next_operation
            if ref is not None:
                next_refs[(group_name, descriptor.name)] = NextOperationRef(
                    name=ref.name,
                    group=normalize_group_name(ref.group) if ref.group else group_name,
                )
        # Operations reached as another operation's next page; an operation
        # following its own links stays an entry point
        next_targets = {
            (ref.group, ref.name) for key, ref in next_refs.items() if (ref.group, ref.name) != key
        }

        for group_name, descriptor in pending:
            key = (group_name, descriptor.name)
            ref = next_refs.get(key)
            operation = Operation(
                descriptor=descriptor,
                group=self._groups[group_name],
                next_operation=ref,
                is_next_page_operation=key in next_targets,
                polling_family=(
                    select_polling_family(descriptor)
                    if descriptor.is_long_running
                    else None
                ),
            )
            self._groups[group_name]._operations[descriptor.name] = operation
            self._operations[key] = operation

        logger.debug(
            "Operation registry built",
            extra={"groups": len(self._groups), "operations": len(self._operations)},
        )

    def resolve(self, operation_name: str, group_name: str | None = None) -> Operation:
        """Look up an operation by exact (normalized) group name.

        Raises:
            OperationNotFound: If no operation matches
        """
        key = (group_name or ROOT_GROUP, operation_name)
        try:
            return self._operations[key]
        except KeyError:
            raise OperationNotFound(
                f"Operation '{operation_name}' not found in group '{key[0]}'",
                operation=operation_name,
                group=key[0],
            ) from None

    def group(self, group_name: str | None = None) -> OperationGroup:
        name = group_name or ROOT_GROUP
        try:
            return self._groups[name]
        except KeyError:
            raise OperationNotFound(
                f"Group '{name}' is not registered", operation="", group=name
            ) from None

    def list_groups(self) -> list[str]:
        return list(self._groups)

    def __len__(self) -> int:
        return len(self._operations)
