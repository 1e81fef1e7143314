"""ServiceClient facade over the registry and invoker.

The client owns the transport, the operation registry built from its
descriptors, and one Invoker. It exposes the same call three ways:

    - `await client.invoke(...)`: async, returns the result
    - `client.invoke_sync(...)`: blocks on a private event loop
    - `client.begin(...)`: schedules the call and returns an OperationHandle
      that can be awaited or cancelled

Example:
    >>> async with ServiceClient(groups, HTTPTransport("https://api.example.com")) as client:
    ...     widgets = await client.invoke("list", "widgets", {"filter": "blue"})
    ...     handle = client.begin("create", "widgets", {"widget_name": "w1", "body": {...}})
    ...     created = await handle.result()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Iterable, Mapping
from typing import Any

from .core.config import ClientConfig
from .core.descriptor import OperationDescriptor
from .io.http_client import HTTPTransport
from .io.transport import Transport
from .runtime.cancellation import CancellationToken
from .runtime.invoker import Invoker
from .runtime.pager import Page, ProgressCallback
from .runtime.registry import (
    Operation,
    OperationGroup,
    OperationRegistry,
    normalize_group_name,
)

logger = logging.getLogger(__name__)


class OperationHandle:
    """Handle to a scheduled invoke.

    `cancel()` is cooperative: the running pager or poller observes it and
    fails with Cancelled / InterruptedPoll, which `result()` re-raises.
    """

    def __init__(self, task: asyncio.Task[Any], cancellation: CancellationToken) -> None:
        self._task = task
        self._cancellation = cancellation

    @property
    def cancellation(self) -> CancellationToken:
        return self._cancellation

    def done(self) -> bool:
        return self._task.done()

    def cancel(self) -> None:
        self._cancellation.cancel()

    async def result(self) -> Any:
        return await self._task

    def __await__(self):
        return self._task.__await__()


class ServiceClient:
    """Client executing operations described by operation descriptors."""

    def __init__(
        self,
        groups: Mapping[str | None, Iterable[OperationDescriptor]],
        transport: Transport,
        *,
        config: ClientConfig | None = None,
    ) -> None:
        """Build the client.

        Args:
            groups: Descriptors keyed by group name (None or "" for operations
                declared on the client itself)
            transport: Transport used for every call
            config: Optional execution settings

        Raises:
            RegistryError: On duplicate group or operation names
            InvalidOperationVerb: On a long-running descriptor with an
                unpollable verb
        """
        self.config = config or ClientConfig()
        self.transport = transport
        self.registry = OperationRegistry(groups, transport)
        self._invoker = Invoker(self.config)

    @classmethod
    def over_http(
        cls,
        groups: Mapping[str | None, Iterable[OperationDescriptor]],
        base_url: str,
        *,
        config: ClientConfig | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> ServiceClient:
        """Build a client over an HTTPTransport using `config.http_timeout`."""
        config = config or ClientConfig()
        transport = HTTPTransport(base_url, timeout=config.http_timeout, headers=headers)
        return cls(groups, transport, config=config)

    def group(self, name: str | None = None) -> OperationGroup:
        return self.registry.group(normalize_group_name(name))

    def resolve(self, operation_name: str, group_name: str | None = None) -> Operation:
        """Resolve an operation; `group_name` may be given in any spelling.

        `WidgetsOperations`, `widgets_operations` and `widgets` name the same
        group.
        """
        return self.registry.resolve(operation_name, normalize_group_name(group_name))

    async def invoke(
        self,
        operation_name: str,
        group_name: str | None = None,
        args: Mapping[str, Any] | None = None,
        *,
        cancellation: CancellationToken | None = None,
        progress: ProgressCallback | None = None,
    ) -> Any:
        """Resolve and run an operation.

        Returns:
            Final LRO result, accumulated page items, or the response body

        Raises:
            OperationNotFound: Unknown operation or group
            TransportError: Transport failure
            OperationFailed: LRO ended Failed or Canceled
            Cancelled: Cancellation was requested (InterruptedPoll while polling)
        """
        operation = self.resolve(operation_name, group_name)
        return await self._invoker.invoke(
            operation, args, cancellation=cancellation, progress=progress
        )

    def invoke_sync(
        self,
        operation_name: str,
        group_name: str | None = None,
        args: Mapping[str, Any] | None = None,
        *,
        progress: ProgressCallback | None = None,
    ) -> Any:
        """Blocking form of `invoke`. Must not be called from a running event loop.

        Each call runs its own event loop; the transport is closed before that
        loop ends and reopens lazily on the next call.
        """

        async def run() -> Any:
            try:
                return await self.invoke(operation_name, group_name, args, progress=progress)
            finally:
                await self.close()

        return asyncio.run(run())

    def begin(
        self,
        operation_name: str,
        group_name: str | None = None,
        args: Mapping[str, Any] | None = None,
        *,
        progress: ProgressCallback | None = None,
    ) -> OperationHandle:
        """Schedule an invoke on the running loop and return its handle.

        Resolution happens eagerly, so OperationNotFound is raised here.
        """
        operation = self.resolve(operation_name, group_name)
        cancellation = CancellationToken()
        task = asyncio.ensure_future(
            self._invoker.invoke(
                operation, args, cancellation=cancellation, progress=progress
            )
        )
        return OperationHandle(task, cancellation)

    def pages(
        self,
        operation_name: str,
        group_name: str | None = None,
        args: Mapping[str, Any] | None = None,
        *,
        cancellation: CancellationToken | None = None,
    ) -> AsyncIterator[Page]:
        """Stream pages of a paged operation lazily."""
        operation = self.resolve(operation_name, group_name)
        return self._invoker.pages(operation, args, cancellation=cancellation)

    async def close(self) -> None:
        close = getattr(self.transport, "close", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> ServiceClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
