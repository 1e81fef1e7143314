"""Invoker: picks the execution strategy for one operation call.

Dispatch order:
    1. Long-running -> issue the initiating call, then poll to completion
    2. Pageable entry point -> page through continuation links
    3. Anything else -> single call, body returned unwrapped

An operation that is both long-running and pageable is treated as
long-running. Next-page operations are never wrapped in a pager themselves;
called directly they return their raw page body.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping
from typing import Any

from ..core.config import ClientConfig
from ..core.descriptor import OperationDescriptor
from ..io.transport import Response, ServiceResponse
from .cancellation import CancellationToken
from .pager import Page, Pager, ProgressCallback
from .poller import Poller
from .registry import Operation

logger = logging.getLogger(__name__)


class Invoker:
    """Stateless dispatcher; safe to share between concurrent invokes."""

    def __init__(self, config: ClientConfig | None = None) -> None:
        self._config = config or ClientConfig()

    async def invoke(
        self,
        operation: Operation,
        args: Mapping[str, Any] | None = None,
        *,
        cancellation: CancellationToken | None = None,
        progress: ProgressCallback | None = None,
    ) -> Any:
        """Run one operation with the strategy its descriptor calls for.

        Args:
            operation: Resolved operation
            args: Call arguments
            cancellation: Optional token aborting waits and in-flight calls
            progress: Optional per-page callback for paged operations

        Returns:
            Final LRO result, accumulated page items, or the response body
            (a ServiceResponse for operations declared `with_headers`)
        """
        args = dict(args or {})
        descriptor = operation.descriptor

        if descriptor.is_long_running:
            logger.debug(
                "Invoking long running operation",
                extra={"operation": operation.name, "group": operation.group_name},
            )
            return await self._invoke_long_running(operation, args, cancellation)

        if operation.is_paging_entry:
            logger.debug(
                "Invoking paged operation",
                extra={"operation": operation.name, "group": operation.group_name},
            )
            pager = Pager(
                operation, max_pages=self._config.max_pages, cancellation=cancellation
            )
            return await pager.page(args, progress=progress)

        logger.debug(
            "Invoking operation",
            extra={"operation": operation.name, "group": operation.group_name},
        )
        response = await operation(args, cancellation=cancellation)
        return self._unwrap(descriptor, response)

    def pages(
        self,
        operation: Operation,
        args: Mapping[str, Any] | None = None,
        *,
        cancellation: CancellationToken | None = None,
    ) -> AsyncIterator[Page]:
        """Streaming form of a paged invoke; pages already yielded stay with the caller."""
        pager = Pager(operation, max_pages=self._config.max_pages, cancellation=cancellation)
        return pager.pages(args)

    async def _invoke_long_running(
        self,
        operation: Operation,
        args: dict[str, Any],
        cancellation: CancellationToken | None,
    ) -> Any:
        poller = Poller(
            operation.group.transport,
            poll_interval=self._config.poll_interval,
            poll_timeout=self._config.poll_timeout,
        )
        initial = await operation(args, cancellation=cancellation)
        result, final = await poller.poll_with_response(
            initial,
            operation.descriptor,
            resource_url=operation.build_url(args),
            cancellation=cancellation,
        )
        if operation.descriptor.with_headers:
            return ServiceResponse(
                body=result, headers=dict(final.headers), status_code=final.status_code
            )
        return result

    @staticmethod
    def _unwrap(descriptor: OperationDescriptor, response: Response) -> Any:
        if descriptor.with_headers:
            return ServiceResponse.from_response(response)
        return response.body
