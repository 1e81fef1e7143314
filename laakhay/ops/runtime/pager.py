"""Multi-page traversal driven by continuation links.

State machine:
    Fetching -> HasNext -> Fetching ... -> Done

The first fetch uses the initiating operation; every following fetch uses the
operation named by its next-operation reference (possibly in another group),
called with the continuation link and the arguments it shares with the
initiating call. Pages are processed strictly in fetch order.
"""

from __future__ import annotations

import contextlib
from collections.abc import AsyncIterator, Callable, Mapping
from time import perf_counter
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from ..core.descriptor import NEXT_LINK_PARAMETER, OperationDescriptor
from ..core.enums import PagingBehavior
from ..core.exceptions import Cancelled, OperationsError, PageLimitExceeded
from ..io.transport import Response
from .cancellation import CancellationToken
from .grouping import transform_grouped_parameter
from .telemetry import log_page_fetched, log_paging_complete, log_paging_error

if TYPE_CHECKING:
    from .registry import Operation

ProgressCallback = Callable[[list[Any]], PagingBehavior | None]


class Page(BaseModel):
    """One fetched page: its items and the optional continuation link."""

    items: list[Any] = Field(default_factory=list)
    next_link: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def has_next(self) -> bool:
        return self.next_link is not None

    @classmethod
    def from_body(cls, body: Any, descriptor: OperationDescriptor) -> Page:
        """Extract a page from a decoded response body.

        A missing item list is an empty page; an empty or missing link ends
        traversal. A bare list body is a single, final page.
        """
        if body is None:
            return cls()
        if isinstance(body, list):
            return cls(items=body)

        if isinstance(body, Mapping):
            items = body.get(descriptor.item_name)
            link = body.get(descriptor.next_link_name)
        else:
            items = getattr(body, descriptor.item_name, None)
            link = getattr(body, descriptor.next_link_name, None)
        return cls(items=list(items or []), next_link=link or None)


class Pager:
    """Drives one paged invoke.

    A Pager is created per call and owns its accumulator; it is not reused.
    """

    def __init__(
        self,
        operation: Operation,
        *,
        max_pages: int | None = None,
        cancellation: CancellationToken | None = None,
    ) -> None:
        """Initialize the pager.

        Args:
            operation: Initiating (entry point) operation
            max_pages: Optional page ceiling; reaching it with more pages
                pending raises PageLimitExceeded
            cancellation: Optional token aborting waits and in-flight calls
        """
        self._operation = operation
        self._max_pages = max_pages
        self._cancellation = cancellation
        self._last_latency_ms: float | None = None

    async def pages(self, args: Mapping[str, Any] | None = None) -> AsyncIterator[Page]:
        """Yield pages lazily until the service returns no continuation link.

        Unbounded if the service never stops returning links; pass `max_pages`
        or a cancellation token to guard against that.
        """
        args = dict(args or {})
        operation = self._operation
        pages_fetched = 0
        total_items = 0

        try:
            source = operation
            response = await self._call(operation, args)
            while True:
                # Item and link names are declared by the entry operation for every page
                page = Page.from_body(response.body, operation.descriptor)
                pages_fetched += 1
                total_items += len(page.items)
                log_page_fetched(
                    operation=source.name,
                    page_index=pages_fetched - 1,
                    items=len(page.items),
                    has_next=page.has_next,
                    latency_ms=self._last_latency_ms,
                )
                yield page

                if not page.has_next:
                    log_paging_complete(
                        operation=operation.name,
                        pages_fetched=pages_fetched,
                        total_items=total_items,
                    )
                    return
                if self._max_pages is not None and pages_fetched >= self._max_pages:
                    raise PageLimitExceeded(
                        f"Operation '{operation.name}' has more than {self._max_pages} pages",
                        max_pages=self._max_pages,
                    )

                next_operation = operation.resolve_next()
                if next_operation is None:
                    response = await self._call_link(operation, page.next_link)
                else:
                    source = next_operation
                    response = await self._call(
                        next_operation, self._next_args(next_operation, page.next_link, args)
                    )
        except OperationsError as e:
            e.pages_fetched = pages_fetched
            log_paging_error(
                operation=operation.name,
                pages_fetched=pages_fetched,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise

    async def page(
        self,
        args: Mapping[str, Any] | None = None,
        *,
        progress: ProgressCallback | None = None,
    ) -> list[Any]:
        """Fetch every page and return the concatenated items.

        Args:
            args: Arguments of the initiating call
            progress: Optional callback receiving each page's items; returning
                PagingBehavior.STOP ends traversal after that page

        Raises:
            Cancelled: On cancellation or page limit; items fetched so far are
                discarded (use `pages` for partial results)
        """
        items: list[Any] = []
        async with contextlib.aclosing(self.pages(args)) as pages:
            async for page in pages:
                items.extend(page.items)
                if progress is not None and progress(page.items) == PagingBehavior.STOP:
                    break
        return items

    def _next_args(
        self, next_operation: Operation, next_link: str | None, args: Mapping[str, Any]
    ) -> dict[str, Any]:
        source_spec = self._operation.descriptor.grouped_parameter
        target = next_operation.descriptor
        target_spec = target.grouped_parameter

        next_args = {
            key: value
            for key, value in args.items()
            if key in target.parameters and (source_spec is None or key != source_spec.name)
        }
        next_args[NEXT_LINK_PARAMETER] = next_link
        if source_spec is not None and target_spec is not None:
            next_args[target_spec.name] = transform_grouped_parameter(
                args.get(source_spec.name), target_spec
            )
        return next_args

    async def _call(self, operation: Operation, args: Mapping[str, Any]) -> Response:
        self._check_cancelled()
        start = perf_counter()
        response = await operation(args, cancellation=self._cancellation)
        self._last_latency_ms = (perf_counter() - start) * 1000.0
        return response

    async def _call_link(self, operation: Operation, link: str | None) -> Response:
        self._check_cancelled()
        start = perf_counter()
        response = await operation.call_url(str(link), cancellation=self._cancellation)
        self._last_latency_ms = (perf_counter() - start) * 1000.0
        return response

    def _check_cancelled(self) -> None:
        if self._cancellation is not None and self._cancellation.cancelled:
            raise Cancelled(f"Paging '{self._operation.name}' was cancelled")
