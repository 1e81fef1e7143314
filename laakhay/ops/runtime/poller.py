"""Long-running operation completion by polling.

Architecture:
    The status-check strategy is a closed choice made once from the
    initiating verb (`select_polling_family`):

    - RESOURCE (PUT, PATCH): re-read the original resource URL until its
      provisioning state is terminal; the final result is the resource.
    - OPERATION (POST, DELETE): read the operation-status URL from the
      `Azure-AsyncOperation` header (falling back to `Location`); the final
      result is None for DELETE and, for POST, the body at `Location` when
      the service supplied one.

    The loop is sequential: wait (Retry-After or the configured interval),
    check, extract status. Only a terminal status, cancellation or an
    explicitly configured timeout end it.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict

from ..core.config import (
    ASYNC_OPERATION_HEADER,
    DEFAULT_POLL_INTERVAL,
    LOCATION_HEADER,
    RETRY_AFTER_HEADER,
)
from ..core.descriptor import OperationDescriptor
from ..core.enums import HttpVerb, PollingFamily, PollStatus
from ..core.exceptions import (
    InterruptedPoll,
    InvalidOperationVerb,
    MissingPollingHeader,
    OperationFailed,
    OperationsError,
)
from ..io.transport import Response, Transport
from .cancellation import CancellationToken
from .telemetry import log_poll_attempt, log_poll_complete, log_poll_error

_FAMILIES = {
    HttpVerb.PUT: PollingFamily.RESOURCE,
    HttpVerb.PATCH: PollingFamily.RESOURCE,
    HttpVerb.POST: PollingFamily.OPERATION,
    HttpVerb.DELETE: PollingFamily.OPERATION,
}


def select_polling_family(descriptor: OperationDescriptor) -> PollingFamily:
    """Pick the status-check family for a long-running descriptor.

    Raises:
        InvalidOperationVerb: For verbs other than PUT, PATCH, POST, DELETE
    """
    try:
        return _FAMILIES[descriptor.http_verb]
    except KeyError:
        raise InvalidOperationVerb(
            f"Invalid long running operation HTTP method {descriptor.http_verb.value} "
            f"on '{descriptor.name}'",
            verb=descriptor.http_verb,
        ) from None


class OperationStatus(BaseModel):
    """Status payload of a status check.

    Accepts both `{"status": ...}` operation-status documents and resource
    bodies carrying `{"properties": {"provisioningState": ...}}`. `explicit`
    is False when the payload named no state at all.
    """

    status: PollStatus = PollStatus.IN_PROGRESS
    explicit: bool = False
    error: Any = None
    properties: Any = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_body(cls, body: Any) -> OperationStatus:
        if not isinstance(body, Mapping):
            return cls()
        properties = body.get("properties")
        raw = body.get("status")
        if raw is None and isinstance(properties, Mapping):
            raw = properties.get("provisioningState")
        return cls(
            status=PollStatus.parse(raw),
            explicit=raw is not None,
            error=body.get("error"),
            properties=properties,
        )


@dataclass
class PollState:
    """Mutable state of one in-flight LRO, owned by the poll loop."""

    status: PollStatus
    last_response: Response
    poll_count: int = 0
    started_at: float = field(default_factory=time.monotonic)

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started_at


def status_of(response: Response) -> PollStatus:
    """Status reported by a response.

    Without an explicit state, 202 means still running and any other
    success code means done.
    """
    payload = OperationStatus.from_body(response.body)
    if payload.explicit:
        return payload.status
    if response.status_code == 202:
        return PollStatus.IN_PROGRESS
    return PollStatus.SUCCEEDED


class Poller:
    """Drives long-running operations to a terminal state."""

    def __init__(
        self,
        transport: Transport,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        poll_timeout: float | None = None,
    ) -> None:
        """Initialize the poller.

        Args:
            transport: Transport used for status checks
            poll_interval: Wait between checks when no Retry-After is sent
            poll_timeout: Optional bound on total polling time; exceeding it
                raises InterruptedPoll
        """
        self._transport = transport
        self._poll_interval = poll_interval
        self._poll_timeout = poll_timeout

    async def poll_to_completion(
        self,
        initial_response: Response,
        descriptor: OperationDescriptor,
        *,
        resource_url: str,
        cancellation: CancellationToken | None = None,
    ) -> Any:
        """Poll until terminal and return the final result.

        Args:
            initial_response: Response of the initiating call
            descriptor: Descriptor of the initiating operation
            resource_url: URL the initiating call targeted
            cancellation: Optional token aborting waits and in-flight checks

        Returns:
            Resource body (PUT/PATCH), result payload (POST) or None (DELETE)

        Raises:
            InvalidOperationVerb: Verb cannot be polled; no call is issued
            OperationFailed: Terminal state is Failed or Canceled
            InterruptedPoll: Cancelled or timed out while polling
        """
        result, _ = await self.poll_with_response(
            initial_response,
            descriptor,
            resource_url=resource_url,
            cancellation=cancellation,
        )
        return result

    async def poll_with_response(
        self,
        initial_response: Response,
        descriptor: OperationDescriptor,
        *,
        resource_url: str,
        cancellation: CancellationToken | None = None,
    ) -> tuple[Any, Response]:
        """Like `poll_to_completion`, also returning the last response seen."""
        family = select_polling_family(descriptor)
        state = PollState(status=status_of(initial_response), last_response=initial_response)
        try:
            status_url = self._status_url(family, initial_response, resource_url)
            while not state.status.is_terminal:
                await self._wait(state, cancellation)
                response = await self._get(status_url, state, cancellation)
                state.poll_count += 1
                state.last_response = response
                state.status = status_of(response)
                log_poll_attempt(
                    operation=descriptor.name,
                    family=family,
                    poll_count=state.poll_count,
                    status=state.status,
                    elapsed_s=state.elapsed,
                )

            if state.status is not PollStatus.SUCCEEDED:
                raise OperationFailed(
                    f"Long running operation '{descriptor.name}' ended with "
                    f"status {state.status.value}",
                    status=state.status,
                    body=state.last_response.body,
                    poll_count=state.poll_count,
                )

            result, final = await self._final_result(
                family, descriptor, initial_response, state, resource_url, cancellation
            )
        except OperationsError as e:
            e.poll_count = state.poll_count
            log_poll_error(
                operation=descriptor.name,
                poll_count=state.poll_count,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise

        log_poll_complete(
            operation=descriptor.name,
            status=state.status,
            poll_count=state.poll_count,
            elapsed_s=state.elapsed,
        )
        return result, final

    def _status_url(
        self, family: PollingFamily, initial_response: Response, resource_url: str
    ) -> str:
        if family is PollingFamily.RESOURCE:
            return resource_url
        url = initial_response.header(ASYNC_OPERATION_HEADER) or initial_response.header(
            LOCATION_HEADER
        )
        if url is None and not status_of(initial_response).is_terminal:
            raise MissingPollingHeader(
                "Long running operation response carries no "
                f"{ASYNC_OPERATION_HEADER} or {LOCATION_HEADER} header",
                status_code=initial_response.status_code,
                body=initial_response.body,
            )
        return url or resource_url

    async def _final_result(
        self,
        family: PollingFamily,
        descriptor: OperationDescriptor,
        initial_response: Response,
        state: PollState,
        resource_url: str,
        cancellation: CancellationToken | None,
    ) -> tuple[Any, Response]:
        last = state.last_response
        if family is PollingFamily.RESOURCE:
            if last.body is None:
                last = await self._get(resource_url, state, cancellation)
            return last.body, last

        if descriptor.http_verb is HttpVerb.DELETE:
            return None, last

        if initial_response.header(ASYNC_OPERATION_HEADER) is None:
            # Location itself was polled (or nothing was); its body is the result
            return last.body, last

        location = initial_response.header(LOCATION_HEADER)
        if location:
            last = await self._get(location, state, cancellation)
            return last.body, last
        return OperationStatus.from_body(last.body).properties, last

    async def _wait(self, state: PollState, cancellation: CancellationToken | None) -> None:
        if self._poll_timeout is not None and state.elapsed >= self._poll_timeout:
            raise InterruptedPoll(
                f"Polling timed out after {state.elapsed:.1f}s", poll_count=state.poll_count
            )

        delay = self._retry_after(state.last_response)
        if cancellation is None:
            if delay > 0:
                await asyncio.sleep(delay)
            return
        if await cancellation.sleep(delay):
            raise InterruptedPoll(
                "Polling was cancelled while waiting", poll_count=state.poll_count
            )

    async def _get(
        self, url: str, state: PollState, cancellation: CancellationToken | None
    ) -> Response:
        if cancellation is None:
            return await self._transport.call("GET", url, {})
        if cancellation.cancelled:
            raise InterruptedPoll("Polling was cancelled", poll_count=state.poll_count)

        cancelled, response = await cancellation.run(self._transport.call("GET", url, {}))
        if cancelled:
            raise InterruptedPoll(
                "Polling was cancelled during a status check", poll_count=state.poll_count
            )
        return response

    def _retry_after(self, response: Response) -> float:
        value = response.header(RETRY_AFTER_HEADER)
        if value is not None:
            try:
                return max(float(value), 0.0)
            except ValueError:
                # HTTP-date form is not supported
                return self._poll_interval
        return self._poll_interval
