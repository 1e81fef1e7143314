"""aiohttp-backed Transport."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

import aiohttp

from ..core.config import DEFAULT_HTTP_TIMEOUT
from ..core.exceptions import TransportError
from .transport import Response

logger = logging.getLogger(__name__)

# Argument keys with a reserved meaning for this transport
BODY_ARG = "body"
HEADERS_ARG = "headers"
ABSOLUTE_URL_PREFIXES = ("http://", "https://")


class HTTPTransport:
    """Async HTTP transport over a shared aiohttp session.

    Arguments are sent as query parameters, except `body` (JSON payload) and
    `headers` (extra request headers). `None` values are dropped.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") if base_url else None
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._default_headers = dict(headers or {})
        self._session: aiohttp.ClientSession | None = None
        self._session_loop: asyncio.AbstractEventLoop | None = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create session.

        Sessions are bound to the running loop. A session left open by a
        previous loop is replaced; `ServiceClient.invoke_sync` closes the
        transport before its loop ends so this does not leak.
        """
        loop = asyncio.get_running_loop()
        current = self._session
        if current is not None and not current.closed and self._session_loop is not loop:
            # Its connections belong to the other loop and cannot be closed from this one
            logger.warning(
                "Replacing HTTP session bound to another event loop; "
                "close the transport before its loop ends"
            )
        if current is None or current.closed or self._session_loop is not loop:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._session_loop = loop
        return self._session

    def build_url(self, url: str) -> str:
        # Continuation and status links are absolute; only paths get the base URL
        if self.base_url and not url.startswith(ABSOLUTE_URL_PREFIXES):
            return f"{self.base_url}/{url.lstrip('/')}"
        return url

    async def call(self, verb: str, url: str, args: Mapping[str, Any]) -> Response:
        params, body, headers = self._split_args(args)
        full_url = self.build_url(url)
        logger.debug("HTTP request", extra={"verb": verb, "url": full_url})

        try:
            async with self.session.request(
                verb,
                full_url,
                params=params or None,
                json=body,
                headers=headers or None,
            ) as response:
                response.raise_for_status()
                text = await response.text()
                payload = await response.json(content_type=None) if text.strip() else None
                return Response(
                    status_code=response.status,
                    headers=dict(response.headers),
                    body=payload,
                )
        except aiohttp.ClientResponseError as e:
            raise TransportError(
                f"{verb} {full_url} failed: {e.status} {e.message}", status_code=e.status
            ) from e
        except aiohttp.ClientError as e:
            raise TransportError(f"{verb} {full_url} failed: {e}") from e
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"{verb} {full_url} timed out after {self.timeout.total}s"
            ) from e

    def _split_args(
        self, args: Mapping[str, Any]
    ) -> tuple[dict[str, str], Any, dict[str, str]]:
        params: dict[str, str] = {}
        body: Any = None
        headers = dict(self._default_headers)
        for key, value in args.items():
            if value is None:
                continue
            if key == BODY_ARG:
                body = value
            elif key == HEADERS_ARG:
                headers.update({k: str(v) for k, v in value.items() if v is not None})
            elif isinstance(value, bool):
                params[key] = "true" if value else "false"
            else:
                params[key] = str(value)
        return params, body, headers

    async def close(self) -> None:
        """Close session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> HTTPTransport:
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()
