"""Structured logging for paging and polling.

This module provides telemetry hooks for the pager and poller, emitting
structured log records (event name as message, fields in `extra`).
"""

from __future__ import annotations

import logging

from ..core.enums import PollingFamily, PollStatus

logger = logging.getLogger(__name__)


def log_page_fetched(
    *,
    operation: str,
    page_index: int,
    items: int,
    has_next: bool,
    latency_ms: float | None = None,
) -> None:
    """Log one fetched page.

    Args:
        operation: Name of the operation that produced the page
        page_index: Zero-based index of the page
        items: Number of items in the page
        has_next: Whether a continuation link was returned
        latency_ms: Latency in milliseconds (optional)
    """
    logger.info(
        "page_fetched",
        extra={
            "operation": operation,
            "page_index": page_index,
            "items": items,
            "has_next": has_next,
            "latency_ms": latency_ms,
        },
    )


def log_paging_complete(*, operation: str, pages_fetched: int, total_items: int) -> None:
    logger.info(
        "paging_complete",
        extra={
            "operation": operation,
            "pages_fetched": pages_fetched,
            "total_items": total_items,
        },
    )


def log_paging_error(
    *,
    operation: str,
    pages_fetched: int,
    error_type: str,
    error_message: str,
) -> None:
    """Log a paging failure.

    Args:
        operation: Operation being paged
        pages_fetched: Pages successfully processed before the failure
        error_type: Exception class name
        error_message: Exception message
    """
    logger.error(
        "paging_error",
        extra={
            "operation": operation,
            "pages_fetched": pages_fetched,
            "error_type": error_type,
            "error_message": error_message,
        },
    )


def log_poll_attempt(
    *,
    operation: str,
    family: PollingFamily,
    poll_count: int,
    status: PollStatus,
    elapsed_s: float,
) -> None:
    logger.debug(
        "poll_attempt",
        extra={
            "operation": operation,
            "family": family.value,
            "poll_count": poll_count,
            "status": status.value,
            "elapsed_s": elapsed_s,
        },
    )


def log_poll_complete(
    *,
    operation: str,
    status: PollStatus,
    poll_count: int,
    elapsed_s: float,
) -> None:
    logger.info(
        "poll_complete",
        extra={
            "operation": operation,
            "status": status.value,
            "poll_count": poll_count,
            "elapsed_s": elapsed_s,
        },
    )


def log_poll_error(
    *,
    operation: str,
    poll_count: int,
    error_type: str,
    error_message: str,
) -> None:
    """Log a polling failure, including terminal Failed/Canceled states."""
    logger.error(
        "poll_error",
        extra={
            "operation": operation,
            "poll_count": poll_count,
            "error_type": error_type,
            "error_message": error_message,
        },
    )
