"""Precise unit tests for exception hierarchy.

Tests focus on meaningful behavior, not just field access.
"""

from laakhay.ops.core import (
    Cancelled,
    InterruptedPoll,
    InvalidOperationVerb,
    MissingPollingHeader,
    OperationFailed,
    OperationNotFound,
    OperationsError,
    PageLimitExceeded,
    PollStatus,
    TransportError,
)


def test_operation_failed_carries_status_and_body():
    error = OperationFailed(
        "failed", status=PollStatus.FAILED, body={"error": {"code": "Boom"}}, poll_count=2
    )
    assert error.status is PollStatus.FAILED
    assert error.body == {"error": {"code": "Boom"}}
    assert error.poll_count == 2
    assert isinstance(error, OperationsError)


def test_interrupted_poll_is_cancellation():
    error = InterruptedPoll("stopped", poll_count=1)
    assert isinstance(error, Cancelled)
    assert error.poll_count == 1
    assert error.pages_fetched is None


def test_page_limit_exceeded_is_cancellation():
    error = PageLimitExceeded("too many pages", max_pages=3)
    assert isinstance(error, Cancelled)
    assert error.max_pages == 3


def test_transport_error_with_status_code():
    error = TransportError("boom", status_code=503)
    assert str(error) == "boom"
    assert error.status_code == 503
    assert isinstance(error, OperationsError)


def test_operation_not_found_context():
    error = OperationNotFound("missing", operation="listNext", group="widgets")
    assert error.operation == "listNext"
    assert error.group == "widgets"


def test_invalid_operation_verb_keeps_verb():
    error = InvalidOperationVerb("bad verb", verb="GET")
    assert error.verb == "GET"
    assert isinstance(error, OperationsError)


def test_missing_polling_header_keeps_initial_response():
    error = MissingPollingHeader("no header", status_code=202, body={"id": 1})
    assert error.status_code == 202
    assert error.body == {"id": 1}
    assert isinstance(error, OperationsError)
    assert not isinstance(error, OperationFailed)


def test_diagnostics_default_to_none():
    error = OperationsError("generic")
    assert error.pages_fetched is None
    assert error.poll_count is None
