"""Shared fixtures for unit tests."""

from __future__ import annotations

import pytest
from ops_fakes import ScriptedTransport, gadget_descriptors, widget_descriptors

from laakhay.ops import OperationDescriptor


@pytest.fixture
def transport() -> ScriptedTransport:
    return ScriptedTransport()


@pytest.fixture
def groups() -> dict[str | None, list[OperationDescriptor]]:
    return {
        "WidgetsOperations": widget_descriptors(),
        "gadgets": gadget_descriptors(),
    }
