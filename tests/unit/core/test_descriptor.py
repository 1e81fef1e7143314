"""Unit tests for OperationDescriptor."""

import pytest

from laakhay.ops.core.descriptor import (
    LONG_RUNNING_EXTENSION,
    PAGEABLE_EXTENSION,
    NextOperationRef,
    OperationDescriptor,
)
from laakhay.ops.core.enums import HttpVerb


class TestOperationDescriptor:
    """Test descriptor flags and derived values."""

    def test_verb_string_is_normalized(self):
        descriptor = OperationDescriptor(name="get", http_verb="get", url="/widgets")
        assert descriptor.http_verb is HttpVerb.GET

    def test_flags(self):
        descriptor = OperationDescriptor(
            name="create",
            http_verb=HttpVerb.PUT,
            url="/widgets/{widget_name}",
            extensions={LONG_RUNNING_EXTENSION: True},
        )
        assert descriptor.is_long_running
        assert not descriptor.is_pageable

    def test_long_running_false_value(self):
        descriptor = OperationDescriptor(
            name="create",
            http_verb=HttpVerb.PUT,
            url="/widgets",
            extensions={LONG_RUNNING_EXTENSION: False},
        )
        assert not descriptor.is_long_running

    def test_pageable_defaults(self):
        descriptor = OperationDescriptor(
            name="list",
            http_verb=HttpVerb.GET,
            url="/widgets",
            extensions={PAGEABLE_EXTENSION: None},
        )
        assert descriptor.is_pageable
        assert descriptor.next_link_name == "nextLink"
        assert descriptor.item_name == "value"

    def test_pageable_custom_names(self):
        descriptor = OperationDescriptor(
            name="list",
            http_verb=HttpVerb.GET,
            url="/widgets",
            extensions={
                PAGEABLE_EXTENSION: {"nextLinkName": "@odata.nextLink", "itemName": "items"}
            },
        )
        assert descriptor.next_link_name == "@odata.nextLink"
        assert descriptor.item_name == "items"

    def test_extensions_are_read_only(self):
        extensions = {LONG_RUNNING_EXTENSION: True}
        descriptor = OperationDescriptor(
            name="create", http_verb=HttpVerb.PUT, url="/w", extensions=extensions
        )
        extensions[LONG_RUNNING_EXTENSION] = False

        assert descriptor.is_long_running
        with pytest.raises(TypeError):
            descriptor.extensions[LONG_RUNNING_EXTENSION] = False

    def test_path_parameters(self):
        descriptor = OperationDescriptor(
            name="get", http_verb=HttpVerb.GET, url="/groups/{group_id}/widgets/{widget_name}"
        )
        assert descriptor.path_parameters == ("group_id", "widget_name")

    def test_next_operation_requires_pageable(self):
        with pytest.raises(ValueError, match="not pageable"):
            OperationDescriptor(
                name="get",
                http_verb=HttpVerb.GET,
                url="/widgets",
                next_operation=NextOperationRef(name="listNext"),
            )

    def test_name_required(self):
        with pytest.raises(ValueError):
            OperationDescriptor(name="", http_verb=HttpVerb.GET, url="/widgets")
