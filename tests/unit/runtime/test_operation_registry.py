"""Unit tests for OperationRegistry and OperationGroup."""

from __future__ import annotations

import pytest
from ops_fakes import ListOptions, make_response, widget_descriptors

from laakhay.ops.core import (
    HttpVerb,
    InvalidOperationVerb,
    NextOperationRef,
    OperationDescriptor,
    OperationNotFound,
    PollingFamily,
    RegistryError,
)
from laakhay.ops.core.descriptor import LONG_RUNNING_EXTENSION
from laakhay.ops.runtime.registry import (
    ROOT_GROUP,
    OperationRegistry,
    normalize_group_name,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("widgets", "widgets"),
        ("Widgets", "widgets"),
        ("WidgetsOperations", "widgets"),
        ("widgets_operations", "widgets"),
        ("virtual-machines", "virtualmachines"),
        ("Operations", "operations"),
        (None, ROOT_GROUP),
        ("", ROOT_GROUP),
    ],
)
def test_normalize_group_name(raw, expected):
    assert normalize_group_name(raw) == expected


class TestOperationRegistryResolution:
    """Test lookups within and across groups."""

    def test_groups_are_registered_under_normalized_names(self, groups, transport):
        registry = OperationRegistry(groups, transport)
        assert sorted(registry.list_groups()) == ["gadgets", "widgets"]
        assert len(registry) == 8

    def test_resolve_in_group(self, groups, transport):
        registry = OperationRegistry(groups, transport)
        operation = registry.resolve("create", "widgets")
        assert operation.name == "create"
        assert operation.group_name == "widgets"

    def test_cross_group_resolve_from_other_group(self, groups, transport):
        registry = OperationRegistry(groups, transport)
        gadgets = registry.group("gadgets")

        operation = gadgets.resolve("listNext", "widgets")

        assert operation.group_name == "widgets"
        assert operation is registry.resolve("listNext", "widgets")

    def test_group_resolve_defaults_to_own_group(self, groups, transport):
        registry = OperationRegistry(groups, transport)
        gadgets = registry.group("gadgets")
        assert gadgets.resolve("list").group_name == "gadgets"
        assert gadgets.resolve("list", "gadgets") is gadgets.resolve("list")

    def test_resolve_missing_operation(self, groups, transport):
        registry = OperationRegistry(groups, transport)
        with pytest.raises(OperationNotFound) as exc_info:
            registry.resolve("missing")
        assert exc_info.value.operation == "missing"
        assert exc_info.value.group == ROOT_GROUP

    def test_group_resolve_missing_operation(self, groups, transport):
        registry = OperationRegistry(groups, transport)
        with pytest.raises(OperationNotFound):
            registry.group("widgets").resolve("missing")

    def test_lookup_is_exact_match(self, groups, transport):
        registry = OperationRegistry(groups, transport)
        with pytest.raises(OperationNotFound):
            registry.resolve("list", "WidgetsOperations")

    def test_unknown_group(self, groups, transport):
        registry = OperationRegistry(groups, transport)
        with pytest.raises(OperationNotFound):
            registry.group("sprockets")

    def test_root_group(self, transport):
        registry = OperationRegistry(
            {None: [OperationDescriptor(name="ping", http_verb=HttpVerb.GET, url="/ping")]},
            transport,
        )
        assert registry.resolve("ping").group_name == ROOT_GROUP
        assert "ping" in registry.group()


class TestOperationRegistryConstruction:
    """Test registration-time validation and derived flags."""

    def test_duplicate_group_after_normalization(self, transport):
        with pytest.raises(RegistryError, match="collides"):
            OperationRegistry({"widgets": [], "WidgetsOperations": []}, transport)

    def test_duplicate_operation_name(self, transport):
        descriptor = OperationDescriptor(name="get", http_verb=HttpVerb.GET, url="/w")
        with pytest.raises(RegistryError, match="declared twice"):
            OperationRegistry({"widgets": [descriptor, descriptor]}, transport)

    def test_next_page_operation_is_flagged(self, groups, transport):
        registry = OperationRegistry(groups, transport)
        assert registry.resolve("listNext", "widgets").is_next_page_operation
        assert not registry.resolve("list", "widgets").is_next_page_operation
        assert registry.resolve("list", "widgets").is_paging_entry
        assert not registry.resolve("listNext", "widgets").is_paging_entry

    def test_next_reference_is_normalized(self, groups, transport):
        registry = OperationRegistry(groups, transport)
        operation = registry.resolve("list", "widgets")
        assert operation.next_operation.group == "widgets"
        assert operation.resolve_next() is registry.resolve("listNext", "widgets")

    def test_next_reference_without_group_stays_in_group(self, transport):
        descriptors = widget_descriptors()
        descriptors[0] = OperationDescriptor(
            name="list",
            http_verb=HttpVerb.GET,
            url="/widgets",
            extensions=dict(descriptors[0].extensions),
            next_operation=NextOperationRef(name="listNext"),
        )
        registry = OperationRegistry({"widgets": descriptors}, transport)
        assert registry.resolve("list", "widgets").next_operation.group == "widgets"

    def test_polling_family_chosen_at_registration(self, groups, transport):
        registry = OperationRegistry(groups, transport)
        assert registry.resolve("create", "widgets").polling_family is PollingFamily.RESOURCE
        assert registry.resolve("restart", "widgets").polling_family is PollingFamily.OPERATION
        assert registry.resolve("delete", "widgets").polling_family is PollingFamily.OPERATION
        assert registry.resolve("get", "widgets").polling_family is None

    def test_long_running_get_fails_fast(self, transport):
        descriptor = OperationDescriptor(
            name="watch",
            http_verb=HttpVerb.GET,
            url="/w",
            extensions={LONG_RUNNING_EXTENSION: True},
        )
        with pytest.raises(InvalidOperationVerb):
            OperationRegistry({"widgets": [descriptor]}, transport)


class TestOperationCall:
    """Test URL and argument building of bound operations."""

    def test_build_url_quotes_path_parameters(self, groups, transport):
        operation = OperationRegistry(groups, transport).resolve("get", "widgets")
        assert operation.build_url({"widget_name": "a b/c"}) == "/widgets/a%20b%2Fc"

    def test_build_url_missing_path_parameter(self, groups, transport):
        operation = OperationRegistry(groups, transport).resolve("get", "widgets")
        with pytest.raises(ValueError, match="widget_name"):
            operation.build_url({})

    def test_next_link_is_the_url(self, groups, transport):
        operation = OperationRegistry(groups, transport).resolve("listNext", "widgets")
        assert operation.build_url({"nextLink": "https://x/p2"}) == "https://x/p2"
        assert operation.build_args({"nextLink": "https://x/p2", "api_version": "1"}) == {
            "api_version": "1"
        }

    def test_grouped_parameter_is_flattened(self, groups, transport):
        operation = OperationRegistry(groups, transport).resolve("list", "widgets")
        args = operation.build_args(
            {"api_version": "1", "list_options": ListOptions(client_request_id="abc", top=5)}
        )
        assert args == {"api_version": "1", "client_request_id": "abc", "filter": None, "top": 5}

    def test_absent_grouped_parameter_is_dropped(self, groups, transport):
        operation = OperationRegistry(groups, transport).resolve("listNext", "widgets")
        assert operation.build_args({"nextLink": "l", "list_next_options": None}) == {}

    @pytest.mark.asyncio
    async def test_call_uses_group_transport(self, groups, transport):
        transport.responses = [make_response({"name": "w1"})]
        operation = OperationRegistry(groups, transport).resolve("get", "widgets")

        response = await operation({"widget_name": "w1"})

        assert response.body == {"name": "w1"}
        assert transport.calls == [("GET", "/widgets/w1", {})]
