"""Grouped parameter transformation.

A grouped parameter bundles several declared fields into one argument (for
example `ListOptions(client_request_id=..., filter=...)`). Next-page and
status operations usually accept a smaller group of their own; the
transformer derives it from the originating operation's group by copying
the overlapping fields by name.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel

from ..core.descriptor import GroupedParameterSpec

_MISSING = object()


def _read_field(source: Any, name: str) -> Any:
    if isinstance(source, Mapping):
        return source.get(name, _MISSING)
    if isinstance(source, BaseModel):
        # Declared fields only; extra attributes are not group members
        if name in type(source).model_fields:
            return getattr(source, name)
        return _MISSING
    return getattr(source, name, _MISSING)


def group_values(source: Any, fields: Iterable[str]) -> dict[str, Any]:
    """Values of `fields` present on `source` (mapping, pydantic model or object)."""
    values: dict[str, Any] = {}
    for name in fields:
        value = _read_field(source, name)
        if value is not _MISSING:
            values[name] = value
    return values


def transform_grouped_parameter(source: Any, target_spec: GroupedParameterSpec) -> Any:
    """Derive a target group value from a source group value.

    Args:
        source: Originating operation's group value, or None
        target_spec: Group expected by the target operation

    Returns:
        None when `source` is None (absence propagates; no empty instance is
        built). Otherwise a new instance of `target_spec.model` (a dict when
        no model is set) holding only the fields named by `target_spec` that
        `source` has; other target fields keep their defaults.
    """
    if source is None:
        return None

    values = group_values(source, target_spec.fields)
    if target_spec.model is None:
        return values
    return target_spec.model(**values)
