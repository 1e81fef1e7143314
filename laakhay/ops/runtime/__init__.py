"""Runtime: registry, pager, poller and invoker."""

from .cancellation import CancellationToken
from .grouping import group_values, transform_grouped_parameter
from .invoker import Invoker
from .pager import Page, Pager
from .poller import OperationStatus, Poller, PollState, select_polling_family
from .registry import (
    ROOT_GROUP,
    Operation,
    OperationGroup,
    OperationRegistry,
    normalize_group_name,
)

__all__ = [
    "CancellationToken",
    "Invoker",
    "Operation",
    "OperationGroup",
    "OperationRegistry",
    "OperationStatus",
    "Page",
    "Pager",
    "PollState",
    "Poller",
    "ROOT_GROUP",
    "group_values",
    "normalize_group_name",
    "select_polling_family",
    "transform_grouped_parameter",
]
