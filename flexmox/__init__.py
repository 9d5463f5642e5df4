"""Dynamic test doubles: mocks, stubs, spies and partial doubles.

Doubles record every call, route it to the first matching expectation and
return its programmed value. A :class:`FlexMox` container verifies the
declared call counts of every double it created and tears them down.
"""

from __future__ import annotations

from .bottom import UNDEFINED, Undefined, is_undefined
from .comparators import (
    ANY,
    OPTIONAL_BLOCK,
    Any,
    Comparator,
    Contains,
    Duck,
    Eq,
    HasEntries,
    IsA,
    OptionalBlock,
    Predicate,
    Regex,
    StartsWith,
    ducktype,
    has_entries,
    on,
)
from .config import MoxConfig
from .controller import FlexMox, use
from .double import Double, Phase
from .errors import (
    CountViolation,
    CountViolationError,
    FlexMoxError,
    LifecycleError,
    NoMatchingHandlerError,
    NoSuchMethodError,
    OrderViolationError,
    UsageError,
    VerificationError,
)
from .expectations import CompositeExpectation, Expectation, ExplicitNeeded
from .partial import PartialDouble
from .pytest_plugin import flexmox as flexmox_fixture

__all__ = [
    "ANY",
    "OPTIONAL_BLOCK",
    "UNDEFINED",
    "Any",
    "Comparator",
    "CompositeExpectation",
    "Contains",
    "CountViolation",
    "CountViolationError",
    "Double",
    "Duck",
    "Eq",
    "Expectation",
    "ExplicitNeeded",
    "FlexMox",
    "FlexMoxError",
    "HasEntries",
    "IsA",
    "LifecycleError",
    "MoxConfig",
    "NoMatchingHandlerError",
    "NoSuchMethodError",
    "OptionalBlock",
    "OrderViolationError",
    "PartialDouble",
    "Phase",
    "Predicate",
    "Regex",
    "StartsWith",
    "Undefined",
    "UsageError",
    "VerificationError",
    "ducktype",
    "flexmox_fixture",
    "has_entries",
    "is_undefined",
    "on",
    "use",
]
