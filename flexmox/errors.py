"""Exception hierarchy raised by flexmox doubles and containers."""

from __future__ import annotations

import dataclasses as dc
import typing as t


class FlexMoxError(Exception):
    """Base class for all flexmox errors."""


class UsageError(FlexMoxError, ValueError):
    """Raised when an expectation is declared incorrectly."""


class LifecycleError(FlexMoxError, RuntimeError):
    """Raised when a double is used outside its open phase."""


class NoSuchMethodError(FlexMoxError, AttributeError):
    """Raised when a double receives a call for an undeclared method."""

    def __init__(self, message: str, *, double_name: str, method_name: str) -> None:
        super().__init__(message)
        self.double_name = double_name
        self.method_name = method_name


class VerificationError(FlexMoxError, AssertionError):
    """Base class for failures that should be reported as test failures."""


class NoMatchingHandlerError(VerificationError):
    """Raised when a call matches none of the declared expectations."""


class OrderViolationError(VerificationError):
    """Raised when an ordered expectation fires before its turn."""


@dc.dataclass(frozen=True, slots=True)
class CountViolation:
    """A single count policy that failed during verification."""

    expectation: str
    policy: str
    limit: int
    actual: int


class CountViolationError(VerificationError):
    """Raised by ``verify()`` with every count policy that did not hold."""

    def __init__(
        self, message: str, violations: t.Sequence[CountViolation] = ()
    ) -> None:
        super().__init__(message)
        self.violations: tuple[CountViolation, ...] = tuple(violations)


__all__ = [
    "CountViolation",
    "CountViolationError",
    "FlexMoxError",
    "LifecycleError",
    "NoMatchingHandlerError",
    "NoSuchMethodError",
    "OrderViolationError",
    "UsageError",
    "VerificationError",
]
