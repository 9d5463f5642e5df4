"""Call-count policies attached to expectations.

Eligibility decides whether an expectation may accept another matching call
and is used while routing. Validity decides whether the final count is
acceptable and is only checked by ``verify()``.
"""

from __future__ import annotations

import dataclasses as dc
import enum

from .errors import UsageError


class CountKind(enum.StrEnum):
    """Kinds of count policy."""

    EXACT = "exact"
    AT_LEAST = "at_least"
    AT_MOST = "at_most"


def _limit_suffix(limit: int) -> str:
    match limit:
        case 0:
            return ".never"
        case 1:
            return ".once"
        case 2:
            return ".twice"
        case _:
            return f".times({limit})"


@dc.dataclass(frozen=True, slots=True)
class CountPolicy:
    """Base class for count policies with a non-negative ``limit``."""

    limit: int
    kind: CountKind = dc.field(init=False, default=CountKind.EXACT)

    def __post_init__(self) -> None:
        """Reject limits that cannot describe a call count."""
        if isinstance(self.limit, bool) or not isinstance(self.limit, int):
            msg = f"call count limit must be an integer, got {self.limit!r}"
            raise UsageError(msg)
        if self.limit < 0:
            msg = f"call count limit must be non-negative, got {self.limit}"
            raise UsageError(msg)

    def eligible(self, count: int) -> bool:
        """Return ``True`` if a call after *count* calls is still allowed."""
        return count < self.limit

    def valid(self, count: int) -> bool:  # pragma: no cover - abstract
        """Return ``True`` if *count* satisfies this policy."""
        raise NotImplementedError

    def describe(self) -> str:
        """Return the declarator chain that created this policy."""
        return _limit_suffix(self.limit)


@dc.dataclass(frozen=True, slots=True)
class ExactCount(CountPolicy):
    """Require exactly ``limit`` calls."""

    def valid(self, count: int) -> bool:
        """Return ``True`` if *count* equals the limit."""
        return count == self.limit


@dc.dataclass(frozen=True, slots=True)
class AtLeastCount(CountPolicy):
    """Require ``limit`` or more calls; imposes no upper bound."""

    kind: CountKind = dc.field(init=False, default=CountKind.AT_LEAST)

    def eligible(self, count: int) -> bool:
        """Always allow further calls."""
        return True

    def valid(self, count: int) -> bool:
        """Return ``True`` if *count* reaches the limit."""
        return count >= self.limit

    def describe(self) -> str:
        """Return the declarator chain that created this policy."""
        if self.limit == 0:
            return ".zero_or_more_times"
        return f".at_least{_limit_suffix(self.limit)}"


@dc.dataclass(frozen=True, slots=True)
class AtMostCount(CountPolicy):
    """Allow at most ``limit`` calls."""

    kind: CountKind = dc.field(init=False, default=CountKind.AT_MOST)

    def valid(self, count: int) -> bool:
        """Return ``True`` if *count* does not exceed the limit."""
        return count <= self.limit

    def describe(self) -> str:
        """Return the declarator chain that created this policy."""
        return f".at_most{_limit_suffix(self.limit)}"


__all__ = ["AtLeastCount", "AtMostCount", "CountKind", "CountPolicy", "ExactCount"]
