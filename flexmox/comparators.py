"""Comparator classes used as argument patterns in expectations.

A plain value in an argument pattern matches by equality. Comparators cover
everything else: types, regular expressions, predicates, duck types and
partial mappings. Every comparator is stateless, so evaluating one against a
value has no side effects and always gives the same answer.
"""

from __future__ import annotations

import abc
import collections.abc as cabc
import dataclasses as dc
import re
import typing as t


class _Missing:
    """Marker for an argument position the caller did not supply."""

    __slots__ = ()

    def __repr__(self) -> str:
        """Return a debug representation."""
        return "<missing>"


MISSING: t.Final[_Missing] = _Missing()


class Comparator(abc.ABC):
    """Callable returning ``True`` when a value matches."""

    __slots__ = ()

    @abc.abstractmethod
    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* satisfies the comparison."""


@dc.dataclass(frozen=True, slots=True)
class Any(Comparator):
    """Match any supplied value."""

    def __call__(self, value: object) -> bool:
        """Return ``True`` for any input the caller actually passed."""
        return value is not MISSING


@dc.dataclass(frozen=True, slots=True)
class Eq(Comparator):
    """Match values equal to ``expected``.

    Useful when the expected value is itself a class or a compiled regular
    expression, which would otherwise be treated as a pattern.
    """

    expected: object

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* equals ``expected``."""
        return bool(self.expected == value)


@dc.dataclass(frozen=True, slots=True)
class IsA(Comparator):
    """Match instances of ``typ``."""

    typ: type | tuple[type, ...]

    def __call__(self, value: object) -> bool:
        """Return ``True`` when *value* is an instance of ``typ``."""
        return isinstance(value, self.typ)


@dc.dataclass(frozen=True, slots=True)
class Regex(Comparator):
    """Match if the string form of *value* contains ``pattern``."""

    pattern: str | re.Pattern[str]
    _compiled: re.Pattern[str] = dc.field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Compile the pattern eagerly so malformed patterns fail early."""
        object.__setattr__(self, "_compiled", re.compile(self.pattern))

    def __call__(self, value: object) -> bool:
        """Return ``True`` if the regex matches ``str(value)``."""
        if value is MISSING:
            return False
        return self._compiled.search(str(value)) is not None


@dc.dataclass(frozen=True, slots=True)
class Contains(Comparator):
    """Match if ``item`` is found in *value*."""

    item: object

    def __call__(self, value: object) -> bool:
        """Return ``True`` if ``item in value``."""
        try:
            return self.item in value  # type: ignore[operator]
        except TypeError:
            return False


@dc.dataclass(frozen=True, slots=True)
class StartsWith(Comparator):
    """Match strings beginning with ``prefix``."""

    prefix: str

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* starts with ``prefix``."""
        return isinstance(value, str) and value.startswith(self.prefix)


@dc.dataclass(frozen=True, slots=True)
class Predicate(Comparator):
    """Use a custom ``func`` to determine a match."""

    func: t.Callable[[t.Any], object]

    def __call__(self, value: object) -> bool:
        """Return ``True`` if ``func(value)`` is truthy."""
        if value is MISSING:
            return False
        return bool(self.func(value))


@dc.dataclass(frozen=True, slots=True)
class Duck(Comparator):
    """Match objects exposing every attribute named in ``methods``."""

    methods: tuple[str, ...]

    def __post_init__(self) -> None:
        """Normalise ``methods`` to a tuple."""
        object.__setattr__(self, "methods", tuple(self.methods))

    def __call__(self, value: object) -> bool:
        """Return ``True`` when *value* has all the named attributes."""
        if value is MISSING:
            return False
        return all(hasattr(value, name) for name in self.methods)


@dc.dataclass(frozen=True, slots=True)
class HasEntries(Comparator):
    """Match mappings containing every key of ``entries`` with equal values.

    Extra keys in the actual mapping are ignored.
    """

    entries: t.Mapping[object, object]

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* holds all of ``entries``."""
        if not isinstance(value, cabc.Mapping):
            return False
        return all(
            key in value and value[key] == expected
            for key, expected in self.entries.items()
        )


@dc.dataclass(frozen=True, slots=True)
class OptionalBlock(Comparator):
    """Match a trailing block argument that may be omitted."""

    def __call__(self, value: object) -> bool:
        """Return ``True`` for a missing value or any callable."""
        return value is MISSING or callable(value)


ANY: t.Final[Any] = Any()
OPTIONAL_BLOCK: t.Final[OptionalBlock] = OptionalBlock()


def on(func: t.Callable[[t.Any], object]) -> Predicate:
    """Return a :class:`Predicate` wrapping *func*."""
    return Predicate(func)


def ducktype(*methods: str) -> Duck:
    """Return a :class:`Duck` comparator for *methods*."""
    return Duck(methods)


def has_entries(
    entries: t.Mapping[object, object] | None = None, /, **kwargs: object
) -> HasEntries:
    """Return a :class:`HasEntries` comparator for *entries* and *kwargs*."""
    merged: dict[object, object] = dict(entries or {})
    merged.update(kwargs)
    return HasEntries(merged)


__all__ = [
    "ANY",
    "MISSING",
    "OPTIONAL_BLOCK",
    "Any",
    "Comparator",
    "Contains",
    "Duck",
    "Eq",
    "HasEntries",
    "IsA",
    "OptionalBlock",
    "Predicate",
    "Regex",
    "StartsWith",
    "ducktype",
    "has_entries",
    "on",
]
