"""Argument matching shared by call routing and spy queries."""

from __future__ import annotations

import re
import typing as t

from .comparators import MISSING, Comparator


def match(expected: object, actual: object) -> bool:
    """Return ``True`` when the *expected* pattern accepts *actual*.

    Comparators decide for themselves. A class accepts its instances (and
    itself), a compiled regular expression accepts values whose string form it
    finds, and anything else matches by equality.
    """
    if isinstance(expected, Comparator):
        return expected(actual)
    if actual is MISSING:
        return False
    if isinstance(expected, type):
        return isinstance(actual, expected) or expected == actual
    if isinstance(expected, re.Pattern):
        return expected == actual or expected.search(str(actual)) is not None
    return bool(expected == actual)


def all_match(
    expected: t.Sequence[object] | None, actual: t.Sequence[object]
) -> bool:
    """Return ``True`` when every positional pattern accepts its argument.

    ``None`` accepts any argument list. Pattern positions the caller left out
    are matched against :data:`MISSING`, which only patterns such as
    :class:`~flexmox.comparators.OptionalBlock` accept.
    """
    if expected is None:
        return True
    if len(actual) > len(expected):
        return False
    for index, pattern in enumerate(expected):
        value = actual[index] if index < len(actual) else MISSING
        if not match(pattern, value):
            return False
    return True


def kwargs_match(
    expected: t.Mapping[str, object] | None, actual: t.Mapping[str, object]
) -> bool:
    """Return ``True`` when keyword patterns accept the keyword arguments."""
    if expected is None:
        return True
    if any(key not in expected for key in actual):
        return False
    return all(
        match(pattern, actual.get(key, MISSING)) for key, pattern in expected.items()
    )


def is_missing(value: object) -> bool:
    """Return ``True`` if *value* is the missing-argument marker."""
    return value is MISSING


__all__ = ["MISSING", "all_match", "is_missing", "kwargs_match", "match"]
