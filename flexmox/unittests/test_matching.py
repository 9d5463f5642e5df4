"""Unit tests for argument matching."""

from __future__ import annotations

import re

import pytest

from flexmox.comparators import ANY, OPTIONAL_BLOCK, IsA
from flexmox.matching import MISSING, all_match, is_missing, kwargs_match, match


@pytest.mark.parametrize(
    ("pattern", "actual", "expected"),
    [
        (1, 1, True),
        (1, 2, False),
        (int, 5, True),
        (int, int, True),
        (int, "5", False),
        (re.compile(r"^a+$"), "aaa", True),
        (re.compile(r"^a+$"), "baa", False),
        (re.compile(r"\d"), 42, True),
        (IsA(str), "x", True),
        ("x", MISSING, False),
        (None, None, True),
    ],
)
def test_match(pattern: object, actual: object, *, expected: bool) -> None:
    """Patterns follow comparator, type, regex and equality rules."""
    assert match(pattern, actual) is expected


def test_compiled_pattern_equal_to_itself() -> None:
    """A compiled pattern matches itself by equality."""
    pattern = re.compile("x")
    assert match(pattern, pattern)


def test_all_match_none_accepts_anything() -> None:
    """A ``None`` pattern list accepts any arguments."""
    assert all_match(None, ())
    assert all_match(None, (1, 2, 3))


def test_all_match_rejects_extra_arguments() -> None:
    """More actual arguments than patterns never match."""
    assert not all_match((1,), (1, 2))
    assert not all_match((), (1,))
    assert all_match((), ())


def test_all_match_missing_positions() -> None:
    """Only an optional-block pattern may be left out."""
    assert all_match((1, OPTIONAL_BLOCK), (1,))
    assert all_match((1, OPTIONAL_BLOCK), (1, print))
    assert not all_match((1, OPTIONAL_BLOCK), (1, "no"))
    assert not all_match((1, 2), (1,))
    assert not all_match((1, ANY), (1,))


def test_all_match_is_idempotent() -> None:
    """Evaluating the same patterns twice gives the same answer."""
    patterns = (IsA(int), re.compile("a"))
    args = (3, "cat")
    assert all_match(patterns, args) == all_match(patterns, args)


def test_kwargs_match() -> None:
    """Declared keys must match; undeclared actual keys never do."""
    assert kwargs_match(None, {"a": 1})
    assert kwargs_match({"a": IsA(int)}, {"a": 1})
    assert not kwargs_match({"a": 1}, {"a": 1, "b": 2})
    assert not kwargs_match({"a": 1}, {})
    assert kwargs_match({}, {})


def test_is_missing() -> None:
    """The marker is recognised by identity."""
    assert is_missing(MISSING)
    assert not is_missing(None)
