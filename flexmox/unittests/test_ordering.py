"""Unit tests for ordered expectations."""

from __future__ import annotations

import pytest

from flexmox.double import Double
from flexmox.errors import OrderViolationError
from flexmox.ordering import Ordering


def test_allocation_and_groups() -> None:
    """Ungrouped declarations get new numbers; groups share one."""
    ordering = Ordering("db")
    assert ordering.number_for() == 1
    assert ordering.number_for("setup") == 2
    assert ordering.number_for("setup") == 2
    assert ordering.number_for() == 3
    assert ordering.groups == {"setup": 2}


def test_validate_moves_cursor_forward_only() -> None:
    """The cursor may stay or advance but never move back."""
    ordering = Ordering("db")
    ordering.validate("a()", 2)
    ordering.validate("b()", 2)
    assert ordering.current_order == 2
    with pytest.raises(OrderViolationError) as excinfo:
        ordering.validate("c()", 1)
    assert str(excinfo.value) == (
        "in double 'db': method c() called out of order (expected order 1, was 2)"
    )


def _grouped_double() -> Double:
    dbl = Double("conn")
    dbl.should_receive("open").ordered()
    dbl.should_receive("read").ordered("io")
    dbl.should_receive("write").ordered("io")
    dbl.should_receive("close").ordered()
    return dbl


@pytest.mark.parametrize(
    "sequence",
    [
        ("open", "read", "write", "close"),
        ("open", "write", "read", "close"),
        ("open", "read", "read", "write", "close"),
    ],
)
def test_grouped_ordering_accepts_group_permutations(sequence: tuple[str, ...]) -> None:
    """Members of a group may be called in any order within their slot."""
    dbl = _grouped_double()
    for name in sequence:
        dbl.invoke(name)


@pytest.mark.parametrize(
    "sequence",
    [
        ("read", "open"),
        ("open", "close", "read"),
        ("open", "read", "close", "write"),
    ],
)
def test_grouped_ordering_rejects_out_of_order_calls(sequence: tuple[str, ...]) -> None:
    """Calling an earlier slot after a later one fails immediately."""
    dbl = _grouped_double()
    *allowed, last = sequence
    for name in allowed:
        dbl.invoke(name)
    with pytest.raises(OrderViolationError):
        dbl.invoke(last)


def test_out_of_order_call_is_logged_but_not_counted() -> None:
    """An order violation is recorded in the log without a handler."""
    dbl = Double("conn")
    first = dbl.should_receive("first").ordered()
    dbl.should_receive("second").ordered()
    dbl.second()
    with pytest.raises(OrderViolationError):
        dbl.first()
    assert first.actual_count == 0
    assert dbl.calls[-1].matched_by is None


def test_any_order_removes_constraint() -> None:
    """``any_order`` drops a previously declared order number."""
    dbl = Double("conn")
    exp = dbl.should_receive("first").ordered().any_order()
    dbl.should_receive("second").ordered()
    dbl.second()
    dbl.first()
    assert exp.order_number is None
