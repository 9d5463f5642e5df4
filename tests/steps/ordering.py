"""pytest-bdd steps for ordered expectations."""

from __future__ import annotations

import re
import typing as t

from pytest_bdd import given, parsers, then, when

from flexmox.errors import OrderViolationError

if t.TYPE_CHECKING:  # pragma: no cover - typing only
    from flexmox.double import Double


@given(parsers.re(r'"(?P<name>\w+)" is ordered'))
def declare_ordered(double: Double, name: str) -> None:
    """Declare *name* in its own order slot."""
    double.should_receive(name).ordered()


@given(parsers.re(r'"(?P<name>\w+)" is ordered in group "(?P<group>\w+)"'))
def declare_grouped(double: Double, name: str, group: str) -> None:
    """Declare *name* in the slot shared by *group*."""
    double.should_receive(name).ordered(group)


@when(parsers.re(r"I call (?P<sequence>.+) in turn"), target_fixture="order_error")
def call_in_turn(double: Double, sequence: str) -> OrderViolationError | None:
    """Call each quoted name in order, stopping at an order violation."""
    for name in re.findall(r'"(\w+)"', sequence):
        try:
            double.invoke(name)
        except OrderViolationError as err:
            return err
    return None


@then("no order violation occurs")
def no_violation(order_error: OrderViolationError | None) -> None:
    """Every call was in order."""
    assert order_error is None


@then("an order violation occurs")
def violation(order_error: OrderViolationError | None) -> None:
    """One call arrived too early."""
    assert isinstance(order_error, OrderViolationError)
    assert "called out of order" in str(order_error)
