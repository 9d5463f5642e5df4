"""Step definitions for flexmox behavioural tests."""
# pyright: reportMissingImports=false, reportUnknownMemberType=false

from __future__ import annotations

import re
import typing as t

from behave import given, then, when  # type: ignore[attr-defined]

from flexmox.bottom import UNDEFINED
from flexmox.controller import FlexMox
from flexmox.double import Double
from flexmox.errors import (
    CountViolationError,
    NoMatchingHandlerError,
    OrderViolationError,
)


class BehaveContext(t.Protocol):
    """Behave step context with attributes used in tests."""

    mox: FlexMox
    double: Double
    results: list[object]
    order_error: OrderViolationError | None

    def add_cleanup(self, func: t.Callable[[], object]) -> None:
        """Register *func* to run after the scenario."""


@given('a double named "{name}"')
def step_create_double(context: BehaveContext, name: str) -> None:
    """Create a container and a double for the scenario."""
    context.mox = FlexMox(verify_on_exit=False)
    context.add_cleanup(context.mox.close)
    context.double = context.mox.mock(name)


@given("the double ignores missing methods")
def step_ignore_missing(context: BehaveContext) -> None:
    """Make undeclared calls return ``UNDEFINED``."""
    context.double.should_ignore_missing()


@given('"{name}" is declared to return {values}')
def step_declare_values(context: BehaveContext, name: str, values: str) -> None:
    """Declare an expectation returning integers in turn."""
    numbers = [int(value) for value in re.findall(r"\d+", values)]
    context.double.should_receive(name).and_return(*numbers)


@given('"{name}" is declared with argument {arg:d} to return nothing once')
def step_declare_once(context: BehaveContext, name: str, arg: int) -> None:
    """Declare an expectation for one call with *arg*."""
    context.double.should_receive(name).with_args(arg).and_return(None).once()


@given('"{name}" is declared with argument {arg:d} to return undefined')
def step_declare_undefined(context: BehaveContext, name: str, arg: int) -> None:
    """Declare an expectation returning ``UNDEFINED``."""
    context.double.should_receive(name).with_args(arg).and_return_undefined()


@given('"{name}" is declared without arguments to return "{first}" then "{second}"')
def step_declare_sequence(
    context: BehaveContext, name: str, first: str, second: str
) -> None:
    """Declare a no-argument expectation returning two values in turn."""
    context.double.should_receive(name).with_no_args().and_return(first, second)


@given('"{name}" is ordered')
def step_declare_ordered(context: BehaveContext, name: str) -> None:
    """Declare *name* in its own order slot."""
    context.double.should_receive(name).ordered()


@given('"{name}" is ordered in group "{group}"')
def step_declare_grouped(context: BehaveContext, name: str, group: str) -> None:
    """Declare *name* in the slot shared by *group*."""
    context.double.should_receive(name).ordered(group)


@when('I call "{name}" {count:d} times')
def step_call_repeatedly(context: BehaveContext, name: str, count: int) -> None:
    """Call *name* without arguments *count* times."""
    context.results = [context.double.invoke(name) for _ in range(count)]


@when('I call "{name}" with argument {arg:d}')
def step_call_with_argument(context: BehaveContext, name: str, arg: int) -> None:
    """Call *name* once with *arg*."""
    context.results = [context.double.invoke(name, (arg,))]


@when("I call {sequence} in turn")
def step_call_in_turn(context: BehaveContext, sequence: str) -> None:
    """Call each quoted name, stopping at an order violation."""
    context.order_error = None
    for name in re.findall(r'"(\w+)"', sequence):
        try:
            context.double.invoke(name)
        except OrderViolationError as err:
            context.order_error = err
            return


@then("verifying the double succeeds")
def step_verify_succeeds(context: BehaveContext) -> None:
    """Verification raises nothing."""
    context.double.verify()


@then('verifying the double fails mentioning "{text}"')
def step_verify_fails(context: BehaveContext, text: str) -> None:
    """Verification reports the unmet expectation."""
    try:
        context.double.verify()
    except CountViolationError as err:
        assert text in str(err)  # noqa: S101
    else:
        msg = "verify() did not raise"
        raise AssertionError(msg)


@then('calling "{name}" with argument {arg:d} fails with NoMatchingHandlerError')
def step_call_fails(context: BehaveContext, name: str, arg: int) -> None:
    """A call no expectation accepts raises ``NoMatchingHandlerError``."""
    try:
        context.double.invoke(name, (arg,))
    except NoMatchingHandlerError:
        return
    msg = f"{name}({arg}) did not raise NoMatchingHandlerError"
    raise AssertionError(msg)


@then("the results are {expected}")
def step_check_results(context: BehaveContext, expected: str) -> None:
    """Compare the results with the quoted values in *expected*."""
    assert context.results == re.findall(r'"([^"]*)"', expected)  # noqa: S101


@then("the result is undefined")
def step_result_undefined(context: BehaveContext) -> None:
    """The last call returned ``UNDEFINED``."""
    assert context.results[-1] is UNDEFINED  # noqa: S101


@then("calling anything on the result is undefined")
def step_undefined_propagates(context: BehaveContext) -> None:
    """Further use of ``UNDEFINED`` yields ``UNDEFINED``."""
    value = t.cast("t.Any", context.results[-1])
    assert value.anything(1).other is UNDEFINED  # noqa: S101


@then("no order violation occurs")
def step_no_violation(context: BehaveContext) -> None:
    """Every call was in order."""
    assert context.order_error is None  # noqa: S101


@then("an order violation occurs")
def step_violation(context: BehaveContext) -> None:
    """One call arrived too early."""
    assert isinstance(context.order_error, OrderViolationError)  # noqa: S101
