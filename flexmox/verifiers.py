"""Diagnostic formatting and verification reports for doubles."""

from __future__ import annotations

import typing as t
from textwrap import indent

from .errors import CountViolation, CountViolationError

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .call_record import CallRecord
    from .expectations import Expectation


def format_args(
    name: str,
    args: t.Sequence[object] | None,
    kwargs: t.Mapping[str, object] | None = None,
) -> str:
    """Return ``name(arg, ...)`` or ``name(...)`` for unconstrained args."""
    if args is None:
        return f"{name}(...)"
    parts = [repr(arg) for arg in args]
    parts.extend(f"{key}={value!r}" for key, value in (kwargs or {}).items())
    return f"{name}({', '.join(parts)})"


def describe_count(count: int) -> str:
    """Phrase *count* in words for 0, 1 and 2 and numerically otherwise."""
    match count:
        case 0:
            return "never"
        case 1:
            return "once"
        case 2:
            return "twice"
        case _:
            return f"{count} times"


def calls_word(count: int) -> str:
    """Pluralise ``call`` for *count*."""
    return "call" if count == 1 else "calls"


def _numbered(entries: t.Sequence[str], *, start: int = 1) -> str:
    if not entries:
        return "(none)"
    lines: list[str] = []
    for index, entry in enumerate(entries, start=start):
        entry_lines = entry.splitlines() or [""]
        lines.append(f"{index}. {entry_lines[0]}")
        lines.extend(f"   {extra}" for extra in entry_lines[1:])
    return "\n".join(lines)


def _format_sections(title: str, sections: list[tuple[str, str]]) -> str:
    parts = [title]
    for label, body in sections:
        if not body:
            continue
        parts.append("")
        parts.append(f"{label}:")
        parts.append(indent(body, "  "))
    return "\n".join(parts)


def describe_call(call: CallRecord) -> str:
    """Return one call log entry, annotated with its handler if any."""
    text = call.describe()
    if call.matched_by is not None:
        text += f" matched by {call.matched_by}"
    return text


def describe_calls(calls: t.Sequence[CallRecord]) -> str:
    """Return a numbered replay of the call log."""
    return _numbered([describe_call(call) for call in calls])


def describe_expectations(expectations: t.Sequence[Expectation]) -> str:
    """Return a numbered list of declared expectations."""
    return _numbered([exp.describe() for exp in expectations])


def no_match_message(
    double_name: str,
    call: CallRecord,
    expectations: t.Sequence[Expectation],
    calls: t.Sequence[CallRecord],
) -> str:
    """Build the message for a call no expectation accepts."""
    return _format_sections(
        f"No matching handler found for {call.describe()} on double "
        f"{double_name!r}.",
        [
            ("Declared expectations", describe_expectations(expectations)),
            ("Recorded calls", describe_calls(calls)),
        ],
    )


def no_such_method_message(
    double_name: str, call: CallRecord, calls: t.Sequence[CallRecord]
) -> str:
    """Build the message for a call to a method nothing declared."""
    return _format_sections(
        f"Double {double_name!r} received unexpected message {call.describe()}.",
        [("Recorded calls", describe_calls(calls))],
    )


def order_violation_message(
    double_name: str, description: str, order_number: int, current_order: int
) -> str:
    """Build the message for an ordered expectation that fired too early."""
    return (
        f"in double {double_name!r}: method {description} called out of order "
        f"(expected order {order_number}, was {current_order})"
    )


def _describe_violation(violation: CountViolation) -> str:
    return "\n".join(
        [
            f"Method '{violation.expectation}' called incorrect number of times",
            f"expected {violation.policy} ({violation.limit} matching "
            f"{calls_word(violation.limit)})",
            f"found {violation.actual} matching {calls_word(violation.actual)} "
            f"(called {describe_count(violation.actual)})",
        ]
    )


class CountVerifier:
    """Check that every expectation was called an acceptable number of times."""

    def collect(self, expectations: t.Iterable[Expectation]) -> list[CountViolation]:
        """Return a violation for every count policy that does not hold."""
        violations: list[CountViolation] = []
        for exp in expectations:
            violations.extend(exp.count_violations())
        return violations

    def verify(
        self,
        double_name: str,
        expectations: t.Iterable[Expectation],
        calls: t.Sequence[CallRecord],
    ) -> None:
        """Raise :class:`CountViolationError` listing every failed policy."""
        violations = self.collect(expectations)
        if not violations:
            return
        msg = _format_sections(
            f"Unfulfilled expectations on double {double_name!r}.",
            [
                (
                    "Violations",
                    _numbered([_describe_violation(v) for v in violations]),
                ),
                ("Recorded calls", describe_calls(calls)),
            ],
        )
        raise CountViolationError(msg, violations)


def _times_description(times: int | None) -> str:
    return "" if times is None else f" {describe_count(times)}"


def _block_description(with_block: bool | None) -> str:
    if with_block is None:
        return ""
    return " with a block" if with_block else " without a block"


def describe_spy_expectation(  # noqa: PLR0913 - mirrors the spy query options
    spy: str,
    method_name: str,
    args: t.Sequence[object] | None,
    kwargs: t.Mapping[str, object] | None,
    calls: t.Sequence[CallRecord],
    *,
    times: int | None = None,
    with_block: bool | None = None,
    negative: bool = False,
) -> str:
    """Describe a failed spy assertion and list the messages received."""
    not_clause = " NOT" if negative else ""
    lines = [
        f"expected {format_args(method_name, args, kwargs)} to{not_clause} be "
        f"called on {spy}{_times_description(times)}"
        f"{_block_description(with_block)}.",
        "The following messages have been received:",
    ]
    lines.extend(f"    {call.describe()}" for call in calls)
    if not calls:
        lines.append("    (none)")
    return "\n".join(lines)


__all__ = [
    "CountVerifier",
    "calls_word",
    "describe_call",
    "describe_calls",
    "describe_count",
    "describe_expectations",
    "describe_spy_expectation",
    "format_args",
    "no_match_message",
    "no_such_method_message",
    "order_violation_message",
]
