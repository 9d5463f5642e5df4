"""Call log entries and the spy query over them."""

from __future__ import annotations

import dataclasses as dc
import types
import typing as t

from .matching import all_match, kwargs_match
from .verifiers import format_args

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .expectations import Expectation


@dc.dataclass(frozen=True, slots=True)
class CallRecord:
    """One observed invocation of a double.

    ``args`` includes the block, when one was given, as the last positional
    argument. ``matched_by`` is assigned once, when the call is routed.
    """

    method_name: str
    args: tuple[object, ...] = ()
    kwargs: t.Mapping[str, object] = dc.field(
        default_factory=lambda: types.MappingProxyType({})
    )
    had_block: bool = False
    matched_by: Expectation | None = dc.field(default=None, compare=False)

    def bind(self, expectation: Expectation) -> None:
        """Record *expectation* as the handler of this call."""
        if self.matched_by is not None:
            msg = f"call {self.describe()} is already matched by {self.matched_by}"
            raise ValueError(msg)
        object.__setattr__(self, "matched_by", expectation)

    @property
    def block(self) -> t.Callable[..., object] | None:
        """Return the block passed with the call, if any."""
        if not self.had_block:
            return None
        return t.cast("t.Callable[..., object]", self.args[-1])

    def describe(self) -> str:
        """Return ``name(args)`` for diagnostics."""
        return format_args(self.method_name, self.args, self.kwargs)

    def matches(
        self,
        method_name: str,
        args: t.Sequence[object] | None,
        kwargs: t.Mapping[str, object] | None = None,
        *,
        with_block: bool | None = None,
    ) -> bool:
        """Return ``True`` when this call fits the spy query pattern."""
        return (
            self.method_name == method_name
            and all_match(args, self.args)
            and (args is None or kwargs_match(kwargs or {}, self.kwargs))
            and self._matches_block(with_block)
        )

    def _matches_block(self, with_block: bool | None) -> bool:
        if with_block is None:
            return True
        return with_block == self.had_block


Validation = t.Callable[..., object]


class CallValidator:
    """Check a call log for calls to a method with given arguments."""

    def received(  # noqa: PLR0913 - mirrors the spy query options
        self,
        calls: t.Iterable[CallRecord],
        method_name: str,
        args: t.Sequence[object] | None = None,
        kwargs: t.Mapping[str, object] | None = None,
        *,
        times: int | None = None,
        with_block: bool | None = None,
        and_: Validation | t.Sequence[Validation] | None = None,
        on_count: int | None = None,
    ) -> bool:
        """Return ``True`` when *calls* include the described call.

        ``times`` requires exactly that many matches, otherwise at least one
        is needed. Each callable in ``and_`` is invoked with the arguments of
        every matching call, or only the ``on_count``-th one when given; the
        callables assert on their own.
        """
        count = 0
        for call in calls:
            if call.matches(method_name, args, kwargs, with_block=with_block):
                count += 1
                self._run_additional_validations(call, count, and_, on_count)
        if times is not None:
            return count == times
        return count > 0

    @staticmethod
    def _additionals(
        and_: Validation | t.Sequence[Validation] | None,
    ) -> t.Sequence[Validation]:
        if and_ is None:
            return ()
        if callable(and_):
            return (and_,)
        return and_

    def _run_additional_validations(
        self,
        call: CallRecord,
        count: int,
        and_: Validation | t.Sequence[Validation] | None,
        on_count: int | None,
    ) -> None:
        if on_count is not None and count != on_count:
            return
        for validation in self._additionals(and_):
            validation(*call.args, **call.kwargs)


__all__ = ["CallRecord", "CallValidator"]
