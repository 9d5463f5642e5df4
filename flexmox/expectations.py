"""Expectations declared on doubles and their chained declarators.

An :class:`Expectation` is returned from every ``should_receive`` call. It
records how a call matching its method name and argument pattern should
behave::

    db.should_receive("query").with_args(IsA(str)).and_return([1, 2]).once()

Declarators return the expectation so they can be chained.
"""

from __future__ import annotations

import enum
import typing as t

from typing_extensions import Self

from .bottom import UNDEFINED
from .counts import AtLeastCount, AtMostCount, CountPolicy, ExactCount
from .errors import CountViolation, UsageError
from .matching import all_match, kwargs_match
from .verifiers import format_args

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .call_record import CallRecord
    from .double import Double


class BlockRequirement(enum.StrEnum):
    """Whether a matching call must, must not, or may pass a block."""

    REQUIRED = "required"
    FORBIDDEN = "forbidden"
    IRRELEVANT = "irrelevant"


class ReturnProgram(t.Protocol):
    """Produce the result of a matched call."""

    def __call__(
        self, args: tuple[object, ...], kwargs: t.Mapping[str, object]
    ) -> object:
        """Return the value for a call with *args* and *kwargs*."""
        ...


class _ValueSequence:
    """Return *values* in turn, repeating the last one forever."""

    def __init__(self, values: t.Sequence[object]) -> None:
        self._values = tuple(values)
        self._index = 0

    def __call__(
        self, args: tuple[object, ...], kwargs: t.Mapping[str, object]
    ) -> object:
        if not self._values:
            return None
        value = self._values[self._index]
        if self._index < len(self._values) - 1:
            self._index += 1
        return value


class _Computed:
    """Call *func* with the call's arguments."""

    def __init__(self, func: t.Callable[..., object]) -> None:
        self._func = func

    def __call__(
        self, args: tuple[object, ...], kwargs: t.Mapping[str, object]
    ) -> object:
        return self._func(*args, **kwargs)


class _Raise:
    """Raise an exception on every call."""

    def __init__(
        self, exception: BaseException | type[BaseException], args: tuple[object, ...]
    ) -> None:
        self._exception = exception
        self._args = args

    def __call__(
        self, args: tuple[object, ...], kwargs: t.Mapping[str, object]
    ) -> t.NoReturn:
        if isinstance(self._exception, type):
            raise self._exception(*self._args)
        raise self._exception


class Expectation:
    """Declared behaviour for one method name and argument pattern."""

    def __init__(self, double: Double, method_name: str) -> None:
        self.double = double
        self.method_name = method_name
        self.expected_args: tuple[object, ...] | None = None
        self.expected_kwargs: dict[str, object] | None = None
        self.block_requirement = BlockRequirement.IRRELEVANT
        self.order_number: int | None = None
        self.actual_count = 0
        self.is_default = False
        self._count_policies: list[CountPolicy] = []
        self._policy_class: type[CountPolicy] = ExactCount
        self._program: ReturnProgram = _ValueSequence((UNDEFINED,))

    def describe(self) -> str:
        """Return ``name(args)`` or ``name(...)`` for unconstrained args."""
        text = format_args(self.method_name, self.expected_args, self.expected_kwargs)
        match self.block_requirement:
            case BlockRequirement.REQUIRED:
                text += " with a block"
            case BlockRequirement.FORBIDDEN:
                text += " without a block"
        return text

    def __str__(self) -> str:
        """Return the expectation description."""
        return self.describe()

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"<Expectation {self.describe()} on {self.double.name!r}>"

    @property
    def count_policies(self) -> tuple[CountPolicy, ...]:
        """Return the attached count policies in declaration order."""
        return tuple(self._count_policies)

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------
    def match_args(
        self, args: t.Sequence[object], kwargs: t.Mapping[str, object]
    ) -> bool:
        """Return ``True`` if *args* and *kwargs* fit the argument pattern."""
        if self.expected_args is None:
            return True
        return all_match(self.expected_args, args) and kwargs_match(
            self.expected_kwargs or {}, kwargs
        )

    def _matches_block(self, had_block: bool) -> bool:  # noqa: FBT001
        match self.block_requirement:
            case BlockRequirement.REQUIRED:
                return had_block
            case BlockRequirement.FORBIDDEN:
                return not had_block
            case _:
                return True

    def matches(self, call: CallRecord) -> bool:
        """Return ``True`` if *call* fits the argument and block pattern."""
        return self.match_args(call.args, call.kwargs) and self._matches_block(
            call.had_block
        )

    def eligible(self) -> bool:
        """Return ``True`` if every count policy permits another call."""
        return all(policy.eligible(self.actual_count) for policy in self._count_policies)

    def verify_call(self, call: CallRecord) -> object:
        """Account for *call* and return the programmed result."""
        if self.order_number is not None:
            self.double.ordering.validate(self.describe(), self.order_number)
        self.actual_count += 1
        call.bind(self)
        return self._program(call.args, call.kwargs)

    def count_violations(self) -> list[CountViolation]:
        """Return a violation for each policy the actual count breaks."""
        return [
            CountViolation(
                expectation=self.describe(),
                policy=policy.describe(),
                limit=policy.limit,
                actual=self.actual_count,
            )
            for policy in self._count_policies
            if not policy.valid(self.actual_count)
        ]

    # ------------------------------------------------------------------
    # Argument declarators
    # ------------------------------------------------------------------
    def with_args(self, *args: object, **kwargs: object) -> Self:
        """Require the call's arguments to match *args* and *kwargs*."""
        self.expected_args = args
        self.expected_kwargs = dict(kwargs)
        return self

    def with_no_args(self) -> Self:
        """Require the call to pass no arguments."""
        return self.with_args()

    def with_any_args(self) -> Self:
        """Accept any argument list."""
        self.expected_args = None
        self.expected_kwargs = None
        return self

    def with_block(self) -> Self:
        """Require the call to pass a block."""
        self.block_requirement = BlockRequirement.REQUIRED
        return self

    def without_block(self) -> Self:
        """Require the call to pass no block."""
        self.block_requirement = BlockRequirement.FORBIDDEN
        return self

    # ------------------------------------------------------------------
    # Return-value declarators
    # ------------------------------------------------------------------
    def and_return(self, *values: object) -> Self:
        """Return *values* on successive calls, repeating the last one.

        A single value is returned on every call; no values returns ``None``.
        """
        self._program = _ValueSequence(values)
        return self

    returns = and_return

    def runs(self, func: t.Callable[..., object]) -> Self:
        """Return ``func(*args, **kwargs)`` for every matching call."""
        if not callable(func):
            msg = f"runs() expects a callable, got {func!r}"
            raise UsageError(msg)
        self._program = _Computed(func)
        return self

    and_return_with = runs

    def and_return_undefined(self) -> Self:
        """Return the ``UNDEFINED`` sentinel."""
        self._program = _ValueSequence((UNDEFINED,))
        return self

    def and_raise(
        self, exception: BaseException | type[BaseException], *args: object
    ) -> Self:
        """Raise *exception* on every matching call.

        An exception class is instantiated with *args* on each call.
        """
        is_class = isinstance(exception, type) and issubclass(exception, BaseException)
        if not is_class and not isinstance(exception, BaseException):
            msg = f"and_raise() expects an exception, got {exception!r}"
            raise UsageError(msg)
        self._program = _Raise(exception, args)
        return self

    raises = and_raise

    # ------------------------------------------------------------------
    # Count declarators
    # ------------------------------------------------------------------
    def times(self, limit: int) -> Self:
        """Expect *limit* matching calls, modified by ``at_least``/``at_most``."""
        self._count_policies.append(self._policy_class(limit))
        self._policy_class = ExactCount
        return self

    times_called = times

    def never(self) -> Self:
        """Expect no matching calls."""
        return self.times(0)

    def once(self) -> Self:
        """Expect exactly one matching call."""
        return self.times(1)

    def twice(self) -> Self:
        """Expect exactly two matching calls."""
        return self.times(2)

    def at_least(self) -> Self:
        """Make the next count declarator a lower bound."""
        self._policy_class = AtLeastCount
        return self

    def at_most(self) -> Self:
        """Make the next count declarator an upper bound."""
        self._policy_class = AtMostCount
        return self

    def zero_or_more_times(self) -> Self:
        """Allow any number of calls."""
        return self.at_least().never()

    # ------------------------------------------------------------------
    # Ordering and defaults
    # ------------------------------------------------------------------
    def ordered(self, group: t.Hashable | None = None) -> Self:
        """Require calls to arrive in declaration order.

        Expectations sharing a *group* occupy one slot: they may be called in
        any order relative to each other, but after earlier slots and before
        later ones.
        """
        self.order_number = self.double.ordering.number_for(group)
        return self

    def any_order(self) -> Self:
        """Remove any ordering constraint."""
        self.order_number = None
        return self

    def by_default(self) -> Self:
        """Use this expectation only until a regular one is declared."""
        self.double.director_for(self.method_name).make_default(self)
        return self

    def should_receive(self, *names: str | t.Mapping[str, object]) -> t.Any:  # noqa: ANN401
        """Start a new expectation on the same double."""
        return self.double.should_receive(*names)


class CompositeExpectation:
    """Apply the same declarators to several expectations."""

    def __init__(
        self, expectations: t.Iterable[Expectation | ExplicitNeeded] = ()
    ) -> None:
        self._expectations: list[Expectation | ExplicitNeeded] = list(expectations)

    def add(self, expectation: Expectation | ExplicitNeeded) -> None:
        """Add *expectation* to the composite."""
        self._expectations.append(expectation)

    @property
    def expectations(self) -> tuple[Expectation | ExplicitNeeded, ...]:
        """Return the member expectations."""
        return tuple(self._expectations)

    @property
    def double(self) -> Double:
        """Return the double of the first member."""
        return self._expectations[0].double

    @property
    def order_number(self) -> int | None:
        """Return the order number of the first member."""
        return self._expectations[0].order_number

    def should_receive(self, *names: str | t.Mapping[str, object]) -> t.Any:  # noqa: ANN401
        """Start a new expectation on the same double."""
        return self.double.should_receive(*names)

    def __getattr__(self, name: str) -> t.Callable[..., CompositeExpectation]:
        """Forward declarator *name* to every member."""
        if name.startswith("_") or not self._expectations:
            raise AttributeError(name)
        if not callable(getattr(self._expectations[0], name)):
            raise AttributeError(name)

        def forward(*args: object, **kwargs: object) -> CompositeExpectation:
            for expectation in self._expectations:
                getattr(expectation, name)(*args, **kwargs)
            return self

        return forward

    def explicitly(self) -> CompositeExpectation:
        """Register every guarded member and chain on the expectations."""
        self._expectations = [
            exp.explicitly() if isinstance(exp, ExplicitNeeded) else exp
            for exp in self._expectations
        ]
        return self

    def describe(self) -> str:
        """Return the member descriptions."""
        if len(self._expectations) == 1:
            return self._expectations[0].describe()
        return "[" + ", ".join(exp.describe() for exp in self._expectations) + "]"

    def __str__(self) -> str:
        """Return the composite description."""
        return self.describe()


class ExplicitNeeded:
    """Guard an expectation for a method outside the double's base shape.

    Every declarator raises :class:`~flexmox.errors.UsageError` until
    :meth:`explicitly` is called, which registers and returns the wrapped
    expectation. From then on declarators are forwarded to it.
    """

    def __init__(self, expectation: Expectation, base: str) -> None:
        self._expectation = expectation
        self._base = base
        self._explicit = False

    @property
    def double(self) -> Double:
        """Return the double the expectation belongs to."""
        return self._expectation.double

    @property
    def method_name(self) -> str:
        """Return the guarded method name."""
        return self._expectation.method_name

    def describe(self) -> str:
        """Return the wrapped expectation's description."""
        return self._expectation.describe()

    def explicitly(self) -> Expectation:
        """Register the wrapped expectation despite the base shape."""
        exp = self._expectation
        if not self._explicit:
            self._explicit = True
            exp.double.director_for(exp.method_name).add(exp)
        return exp

    @property
    def is_explicit(self) -> bool:
        """Return ``True`` once :meth:`explicitly` has registered the expectation."""
        return self._explicit

    def __getattr__(self, name: str) -> t.Any:  # noqa: ANN401
        """Forward declarators once explicit, reject them before."""
        if name.startswith("_"):
            raise AttributeError(name)
        if self._explicit:
            return getattr(self._expectation, name)
        msg = (
            "Cannot stub methods not defined by the base class\n"
            f"   Method:     {self._expectation.method_name}\n"
            f"   Base Class: {self._base}\n"
            "   (Use 'explicitly' to override)"
        )
        raise UsageError(msg)


__all__ = [
    "BlockRequirement",
    "CompositeExpectation",
    "Expectation",
    "ExplicitNeeded",
    "ReturnProgram",
]
