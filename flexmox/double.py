"""Test doubles: mocks, stubs and spies built on expectation directors."""

from __future__ import annotations

import collections.abc as cabc
import enum
import keyword
import logging
import types
import typing as t

from .bottom import UNDEFINED
from .call_record import CallRecord, CallValidator, Validation
from .director import ExpectationDirector
from .errors import (
    CountViolationError,
    LifecycleError,
    NoSuchMethodError,
    UsageError,
)
from .expectations import CompositeExpectation, Expectation, ExplicitNeeded
from .ordering import Ordering
from .verifiers import CountVerifier, describe_spy_expectation, no_such_method_message

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .controller import FlexMox

logger = logging.getLogger(__name__)

Declared = Expectation | ExplicitNeeded
BaseShape = type | cabc.Iterable[str]


class Phase(enum.StrEnum):
    """Lifecycle phases for :class:`Double`."""

    OPEN = "OPEN"
    VERIFYING = "VERIFYING"
    CLOSED = "CLOSED"


class BoundCall:
    """Callable returned for attribute access on a double."""

    __slots__ = ("_double", "_name")

    def __init__(self, double: Double, name: str) -> None:
        self._double = double
        self._name = name

    def __call__(self, *args: object, **kwargs: object) -> object:
        """Invoke the double's method *name* with *args* and *kwargs*."""
        return self._double.invoke(self._name, args, kwargs)

    def call_with_block(
        self, block: t.Callable[..., object], *args: object, **kwargs: object
    ) -> object:
        """Invoke the method passing *block* as its block."""
        return self._double.invoke(self._name, args, kwargs, block=block)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"<bound call {self._name!r} of {self._double!r}>"


class Double:
    """A stand-in object that records calls and routes them to expectations.

    Parameters
    ----------
    name:
        Name used in diagnostics.
    based_on:
        Optional class, or iterable of method names, describing the shape
        of the real collaborator. Methods in the shape return ``UNDEFINED``
        when no expectation exists, and declaring expectations outside it
        requires :meth:`ExplicitNeeded.explicitly`.
    ignore_missing:
        When ``True``, calls to undeclared methods return ``UNDEFINED``
        instead of raising :class:`~flexmox.errors.NoSuchMethodError`.
    defs:
        Mapping of method names to static return values.
    container:
        The :class:`~flexmox.controller.FlexMox` that owns this double.

    Any public attribute that is not part of this class is a call target:
    ``double.fetch(1)`` is ``double.invoke("fetch", (1,))``.
    """

    def __init__(
        self,
        name: str = "unknown",
        *,
        based_on: BaseShape | None = None,
        ignore_missing: bool = False,
        defs: t.Mapping[str, object] | None = None,
        container: FlexMox | None = None,
    ) -> None:
        self.name = name
        self.container = container
        self.calls: list[CallRecord] = []
        self.ordering = Ordering(name)
        self._phase = Phase.OPEN
        self._verified = False
        self._ignore_missing = ignore_missing
        self._directors: dict[str, ExpectationDirector] = {}
        self._children: dict[str, Double] = {}
        self._base_names: frozenset[str] | None = None
        self._base_label = ""
        if based_on is not None:
            self.set_base(based_on)
        if defs:
            self.should_receive(defs)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"<{type(self).__name__} {self.name!r}>"

    def __getattr__(self, name: str) -> BoundCall:
        """Return a callable that invokes method *name* on this double."""
        if name.startswith("_"):
            raise AttributeError(name)
        return BoundCall(self, name)

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------
    @property
    def phase(self) -> Phase:
        """Return the current lifecycle phase."""
        return self._phase

    @property
    def verified(self) -> bool:
        """Return ``True`` once :meth:`verify` has run."""
        return self._verified

    @property
    def ignore_missing(self) -> bool:
        """Return whether undeclared calls return ``UNDEFINED``."""
        return self._ignore_missing

    @property
    def base_names(self) -> frozenset[str] | None:
        """Return the method names of the base shape, if any."""
        return self._base_names

    @property
    def directors(self) -> dict[str, ExpectationDirector]:
        """Return the directors keyed by method name."""
        return dict(self._directors)

    @property
    def children(self) -> dict[str, Double]:
        """Return the demeter child doubles keyed by method name."""
        return dict(self._children)

    def set_base(self, based_on: BaseShape) -> None:
        """Restrict declarations to the methods of *based_on*."""
        if isinstance(based_on, type):
            self._base_names = frozenset(dir(based_on))
            self._base_label = f"{based_on.__module__}.{based_on.__qualname__}"
        elif isinstance(based_on, str):
            msg = "based_on must be a class or an iterable of method names"
            raise UsageError(msg)
        else:
            self._base_names = frozenset(based_on)
            self._base_label = repr(sorted(self._base_names))

    def intercepts(self, method_name: str) -> bool:
        """Return ``True`` if *method_name* has a director on this double."""
        return self._phase is not Phase.CLOSED and method_name in self._directors

    def director_for(self, method_name: str) -> ExpectationDirector:
        """Return the director for *method_name*, creating it if needed."""
        director = self._directors.get(method_name)
        if director is None:
            director = ExpectationDirector(self, method_name)
            self._directors[method_name] = director
        return director

    def find_expectation(
        self, method_name: str, *args: object, **kwargs: object
    ) -> Expectation | None:
        """Return the expectation that would handle the given call, if any."""
        director = self._directors.get(method_name)
        if director is None:
            return None
        probe = CallRecord(method_name, args, types.MappingProxyType(kwargs))
        return director.find_expectation(probe)

    # ------------------------------------------------------------------
    # Declaration
    # ------------------------------------------------------------------
    def _require_open(self, action: str) -> None:
        if self._phase is not Phase.OPEN:
            msg = (
                f"Cannot call {action}(): double {self.name!r} not in 'open' phase "
                f"(current phase: {self._phase.name.lower()})"
            )
            raise LifecycleError(msg)

    def should_receive(
        self, *names: str | t.Mapping[str, object]
    ) -> Expectation | ExplicitNeeded | CompositeExpectation:
        """Declare that this double should receive the named methods.

        Each argument is a method name, a dotted demeter chain such as
        ``"config.db.url"``, or a mapping of names to static return values.
        A single name returns its :class:`Expectation`; several return a
        :class:`CompositeExpectation` that applies declarators to all.
        """
        self._require_open("should_receive")
        declared: list[Declared] = []
        for entry in names:
            if isinstance(entry, cabc.Mapping):
                for name, value in entry.items():
                    declared.append(self._create_expectation(name).and_return(value))
            elif isinstance(entry, str):
                declared.append(self._create_expectation(entry))
            else:
                msg = f"method names must be strings or mappings, got {entry!r}"
                raise UsageError(msg)
        if not declared:
            msg = "should_receive() requires at least one method name"
            raise UsageError(msg)
        if len(declared) == 1:
            return declared[0]
        return CompositeExpectation(declared)

    def should_ignore_missing(self) -> Double:
        """Return ``UNDEFINED`` for calls to undeclared methods."""
        self._ignore_missing = True
        return self

    def should_expect(self) -> ExpectationRecorder:
        """Return a recorder that declares expectations from calls on it."""
        self._require_open("should_expect")
        return ExpectationRecorder(self)

    @staticmethod
    def _check_method_names(names: t.Sequence[str]) -> None:
        for name in names:
            if not name.isidentifier() or keyword.iskeyword(name):
                msg = f"Ill-formed method name {name!r}"
                raise UsageError(msg)

    def _create_expectation(self, name_chain: str) -> Declared:
        if not isinstance(name_chain, str):
            msg = f"method names must be strings, got {name_chain!r}"
            raise UsageError(msg)
        names = name_chain.split(".")
        self._check_method_names(names)
        if len(names) == 1:
            return self._declare(names[0])
        *path, last = names
        double = self
        for segment in path:
            double = double._demeter_child(segment)
        return double._declare(last)

    def _shadows_attribute(self, method_name: str) -> bool:
        return hasattr(type(self), method_name) or method_name in vars(self)

    def _check_declarable(self, method_name: str) -> None:
        if self._shadows_attribute(method_name):
            msg = (
                f"Cannot declare {method_name}() on double {self.name!r}: "
                f"the name is an attribute of {type(self).__name__}"
            )
            raise UsageError(msg)

    def _declare(self, method_name: str) -> Declared:
        self._check_declarable(method_name)
        exp = Expectation(self, method_name)
        if self._base_names is not None and method_name not in self._base_names:
            return ExplicitNeeded(exp, self._base_label)
        self.director_for(method_name).add(exp)
        return exp

    def _demeter_child(self, segment: str) -> Double:
        child = self._children.get(segment)
        if child is not None:
            return child
        self._check_declarable(segment)
        if segment in self._directors:
            msg = f"Conflicting mock declaration for {segment!r} in demeter style mock"
            raise UsageError(msg)
        child = self._spawn(f"demeter_{segment}")
        self._declare(segment).and_return(child)
        self._children[segment] = child
        return child

    def _spawn(self, name: str) -> Double:
        if self.container is not None:
            return self.container.mock(name)
        return Double(name)

    # ------------------------------------------------------------------
    # Invocation
    # ------------------------------------------------------------------
    def invoke(
        self,
        method_name: str,
        args: t.Sequence[object] = (),
        kwargs: t.Mapping[str, object] | None = None,
        *,
        block: t.Callable[..., object] | None = None,
    ) -> object:
        """Record a call to *method_name* and return its programmed result.

        The call is logged before routing, so calls that fail to route still
        show up in diagnostics. A *block* is passed to matching and to the
        return program as the last positional argument.
        """
        if self._phase is Phase.CLOSED:
            msg = f"Cannot call {method_name}() on closed double {self.name!r}"
            raise LifecycleError(msg)
        call_args = (*args, block) if block is not None else tuple(args)
        call = CallRecord(
            method_name,
            call_args,
            types.MappingProxyType(dict(kwargs or {})),
            had_block=block is not None,
        )
        self.calls.append(call)
        director = self._directors.get(method_name)
        if director is not None:
            return director.route(call)
        return self._handle_missing(call)

    def _handle_missing(self, call: CallRecord) -> object:
        if self._base_names is not None and call.method_name in self._base_names:
            return UNDEFINED
        if self._ignore_missing:
            return UNDEFINED
        msg = no_such_method_message(self.name, call, self.calls)
        raise NoSuchMethodError(msg, double_name=self.name, method_name=call.method_name)

    # ------------------------------------------------------------------
    # Spy queries
    # ------------------------------------------------------------------
    def received(  # noqa: PLR0913 - mirrors the spy query options
        self,
        method_name: str,
        args: t.Sequence[object] | None = None,
        *,
        kwargs: t.Mapping[str, object] | None = None,
        times: int | None = None,
        with_block: bool | None = None,
        and_: Validation | t.Sequence[Validation] | None = None,
        on_count: int | None = None,
    ) -> bool:
        """Return ``True`` if the call log holds a matching call.

        ``args=None`` accepts any arguments. See
        :meth:`~flexmox.call_record.CallValidator.received` for the options.
        """
        return CallValidator().received(
            self.calls,
            method_name,
            args,
            kwargs,
            times=times,
            with_block=with_block,
            and_=and_,
            on_count=on_count,
        )

    def assert_received(  # noqa: PLR0913 - mirrors the spy query options
        self,
        method_name: str,
        args: t.Sequence[object] | None = None,
        *,
        kwargs: t.Mapping[str, object] | None = None,
        times: int | None = None,
        with_block: bool | None = None,
        and_: Validation | t.Sequence[Validation] | None = None,
        on_count: int | None = None,
    ) -> None:
        """Raise ``AssertionError`` unless :meth:`received` is ``True``."""
        if self.received(
            method_name,
            args,
            kwargs=kwargs,
            times=times,
            with_block=with_block,
            and_=and_,
            on_count=on_count,
        ):
            return
        msg = describe_spy_expectation(
            repr(self),
            method_name,
            args,
            kwargs,
            self.calls,
            times=times,
            with_block=with_block,
        )
        raise AssertionError(msg)

    def assert_not_received(
        self,
        method_name: str,
        args: t.Sequence[object] | None = None,
        *,
        kwargs: t.Mapping[str, object] | None = None,
        with_block: bool | None = None,
    ) -> None:
        """Raise ``AssertionError`` if a matching call was recorded."""
        if not self.received(method_name, args, kwargs=kwargs, with_block=with_block):
            return
        msg = describe_spy_expectation(
            repr(self),
            method_name,
            args,
            kwargs,
            self.calls,
            with_block=with_block,
            negative=True,
        )
        raise AssertionError(msg)

    # ------------------------------------------------------------------
    # Verification and teardown
    # ------------------------------------------------------------------
    def _unowned_children(self) -> list[Double]:
        if self.container is not None:
            return []
        return list(self._children.values())

    def verify(self) -> None:
        """Check every count policy of every expectation.

        All violations are reported together in one
        :class:`~flexmox.errors.CountViolationError`. Verifying twice is a
        no-op.
        """
        if self._verified:
            return
        self._verified = True
        if self._phase is Phase.OPEN:
            self._phase = Phase.VERIFYING
        expectations = [
            exp for director in self._directors.values() for exp in director.expectations
        ]
        logger.debug(
            "Verifying double %r: %d expectations, %d calls",
            self.name,
            len(expectations),
            len(self.calls),
        )
        errors: list[CountViolationError] = []
        try:
            CountVerifier().verify(self.name, expectations, self.calls)
        except CountViolationError as err:
            errors.append(err)
        for child in self._unowned_children():
            try:
                child.verify()
            except CountViolationError as err:
                errors.append(err)
        if len(errors) == 1:
            raise errors[0]
        if errors:
            msg = "\n\n".join(str(err) for err in errors)
            raise CountViolationError(msg, [v for err in errors for v in err.violations])

    def teardown(self) -> None:
        """Close the double and release anything it wrapped."""
        if self._phase is Phase.CLOSED:
            return
        self._phase = Phase.CLOSED
        try:
            self._release()
        finally:
            for child in self._unowned_children():
                child.teardown()
        logger.debug("Double %r closed", self.name)

    def _release(self) -> None:
        """Release wrapped resources; plain doubles hold none."""


class ExpectationRecorder:
    """Declare expectations by calling methods on a recorder.

    ``recorder.fetch(1)`` declares ``should_receive("fetch").with_args(1)``
    and returns the expectation for further chaining. In strict mode every
    recorded call is also ``ordered().once()``.
    """

    def __init__(self, double: Double) -> None:
        self._double = double
        self._strict = False

    def should_be_strict(self, is_strict: bool = True) -> None:  # noqa: FBT001, FBT002
        """Make subsequent recorded calls ordered and expected once."""
        self._strict = is_strict

    @property
    def is_strict(self) -> bool:
        """Return ``True`` in strict mode."""
        return self._strict

    def __getattr__(self, name: str) -> t.Callable[..., Expectation]:
        """Return a callable declaring an expectation for *name*."""
        if name.startswith("_"):
            raise AttributeError(name)

        def record(*args: object, **kwargs: object) -> Expectation:
            exp = self._double.should_receive(name)
            if not isinstance(exp, Expectation):
                msg = f"cannot record {name!r}: not defined by the base shape"
                raise UsageError(msg)
            exp.with_args(*args, **kwargs)
            if self._strict:
                exp.ordered().once()
            return exp

        return record


__all__ = ["BoundCall", "Double", "ExpectationRecorder", "Phase"]
