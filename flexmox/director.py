"""Routing of calls to the expectations declared for one method name."""

from __future__ import annotations

import logging
import typing as t

from .errors import NoMatchingHandlerError
from .verifiers import no_match_message

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .call_record import CallRecord
    from .double import Double
    from .expectations import Expectation

logger = logging.getLogger(__name__)


class ExpectationDirector:
    """Own the expectations for one method name and pick one per call.

    Expectations are kept in declaration order, which breaks ties between
    several matching expectations. Default expectations (see
    :meth:`Expectation.by_default`) only take part while no regular
    expectation exists, and are never count-verified.
    """

    def __init__(self, double: Double, method_name: str) -> None:
        self.double = double
        self.method_name = method_name
        self._expectations: list[Expectation] = []
        self._defaults: list[Expectation] = []

    @property
    def expectations(self) -> tuple[Expectation, ...]:
        """Return the regular expectations in declaration order."""
        return tuple(self._expectations)

    @property
    def defaults(self) -> tuple[Expectation, ...]:
        """Return the default expectations in declaration order."""
        return tuple(self._defaults)

    def add(self, expectation: Expectation) -> None:
        """Append *expectation* to the regular expectations."""
        self._expectations.append(expectation)

    def make_default(self, expectation: Expectation) -> None:
        """Move *expectation* from the regular to the default list."""
        if expectation in self._expectations:
            self._expectations.remove(expectation)
        if expectation not in self._defaults:
            self._defaults.append(expectation)
        expectation.is_default = True

    def _candidates(self) -> list[Expectation]:
        return self._expectations or self._defaults

    def find_expectation(self, call: CallRecord) -> Expectation | None:
        """Return the expectation that should handle *call*.

        The first matching expectation that is still eligible wins. Failing
        that, the first matching one is returned even though it is exhausted,
        so the caller gets a precise count failure instead of a generic miss.
        """
        candidates = self._candidates()
        for exp in candidates:
            if exp.matches(call) and exp.eligible():
                return exp
        for exp in candidates:
            if exp.matches(call):
                return exp
        return None

    def route(self, call: CallRecord) -> object:
        """Dispatch *call* to its expectation and return the result."""
        exp = self.find_expectation(call)
        if exp is None:
            msg = no_match_message(
                self.double.name, call, self._candidates(), self.double.calls
            )
            raise NoMatchingHandlerError(msg)
        logger.debug("Double %r routed %s to %s", self.double.name, call.describe(), exp)
        return exp.verify_call(call)


__all__ = ["ExpectationDirector"]
