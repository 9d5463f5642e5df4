"""FlexMox container and related helpers."""

from __future__ import annotations

import contextlib
import logging
import types  # noqa: TC003
import typing as t

from .config import DEFAULT_CONFIG, MoxConfig
from .double import BaseShape, Double, Phase
from .errors import LifecycleError, VerificationError
from .partial import PartialDouble

logger = logging.getLogger(__name__)


class FlexMox:
    """Create doubles and verify and tear them down together."""

    def __init__(
        self,
        config: MoxConfig | None = None,
        *,
        verify_on_exit: bool | None = None,
    ) -> None:
        """Create a new container.

        Parameters
        ----------
        config:
            Settings applied to the doubles this container creates. Defaults
            to :data:`~flexmox.config.DEFAULT_CONFIG`.
        verify_on_exit:
            When ``True``, :meth:`__exit__` verifies every double before
            closing it, unless the ``with`` block raised. Defaults to
            ``config.auto_verify``.
        """
        self.config = config if config is not None else DEFAULT_CONFIG
        self._verify_on_exit = (
            self.config.auto_verify if verify_on_exit is None else verify_on_exit
        )
        self._doubles: list[Double] = []
        self._phase = Phase.OPEN

    # ------------------------------------------------------------------
    # Lifecycle state
    # ------------------------------------------------------------------
    @property
    def phase(self) -> Phase:
        """Return the current lifecycle phase."""
        return self._phase

    @property
    def doubles(self) -> tuple[Double, ...]:
        """Return every remembered double in creation order."""
        return tuple(self._doubles)

    def _require_not_closed(self, action: str) -> None:
        if self._phase is Phase.CLOSED:
            msg = f"Cannot call {action}(): container is closed"
            raise LifecycleError(msg)

    # ------------------------------------------------------------------
    # Context manager protocol
    # ------------------------------------------------------------------
    def __enter__(self) -> FlexMox:
        """Enter context."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        """Exit context, verifying unless the block raised, then close."""
        self.teardown(test_failed=exc_type is not None or not self._verify_on_exit)

    # ------------------------------------------------------------------
    # Double factories
    # ------------------------------------------------------------------
    def remember(self, double: Double) -> Double:
        """Track *double* so it is verified and closed with the container."""
        self._require_not_closed("remember")
        double.container = self
        if double not in self._doubles:
            self._doubles.append(double)
        return double

    def mock(
        self,
        name: str | None = None,
        *,
        based_on: BaseShape | None = None,
        defs: t.Mapping[str, object] | None = None,
        ignore_missing: bool = False,
    ) -> Double:
        """Create a double for mocking or stubbing."""
        self._require_not_closed("mock")
        double = Double(
            name or self.config.default_name,
            based_on=based_on,
            ignore_missing=ignore_missing,
            container=self,
        )
        self.remember(double)
        if defs:
            double.should_receive(defs)
        return double

    def spy(self, based_on: BaseShape, name: str | None = None) -> Double:
        """Create a double shaped like *based_on* for call-log queries.

        Methods of the base shape return ``UNDEFINED`` until an expectation
        is declared for them.
        """
        if name is None and isinstance(based_on, type):
            name = based_on.__name__
        return self.mock(name, based_on=based_on)

    def partial(
        self,
        target: object,
        name: str | None = None,
        *,
        defs: t.Mapping[str, object] | None = None,
    ) -> PartialDouble:
        """Create a partial double wrapping *target*."""
        self._require_not_closed("partial")
        double = PartialDouble(
            target,
            name,
            based=self.config.partials_are_based,
            container=self,
        )
        self.remember(double)
        if defs:
            double.should_receive(defs)
        return double

    # ------------------------------------------------------------------
    # Verification and teardown
    # ------------------------------------------------------------------
    def verify(self) -> None:
        """Verify every double, reporting all failures together."""
        self._require_not_closed("verify")
        self._phase = Phase.VERIFYING
        failures: list[VerificationError] = []
        for double in self._doubles:
            try:
                double.verify()
            except VerificationError as err:
                failures.append(err)
        if len(failures) == 1:
            raise failures[0]
        if failures:
            msg = f"{len(failures)} doubles failed verification:\n\n" + "\n\n".join(
                str(err) for err in failures
            )
            raise VerificationError(msg)

    def close(self) -> None:
        """Tear down every double, even when one of them fails to."""
        if self._phase is Phase.CLOSED:
            return
        self._phase = Phase.CLOSED
        first_error: Exception | None = None
        for double in reversed(self._doubles):
            try:
                double.teardown()
            except Exception as err:
                logger.exception("Error tearing down double %r", double.name)
                if first_error is None:
                    first_error = err
        logger.debug("FlexMox closed %d doubles", len(self._doubles))
        if first_error is not None:
            raise first_error

    def teardown(self, *, test_failed: bool = False) -> None:
        """Verify unless *test_failed*, then always close."""
        try:
            if not test_failed and self._phase is not Phase.CLOSED:
                self.verify()
        finally:
            self.close()


@contextlib.contextmanager
def use(
    *names: str, config: MoxConfig | None = None
) -> t.Iterator[Double | tuple[Double, ...]]:
    """Yield fresh doubles that are verified and closed when the block ends.

    One name yields a single double; several names yield a tuple. Without
    names a single double with the default name is yielded. Verification is
    skipped when the block raises.
    """
    with FlexMox(config, verify_on_exit=True) as mox:
        doubles = tuple(mox.mock(name) for name in names) or (mox.mock(),)
        yield doubles[0] if len(doubles) == 1 else doubles


__all__ = ["FlexMox", "Phase", "use"]
