"""Partial doubles that stand in for selected methods of a real object."""

from __future__ import annotations

import logging
import typing as t

from .double import BoundCall, Double

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .call_record import CallRecord
    from .controller import FlexMox

logger = logging.getLogger(__name__)


class PartialDouble(Double):
    """A double wrapping a real object.

    Code under test receives :attr:`proxy`. Methods with declared
    expectations are routed through the double; every other attribute is
    read from, and written to, the real object. Once the double is torn
    down the proxy forwards everything to the real object.

    Parameters
    ----------
    target:
        The real object to wrap.
    name:
        Name used in diagnostics; defaults to ``partial(<TypeName>)``.
    based:
        Base the double on the attributes of *target*, so declaring a
        method the object lacks requires ``explicitly()``.
    """

    def __init__(
        self,
        target: object,
        name: str | None = None,
        *,
        based: bool = False,
        defs: t.Mapping[str, object] | None = None,
        container: FlexMox | None = None,
    ) -> None:
        self._target = target
        self._proxy = PartialProxy(self)
        super().__init__(
            name or f"partial({type(target).__name__})",
            based_on=dir(target) if based else None,
            container=container,
        )
        if based:
            self._base_label = repr(target)
        if defs:
            self.should_receive(defs)

    @property
    def target(self) -> object:
        """Return the wrapped object."""
        return self._target

    @property
    def proxy(self) -> PartialProxy:
        """Return the stand-in to hand to the code under test."""
        return self._proxy

    def _shadows_attribute(self, method_name: str) -> bool:
        # Calls reach the double through the proxy, never its own attributes.
        del method_name
        return False

    def _handle_missing(self, call: CallRecord) -> object:
        real = getattr(self._target, call.method_name, None)
        if callable(real):
            logger.debug(
                "Partial %r forwarding %s to the real object",
                self.name,
                call.describe(),
            )
            return real(*call.args, **call.kwargs)
        return super()._handle_missing(call)

    def _release(self) -> None:
        logger.debug("Partial %r released %r", self.name, self._target)


class PartialProxy:
    """Forward attribute access to a partial double or its real object."""

    __slots__ = ("_flexmox_double",)

    def __init__(self, double: PartialDouble) -> None:
        object.__setattr__(self, "_flexmox_double", double)

    def __getattr__(self, name: str) -> object:
        """Return a routed call for intercepted names, else the real attribute."""
        double: PartialDouble = object.__getattribute__(self, "_flexmox_double")
        if double.intercepts(name):
            return BoundCall(double, name)
        return getattr(double.target, name)

    def __setattr__(self, name: str, value: object) -> None:
        """Set *name* on the real object."""
        double: PartialDouble = object.__getattribute__(self, "_flexmox_double")
        setattr(double.target, name, value)

    def __repr__(self) -> str:
        """Return a debug representation."""
        double: PartialDouble = object.__getattribute__(self, "_flexmox_double")
        return f"<partial proxy of {double.target!r}>"


__all__ = ["PartialDouble", "PartialProxy"]
