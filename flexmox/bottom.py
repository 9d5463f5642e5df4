"""The self-propagating ``UNDEFINED`` sentinel."""

from __future__ import annotations

import typing as t


class Undefined:
    """Placeholder returned when no real value was configured.

    Any interaction with the sentinel (attribute access, calls, indexing,
    arithmetic) yields the sentinel itself, so chained calls on an
    unconfigured result stay inert. Only one instance exists.
    """

    __slots__ = ()
    _instance: t.ClassVar[Undefined | None] = None

    def __new__(cls) -> Undefined:
        """Return the process-wide singleton."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __getattr__(self, name: str) -> Undefined:
        """Return the sentinel for any public attribute."""
        if name.startswith("__") and name.endswith("__"):
            raise AttributeError(name)
        return self

    def __call__(self, *args: object, **kwargs: object) -> Undefined:
        """Calling the sentinel returns the sentinel."""
        return self

    def __getitem__(self, key: object) -> Undefined:
        """Indexing the sentinel returns the sentinel."""
        return self

    def __iter__(self) -> t.Iterator[object]:
        """Iterating the sentinel yields nothing."""
        return iter(())

    def __add__(self, other: object) -> Undefined:
        """Arithmetic with the sentinel returns the sentinel."""
        return self

    __radd__ = __sub__ = __rsub__ = __mul__ = __rmul__ = __add__
    __truediv__ = __rtruediv__ = __floordiv__ = __rfloordiv__ = __add__
    __mod__ = __rmod__ = __pow__ = __rpow__ = __add__

    def __neg__(self) -> Undefined:
        """Unary operators return the sentinel."""
        return self

    __pos__ = __abs__ = __neg__

    def __copy__(self) -> Undefined:
        """Copies of the sentinel are the sentinel."""
        return self

    def __deepcopy__(self, memo: dict[int, object]) -> Undefined:
        """Deep copies of the sentinel are the sentinel."""
        return self

    def __reduce__(self) -> str:
        """Pickle by reference to the module-level singleton."""
        return "UNDEFINED"

    def __repr__(self) -> str:
        """Return a debug representation."""
        return "UNDEFINED"

    __str__ = __repr__


UNDEFINED: t.Final[Undefined] = Undefined()


def is_undefined(value: object) -> bool:
    """Return ``True`` when *value* is the ``UNDEFINED`` sentinel."""
    return value is UNDEFINED


__all__ = ["UNDEFINED", "Undefined", "is_undefined"]
