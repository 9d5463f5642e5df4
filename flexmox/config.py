"""Configuration values shared by a :class:`~flexmox.controller.FlexMox`."""

from __future__ import annotations

import dataclasses as dc


@dc.dataclass(frozen=True, slots=True)
class MoxConfig:
    """Settings applied to every double a container creates.

    Attributes
    ----------
    partials_are_based:
        Base partial doubles on the attributes of the object they wrap, so
        declaring a method the object lacks requires ``explicitly()``.
    auto_verify:
        Verify the container when it is torn down without a test failure.
    default_name:
        Name given to doubles created without one.
    """

    partials_are_based: bool = False
    auto_verify: bool = True
    default_name: str = "unknown"

    def replace(self, **changes: object) -> MoxConfig:
        """Return a copy with *changes* applied."""
        return dc.replace(self, **changes)  # type: ignore[arg-type]


DEFAULT_CONFIG = MoxConfig()

__all__ = ["DEFAULT_CONFIG", "MoxConfig"]
