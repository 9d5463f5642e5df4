"""Aggregate pytest-bdd step definitions for flexmox features."""

from .doubles import *  # noqa: F403
from .ordering import *  # noqa: F403

# Re-export all imported step definitions so ``from tests.steps import *``
# makes them available to scenario modules during collection.
__all__ = [
    name
    for name in globals()
    if not name.startswith("_") and name != "annotations"
]
