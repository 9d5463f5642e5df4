"""Unit tests for the ``UNDEFINED`` sentinel."""

from __future__ import annotations

import copy
import pickle

from flexmox.bottom import UNDEFINED, Undefined, is_undefined


def test_singleton() -> None:
    """Every construction returns the same object."""
    assert Undefined() is UNDEFINED
    assert is_undefined(Undefined())
    assert not is_undefined(None)


def test_interactions_propagate() -> None:
    """Attribute access, calls, indexing and arithmetic yield the sentinel."""
    assert UNDEFINED.anything is UNDEFINED
    assert UNDEFINED.deeply.nested.call(1, x=2) is UNDEFINED
    assert UNDEFINED["key"] is UNDEFINED
    assert UNDEFINED + 1 is UNDEFINED
    assert 1 + UNDEFINED is UNDEFINED
    assert UNDEFINED * 3 is UNDEFINED
    assert -UNDEFINED is UNDEFINED
    assert list(UNDEFINED) == []


def test_copies_and_pickles_preserve_identity() -> None:
    """Copying or pickling never creates a second sentinel."""
    assert copy.copy(UNDEFINED) is UNDEFINED
    assert copy.deepcopy([UNDEFINED])[0] is UNDEFINED
    assert pickle.loads(pickle.dumps(UNDEFINED)) is UNDEFINED  # noqa: S301


def test_repr() -> None:
    """The sentinel prints as ``UNDEFINED``."""
    assert repr(UNDEFINED) == "UNDEFINED"
    assert str(UNDEFINED) == "UNDEFINED"
    assert f"{UNDEFINED}" == "UNDEFINED"
