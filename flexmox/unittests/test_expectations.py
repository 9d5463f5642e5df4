"""Unit tests for expectations and their declarators."""

from __future__ import annotations

import pytest

from flexmox.bottom import UNDEFINED
from flexmox.comparators import IsA
from flexmox.double import Double
from flexmox.errors import UsageError
from flexmox.expectations import BlockRequirement, CompositeExpectation, Expectation


@pytest.fixture
def double() -> Double:
    """Return a fresh double named ``subject``."""
    return Double("subject")


def _declare(double: Double, name: str = "fetch") -> Expectation:
    exp = double.should_receive(name)
    assert isinstance(exp, Expectation)
    return exp


def test_default_return_is_undefined(double: Double) -> None:
    """Without a return declarator calls yield ``UNDEFINED``."""
    _declare(double)
    assert double.fetch() is UNDEFINED


def test_and_return_sequence_is_sticky(double: Double) -> None:
    """Values are returned in turn, then the last one repeats."""
    _declare(double).and_return(1, 2, 3)
    assert [double.fetch() for _ in range(5)] == [1, 2, 3, 3, 3]


def test_and_return_without_values_returns_none(double: Double) -> None:
    """An empty return list yields ``None``."""
    _declare(double).and_return()
    assert double.fetch() is None


def test_and_return_undefined(double: Double) -> None:
    """``and_return_undefined`` overrides a previous return value."""
    _declare(double).and_return(5).and_return_undefined()
    assert double.fetch() is UNDEFINED


def test_runs_receives_call_arguments(double: Double) -> None:
    """Computed returns see the positional and keyword arguments."""
    _declare(double, "add").runs(lambda a, b, scale=1: (a + b) * scale)
    assert double.add(1, 2) == 3
    assert double.add(1, 2, scale=10) == 30


def test_runs_rejects_non_callables(double: Double) -> None:
    """A computed return needs a callable."""
    with pytest.raises(UsageError, match="expects a callable"):
        _declare(double).runs(42)  # type: ignore[arg-type]


def test_and_raise_class_and_instance(double: Double) -> None:
    """Exception classes are instantiated per call; instances are re-raised."""
    _declare(double, "boom").and_raise(KeyError, "missing")
    _declare(double, "bang").and_raise(ValueError("bad"))
    with pytest.raises(KeyError, match="missing"):
        double.boom()
    with pytest.raises(ValueError, match="bad"):
        double.bang()


def test_and_raise_rejects_non_exceptions(double: Double) -> None:
    """Only exceptions may be raised."""
    with pytest.raises(UsageError):
        _declare(double).and_raise("oops")  # type: ignore[arg-type]


def test_describe(double: Double) -> None:
    """Descriptions show the argument pattern and block requirement."""
    exp = _declare(double)
    assert exp.describe() == "fetch(...)"
    exp.with_args(1, "a", key=IsA(int))
    assert exp.describe() == "fetch(1, 'a', key=IsA(typ=<class 'int'>))"
    exp.with_no_args().with_block()
    assert str(exp) == "fetch() with a block"
    exp.without_block()
    assert exp.describe() == "fetch() without a block"
    assert repr(exp) == "<Expectation fetch() without a block on 'subject'>"


def test_block_requirement(double: Double) -> None:
    """Block requirements filter calls by the presence of a block."""
    exp = _declare(double).with_block().and_return("yes")
    assert exp.block_requirement is BlockRequirement.REQUIRED
    assert double.fetch.call_with_block(print) == "yes"


def test_count_declarators_attach_policies(double: Double) -> None:
    """``at_least``/``at_most`` modify only the next count declarator."""
    exp = _declare(double).at_least().once().at_most().times(3)
    assert [policy.describe() for policy in exp.count_policies] == [
        ".at_least.once",
        ".at_most.times(3)",
    ]
    exp.twice()
    assert exp.count_policies[-1].describe() == ".twice"


def test_zero_or_more_times(double: Double) -> None:
    """``zero_or_more_times`` never produces a violation."""
    exp = _declare(double).zero_or_more_times()
    assert exp.count_violations() == []
    double.fetch()
    assert exp.count_violations() == []


def test_count_violations_report_each_policy(double: Double) -> None:
    """Every failing policy is reported with its limit and actual count."""
    exp = _declare(double).at_least().twice().at_most().times(5)
    double.fetch()
    violations = exp.count_violations()
    assert len(violations) == 1
    assert violations[0].policy == ".at_least.twice"
    assert violations[0].limit == 2
    assert violations[0].actual == 1


def test_should_receive_chains_to_the_double(double: Double) -> None:
    """Expectations can start another declaration on the same double."""
    second = _declare(double).and_return(1).should_receive("other")
    assert isinstance(second, Expectation)
    assert second.double is double


def test_composite_forwards_declarators(double: Double) -> None:
    """Several names share declarators through a composite."""
    composite = double.should_receive("a", "b")
    assert isinstance(composite, CompositeExpectation)
    result = composite.and_return(7).once()
    assert result is composite
    assert double.a() == 7
    assert double.b() == 7
    assert composite.describe() == "[a(...), b(...)]"
    assert composite.double is double


def test_composite_rejects_unknown_attributes(double: Double) -> None:
    """Non-declarator attributes are not forwarded."""
    composite = double.should_receive("a", "b")
    with pytest.raises(AttributeError):
        composite._private  # noqa: B018
    with pytest.raises(AttributeError):
        composite.method_name()
