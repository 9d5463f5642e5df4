"""Unit tests for partial doubles."""

from __future__ import annotations

import pytest

from flexmox.config import MoxConfig
from flexmox.controller import FlexMox
from flexmox.errors import CountViolationError, NoSuchMethodError, UsageError
from flexmox.expectations import ExplicitNeeded
from flexmox.partial import PartialDouble


class Account:
    """Real object wrapped by the partial doubles below."""

    def __init__(self) -> None:
        self.balance = 100

    def deposit(self, amount: int) -> int:
        self.balance += amount
        return self.balance

    def owner(self) -> str:
        return "alice"


def test_declared_methods_are_intercepted() -> None:
    """Only declared methods route through the double."""
    account = Account()
    partial = PartialDouble(account)
    partial.should_receive("owner").and_return("mallory").once()
    proxy = partial.proxy
    assert proxy.owner() == "mallory"
    assert proxy.deposit(5) == 105
    assert proxy.balance == 105
    partial.verify()


def test_attribute_writes_reach_the_real_object() -> None:
    """Setting attributes on the proxy updates the wrapped object."""
    account = Account()
    proxy = PartialDouble(account).proxy
    proxy.balance = 7
    assert account.balance == 7
    assert repr(proxy).startswith("<partial proxy of <")


def test_invoke_falls_back_to_real_method() -> None:
    """Undeclared names invoked on the double call the real method."""
    account = Account()
    partial = PartialDouble(account, "acct")
    assert partial.invoke("deposit", (10,)) == 110
    assert partial.calls[0].describe() == "deposit(10)"
    with pytest.raises(NoSuchMethodError):
        partial.invoke("withdraw", (10,))


def test_teardown_restores_real_behaviour() -> None:
    """After teardown the proxy forwards everything to the real object."""
    account = Account()
    partial = PartialDouble(account)
    partial.should_receive("owner").and_return("mallory")
    partial.teardown()
    assert partial.proxy.owner() == "alice"


def test_default_name() -> None:
    """Unnamed partials are named after the wrapped type."""
    assert PartialDouble(Account()).name == "partial(Account)"


def test_based_partials_require_explicitly() -> None:
    """With ``partials_are_based`` unknown methods need ``explicitly()``."""
    mox = FlexMox(MoxConfig(partials_are_based=True))
    partial = mox.partial(Account())
    guard = partial.should_receive("withdraw")
    assert isinstance(guard, ExplicitNeeded)
    with pytest.raises(UsageError, match="Cannot stub methods not defined"):
        guard.once()
    partial.should_receive("deposit").and_return(0)
    assert partial.proxy.deposit(1) == 0
    mox.close()


def test_container_verifies_partials() -> None:
    """Partials created through a container are verified with it."""
    mox = FlexMox()
    partial = mox.partial(Account(), defs={"owner": "bob"})
    partial.should_receive("deposit").once()
    assert partial.proxy.owner() == "bob"
    with pytest.raises(CountViolationError, match="partial\\(Account\\)"):
        mox.teardown()


def test_proxy_routes_names_shared_with_the_double() -> None:
    """Methods named like the double's own attributes still route via the proxy."""

    class Ledger:
        def verify(self) -> bool:
            return False

    partial = PartialDouble(Ledger())
    partial.should_receive("verify").and_return(True).once()
    assert partial.proxy.verify() is True
    partial.verify()
