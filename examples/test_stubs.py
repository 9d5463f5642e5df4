"""Example tests demonstrating stub usage."""

from __future__ import annotations

import typing as t

from examples._utils import Checkout
from flexmox.bottom import UNDEFINED

pytest_plugins = ("flexmox.pytest_plugin",)

if t.TYPE_CHECKING:  # pragma: no cover - typing only
    from flexmox.controller import FlexMox


def test_stub_returns_canned_values(flexmox: FlexMox) -> None:
    """Stubs provide canned values without call-count verification."""
    gateway = flexmox.mock("gateway", defs={"charge": "r-42"})
    ledger = flexmox.mock("ledger").should_ignore_missing()

    assert Checkout(gateway, ledger).pay("acct", [1, 2]) == "r-42"
    assert ledger.calls[0].kwargs == {"total": 3}
    assert ledger.void("r-42") is UNDEFINED


def test_stub_computes_values(flexmox: FlexMox) -> None:
    """Stubs can compute a value from the call arguments."""
    gateway = flexmox.mock("gateway")
    gateway.should_receive("charge").runs(lambda account, amount: f"{account}:{amount}")
    ledger = flexmox.mock("ledger", ignore_missing=True)

    assert Checkout(gateway, ledger).pay("acct", [5, 5]) == "acct:10"


def test_stub_defaults_can_be_overridden(flexmox: FlexMox) -> None:
    """Defaults apply until a test declares a specific expectation."""
    gateway = flexmox.mock("gateway")
    gateway.should_receive("charge").and_return("default").by_default()
    ledger = flexmox.mock("ledger", ignore_missing=True)
    checkout = Checkout(gateway, ledger)

    assert checkout.pay("acct", [1]) == "default"
    gateway.should_receive("charge").with_args("vip", 1).and_return("priority")
    assert checkout.pay("vip", [1]) == "priority"


def test_stub_chains_with_demeter_names(flexmox: FlexMox) -> None:
    """Dotted names stub a chain of calls."""
    app = flexmox.mock("app")
    app.should_receive("settings.payments.currency").and_return("EUR")

    assert app.settings().payments().currency() == "EUR"
