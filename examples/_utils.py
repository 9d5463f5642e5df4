"""Shared code under test for the runnable examples."""

from __future__ import annotations

import typing as t


class PaymentGateway:
    """Real collaborator shape used to base doubles on."""

    def charge(self, account: str, amount: int) -> str:
        raise NotImplementedError

    def refund(self, receipt: str) -> None:
        raise NotImplementedError


class Checkout:
    """Charge an account and record the receipt in a ledger."""

    def __init__(self, gateway: t.Any, ledger: t.Any) -> None:  # noqa: ANN401
        self.gateway = gateway
        self.ledger = ledger

    def pay(self, account: str, amounts: t.Iterable[int]) -> str:
        """Charge the sum of *amounts* and record the receipt."""
        total = sum(amounts)
        receipt = self.gateway.charge(account, total)
        self.ledger.record(account, receipt, total=total)
        return receipt

    def cancel(self, receipt: str) -> None:
        """Refund *receipt* and mark it void."""
        self.gateway.refund(receipt)
        self.ledger.void(receipt)
