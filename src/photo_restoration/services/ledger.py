"""Pooled ledger account with staged, all-or-nothing transactions."""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from photo_restoration.domain.errors import (
    InsufficientEscrowError,
    InvalidTransitionError,
)
from photo_restoration.domain.ledger import EntryKind, LedgerAccount, LedgerEntry

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class LedgerRepository(Protocol):
    """Persistence interface for the pooled balance and its journal."""

    def get_account(self) -> LedgerAccount:
        """Return the committed balance and obligations."""

    def apply_entries(self, entries: list[LedgerEntry]) -> LedgerAccount:
        """Atomically append entries and update the account."""

    def total_paid_to(self, identity: str) -> int:
        """Return the sum of disbursements and withdrawals to an identity."""

    def list_entries(self, limit: int) -> list[LedgerEntry]:
        """Return the most recent entries, newest first."""


@dataclass
class LedgerTransaction:
    """Entries staged by one workflow transition.

    Outgoing amounts are reserved against the pool as soon as they are staged,
    so a transition that cannot be paid fails before it mutates anything.
    """

    ledger: "LedgerService"
    entries: list[LedgerEntry] = field(default_factory=list)
    reserved: int = 0

    @property
    def staged_inflow(self) -> int:
        return sum(e.amount for e in self.entries if e.kind is EntryKind.ESCROW)

    @property
    def staged_obligations(self) -> int:
        return sum(e.obligation_delta for e in self.entries)

    def escrow(
        self,
        amount: int,
        payer: str,
        photo_id: int | None = None,
        obligation: int = 0,
    ) -> None:
        """Stage incoming value, optionally earmarking part of it for a payout."""
        if amount < 0 or obligation < 0 or obligation > amount:
            raise ValueError("escrow amount and obligation must be non-negative")
        self.entries.append(
            LedgerEntry(
                kind=EntryKind.ESCROW,
                amount=amount,
                counterparty=payer,
                created_at=self.ledger.clock(),
                photo_id=photo_id,
                obligation_delta=obligation,
            )
        )

    def disburse(
        self, to: str, amount: int, photo_id: int | None = None, release: int = 0
    ) -> None:
        """Reserve and stage a payout from the pool."""
        if amount < 0 or release < 0:
            raise ValueError("disbursement amount must be non-negative")
        self.ledger.reserve(self, amount)
        self.entries.append(
            LedgerEntry(
                kind=EntryKind.DISBURSE,
                amount=amount,
                counterparty=to,
                created_at=self.ledger.clock(),
                photo_id=photo_id,
                obligation_delta=-release,
            )
        )

    def withdraw(self, to: str) -> int:
        """Reserve and stage every pooled unit not owed to a processor."""
        amount = self.ledger.withdrawable(self)
        if amount <= 0:
            raise InvalidTransitionError("no withdrawable platform revenue in pool")
        self.ledger.reserve(self, amount)
        self.entries.append(
            LedgerEntry(
                kind=EntryKind.WITHDRAW,
                amount=amount,
                counterparty=to,
                created_at=self.ledger.clock(),
            )
        )
        return amount


@dataclass
class LedgerService:
    """Ledger account model used by the settlement engine."""

    repository: LedgerRepository
    clock: Callable[[], datetime] = _utcnow
    _reserved: int = 0

    @contextmanager
    def transaction(self) -> Iterator[LedgerTransaction]:
        """Stage entries; commit on normal exit, discard on exception."""
        txn = LedgerTransaction(ledger=self)
        try:
            yield txn
            if txn.entries:
                account = self.repository.apply_entries(list(txn.entries))
                _logger.info(
                    "Ledger committed %s entries: balance=%s obligations=%s",
                    len(txn.entries),
                    account.balance,
                    account.obligations,
                )
        finally:
            self._reserved -= txn.reserved
            txn.reserved = 0

    def reserve(self, txn: LedgerTransaction, amount: int) -> None:
        """Reserve an outgoing amount for an open transaction."""
        account = self.repository.get_account()
        available = account.balance + txn.staged_inflow - self._reserved
        if amount > available:
            _logger.error(
                "Escrow invariant violated: requested=%s available=%s",
                amount,
                available,
            )
            raise InsufficientEscrowError(
                f"disbursement of {amount} exceeds pooled funds of {available}"
            )
        self._reserved += amount
        txn.reserved += amount

    def withdrawable(self, txn: LedgerTransaction | None = None) -> int:
        """Return pooled funds that are neither owed nor reserved."""
        account = self.repository.get_account()
        inflow = txn.staged_inflow if txn else 0
        obligations = account.obligations + (txn.staged_obligations if txn else 0)
        return max(account.balance + inflow - obligations - self._reserved, 0)

    def get_account(self) -> LedgerAccount:
        """Return the committed account state."""
        return self.repository.get_account()

    def total_paid_to(self, identity: str) -> int:
        """Return everything the pool has paid to an identity."""
        return self.repository.total_paid_to(identity)

    def list_entries(self, limit: int = 50) -> list[LedgerEntry]:
        """Return recent journal entries."""
        return self.repository.list_entries(limit)
