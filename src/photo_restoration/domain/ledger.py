"""Domain models for the pooled ledger account."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class EntryKind(str, Enum):
    """Kind of value movement recorded in the ledger."""

    ESCROW = "escrow"
    DISBURSE = "disburse"
    WITHDRAW = "withdraw"


@dataclass(frozen=True)
class LedgerAccount:
    """Pooled balance and the part of it owed to processors."""

    balance: int
    obligations: int


@dataclass(frozen=True)
class LedgerEntry:
    """A single committed value movement.

    ``obligation_delta`` tracks how much of the pool is promised to a
    processor: positive when a submission fee is escrowed, negative when the
    processor share is paid out.
    """

    kind: EntryKind
    amount: int
    counterparty: str
    created_at: datetime
    photo_id: int | None = None
    obligation_delta: int = 0

    @property
    def balance_delta(self) -> int:
        if self.kind is EntryKind.ESCROW:
            return self.amount
        return -self.amount
