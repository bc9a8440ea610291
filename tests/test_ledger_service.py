"""Tests for the pooled ledger."""

import pytest

from photo_restoration.domain.errors import (
    InsufficientEscrowError,
    InvalidTransitionError,
)
from photo_restoration.domain.ledger import EntryKind
from photo_restoration.services.ledger import LedgerService
from tests.conftest import ADMIN, OWNER, PROCESSOR, FakeClock, InMemoryLedgerRepository


def _ledger(balance: int = 0, obligations: int = 0) -> LedgerService:
    return LedgerService(
        InMemoryLedgerRepository(balance=balance, obligations=obligations),
        clock=FakeClock(),
    )


def test_transaction_commits_entries_together() -> None:
    ledger = _ledger()

    with ledger.transaction() as txn:
        txn.escrow(100, payer=OWNER, photo_id=1, obligation=70)
        txn.disburse(PROCESSOR, 70, photo_id=1, release=70)

    account = ledger.get_account()
    assert account.balance == 30
    assert account.obligations == 0
    assert [e.kind for e in ledger.list_entries()] == [
        EntryKind.DISBURSE,
        EntryKind.ESCROW,
    ]
    assert ledger.total_paid_to(PROCESSOR) == 70


def test_transaction_discards_entries_on_error() -> None:
    ledger = _ledger(balance=50)

    with pytest.raises(RuntimeError):
        with ledger.transaction() as txn:
            txn.disburse(PROCESSOR, 20)
            raise RuntimeError("boom")

    assert ledger.get_account().balance == 50
    assert ledger.list_entries() == []
    assert ledger.withdrawable() == 50


def test_disburse_beyond_pool_fails_before_commit() -> None:
    ledger = _ledger(balance=10)

    with pytest.raises(InsufficientEscrowError):
        with ledger.transaction() as txn:
            txn.disburse(PROCESSOR, 11)

    assert ledger.get_account().balance == 10


def test_reservations_block_concurrent_overdraw() -> None:
    ledger = _ledger(balance=10)

    with ledger.transaction() as first:
        first.disburse(PROCESSOR, 8)
        with pytest.raises(InsufficientEscrowError):
            with ledger.transaction() as second:
                second.disburse(ADMIN, 8)

    assert ledger.get_account().balance == 2


def test_withdraw_takes_only_unobligated_funds() -> None:
    ledger = _ledger(balance=100, obligations=70)

    with ledger.transaction() as txn:
        amount = txn.withdraw(ADMIN)

    assert amount == 30
    assert ledger.get_account().balance == 70
    assert ledger.withdrawable() == 0


def test_withdraw_with_nothing_available() -> None:
    ledger = _ledger(balance=70, obligations=70)

    with pytest.raises(InvalidTransitionError):
        with ledger.transaction() as txn:
            txn.withdraw(ADMIN)


def test_negative_amounts_are_rejected() -> None:
    ledger = _ledger(balance=10)

    with ledger.transaction() as txn:
        with pytest.raises(ValueError):
            txn.escrow(-1, payer=OWNER)
        with pytest.raises(ValueError):
            txn.disburse(PROCESSOR, -1)

    assert ledger.list_entries() == []


def test_failed_commit_releases_reservations() -> None:
    repository = InMemoryLedgerRepository(balance=10, fail_next_apply=True)
    ledger = LedgerService(repository, clock=FakeClock())

    with pytest.raises(RuntimeError):
        with ledger.transaction() as txn:
            txn.disburse(PROCESSOR, 10)

    assert ledger.withdrawable() == 10
