"""Tests for fee management and fee splits."""

import asyncio

import pytest

from photo_restoration.domain.errors import (
    InsufficientPaymentError,
    OutOfRangeError,
    UnauthorizedError,
)
from photo_restoration.services.settlement import COLORIZATION_FEE, MINT_FEE
from tests.conftest import ADMIN, OTHER, OWNER, submit_and_colorize


def test_processor_share_truncates(container) -> None:
    engine = container.settlement_engine

    assert engine.processor_share(10**16) == 7 * 10**15
    assert engine.processor_share(3) == 2


def test_set_fees_requires_admin(container, event_repository) -> None:
    engine = container.settlement_engine
    before = engine.current_fees()

    with pytest.raises(UnauthorizedError):
        engine.set_fees(OTHER, 1, 2, 3)

    assert engine.current_fees() == before
    assert "FeesUpdated" not in event_repository.types()


def test_set_fees_rejects_negative_values(container) -> None:
    with pytest.raises(OutOfRangeError):
        container.settlement_engine.set_fees(ADMIN, 1, -2, 3)


def test_set_fees_applies_to_next_transition(container, workflow) -> None:
    engine = container.settlement_engine

    fees = engine.set_fees(ADMIN, 5, 6, 7)

    assert fees.updated_at is not None
    assert engine.current_fees().colorization_fee == 5
    with pytest.raises(InsufficientPaymentError):
        asyncio.run(workflow.submit(OWNER, "cid://a", 4))
    record = asyncio.run(workflow.submit(OWNER, "cid://a", 5))
    assert record.escrowed_fee == 5


def test_require_payment_reports_shortfall(container) -> None:
    engine = container.settlement_engine

    with pytest.raises(InsufficientPaymentError) as exc_info:
        engine.require_payment(MINT_FEE, 1)

    assert exc_info.value.fee_name == MINT_FEE
    assert exc_info.value.paid == 1
    assert engine.require_payment(COLORIZATION_FEE, 10**17) == 10**16


def test_withdraw_pays_admin_platform_revenue(
    container, workflow, registry, ledger_repository, event_repository
) -> None:
    submit_and_colorize(workflow, registry)

    amount = container.settlement_engine.withdraw(ADMIN)

    assert amount == 3 * 10**15
    assert ledger_repository.balance == 0
    assert ledger_repository.total_paid_to(ADMIN) == amount
    assert event_repository.types()[-1] == "FundsWithdrawn"


def test_withdraw_requires_admin(
    container, workflow, registry, ledger_repository
) -> None:
    submit_and_colorize(workflow, registry)

    with pytest.raises(UnauthorizedError):
        container.settlement_engine.withdraw(OTHER)

    assert ledger_repository.balance == 3 * 10**15


def test_withdraw_never_strands_pending_payout(
    container, workflow, registry, ledger_repository
) -> None:
    registry.register("0xprocessor", "model://a")
    record = asyncio.run(workflow.submit(OWNER, "cid://a", 10**16))

    container.settlement_engine.withdraw(ADMIN)
    asyncio.run(workflow.submit_colorization("0xprocessor", record.id, "cid://c"))

    assert ledger_repository.total_paid_to("0xprocessor") == 7 * 10**15
    assert ledger_repository.balance == 0
