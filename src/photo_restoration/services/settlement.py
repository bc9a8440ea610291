"""Fee schedule and fee-split settlement."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from photo_restoration.domain.errors import InsufficientPaymentError, OutOfRangeError
from photo_restoration.domain.events import FeesUpdated, FundsWithdrawn
from photo_restoration.domain.fees import FeeSchedule
from photo_restoration.domain.photos import PhotoRecord
from photo_restoration.services.admin import AdminCapability, require_admin
from photo_restoration.services.events import EventService
from photo_restoration.services.ledger import LedgerService, LedgerTransaction

_logger = logging.getLogger(__name__)

COLORIZATION_FEE = "colorization_fee"
ADJUSTMENT_FEE = "adjustment_fee"
MINT_FEE = "mint_fee"


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class FeeRepository(Protocol):
    """Persistence interface for the fee schedule."""

    def get_fees(self) -> FeeSchedule | None:
        """Return the stored schedule, if one has been set."""

    def set_fees(self, fees: FeeSchedule) -> None:
        """Replace the stored schedule."""


@dataclass
class SettlementEngine:
    """Collects fees into the pool and splits the colorization fee."""

    ledger: LedgerService
    fee_repository: FeeRepository
    admin: AdminCapability
    events: EventService
    default_fees: FeeSchedule
    processor_share_percent: int = 70
    clock: Callable[[], datetime] = _utcnow

    def current_fees(self) -> FeeSchedule:
        """Return the schedule in force for transitions starting now."""
        return self.fee_repository.get_fees() or self.default_fees

    def set_fees(
        self, actor: str, colorization_fee: int, adjustment_fee: int, mint_fee: int
    ) -> FeeSchedule:
        """Replace all three fee rates."""
        require_admin(self.admin, actor, "set_fees")
        for name, value in (
            (COLORIZATION_FEE, colorization_fee),
            (ADJUSTMENT_FEE, adjustment_fee),
            (MINT_FEE, mint_fee),
        ):
            if value < 0:
                raise OutOfRangeError(f"{name} must be non-negative, got {value}")
        fees = FeeSchedule(
            colorization_fee=colorization_fee,
            adjustment_fee=adjustment_fee,
            mint_fee=mint_fee,
            updated_at=self.clock(),
        )
        self.fee_repository.set_fees(fees)
        _logger.info(
            "Fees updated: colorization=%s adjustment=%s mint=%s",
            colorization_fee,
            adjustment_fee,
            mint_fee,
        )
        self.events.publish(
            FeesUpdated(
                colorization_fee=colorization_fee,
                adjustment_fee=adjustment_fee,
                mint_fee=mint_fee,
            )
        )
        return fees

    def require_payment(self, fee_name: str, payment: int) -> int:
        """Return the fee for a transition, or raise if the payment is short."""
        required = getattr(self.current_fees(), fee_name)
        if payment < required:
            _logger.warning(
                "Rejected payment for %s: required=%s paid=%s",
                fee_name,
                required,
                payment,
            )
            raise InsufficientPaymentError(fee_name, required, payment)
        return required

    def processor_share(self, escrowed_fee: int) -> int:
        """Processor cut of a submission fee, truncated to whole units."""
        return escrowed_fee * self.processor_share_percent // 100

    def escrow_submission(
        self, txn: LedgerTransaction, owner: str, payment: int, photo_id: int
    ) -> None:
        """Escrow a submission fee and earmark the processor share."""
        txn.escrow(
            payment,
            payer=owner,
            photo_id=photo_id,
            obligation=self.processor_share(payment),
        )

    def settle_colorization(
        self, txn: LedgerTransaction, record: PhotoRecord, processor: str
    ) -> int:
        """Pay the processor its share of the escrowed submission fee."""
        share = self.processor_share(record.escrowed_fee)
        txn.disburse(processor, share, photo_id=record.id, release=share)
        return share

    def collect(
        self, txn: LedgerTransaction, payer: str, payment: int, photo_id: int
    ) -> None:
        """Collect an adjustment or mint payment as platform revenue."""
        txn.escrow(payment, payer=payer, photo_id=photo_id)

    def withdraw(self, actor: str) -> int:
        """Pay out platform revenue to the administrator."""
        require_admin(self.admin, actor, "withdraw")
        with self.ledger.transaction() as txn:
            amount = txn.withdraw(actor)
        _logger.info("Withdrew %s to %s", amount, actor)
        self.events.publish(FundsWithdrawn(recipient=actor, amount=amount))
        return amount
