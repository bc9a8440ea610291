"""Read-only views over photos, history, processors and the pool."""

from dataclasses import dataclass

from photo_restoration.adapters.asset_ledger_client import AssetLedgerClient
from photo_restoration.domain.fees import FeeSchedule
from photo_restoration.domain.ledger import LedgerEntry
from photo_restoration.domain.photos import AdjustmentEntry, PhotoRecord
from photo_restoration.domain.processors import ProcessorProfile
from photo_restoration.services.ledger import LedgerService
from photo_restoration.services.photos import PhotoRecordStore
from photo_restoration.services.processors import ProcessorRegistry
from photo_restoration.services.settlement import SettlementEngine


@dataclass(frozen=True)
class LedgerSummary:
    """Snapshot of the pooled account."""

    balance: int
    obligations: int
    withdrawable: int


@dataclass
class ReportingService:
    """Query facade; never mutates state."""

    photos: PhotoRecordStore
    processors: ProcessorRegistry
    settlement: SettlementEngine
    ledger: LedgerService
    asset_ledger: AssetLedgerClient

    def get_photo(self, photo_id: int) -> PhotoRecord:
        return self.photos.require(photo_id)

    def get_photos_by_owner(self, owner: str) -> list[int]:
        return self.photos.ids_by_owner(owner)

    def get_adjustments(self, photo_id: int) -> list[AdjustmentEntry]:
        return self.photos.adjustments(photo_id)

    def get_processor(self, identity: str) -> ProcessorProfile:
        return self.processors.require(identity)

    def list_processors(self) -> list[ProcessorProfile]:
        """Return processors ranked by reputation, then throughput."""
        return sorted(
            self.processors.list_processors(),
            key=lambda profile: (profile.reputation, profile.total_processed),
            reverse=True,
        )

    def get_fees(self) -> FeeSchedule:
        return self.settlement.current_fees()

    def get_ledger_summary(self) -> LedgerSummary:
        account = self.ledger.get_account()
        return LedgerSummary(
            balance=account.balance,
            obligations=account.obligations,
            withdrawable=self.ledger.withdrawable(),
        )

    def get_ledger_entries(self, limit: int = 50) -> list[LedgerEntry]:
        return self.ledger.list_entries(limit)

    def get_payouts(self, identity: str) -> int:
        return self.ledger.total_paid_to(identity)

    async def asset_of(self, photo_id: int) -> str | None:
        """Return the minted asset id for a photo, asking the ledger if needed."""
        record = self.photos.require(photo_id)
        if record.minted_asset_id is not None:
            return record.minted_asset_id
        return await self.asset_ledger.asset_of(photo_id)
