"""Workflow state machine for photo restoration submissions.

Every transition follows the same shape: check the actor's capability, check
the record's state and inputs, check the payment, stage ledger entries, persist
the new record, commit the ledger, then publish events. A failure at any step
before the ledger commits leaves records, counters and the pool untouched.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

from photo_restoration.adapters.asset_ledger_client import AssetLedgerClient
from photo_restoration.domain.errors import InvalidTransitionError, UnauthorizedError
from photo_restoration.domain.events import (
    AssetMinted,
    ColorizationCompleted,
    ColorizationRequested,
    ManualAdjustmentMade,
    PhotoSubmitted,
)
from photo_restoration.domain.photos import AdjustmentEntry, PhotoRecord, PhotoStatus
from photo_restoration.services.events import EventService
from photo_restoration.services.ledger import LedgerTransaction
from photo_restoration.services.locks import KeyedLocks
from photo_restoration.services.photos import PhotoRecordStore
from photo_restoration.services.processors import ProcessorRegistry
from photo_restoration.services.settlement import (
    ADJUSTMENT_FEE,
    COLORIZATION_FEE,
    MINT_FEE,
    SettlementEngine,
)

_logger = logging.getLogger(__name__)

SUBMIT_COLORIZATION = "submit_colorization"
ADJUST = "adjust"
MINT = "mint"

TRANSITION_SOURCES: dict[str, frozenset[PhotoStatus]] = {
    SUBMIT_COLORIZATION: frozenset({PhotoStatus.SUBMITTED}),
    ADJUST: frozenset({PhotoStatus.AI_COLORIZED, PhotoStatus.MANUALLY_ADJUSTED}),
    MINT: frozenset(
        {
            PhotoStatus.AI_COLORIZED,
            PhotoStatus.MANUALLY_ADJUSTED,
            PhotoStatus.COMPLETED,
        }
    ),
}


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class WorkflowService:
    """Enforces legal transitions and drives settlement for each of them."""

    photos: PhotoRecordStore
    processors: ProcessorRegistry
    settlement: SettlementEngine
    asset_ledger: AssetLedgerClient
    events: EventService
    locks: KeyedLocks = field(default_factory=KeyedLocks)
    clock: Callable[[], datetime] = _utcnow

    async def submit(self, owner: str, original_ref: str, payment: int) -> PhotoRecord:
        """Submit a photo for colorization and escrow the fee."""
        _require_ref("original_ref", original_ref)
        self.settlement.require_payment(COLORIZATION_FEE, payment)

        created: PhotoRecord | None = None
        try:
            with self.settlement.ledger.transaction() as txn:
                created = self.photos.create(
                    owner=owner,
                    original_ref=original_ref,
                    escrowed_fee=payment,
                    submitted_at=self.clock(),
                )
                self.settlement.escrow_submission(txn, owner, payment, created.id)
        except Exception:
            if created is not None:
                self.photos.discard(created.id)
            raise

        _logger.info(
            "Photo submitted: id=%s owner=%s fee=%s", created.id, owner, payment
        )
        self.events.publish(
            PhotoSubmitted(
                photo_id=created.id, owner=owner, original_ref=original_ref
            ),
            ColorizationRequested(photo_id=created.id, requester=owner, fee=payment),
        )
        return created

    async def submit_colorization(
        self, processor: str, photo_id: int, colorized_ref: str
    ) -> PhotoRecord:
        """Deliver an AI colorization and pay the processor its share."""
        async with self.locks.hold(photo_id):
            record = self.photos.require(photo_id)
            self.processors.require_active(processor)
            _require_source(record, SUBMIT_COLORIZATION)
            _require_ref("colorized_ref", colorized_ref)

            updated = replace(
                record,
                status=PhotoStatus.AI_COLORIZED,
                colorized_ref=colorized_ref,
                final_ref=colorized_ref,
                colorized_at=self.clock(),
                assigned_processor=processor,
            )
            updated, payout = self._commit(
                record,
                updated,
                lambda txn: self.settlement.settle_colorization(txn, record, processor),
                processor=processor,
            )

        _logger.info(
            "Photo colorized: id=%s processor=%s payout=%s",
            photo_id,
            processor,
            payout,
        )
        self.events.publish(
            ColorizationCompleted(
                photo_id=photo_id, colorized_ref=colorized_ref, processor=processor
            )
        )
        return updated

    async def adjust(
        self, owner: str, photo_id: int, payload: str, final_ref: str, payment: int
    ) -> PhotoRecord:
        """Apply a paid manual adjustment and record it in the history."""
        async with self.locks.hold(photo_id):
            record = self.photos.require(photo_id)
            _require_owner(record, owner, ADJUST)
            _require_source(record, ADJUST)
            _require_ref("payload", payload)
            _require_ref("final_ref", final_ref)
            self.settlement.require_payment(ADJUSTMENT_FEE, payment)

            entry = AdjustmentEntry(
                photo_id=photo_id,
                adjuster=owner,
                payload=payload,
                final_ref=final_ref,
                applied_at=self.clock(),
            )
            updated = replace(
                record, status=PhotoStatus.MANUALLY_ADJUSTED, final_ref=final_ref
            )
            updated, _ = self._commit(
                record,
                updated,
                lambda txn: self.settlement.collect(txn, owner, payment, photo_id),
                adjustment=entry,
            )

        _logger.info("Photo adjusted: id=%s final_ref=%s", photo_id, final_ref)
        self.events.publish(
            ManualAdjustmentMade(photo_id=photo_id, adjuster=owner, payload=payload)
        )
        return updated

    async def mint(
        self, owner: str, photo_id: int, metadata_ref: str, payment: int
    ) -> str:
        """Mint the final image as a collectible; allowed once per photo."""
        async with self.locks.hold(photo_id):
            record = self.photos.require(photo_id)
            _require_owner(record, owner, MINT)
            if record.is_minted or record.status is PhotoStatus.ASSET_MINTED:
                raise InvalidTransitionError(f"photo {photo_id} is already minted")
            _require_source(record, MINT)
            _require_ref("metadata_ref", metadata_ref)
            self.settlement.require_payment(MINT_FEE, payment)
            if await self.asset_ledger.asset_of(photo_id) is not None:
                raise InvalidTransitionError(
                    f"photo {photo_id} already has an asset on the ledger"
                )

            asset_id = await self.asset_ledger.mint(owner, metadata_ref, photo_id)
            updated = replace(
                record, status=PhotoStatus.ASSET_MINTED, minted_asset_id=asset_id
            )
            try:
                self._commit(
                    record,
                    updated,
                    lambda txn: self.settlement.collect(txn, owner, payment, photo_id),
                )
            except Exception:
                _logger.error(
                    "Asset %s minted for photo %s but settlement failed; "
                    "reconcile the photo record with the asset ledger",
                    asset_id,
                    photo_id,
                )
                raise

        _logger.info("Photo minted: id=%s asset_id=%s", photo_id, asset_id)
        self.events.publish(
            AssetMinted(asset_id=asset_id, photo_id=photo_id, owner=owner)
        )
        return asset_id

    def _commit(  # noqa: PLR0913
        self,
        previous: PhotoRecord,
        updated: PhotoRecord,
        stage: Callable[[LedgerTransaction], object],
        adjustment: AdjustmentEntry | None = None,
        processor: str | None = None,
    ) -> tuple[PhotoRecord, object]:
        """Stage settlement, persist the record, then commit the ledger.

        The record write is a compare-and-set on the version that was read,
        so at most one worker advances a given state. Writes made before a
        failed ledger commit are reverted.
        """
        saved: PhotoRecord | None = None
        counted = False
        try:
            with self.settlement.ledger.transaction() as txn:
                result = stage(txn)
                saved = self.photos.save(previous, updated, adjustment)
                if processor is not None:
                    self.processors.record_processed(processor)
                    counted = True
        except Exception:
            if counted and processor is not None:
                self.processors.revert_processed(processor)
            if saved is not None and not self.photos.restore(
                previous, saved, adjustment
            ):
                _logger.error(
                    "Could not restore photo %s after failed settlement: "
                    "version %s was superseded",
                    previous.id,
                    saved.version,
                )
            raise
        return saved, result


def _require_owner(record: PhotoRecord, actor: str, action: str) -> None:
    if actor != record.owner:
        raise UnauthorizedError(f"only the owner of photo {record.id} may {action}")


def _require_source(record: PhotoRecord, event: str) -> None:
    allowed = TRANSITION_SOURCES[event]
    if record.status not in allowed:
        raise InvalidTransitionError(
            f"cannot {event} photo {record.id} in status {record.status.value}"
        )


def _require_ref(name: str, value: str) -> None:
    if not value or not value.strip():
        raise InvalidTransitionError(f"{name} must be non-empty")
