"""JSON serialization of domain models for API responses."""

from photo_restoration.domain.fees import FeeSchedule
from photo_restoration.domain.ledger import LedgerEntry
from photo_restoration.domain.photos import AdjustmentEntry, PhotoRecord
from photo_restoration.domain.processors import ProcessorProfile
from photo_restoration.services.reporting import LedgerSummary


def serialize_photo(record: PhotoRecord) -> dict[str, object]:
    return {
        "id": record.id,
        "owner": record.owner,
        "original_ref": record.original_ref,
        "colorized_ref": record.colorized_ref,
        "final_ref": record.final_ref,
        "submitted_at": record.submitted_at.isoformat(),
        "colorized_at": record.colorized_at.isoformat()
        if record.colorized_at
        else None,
        "status": record.status.value,
        "escrowed_fee": record.escrowed_fee,
        "assigned_processor": record.assigned_processor,
        "minted_asset_id": record.minted_asset_id,
        "version": record.version,
    }


def serialize_adjustment(entry: AdjustmentEntry) -> dict[str, object]:
    return {
        "photo_id": entry.photo_id,
        "adjuster": entry.adjuster,
        "payload": entry.payload,
        "final_ref": entry.final_ref,
        "applied_at": entry.applied_at.isoformat(),
    }


def serialize_processor(profile: ProcessorProfile) -> dict[str, object]:
    return {
        "identity": profile.identity,
        "model_ref": profile.model_ref,
        "registered_at": profile.registered_at.isoformat(),
        "total_processed": profile.total_processed,
        "reputation": profile.reputation,
        "active": profile.active,
    }


def serialize_fees(fees: FeeSchedule) -> dict[str, object]:
    return {
        "colorization_fee": fees.colorization_fee,
        "adjustment_fee": fees.adjustment_fee,
        "mint_fee": fees.mint_fee,
        "updated_at": fees.updated_at.isoformat() if fees.updated_at else None,
    }


def serialize_ledger(
    summary: LedgerSummary, entries: list[LedgerEntry]
) -> dict[str, object]:
    return {
        "balance": summary.balance,
        "obligations": summary.obligations,
        "withdrawable": summary.withdrawable,
        "entries": [
            {
                "kind": entry.kind.value,
                "amount": entry.amount,
                "counterparty": entry.counterparty,
                "photo_id": entry.photo_id,
                "created_at": entry.created_at.isoformat(),
            }
            for entry in entries
        ],
    }
