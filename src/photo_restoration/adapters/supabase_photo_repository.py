"""Supabase-backed photo record repository."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from photo_restoration.domain.photos import AdjustmentEntry, PhotoRecord, PhotoStatus
from photo_restoration.services.photos import PhotoRepository

_PHOTO_COLUMNS = (
    "id, owner, original_ref, colorized_ref, final_ref, submitted_at, "
    "colorized_at, status, escrowed_fee, assigned_processor, minted_asset_id, "
    "version"
)


@dataclass
class SupabasePhotoRepository(PhotoRepository):
    """Supabase implementation for photo records and adjustments.

    Photo ids come from the ``photos.id`` identity column, so they are
    allocated by the insert itself and never reused.
    """

    client: Client

    def create_photo(
        self,
        owner: str,
        original_ref: str,
        escrowed_fee: int,
        submitted_at: datetime,
    ) -> PhotoRecord:
        """Insert a SUBMITTED row and return it with its allocated id."""
        response = (
            self.client.table("photos")
            .insert(
                {
                    "owner": owner,
                    "original_ref": original_ref,
                    "colorized_ref": "",
                    "final_ref": "",
                    "submitted_at": submitted_at.isoformat(),
                    "status": PhotoStatus.SUBMITTED.value,
                    "escrowed_fee": str(escrowed_fee),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create photo record")
        return _parse_photo(response.data[0])

    def get_photo(self, photo_id: int) -> PhotoRecord | None:
        """Return a photo by id, if present."""
        response = (
            self.client.table("photos")
            .select(_PHOTO_COLUMNS)
            .eq("id", photo_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_photo(response.data[0])

    def update_photo(self, record: PhotoRecord, expected_version: int) -> bool:
        """Write the workflow fields if the row is still at ``expected_version``."""
        response = (
            self.client.table("photos")
            .update(
                {
                    "colorized_ref": record.colorized_ref,
                    "final_ref": record.final_ref,
                    "colorized_at": record.colorized_at.isoformat()
                    if record.colorized_at
                    else None,
                    "status": record.status.value,
                    "assigned_processor": record.assigned_processor,
                    "minted_asset_id": record.minted_asset_id,
                    "version": record.version,
                }
            )
            .eq("id", record.id)
            .eq("version", expected_version)
            .execute()
        )
        return bool(response.data)

    def delete_photo(self, photo_id: int) -> None:
        """Delete a photo row."""
        self.client.table("photos").delete().eq("id", photo_id).execute()

    def list_photo_ids_by_owner(self, owner: str) -> list[int]:
        """Return an owner's photo ids in submission order."""
        response = (
            self.client.table("photos")
            .select("id")
            .eq("owner", owner)
            .order("id")
            .execute()
        )
        return [int(row["id"]) for row in response.data or []]

    def append_adjustment(self, entry: AdjustmentEntry) -> None:
        """Insert an adjustment row."""
        self.client.table("photo_adjustments").insert(
            {
                "photo_id": entry.photo_id,
                "adjuster": entry.adjuster,
                "payload": entry.payload,
                "final_ref": entry.final_ref,
                "applied_at": entry.applied_at.isoformat(),
            }
        ).execute()

    def remove_adjustment(self, entry: AdjustmentEntry) -> None:
        """Delete the adjustment row written for ``entry``."""
        (
            self.client.table("photo_adjustments")
            .delete()
            .eq("photo_id", entry.photo_id)
            .eq("adjuster", entry.adjuster)
            .eq("final_ref", entry.final_ref)
            .eq("applied_at", entry.applied_at.isoformat())
            .execute()
        )

    def list_adjustments(self, photo_id: int) -> list[AdjustmentEntry]:
        """Return a photo's adjustments in insertion order."""
        response = (
            self.client.table("photo_adjustments")
            .select("photo_id, adjuster, payload, final_ref, applied_at")
            .eq("photo_id", photo_id)
            .order("id")
            .execute()
        )
        return [
            AdjustmentEntry(
                photo_id=int(row["photo_id"]),
                adjuster=row["adjuster"],
                payload=row["payload"],
                final_ref=row["final_ref"],
                applied_at=datetime.fromisoformat(row["applied_at"]),
            )
            for row in response.data or []
        ]


def _parse_photo(row: dict[str, object]) -> PhotoRecord:
    """Parse a photos row into a domain model."""
    colorized_raw = row.get("colorized_at")
    colorized_at = (
        datetime.fromisoformat(colorized_raw)
        if isinstance(colorized_raw, str) and colorized_raw
        else None
    )
    return PhotoRecord(
        id=int(row["id"]),
        owner=str(row["owner"]),
        original_ref=str(row["original_ref"]),
        submitted_at=datetime.fromisoformat(str(row["submitted_at"])),
        status=PhotoStatus(row["status"]),
        escrowed_fee=int(row["escrowed_fee"]),
        colorized_ref=str(row.get("colorized_ref") or ""),
        final_ref=str(row.get("final_ref") or ""),
        colorized_at=colorized_at,
        assigned_processor=row.get("assigned_processor"),
        minted_asset_id=row.get("minted_asset_id"),
        version=int(row.get("version") or 0),
    )
