"""Photo record store and adjustment history."""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Protocol

from photo_restoration.domain.errors import InvalidTransitionError, NotFoundError
from photo_restoration.domain.photos import AdjustmentEntry, PhotoRecord


class PhotoRepository(Protocol):
    """Persistence interface for photo records and their history."""

    def create_photo(
        self,
        owner: str,
        original_ref: str,
        escrowed_fee: int,
        submitted_at: datetime,
    ) -> PhotoRecord:
        """Allocate the next id, store a SUBMITTED record and index it."""

    def get_photo(self, photo_id: int) -> PhotoRecord | None:
        """Return a photo record by id, if present."""

    def update_photo(self, record: PhotoRecord, expected_version: int) -> bool:
        """Overwrite the record only if its stored version is ``expected_version``.

        Returns False when another writer changed the record first.
        """

    def delete_photo(self, photo_id: int) -> None:
        """Remove a record whose creating transition did not commit."""

    def list_photo_ids_by_owner(self, owner: str) -> list[int]:
        """Return ids submitted by an owner in submission order."""

    def append_adjustment(self, entry: AdjustmentEntry) -> None:
        """Append an adjustment to a photo's history."""

    def remove_adjustment(self, entry: AdjustmentEntry) -> None:
        """Drop an adjustment whose transition did not commit."""

    def list_adjustments(self, photo_id: int) -> list[AdjustmentEntry]:
        """Return a photo's adjustments in application order."""


@dataclass
class PhotoRecordStore:
    """Owns photo records, the owner index and adjustment history."""

    repository: PhotoRepository

    def create(
        self, owner: str, original_ref: str, escrowed_fee: int, submitted_at: datetime
    ) -> PhotoRecord:
        """Create a record; the repository assigns its id."""
        return self.repository.create_photo(
            owner=owner,
            original_ref=original_ref,
            escrowed_fee=escrowed_fee,
            submitted_at=submitted_at,
        )

    def require(self, photo_id: int) -> PhotoRecord:
        """Return a record or raise NotFoundError."""
        record = self.repository.get_photo(photo_id)
        if record is None:
            raise NotFoundError(f"photo {photo_id} does not exist")
        return record

    def save(
        self,
        previous: PhotoRecord,
        updated: PhotoRecord,
        adjustment: AdjustmentEntry | None = None,
    ) -> PhotoRecord:
        """Persist a transitioned record and its new history entry together.

        The write succeeds only if the stored record is still ``previous``.
        """
        saved = replace(updated, version=previous.version + 1)
        if adjustment is not None:
            self.repository.append_adjustment(adjustment)
        try:
            written = self.repository.update_photo(saved, previous.version)
        except Exception:
            if adjustment is not None:
                self.repository.remove_adjustment(adjustment)
            raise
        if not written:
            if adjustment is not None:
                self.repository.remove_adjustment(adjustment)
            raise InvalidTransitionError(
                f"photo {previous.id} was modified by a concurrent transition"
            )
        return saved

    def restore(
        self,
        previous: PhotoRecord,
        saved: PhotoRecord,
        adjustment: AdjustmentEntry | None = None,
    ) -> bool:
        """Undo ``save`` for a transition whose settlement failed to commit.

        Returns False, leaving the record alone, if another transition has
        already built on ``saved``.
        """
        if not self.repository.update_photo(previous, saved.version):
            return False
        if adjustment is not None:
            self.repository.remove_adjustment(adjustment)
        return True

    def discard(self, photo_id: int) -> None:
        """Undo ``create`` for a submission whose escrow failed to commit."""
        self.repository.delete_photo(photo_id)

    def ids_by_owner(self, owner: str) -> list[int]:
        return self.repository.list_photo_ids_by_owner(owner)

    def adjustments(self, photo_id: int) -> list[AdjustmentEntry]:
        self.require(photo_id)
        return self.repository.list_adjustments(photo_id)
