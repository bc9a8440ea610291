"""Domain models for photo submissions."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class PhotoStatus(str, Enum):
    """Workflow status of a submitted photo."""

    SUBMITTED = "SUBMITTED"
    AI_COLORIZED = "AI_COLORIZED"
    MANUALLY_ADJUSTED = "MANUALLY_ADJUSTED"
    COMPLETED = "COMPLETED"
    ASSET_MINTED = "ASSET_MINTED"


@dataclass(frozen=True)
class PhotoRecord:
    """Represents a single restoration submission.

    ``version`` increases by one on every persisted transition and guards
    writes against concurrent updates from other workers.
    """

    id: int
    owner: str
    original_ref: str
    submitted_at: datetime
    status: PhotoStatus
    escrowed_fee: int
    colorized_ref: str = ""
    final_ref: str = ""
    colorized_at: datetime | None = None
    assigned_processor: str | None = None
    minted_asset_id: str | None = None
    version: int = 0

    @property
    def is_minted(self) -> bool:
        """Return whether the collectible has been minted."""
        return self.minted_asset_id is not None


@dataclass(frozen=True)
class AdjustmentEntry:
    """A manual edit applied to a photo by its owner."""

    photo_id: int
    adjuster: str
    payload: str
    final_ref: str
    applied_at: datetime
