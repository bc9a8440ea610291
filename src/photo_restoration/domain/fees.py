"""Fee schedule models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class FeeSchedule:
    """Fees charged for each paid transition, in the smallest currency unit."""

    colorization_fee: int
    adjustment_fee: int
    mint_fee: int
    updated_at: datetime | None = None
