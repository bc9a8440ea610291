"""Supabase repository for the fee schedule."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from photo_restoration.domain.fees import FeeSchedule
from photo_restoration.services.settlement import FeeRepository

_SCHEDULE_ID = 1


@dataclass
class SupabaseFeeRepository(FeeRepository):
    """Stores the single fee schedule row."""

    client: Client

    def get_fees(self) -> FeeSchedule | None:
        """Return the stored schedule, if any."""
        response = (
            self.client.table("fee_schedule")
            .select("colorization_fee, adjustment_fee, mint_fee, updated_at")
            .eq("id", _SCHEDULE_ID)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        updated_raw = row.get("updated_at")
        return FeeSchedule(
            colorization_fee=int(row["colorization_fee"]),
            adjustment_fee=int(row["adjustment_fee"]),
            mint_fee=int(row["mint_fee"]),
            updated_at=datetime.fromisoformat(updated_raw)
            if isinstance(updated_raw, str) and updated_raw
            else None,
        )

    def set_fees(self, fees: FeeSchedule) -> None:
        """Upsert the schedule row."""
        self.client.table("fee_schedule").upsert(
            {
                "id": _SCHEDULE_ID,
                "colorization_fee": str(fees.colorization_fee),
                "adjustment_fee": str(fees.adjustment_fee),
                "mint_fee": str(fees.mint_fee),
                "updated_at": fees.updated_at.isoformat() if fees.updated_at else None,
            }
        ).execute()
