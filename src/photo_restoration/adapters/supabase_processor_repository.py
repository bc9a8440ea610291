"""Supabase-backed processor registry repository."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from photo_restoration.domain.processors import DEFAULT_REPUTATION, ProcessorProfile
from photo_restoration.services.processors import ProcessorRepository

_COLUMNS = "identity, model_ref, registered_at, total_processed, reputation, active"


@dataclass
class SupabaseProcessorRepository(ProcessorRepository):
    """Supabase implementation for processor profiles."""

    client: Client

    def get_processor(self, identity: str) -> ProcessorProfile | None:
        """Return a processor by identity, if present."""
        response = (
            self.client.table("processors")
            .select(_COLUMNS)
            .eq("identity", identity)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_processor(response.data[0])

    def create_processor(self, profile: ProcessorProfile) -> ProcessorProfile:
        """Insert a processor row and return it."""
        response = (
            self.client.table("processors")
            .insert(
                {
                    "identity": profile.identity,
                    "model_ref": profile.model_ref,
                    "registered_at": profile.registered_at.isoformat(),
                    "total_processed": profile.total_processed,
                    "reputation": profile.reputation,
                    "active": profile.active,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to register processor")
        return _parse_processor(response.data[0])

    def update_processor(self, profile: ProcessorProfile) -> None:
        """Update status and reputation; counters are left to the RPCs."""
        self.client.table("processors").update(
            {"reputation": profile.reputation, "active": profile.active}
        ).eq("identity", profile.identity).execute()

    def increment_processed(self, identity: str) -> int:
        """Increment total_processed in a single statement."""
        return self._adjust_processed(identity, 1)

    def decrement_processed(self, identity: str) -> int:
        """Decrement total_processed in a single statement."""
        return self._adjust_processed(identity, -1)

    def list_processors(self) -> list[ProcessorProfile]:
        """Return all processors ordered by registration."""
        response = (
            self.client.table("processors")
            .select(_COLUMNS)
            .order("registered_at")
            .execute()
        )
        return [_parse_processor(row) for row in response.data or []]

    def _adjust_processed(self, identity: str, delta: int) -> int:
        response = self.client.rpc(
            "increment_processor_total", {"p_identity": identity, "p_delta": delta}
        ).execute()
        if response.data is None:
            raise RuntimeError("Failed to update processor counter")
        return int(response.data)


def _parse_processor(row: dict[str, object]) -> ProcessorProfile:
    """Parse a processors row into a domain model."""
    return ProcessorProfile(
        identity=str(row["identity"]),
        model_ref=str(row["model_ref"]),
        registered_at=datetime.fromisoformat(str(row["registered_at"])),
        total_processed=int(row.get("total_processed") or 0),
        reputation=int(row.get("reputation", DEFAULT_REPUTATION)),
        active=bool(row.get("active", True)),
    )
