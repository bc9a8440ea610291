"""Supabase repository for emitted workflow events."""

from dataclasses import dataclass

from supabase import Client

from photo_restoration.services.events import EventRepository


@dataclass
class SupabaseEventRepository(EventRepository):
    """Supabase-backed event log."""

    client: Client

    def record_event(self, event_type: str, payload: dict[str, object]) -> None:
        """Insert an event row."""
        self.client.table("workflow_events").insert(
            {"event_type": event_type, "payload_json": payload}
        ).execute()
