"""Supabase repository for the pooled ledger account."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from photo_restoration.domain.ledger import EntryKind, LedgerAccount, LedgerEntry
from photo_restoration.services.ledger import LedgerRepository

_ENTRY_COLUMNS = "kind, amount, counterparty, created_at, photo_id, obligation_delta"


@dataclass
class SupabaseLedgerRepository(LedgerRepository):
    """Ledger persistence.

    Entries are applied through the ``apply_ledger_entries`` Postgres function,
    which inserts the journal rows and updates the ``ledger_account`` row in one
    database transaction.
    """

    client: Client

    def get_account(self) -> LedgerAccount:
        """Return the committed balance and obligations."""
        response = (
            self.client.table("ledger_account")
            .select("balance, obligations")
            .limit(1)
            .execute()
        )
        if not response.data:
            return LedgerAccount(balance=0, obligations=0)
        return _parse_account(response.data[0])

    def apply_entries(self, entries: list[LedgerEntry]) -> LedgerAccount:
        """Apply a batch of entries atomically."""
        response = self.client.rpc(
            "apply_ledger_entries",
            {"p_entries": [_serialize_entry(entry) for entry in entries]},
        ).execute()
        if not response.data:
            raise RuntimeError("Failed to apply ledger entries")
        row = response.data[0] if isinstance(response.data, list) else response.data
        return _parse_account(row)

    def total_paid_to(self, identity: str) -> int:
        """Sum payouts to an identity."""
        response = (
            self.client.table("ledger_entries")
            .select("amount")
            .eq("counterparty", identity)
            .in_("kind", [EntryKind.DISBURSE.value, EntryKind.WITHDRAW.value])
            .execute()
        )
        return sum(int(row["amount"]) for row in response.data or [])

    def list_entries(self, limit: int) -> list[LedgerEntry]:
        """Return recent entries, newest first."""
        response = (
            self.client.table("ledger_entries")
            .select(_ENTRY_COLUMNS)
            .order("id", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_entry(row) for row in response.data or []]


def _serialize_entry(entry: LedgerEntry) -> dict[str, object]:
    return {
        "kind": entry.kind.value,
        "amount": str(entry.amount),
        "counterparty": entry.counterparty,
        "created_at": entry.created_at.isoformat(),
        "photo_id": entry.photo_id,
        "obligation_delta": str(entry.obligation_delta),
    }


def _parse_entry(row: dict[str, object]) -> LedgerEntry:
    photo_id = row.get("photo_id")
    return LedgerEntry(
        kind=EntryKind(row["kind"]),
        amount=int(row["amount"]),
        counterparty=str(row["counterparty"]),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        photo_id=int(photo_id) if photo_id is not None else None,
        obligation_delta=int(row.get("obligation_delta") or 0),
    )


def _parse_account(row: dict[str, object]) -> LedgerAccount:
    return LedgerAccount(
        balance=int(row.get("balance") or 0),
        obligations=int(row.get("obligations") or 0),
    )
