"""Shared test fixtures."""

import asyncio
import threading
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta

import pytest

from photo_restoration.adapters.asset_ledger_client import AssetLedgerClient
from photo_restoration.config import Settings
from photo_restoration.containers import AppContainer, default_fees
from photo_restoration.domain.fees import FeeSchedule
from photo_restoration.domain.ledger import EntryKind, LedgerAccount, LedgerEntry
from photo_restoration.domain.photos import AdjustmentEntry, PhotoRecord, PhotoStatus
from photo_restoration.domain.processors import ProcessorProfile
from photo_restoration.services.admin import StaticAdminCapability
from photo_restoration.services.events import EventRepository, EventService
from photo_restoration.services.ledger import LedgerRepository, LedgerService
from photo_restoration.services.photos import PhotoRecordStore, PhotoRepository
from photo_restoration.services.processors import (
    ProcessorRegistry,
    ProcessorRepository,
)
from photo_restoration.services.reporting import ReportingService
from photo_restoration.services.settlement import FeeRepository, SettlementEngine
from photo_restoration.services.workflow import WorkflowService

ADMIN = "0xadmin"
OWNER = "0xowner"
PROCESSOR = "0xprocessor"
OTHER = "0xother"

COLORIZATION_FEE = 10**16
ADJUSTMENT_FEE = 5 * 10**15
MINT_FEE = 2 * 10**16


@dataclass
class FakeClock:
    """Deterministic clock that advances one second per reading."""

    current: datetime = field(
        default_factory=lambda: datetime(2024, 1, 1, tzinfo=UTC)
    )

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(seconds=1)
        return self.current


@dataclass
class InMemoryPhotoRepository(PhotoRepository):
    """In-memory photo repository for tests."""

    photos: dict[int, PhotoRecord] = field(default_factory=dict)
    owner_index: dict[str, list[int]] = field(default_factory=dict)
    adjustments: dict[int, list[AdjustmentEntry]] = field(default_factory=dict)
    next_id: int = 1
    fail_updates: bool = False
    read_barrier: threading.Barrier | None = None
    _write_lock: threading.Lock = field(default_factory=threading.Lock)

    def create_photo(
        self,
        owner: str,
        original_ref: str,
        escrowed_fee: int,
        submitted_at: datetime,
    ) -> PhotoRecord:
        record = PhotoRecord(
            id=self.next_id,
            owner=owner,
            original_ref=original_ref,
            submitted_at=submitted_at,
            status=PhotoStatus.SUBMITTED,
            escrowed_fee=escrowed_fee,
        )
        self.next_id += 1
        self.photos[record.id] = record
        self.owner_index.setdefault(owner, []).append(record.id)
        return record

    def get_photo(self, photo_id: int) -> PhotoRecord | None:
        record = self.photos.get(photo_id)
        if self.read_barrier is not None:
            self.read_barrier.wait(timeout=5)
        return record

    def update_photo(self, record: PhotoRecord, expected_version: int) -> bool:
        if self.fail_updates:
            raise RuntimeError("photo store unavailable")
        with self._write_lock:
            current = self.photos.get(record.id)
            if current is None or current.version != expected_version:
                return False
            self.photos[record.id] = record
            return True

    def delete_photo(self, photo_id: int) -> None:
        record = self.photos.pop(photo_id, None)
        if record is not None:
            self.owner_index[record.owner].remove(photo_id)

    def list_photo_ids_by_owner(self, owner: str) -> list[int]:
        return list(self.owner_index.get(owner, []))

    def append_adjustment(self, entry: AdjustmentEntry) -> None:
        self.adjustments.setdefault(entry.photo_id, []).append(entry)

    def remove_adjustment(self, entry: AdjustmentEntry) -> None:
        history = self.adjustments.get(entry.photo_id, [])
        if entry in history:
            history.remove(entry)

    def list_adjustments(self, photo_id: int) -> list[AdjustmentEntry]:
        return list(self.adjustments.get(photo_id, []))


@dataclass
class InMemoryProcessorRepository(ProcessorRepository):
    """In-memory processor repository for tests."""

    processors: dict[str, ProcessorProfile] = field(default_factory=dict)

    def get_processor(self, identity: str) -> ProcessorProfile | None:
        return self.processors.get(identity)

    def create_processor(self, profile: ProcessorProfile) -> ProcessorProfile:
        self.processors[profile.identity] = profile
        return profile

    def update_processor(self, profile: ProcessorProfile) -> None:
        current = self.processors[profile.identity]
        self.processors[profile.identity] = replace(
            current, reputation=profile.reputation, active=profile.active
        )

    def increment_processed(self, identity: str) -> int:
        current = self.processors[identity]
        self.processors[identity] = replace(
            current, total_processed=current.total_processed + 1
        )
        return current.total_processed + 1

    def decrement_processed(self, identity: str) -> int:
        current = self.processors[identity]
        total = max(current.total_processed - 1, 0)
        self.processors[identity] = replace(current, total_processed=total)
        return total

    def list_processors(self) -> list[ProcessorProfile]:
        return list(self.processors.values())


@dataclass
class InMemoryFeeRepository(FeeRepository):
    """In-memory fee repository for tests."""

    fees: FeeSchedule | None = None

    def get_fees(self) -> FeeSchedule | None:
        return self.fees

    def set_fees(self, fees: FeeSchedule) -> None:
        self.fees = fees


@dataclass
class InMemoryLedgerRepository(LedgerRepository):
    """In-memory ledger repository for tests."""

    balance: int = 0
    obligations: int = 0
    entries: list[LedgerEntry] = field(default_factory=list)
    fail_next_apply: bool = False

    def get_account(self) -> LedgerAccount:
        return LedgerAccount(balance=self.balance, obligations=self.obligations)

    def apply_entries(self, entries: list[LedgerEntry]) -> LedgerAccount:
        if self.fail_next_apply:
            self.fail_next_apply = False
            raise RuntimeError("ledger unavailable")
        for entry in entries:
            self.balance += entry.balance_delta
            self.obligations += entry.obligation_delta
        self.entries.extend(entries)
        return self.get_account()

    def total_paid_to(self, identity: str) -> int:
        return sum(
            entry.amount
            for entry in self.entries
            if entry.counterparty == identity
            and entry.kind in {EntryKind.DISBURSE, EntryKind.WITHDRAW}
        )

    def list_entries(self, limit: int) -> list[LedgerEntry]:
        return list(reversed(self.entries))[:limit]


@dataclass
class InMemoryEventRepository(EventRepository):
    """In-memory event log for tests."""

    events: list[tuple[str, dict[str, object]]] = field(default_factory=list)

    def record_event(self, event_type: str, payload: dict[str, object]) -> None:
        self.events.append((event_type, payload))

    def types(self) -> list[str]:
        return [event_type for event_type, _ in self.events]


@dataclass
class FakeAssetLedgerClient(AssetLedgerClient):
    """Fake collectible ledger that mints sequential asset ids."""

    assets: dict[int, str] = field(default_factory=dict)
    minted: list[tuple[str, str, int]] = field(default_factory=list)
    fail_mint: bool = False

    async def mint(self, owner: str, metadata_ref: str, photo_id: int) -> str:
        await asyncio.sleep(0)
        if self.fail_mint:
            raise RuntimeError("asset ledger unavailable")
        asset_id = f"asset-{len(self.minted) + 1}"
        self.minted.append((owner, metadata_ref, photo_id))
        self.assets[photo_id] = asset_id
        return asset_id

    async def asset_of(self, photo_id: int) -> str | None:
        return self.assets.get(photo_id)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        admin_token="admin-token",
        admin_identity=ADMIN,
        asset_ledger_url="https://assets.example.com",
        colorization_fee=COLORIZATION_FEE,
        adjustment_fee=ADJUSTMENT_FEE,
        mint_fee=MINT_FEE,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def container(settings: Settings, clock: FakeClock) -> AppContainer:
    admin = StaticAdminCapability(settings.admin_identity)
    event_service = EventService(InMemoryEventRepository())
    ledger = LedgerService(InMemoryLedgerRepository(), clock=clock)
    photos = PhotoRecordStore(InMemoryPhotoRepository())
    processor_registry = ProcessorRegistry(
        repository=InMemoryProcessorRepository(),
        admin=admin,
        events=event_service,
        clock=clock,
    )
    settlement_engine = SettlementEngine(
        ledger=ledger,
        fee_repository=InMemoryFeeRepository(),
        admin=admin,
        events=event_service,
        default_fees=default_fees(settings),
        processor_share_percent=settings.processor_share_percent,
        clock=clock,
    )
    asset_ledger = FakeAssetLedgerClient()
    workflow_service = WorkflowService(
        photos=photos,
        processors=processor_registry,
        settlement=settlement_engine,
        asset_ledger=asset_ledger,
        events=event_service,
        clock=clock,
    )
    reporting_service = ReportingService(
        photos=photos,
        processors=processor_registry,
        settlement=settlement_engine,
        ledger=ledger,
        asset_ledger=asset_ledger,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        event_service=event_service,
        processor_registry=processor_registry,
        settlement_engine=settlement_engine,
        workflow_service=workflow_service,
        reporting_service=reporting_service,
        close_resources=close_resources,
    )


@pytest.fixture
def workflow(container: AppContainer) -> WorkflowService:
    return container.workflow_service


@pytest.fixture
def registry(container: AppContainer) -> ProcessorRegistry:
    return container.processor_registry


@pytest.fixture
def ledger_repository(container: AppContainer) -> InMemoryLedgerRepository:
    repository = container.settlement_engine.ledger.repository
    assert isinstance(repository, InMemoryLedgerRepository)
    return repository


@pytest.fixture
def photo_repository(container: AppContainer) -> InMemoryPhotoRepository:
    repository = container.workflow_service.photos.repository
    assert isinstance(repository, InMemoryPhotoRepository)
    return repository


@pytest.fixture
def event_repository(container: AppContainer) -> InMemoryEventRepository:
    repository = container.event_service.repository
    assert isinstance(repository, InMemoryEventRepository)
    return repository


@pytest.fixture
def asset_ledger(container: AppContainer) -> FakeAssetLedgerClient:
    client = container.workflow_service.asset_ledger
    assert isinstance(client, FakeAssetLedgerClient)
    return client


def submit_and_colorize(
    workflow: WorkflowService, registry: ProcessorRegistry
) -> PhotoRecord:
    """Drive a photo to AI_COLORIZED with the default processor."""
    if registry.repository.get_processor(PROCESSOR) is None:
        registry.register(PROCESSOR, "model://deoldify-v2")
    record = asyncio.run(workflow.submit(OWNER, "cid://original", COLORIZATION_FEE))
    return asyncio.run(
        workflow.submit_colorization(PROCESSOR, record.id, "cid://colorized")
    )
