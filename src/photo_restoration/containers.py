"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from photo_restoration.adapters.asset_ledger_client import HttpxAssetLedgerClient
from photo_restoration.adapters.supabase_event_repository import (
    SupabaseEventRepository,
)
from photo_restoration.adapters.supabase_fee_repository import SupabaseFeeRepository
from photo_restoration.adapters.supabase_ledger_repository import (
    SupabaseLedgerRepository,
)
from photo_restoration.adapters.supabase_photo_repository import SupabasePhotoRepository
from photo_restoration.adapters.supabase_processor_repository import (
    SupabaseProcessorRepository,
)
from photo_restoration.config import Settings
from photo_restoration.domain.fees import FeeSchedule
from photo_restoration.services.admin import StaticAdminCapability
from photo_restoration.services.events import EventService
from photo_restoration.services.ledger import LedgerService
from photo_restoration.services.photos import PhotoRecordStore
from photo_restoration.services.processors import ProcessorRegistry
from photo_restoration.services.reporting import ReportingService
from photo_restoration.services.settlement import SettlementEngine
from photo_restoration.services.workflow import WorkflowService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    event_service: EventService
    processor_registry: ProcessorRegistry
    settlement_engine: SettlementEngine
    workflow_service: WorkflowService
    reporting_service: ReportingService
    close_resources: Callable[[], Awaitable[None]]


def default_fees(settings: Settings) -> FeeSchedule:
    """Fee schedule used until an administrator sets one."""
    return FeeSchedule(
        colorization_fee=settings.colorization_fee,
        adjustment_fee=settings.adjustment_fee,
        mint_fee=settings.mint_fee,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    admin = StaticAdminCapability(resolved_settings.admin_identity)
    event_service = EventService(SupabaseEventRepository(supabase_client))
    ledger = LedgerService(SupabaseLedgerRepository(supabase_client))
    photos = PhotoRecordStore(SupabasePhotoRepository(supabase_client))
    processor_registry = ProcessorRegistry(
        repository=SupabaseProcessorRepository(supabase_client),
        admin=admin,
        events=event_service,
    )
    settlement_engine = SettlementEngine(
        ledger=ledger,
        fee_repository=SupabaseFeeRepository(supabase_client),
        admin=admin,
        events=event_service,
        default_fees=default_fees(resolved_settings),
        processor_share_percent=resolved_settings.processor_share_percent,
    )
    asset_ledger = HttpxAssetLedgerClient.create(
        resolved_settings.asset_ledger_url,
        api_key=resolved_settings.asset_ledger_api_key,
    )
    workflow_service = WorkflowService(
        photos=photos,
        processors=processor_registry,
        settlement=settlement_engine,
        asset_ledger=asset_ledger,
        events=event_service,
    )
    reporting_service = ReportingService(
        photos=photos,
        processors=processor_registry,
        settlement=settlement_engine,
        ledger=ledger,
        asset_ledger=asset_ledger,
    )

    async def close_resources() -> None:
        await asset_ledger.close()

    return AppContainer(
        settings=resolved_settings,
        event_service=event_service,
        processor_registry=processor_registry,
        settlement_engine=settlement_engine,
        workflow_service=workflow_service,
        reporting_service=reporting_service,
        close_resources=close_resources,
    )
