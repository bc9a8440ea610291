"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status
from fastapi.responses import JSONResponse

from photo_restoration.api.admin import router as admin_router
from photo_restoration.api.dependencies import require_actor
from photo_restoration.api.models import (
    AdjustmentRequest,
    ColorizationRequest,
    MintRequest,
    RegisterProcessorRequest,
    SubmitPhotoRequest,
)
from photo_restoration.api.serializers import (
    serialize_adjustment,
    serialize_fees,
    serialize_photo,
    serialize_processor,
)
from photo_restoration.app_logging import configure_logging
from photo_restoration.config import parse_identity
from photo_restoration.containers import AppContainer
from photo_restoration.domain.errors import (
    AlreadyRegisteredError,
    InsufficientEscrowError,
    InsufficientPaymentError,
    InvalidTransitionError,
    NotFoundError,
    OutOfRangeError,
    UnauthorizedError,
    WorkflowError,
)

_ERROR_STATUS: dict[type[WorkflowError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    UnauthorizedError: status.HTTP_403_FORBIDDEN,
    InvalidTransitionError: status.HTTP_409_CONFLICT,
    InsufficientPaymentError: status.HTTP_402_PAYMENT_REQUIRED,
    AlreadyRegisteredError: status.HTTP_409_CONFLICT,
    OutOfRangeError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InsufficientEscrowError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level.upper())
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.exception_handler(WorkflowError)
    async def workflow_error_handler(
        request: Request, exc: WorkflowError
    ) -> JSONResponse:
        status_code = _ERROR_STATUS.get(
            type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("%s on %s: %s", exc.kind, request.url.path, exc.detail)
        return JSONResponse(
            status_code=status_code,
            content={"error": exc.kind, "detail": exc.detail},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/photos", status_code=status.HTTP_201_CREATED)
    async def submit_photo(
        body: SubmitPhotoRequest, request: Request, actor: str = Depends(require_actor)
    ) -> dict[str, object]:
        """Submit a photo for colorization."""
        state_container: AppContainer = request.app.state.container
        record = await state_container.workflow_service.submit(
            actor, body.original_ref, body.payment
        )
        return {"photo_id": record.id, "photo": serialize_photo(record)}

    @app.get("/photos/{photo_id}")
    async def get_photo(photo_id: int, request: Request) -> dict[str, object]:
        """Return a photo record."""
        state_container: AppContainer = request.app.state.container
        record = state_container.reporting_service.get_photo(photo_id)
        return serialize_photo(record)

    @app.post("/photos/{photo_id}/colorization")
    async def submit_colorization(
        photo_id: int,
        body: ColorizationRequest,
        request: Request,
        actor: str = Depends(require_actor),
    ) -> dict[str, object]:
        """Deliver a colorization result as a registered processor."""
        state_container: AppContainer = request.app.state.container
        record = await state_container.workflow_service.submit_colorization(
            actor, photo_id, body.colorized_ref
        )
        return serialize_photo(record)

    @app.post("/photos/{photo_id}/adjustments")
    async def adjust_photo(
        photo_id: int,
        body: AdjustmentRequest,
        request: Request,
        actor: str = Depends(require_actor),
    ) -> dict[str, object]:
        """Apply a manual adjustment as the photo owner."""
        state_container: AppContainer = request.app.state.container
        record = await state_container.workflow_service.adjust(
            actor, photo_id, body.payload, body.final_ref, body.payment
        )
        return serialize_photo(record)

    @app.get("/photos/{photo_id}/adjustments")
    async def list_adjustments(photo_id: int, request: Request) -> dict[str, object]:
        """Return a photo's adjustment history."""
        state_container: AppContainer = request.app.state.container
        entries = state_container.reporting_service.get_adjustments(photo_id)
        return {"adjustments": [serialize_adjustment(entry) for entry in entries]}

    @app.post("/photos/{photo_id}/mint")
    async def mint_photo(
        photo_id: int,
        body: MintRequest,
        request: Request,
        actor: str = Depends(require_actor),
    ) -> dict[str, object]:
        """Mint the photo as a collectible."""
        state_container: AppContainer = request.app.state.container
        asset_id = await state_container.workflow_service.mint(
            actor, photo_id, body.metadata_ref, body.payment
        )
        return {"photo_id": photo_id, "asset_id": asset_id}

    @app.get("/photos/{photo_id}/asset")
    async def get_asset(photo_id: int, request: Request) -> dict[str, object]:
        """Return the collectible minted for a photo, if any."""
        state_container: AppContainer = request.app.state.container
        asset_id = await state_container.reporting_service.asset_of(photo_id)
        return {"photo_id": photo_id, "asset_id": asset_id}

    @app.get("/owners/{identity}/photos")
    async def photos_by_owner(identity: str, request: Request) -> dict[str, object]:
        """Return ids of photos submitted by an owner."""
        state_container: AppContainer = request.app.state.container
        owner = parse_identity(identity) or identity
        return {
            "owner": owner,
            "photo_ids": state_container.reporting_service.get_photos_by_owner(owner),
        }

    @app.post("/processors", status_code=status.HTTP_201_CREATED)
    async def register_processor(
        body: RegisterProcessorRequest,
        request: Request,
        actor: str = Depends(require_actor),
    ) -> dict[str, object]:
        """Register the caller as a colorization processor."""
        state_container: AppContainer = request.app.state.container
        profile = state_container.processor_registry.register(actor, body.model_ref)
        return serialize_processor(profile)

    @app.get("/processors")
    async def list_processors(request: Request) -> dict[str, object]:
        """Return processors ranked by reputation."""
        state_container: AppContainer = request.app.state.container
        profiles = state_container.reporting_service.list_processors()
        return {"processors": [serialize_processor(p) for p in profiles]}

    @app.get("/processors/{identity}")
    async def get_processor(identity: str, request: Request) -> dict[str, object]:
        """Return a processor profile with its payout total."""
        state_container: AppContainer = request.app.state.container
        reporting = state_container.reporting_service
        profile = reporting.get_processor(parse_identity(identity) or identity)
        return {
            **serialize_processor(profile),
            "total_paid": reporting.get_payouts(profile.identity),
        }

    @app.get("/fees")
    async def get_fees(request: Request) -> dict[str, object]:
        """Return the current fee schedule."""
        state_container: AppContainer = request.app.state.container
        return serialize_fees(state_container.reporting_service.get_fees())

    return app
