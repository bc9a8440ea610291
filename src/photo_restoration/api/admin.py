"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from photo_restoration.api.dependencies import require_actor
from photo_restoration.api.models import (
    FeesRequest,
    ProcessorActiveRequest,
    ReputationRequest,
)
from photo_restoration.api.serializers import (
    serialize_fees,
    serialize_ledger,
    serialize_processor,
)
from photo_restoration.config import parse_identity

if TYPE_CHECKING:
    from photo_restoration.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.put("/processors/{identity}/active", dependencies=[Depends(require_admin)])
async def set_processor_active(
    identity: str,
    body: ProcessorActiveRequest,
    request: Request,
    actor: str = Depends(require_actor),
) -> dict[str, object]:
    """Pause or resume a processor."""
    container: AppContainer = request.app.state.container
    profile = container.processor_registry.set_active(
        actor, parse_identity(identity) or identity, body.active
    )
    return serialize_processor(profile)


@router.put(
    "/processors/{identity}/reputation", dependencies=[Depends(require_admin)]
)
async def set_processor_reputation(
    identity: str,
    body: ReputationRequest,
    request: Request,
    actor: str = Depends(require_actor),
) -> dict[str, object]:
    """Set a processor's reputation."""
    container: AppContainer = request.app.state.container
    profile = container.processor_registry.set_reputation(
        actor, parse_identity(identity) or identity, body.reputation
    )
    return serialize_processor(profile)


@router.put("/fees", dependencies=[Depends(require_admin)])
async def set_fees(
    body: FeesRequest, request: Request, actor: str = Depends(require_actor)
) -> dict[str, object]:
    """Replace the fee schedule."""
    container: AppContainer = request.app.state.container
    fees = container.settlement_engine.set_fees(
        actor, body.colorization_fee, body.adjustment_fee, body.mint_fee
    )
    return serialize_fees(fees)


@router.post("/withdraw", dependencies=[Depends(require_admin)])
async def withdraw(
    request: Request, actor: str = Depends(require_actor)
) -> dict[str, object]:
    """Withdraw platform revenue from the pool."""
    container: AppContainer = request.app.state.container
    amount = container.settlement_engine.withdraw(actor)
    return {"recipient": actor, "amount": amount}


@router.get("/ledger", dependencies=[Depends(require_admin)])
async def ledger_summary(request: Request, limit: int = 50) -> dict[str, object]:
    """Return the pooled balance and recent journal entries."""
    container: AppContainer = request.app.state.container
    reporting = container.reporting_service
    return serialize_ledger(
        reporting.get_ledger_summary(),
        reporting.get_ledger_entries(limit),
    )
