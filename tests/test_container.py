"""Tests for container wiring."""

import asyncio

from photo_restoration.containers import build_container, default_fees
from tests.conftest import ADJUSTMENT_FEE, COLORIZATION_FEE, MINT_FEE


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)
    assert container.workflow_service is not None
    assert container.reporting_service is not None
    assert (
        container.workflow_service.settlement is container.settlement_engine
    )
    assert container.settlement_engine.processor_share_percent == 70
    asyncio.run(container.close_resources())


def test_default_fees_follow_settings(settings) -> None:
    fees = default_fees(settings)

    assert fees.colorization_fee == COLORIZATION_FEE
    assert fees.adjustment_fee == ADJUSTMENT_FEE
    assert fees.mint_fee == MINT_FEE
