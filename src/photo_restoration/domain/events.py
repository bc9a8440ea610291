"""Events emitted for external observers after a transition commits."""

from dataclasses import asdict, dataclass
from typing import ClassVar


@dataclass(frozen=True)
class WorkflowEvent:
    """Base event with a stable type name."""

    event_type: ClassVar[str] = "WorkflowEvent"

    def payload(self) -> dict[str, object]:
        """Return the event fields as a JSON-friendly dict."""
        return asdict(self)


@dataclass(frozen=True)
class PhotoSubmitted(WorkflowEvent):
    event_type: ClassVar[str] = "PhotoSubmitted"

    photo_id: int
    owner: str
    original_ref: str


@dataclass(frozen=True)
class ColorizationRequested(WorkflowEvent):
    event_type: ClassVar[str] = "ColorizationRequested"

    photo_id: int
    requester: str
    fee: int


@dataclass(frozen=True)
class ColorizationCompleted(WorkflowEvent):
    event_type: ClassVar[str] = "ColorizationCompleted"

    photo_id: int
    colorized_ref: str
    processor: str


@dataclass(frozen=True)
class ManualAdjustmentMade(WorkflowEvent):
    event_type: ClassVar[str] = "ManualAdjustmentMade"

    photo_id: int
    adjuster: str
    payload: str


@dataclass(frozen=True)
class AssetMinted(WorkflowEvent):
    event_type: ClassVar[str] = "AssetMinted"

    asset_id: str
    photo_id: int
    owner: str


@dataclass(frozen=True)
class ProcessorRegistered(WorkflowEvent):
    event_type: ClassVar[str] = "ProcessorRegistered"

    identity: str
    model_ref: str


@dataclass(frozen=True)
class ProcessorStatusChanged(WorkflowEvent):
    event_type: ClassVar[str] = "ProcessorStatusChanged"

    identity: str
    active: bool


@dataclass(frozen=True)
class ReputationUpdated(WorkflowEvent):
    event_type: ClassVar[str] = "ReputationUpdated"

    identity: str
    reputation: int


@dataclass(frozen=True)
class FeesUpdated(WorkflowEvent):
    event_type: ClassVar[str] = "FeesUpdated"

    colorization_fee: int
    adjustment_fee: int
    mint_fee: int


@dataclass(frozen=True)
class FundsWithdrawn(WorkflowEvent):
    event_type: ClassVar[str] = "FundsWithdrawn"

    recipient: str
    amount: int
