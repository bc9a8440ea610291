"""Pydantic models for API request payloads."""

from pydantic import BaseModel, Field


class SubmitPhotoRequest(BaseModel):
    """Photo submission payload."""

    original_ref: str
    payment: int = Field(ge=0)


class ColorizationRequest(BaseModel):
    """Colorization delivery payload."""

    colorized_ref: str


class AdjustmentRequest(BaseModel):
    """Manual adjustment payload."""

    payload: str
    final_ref: str
    payment: int = Field(ge=0)


class MintRequest(BaseModel):
    """Mint payload."""

    metadata_ref: str
    payment: int = Field(ge=0)


class RegisterProcessorRequest(BaseModel):
    """Processor registration payload."""

    model_ref: str


class ProcessorActiveRequest(BaseModel):
    """Processor pause/resume payload."""

    active: bool


class ReputationRequest(BaseModel):
    """Reputation update payload; range is enforced by the registry."""

    reputation: int


class FeesRequest(BaseModel):
    """Fee schedule payload."""

    colorization_fee: int
    adjustment_fee: int
    mint_fee: int
