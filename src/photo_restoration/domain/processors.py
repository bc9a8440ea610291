"""Domain models for colorization processors."""

from dataclasses import dataclass
from datetime import datetime

DEFAULT_REPUTATION = 50
MIN_REPUTATION = 0
MAX_REPUTATION = 100


@dataclass(frozen=True)
class ProcessorProfile:
    """Registered processing agent and its throughput counters."""

    identity: str
    model_ref: str
    registered_at: datetime
    total_processed: int = 0
    reputation: int = DEFAULT_REPUTATION
    active: bool = True
