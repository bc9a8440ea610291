"""Registry of colorization processors."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol

from photo_restoration.domain.errors import (
    AlreadyRegisteredError,
    InvalidTransitionError,
    NotFoundError,
    OutOfRangeError,
    UnauthorizedError,
)
from photo_restoration.domain.events import (
    ProcessorRegistered,
    ProcessorStatusChanged,
    ReputationUpdated,
)
from photo_restoration.domain.processors import (
    MAX_REPUTATION,
    MIN_REPUTATION,
    ProcessorProfile,
)
from photo_restoration.services.admin import AdminCapability, require_admin
from photo_restoration.services.events import EventService

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class ProcessorRepository(Protocol):
    """Persistence interface for processor profiles."""

    def get_processor(self, identity: str) -> ProcessorProfile | None:
        """Return a processor profile, if registered."""

    def create_processor(self, profile: ProcessorProfile) -> ProcessorProfile:
        """Insert a new profile; identity must be unused."""

    def update_processor(self, profile: ProcessorProfile) -> None:
        """Overwrite status and reputation fields of a profile."""

    def increment_processed(self, identity: str) -> int:
        """Atomically add one to total_processed and return the new value."""

    def decrement_processed(self, identity: str) -> int:
        """Atomically subtract one from total_processed."""

    def list_processors(self) -> list[ProcessorProfile]:
        """Return all registered processors."""


@dataclass
class ProcessorRegistry:
    """Tracks processors, their status, reputation and throughput."""

    repository: ProcessorRepository
    admin: AdminCapability
    events: EventService
    clock: Callable[[], datetime] = _utcnow

    def register(self, identity: str, model_ref: str) -> ProcessorProfile:
        """Register the calling identity as a processor."""
        if not model_ref.strip():
            raise InvalidTransitionError("model_ref must be non-empty")
        if self.repository.get_processor(identity) is not None:
            raise AlreadyRegisteredError(f"processor {identity} is already registered")
        profile = self.repository.create_processor(
            ProcessorProfile(
                identity=identity,
                model_ref=model_ref,
                registered_at=self.clock(),
            )
        )
        _logger.info("Processor registered: identity=%s", identity)
        self.events.publish(ProcessorRegistered(identity=identity, model_ref=model_ref))
        return profile

    def set_active(self, actor: str, identity: str, active: bool) -> ProcessorProfile:
        """Pause or resume a processor."""
        require_admin(self.admin, actor, "set_active")
        profile = self.require(identity)
        updated = replace(profile, active=active)
        self.repository.update_processor(updated)
        _logger.info("Processor %s active=%s", identity, active)
        self.events.publish(ProcessorStatusChanged(identity=identity, active=active))
        return updated

    def set_reputation(self, actor: str, identity: str, value: int) -> ProcessorProfile:
        """Set a processor's reputation score."""
        require_admin(self.admin, actor, "set_reputation")
        profile = self.require(identity)
        if not MIN_REPUTATION <= value <= MAX_REPUTATION:
            raise OutOfRangeError(
                f"reputation must be within [{MIN_REPUTATION}, {MAX_REPUTATION}], "
                f"got {value}"
            )
        updated = replace(profile, reputation=value)
        self.repository.update_processor(updated)
        _logger.info("Processor %s reputation=%s", identity, value)
        self.events.publish(ReputationUpdated(identity=identity, reputation=value))
        return updated

    def require(self, identity: str) -> ProcessorProfile:
        """Return a profile or raise NotFoundError."""
        profile = self.repository.get_processor(identity)
        if profile is None:
            raise NotFoundError(f"processor {identity} is not registered")
        return profile

    def require_active(self, identity: str) -> ProcessorProfile:
        """Return the profile of an active processor or raise UnauthorizedError."""
        profile = self.repository.get_processor(identity)
        if profile is None:
            raise UnauthorizedError(f"{identity} is not a registered processor")
        if not profile.active:
            raise UnauthorizedError(f"processor {identity} is paused")
        return profile

    def record_processed(self, identity: str) -> int:
        """Count one delivered colorization for a processor."""
        return self.repository.increment_processed(identity)

    def revert_processed(self, identity: str) -> None:
        """Undo ``record_processed`` for a transition that did not commit."""
        self.repository.decrement_processed(identity)

    def list_processors(self) -> list[ProcessorProfile]:
        return self.repository.list_processors()
