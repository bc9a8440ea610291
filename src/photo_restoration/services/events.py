"""Event publication for external observers."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from photo_restoration.domain.events import WorkflowEvent

_logger = logging.getLogger(__name__)

EventHandler = Callable[[WorkflowEvent], None]


class EventRepository(Protocol):
    """Persistence interface for emitted events."""

    def record_event(self, event_type: str, payload: dict[str, object]) -> None:
        """Persist an emitted event."""


@dataclass
class EventService:
    """Persists committed events and fans them out to subscribers."""

    repository: EventRepository
    subscribers: list[EventHandler] = field(default_factory=list)

    def subscribe(self, handler: EventHandler) -> None:
        """Register a callback invoked for every published event."""
        self.subscribers.append(handler)

    def publish(self, *events: WorkflowEvent) -> None:
        """Publish events for a transition that has already committed.

        Observer failures are logged; they never undo the transition.
        """
        for event in events:
            _logger.info("Event %s: %s", event.event_type, event.payload())
            try:
                self.repository.record_event(event.event_type, event.payload())
            except Exception:
                _logger.exception("Failed to persist event %s", event.event_type)
            for handler in self.subscribers:
                try:
                    handler(event)
                except Exception:
                    _logger.exception(
                        "Event subscriber failed for %s", event.event_type
                    )
