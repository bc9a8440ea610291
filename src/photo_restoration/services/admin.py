"""Administrative capability checks."""

from dataclasses import dataclass
from typing import Protocol

from photo_restoration.domain.errors import UnauthorizedError


class AdminCapability(Protocol):
    """Decides whether an actor may perform administrative operations."""

    def is_admin(self, actor: str) -> bool:
        """Return True if the actor holds the administrative role."""


@dataclass
class StaticAdminCapability(AdminCapability):
    """Grants the administrative role to a single configured identity."""

    admin_identity: str

    def is_admin(self, actor: str) -> bool:
        """Return True if the actor is the configured administrator."""
        return actor.strip().lower() == self.admin_identity.strip().lower()


def require_admin(capability: AdminCapability, actor: str, action: str) -> None:
    """Raise UnauthorizedError unless the actor is an administrator."""
    if not capability.is_admin(actor):
        raise UnauthorizedError(f"{action} requires the administrative role")
