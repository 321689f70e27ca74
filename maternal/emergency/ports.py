from typing import Protocol

from maternal.domain.models import EmergencyAlert


class EmergencyStoreProtocol(Protocol):
    """Persistence for emergency alerts, shared by every process of a deployment."""

    async def insert(self, alert: EmergencyAlert) -> EmergencyAlert:
        """Persist a new alert."""
        ...

    async def get(self, emergency_id: str) -> EmergencyAlert | None:
        """Fetch an alert by id."""
        ...

    async def update(self, alert: EmergencyAlert) -> EmergencyAlert:
        """Replace a stored alert (same id).

        Raises:
            EmergencyNotFoundError: If no alert has this id.
        """
        ...

    async def list_by_owner(self, owner_ref: str) -> list[EmergencyAlert]:
        """All alerts raised by ``owner_ref``, newest first."""
        ...
