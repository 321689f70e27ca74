import asyncio

from maternal.domain.exceptions import EmergencyNotFoundError
from maternal.domain.models import EmergencyAlert


class InMemoryEmergencyStore:
    """Process-local emergency store. Create one per deployment and inject it."""

    def __init__(self) -> None:
        self._alerts: dict[str, EmergencyAlert] = {}
        self._lock = asyncio.Lock()

    async def insert(self, alert: EmergencyAlert) -> EmergencyAlert:
        async with self._lock:
            self._alerts[alert.emergency_id] = alert
            return alert

    async def get(self, emergency_id: str) -> EmergencyAlert | None:
        async with self._lock:
            return self._alerts.get(emergency_id)

    async def update(self, alert: EmergencyAlert) -> EmergencyAlert:
        async with self._lock:
            if alert.emergency_id not in self._alerts:
                raise EmergencyNotFoundError(alert.emergency_id)
            self._alerts[alert.emergency_id] = alert
            return alert

    async def list_by_owner(self, owner_ref: str) -> list[EmergencyAlert]:
        async with self._lock:
            alerts = [a for a in self._alerts.values() if a.owner_ref == owner_ref]
        return sorted(alerts, key=lambda a: a.alerted_at, reverse=True)
