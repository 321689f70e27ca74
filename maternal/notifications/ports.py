from typing import Protocol

from maternal.domain.models import NotificationCommand


class NotifierProtocol(Protocol):
    """Delivers one notification command."""

    async def send(self, command: NotificationCommand) -> None:
        """Deliver the message for ``command``.

        Raises:
            NotificationError: If delivery failed and may be retried.
        """
        ...

    async def close(self) -> None:
        """Release resources."""
        ...
