from loguru import logger

from maternal.domain.models import NotificationCommand
from maternal.notifications.templates import render


class LogNotifier:
    """Writes notifications to the log. Used when no email API is configured."""

    async def send(self, command: NotificationCommand) -> None:
        message = render(command)
        logger.info(
            "Notification [{}] to={} subject={!r}",
            command.kind.value,
            command.recipient or "<none>",
            message.subject,
        )

    async def close(self) -> None:
        return None
