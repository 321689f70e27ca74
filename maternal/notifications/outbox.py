import asyncio
from collections.abc import Iterable

from loguru import logger

from maternal.domain.models import NotificationCommand
from maternal.notifications.ports import NotifierProtocol


class OutboxDispatcher:
    """Delivers outbox commands returned by the core, off the request path.

    Each command is attempted up to ``max_attempts`` times. A command that
    still fails is logged and dropped; nothing here ever raises to the caller.
    """

    def __init__(
        self,
        notifier: NotifierProtocol,
        *,
        max_attempts: int = 3,
        retry_delay_seconds: float = 1.0,
    ) -> None:
        self._notifier = notifier
        self._max_attempts = max(1, max_attempts)
        self._retry_delay = retry_delay_seconds
        self._pending: set[asyncio.Task[int]] = set()

    async def _deliver(self, command: NotificationCommand) -> bool:
        for attempt in range(1, self._max_attempts + 1):
            try:
                await self._notifier.send(command)
                return True
            except Exception as exc:
                if attempt == self._max_attempts:
                    logger.error(
                        "Giving up on {} notification for owner={} after {} attempt(s): {}",
                        command.kind.value,
                        command.owner_ref,
                        attempt,
                        exc,
                    )
                    return False
                logger.warning(
                    "{} notification attempt {} failed: {}; retrying",
                    command.kind.value,
                    attempt,
                    exc,
                )
                await asyncio.sleep(self._retry_delay * attempt)
        return False

    async def dispatch(self, commands: Iterable[NotificationCommand]) -> int:
        """Deliver ``commands`` and return how many succeeded."""
        delivered = 0
        for command in commands:
            if await self._deliver(command):
                delivered += 1
        return delivered

    def schedule(self, commands: Iterable[NotificationCommand]) -> asyncio.Task[int] | None:
        """Run :meth:`dispatch` as a background task. Requires a running loop."""
        batch = list(commands)
        if not batch:
            return None
        task = asyncio.create_task(self.dispatch(batch))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for every scheduled dispatch to finish."""
        if self._pending:
            await asyncio.gather(*self._pending)

    async def close(self) -> None:
        await self.drain()
        await self._notifier.close()
