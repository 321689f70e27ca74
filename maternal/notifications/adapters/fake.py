from maternal.domain.models import NotificationCommand


class RecordingNotifier:
    """In-memory test double for ``NotifierProtocol``.

    Set ``error`` to make every ``send`` raise, or ``fail_times`` to fail only the
    first N attempts. Inspect ``sent`` and ``attempts`` afterwards.
    """

    def __init__(self) -> None:
        self.sent: list[NotificationCommand] = []
        self.attempts: int = 0
        self.error: Exception | None = None
        self.fail_times: int = 0
        self.closed: bool = False

    async def send(self, command: NotificationCommand) -> None:
        self.attempts += 1
        if self.error:
            raise self.error
        if self.fail_times > 0:
            self.fail_times -= 1
            raise RuntimeError("transient delivery failure")
        self.sent.append(command)

    async def close(self) -> None:
        self.closed = True
