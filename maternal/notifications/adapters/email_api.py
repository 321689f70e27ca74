from typing import Any

import httpx
from loguru import logger

from maternal.domain.exceptions import NotificationError
from maternal.domain.models import NotificationCommand
from maternal.notifications.templates import PLATFORM_NAME, render


class EmailAPINotifier:
    """Sends notifications through a transactional email HTTP API.

    Posts ``{"from", "to", "subject", "text"}`` as JSON with a bearer key, the
    request shape shared by most hosted email providers.
    """

    def __init__(
        self,
        api_url: str,
        *,
        api_key: str,
        from_address: str,
        from_name: str = PLATFORM_NAME,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_url = api_url
        self._api_key = api_key
        self._sender = f"{from_name} <{from_address}>"
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    async def send(self, command: NotificationCommand) -> None:
        if not command.recipient:
            logger.warning(
                "No recipient for {} notification (owner={}); skipping",
                command.kind.value,
                command.owner_ref,
            )
            return

        message = render(command)
        payload: dict[str, Any] = {
            "from": self._sender,
            "to": [command.recipient],
            "subject": message.subject,
            "text": message.text,
        }
        try:
            resp = await self._client.post(self._api_url, headers=self._headers(), json=payload)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise NotificationError(
                f"Email API rejected {command.kind.value} (status {exc.response.status_code})"
            ) from exc
        except Exception as exc:
            raise NotificationError(f"Email API request failed: {exc}") from exc

        logger.info("{} email sent for owner={}", command.kind.value, command.owner_ref)

    async def close(self) -> None:
        await self._client.aclose()
        logger.info("Email API client closed")
