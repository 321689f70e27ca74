import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from maternal.domain.exceptions import MaternalHubError, StorageUnavailableError

T = TypeVar("T")


async def call_storage(operation: str, call: Awaitable[T], timeout: float) -> T:
    """Await a storage call under ``timeout``.

    Domain errors raised by the adapter pass through unchanged; timeouts and
    any other failure become ``StorageUnavailableError``.
    """
    try:
        return await asyncio.wait_for(call, timeout=timeout)
    except MaternalHubError:
        raise
    except asyncio.TimeoutError as exc:
        raise StorageUnavailableError(f"{operation} timed out after {timeout}s") from exc
    except Exception as exc:
        raise StorageUnavailableError(f"{operation} failed: {exc}") from exc
