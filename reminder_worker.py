import asyncio
import signal

from loguru import logger

from maternal.config import AppConfig
from maternal.factory import build_services


async def run_worker() -> None:
    logger.info("Starting Maternal Hub reminder worker")

    config = AppConfig()
    services = build_services(config)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, services.reminders.stop)

    try:
        await services.reminders.run_forever(config.reminders.interval_seconds)
    finally:
        await services.close()


if __name__ == "__main__":
    asyncio.run(run_worker())
