from __future__ import annotations

import asyncio
import logging

from listingsync.db import engine
from listingsync.jobs.scheduler import build_scheduler
from listingsync.models import Base


def _quiet_logging() -> None:
    # Root defaults
    logging.basicConfig(
        level=logging.INFO,
        format="%(levelname)s:%(name)s:%(message)s",
    )

    # Quiet the usual offenders
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


async def main() -> None:
    _quiet_logging()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    scheduler = build_scheduler()
    scheduler.start()
    logging.getLogger(__name__).info("Scheduler started")

    try:
        while True:
            await asyncio.sleep(3600)
    except (KeyboardInterrupt, asyncio.CancelledError):
        scheduler.shutdown()
        await engine.dispose()
        logging.getLogger(__name__).info("Scheduler stopped")


if __name__ == "__main__":
    asyncio.run(main())
