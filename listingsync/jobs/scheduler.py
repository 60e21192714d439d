# listingsync/jobs/scheduler.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from ..adapters.mail.base import MailFetchError
from ..config import settings
from ..service_layer.use_cases.ingest import build_mail_source, run_ingest_job

log = logging.getLogger(__name__)

INGEST_JOB_ID = "ingest_email"


async def _run_ingest() -> None:
    log.info("Running email processing job...")
    try:
        result = await run_ingest_job(build_mail_source())
    except MailFetchError as e:
        # already recorded on the JobRun; next tick retries
        log.error("Email job failed: %s", e)
        return

    log.info("Email job completed: %d created, %d updated", result.created, result.updated)
    if result.errors:
        log.warning("Errors during processing: %s", result.errors)


def build_scheduler(
    *,
    cron: str | None = None,
    run_immediately: bool | None = None,
) -> AsyncIOScheduler:
    sched = AsyncIOScheduler()

    trigger = CronTrigger.from_crontab(cron or settings.INGEST_CRON)
    run_now = settings.RUN_INGEST_ON_STARTUP if run_immediately is None else run_immediately

    opts: dict[str, Any] = {}
    if run_now:
        # an explicit next_run_time=None would add the job paused
        opts["next_run_time"] = datetime.now(trigger.timezone)

    # coroutine job: the executor awaits it, so max_instances=1 holds across a slow mailbox
    sched.add_job(
        _run_ingest,
        trigger,
        id=INGEST_JOB_ID,
        max_instances=1,
        coalesce=True,
        **opts,
    )

    return sched
