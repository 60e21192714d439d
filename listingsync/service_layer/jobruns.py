# listingsync/service_layer/jobruns.py
from __future__ import annotations

import json
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ..models import JobRun, JobRunStatus, utcnow


async def start_job(session: AsyncSession, job_name: str, meta: dict[str, Any] | None = None) -> JobRun:
    jr = JobRun(
        job_name=job_name,
        started_at=utcnow(),
        status=JobRunStatus.running,
        meta_json=json.dumps(meta or {}),
    )
    session.add(jr)
    await session.flush()
    return jr


async def finish_job_success(session: AsyncSession, job_id: int, summary: dict[str, Any]) -> None:
    jr = await session.get(JobRun, job_id)
    if jr is None:
        return
    jr.status = JobRunStatus.success
    jr.finished_at = utcnow()
    jr.summary_json = json.dumps(summary, default=str)
    jr.error = None
    await session.flush()


async def finish_job_fail(session: AsyncSession, job_id: int, err: Exception) -> None:
    jr = await session.get(JobRun, job_id)
    if jr is None:
        return
    jr.status = JobRunStatus.failed
    jr.finished_at = utcnow()
    jr.error = str(err)
    await session.flush()
