from apscheduler.triggers.cron import CronTrigger

from listingsync.adapters.mail.base import MailFetchError
from listingsync.jobs import scheduler as scheduler_mod
from listingsync.jobs.scheduler import INGEST_JOB_ID, build_scheduler
from listingsync.service_layer.use_cases.ingest import IngestResult


async def test_ingest_job_registered_without_overlap():
    sched = build_scheduler(cron="*/15 * * * *", run_immediately=False)

    job = sched.get_job(INGEST_JOB_ID)
    assert job is not None
    assert isinstance(job.trigger, CronTrigger)
    assert job.max_instances == 1
    assert job.coalesce is True


async def test_run_immediately_sets_first_run():
    sched = build_scheduler(cron="0 */4 * * *", run_immediately=True)

    job = sched.get_job(INGEST_JOB_ID)
    assert job.next_run_time is not None


async def test_fetch_failure_does_not_escape_the_job(monkeypatch):
    async def failing_job(source, **kwargs):
        raise MailFetchError("IMAP connect failed")

    monkeypatch.setattr(scheduler_mod, "build_mail_source", lambda: object())
    monkeypatch.setattr(scheduler_mod, "run_ingest_job", failing_job)

    await scheduler_mod._run_ingest()


async def test_job_runs_ingest(monkeypatch):
    calls = []

    async def fake_job(source, **kwargs):
        calls.append(source)
        return IngestResult(created=1, updated=2, errors=["Unknown email source: x@example.com"])

    marker = object()
    monkeypatch.setattr(scheduler_mod, "build_mail_source", lambda: marker)
    monkeypatch.setattr(scheduler_mod, "run_ingest_job", fake_job)

    await scheduler_mod._run_ingest()
    assert calls == [marker]
