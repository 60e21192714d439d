# listingsync/service_layer/use_cases/ingest.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Sequence

from ...adapters.mail.base import EmailMessage, MailFetchError, MailSource
from ...adapters.mail.eml_dir import EmlDirectoryMailSource
from ...adapters.mail.imap import ImapMailSource
from ...adapters.parsers.registry import parse_listing_email
from ...config import settings
from ...domain.types import CandidateListing
from ...models import utcnow
from ..dedup import resolve_existing
from ..jobruns import finish_job_fail, finish_job_success, start_job
from ..unit_of_work import SqlAlchemyUnitOfWork, UowFactory
from ..upsert import UpsertAction, apply_upsert

log = logging.getLogger(__name__)

INGEST_JOB_NAME = "ingest_email"


@dataclass
class IngestResult:
    created: int = 0
    updated: int = 0
    errors: list[str] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {"created": self.created, "updated": self.updated, "errors": list(self.errors)}


def build_mail_source() -> MailSource:
    """
    Mail source builder that will NOT brick local dev.

    - imap without credentials -> eml_dir in dev/local/test, error in prod-like
    - unknown MAIL_SOURCE -> same rule
    """
    src = (settings.MAIL_SOURCE or "").strip().lower()
    dev_like = settings.ENV.lower() in ("dev", "local", "test")

    if src == "eml_dir":
        return EmlDirectoryMailSource.from_settings()
    if src == "imap":
        if settings.IMAP_USER and settings.IMAP_PASSWORD:
            return ImapMailSource.from_settings()
        if dev_like:
            log.warning("IMAP credentials not configured - reading %s instead", settings.EML_DIR)
            return EmlDirectoryMailSource.from_settings()
        raise ValueError("MAIL_SOURCE=imap requires IMAP_USER and IMAP_PASSWORD")

    if dev_like:
        return EmlDirectoryMailSource.from_settings()
    raise ValueError(f"Unknown MAIL_SOURCE={src!r}. Use imap or eml_dir.")


async def fetch_messages(source: MailSource, *, timeout_s: float | None = None) -> list[EmailMessage]:
    """
    Blocking mailbox read in a worker thread, bounded so a stalled connection
    cannot hang the job. Any failure surfaces as MailFetchError.
    """
    timeout = settings.MAIL_FETCH_TIMEOUT_S if timeout_s is None else timeout_s
    try:
        return await asyncio.wait_for(asyncio.to_thread(source.fetch), timeout=timeout)
    except MailFetchError:
        raise
    except asyncio.TimeoutError as e:
        raise MailFetchError(f"mail fetch timed out after {timeout}s") from e
    except Exception as e:
        raise MailFetchError(f"Error fetching emails: {e}") from e


async def _reconcile(
    uow_factory: UowFactory,
    candidate: CandidateListing,
    now: datetime,
) -> UpsertAction:
    # resolve + apply for one candidate inside one transaction
    async with uow_factory() as uow:
        existing = await resolve_existing(uow.properties, candidate)
        action, _ = await apply_upsert(uow.properties, candidate, existing, now=now)
    return action


async def ingest_messages(
    messages: Sequence[EmailMessage],
    *,
    uow_factory: UowFactory = SqlAlchemyUnitOfWork,
    clock: Callable[[], datetime] = utcnow,
) -> IngestResult:
    """
    Parse every message and fold its candidates into the catalog.

    Strictly sequential: message order, then card order within a message.
    Two cards in one batch can be the same house, and the second must see the
    first one's commit. Errors are collected, never raised.
    """
    result = IngestResult()

    for msg in messages:
        # soup building is CPU-bound; keep it off the event loop
        parsed = await asyncio.to_thread(parse_listing_email, msg.html, msg.sender)
        if parsed.errors:
            log.warning("Parser errors for %s: %s", msg.sender, parsed.errors)
            result.errors.extend(parsed.errors)

        for candidate in parsed.candidates:
            try:
                action = await _reconcile(uow_factory, candidate, clock())
            except Exception as e:
                log.warning("Error processing property %s: %s", candidate.url, e)
                result.errors.append(f"Error processing property {candidate.url}: {e}")
                continue

            if action == UpsertAction.created:
                result.created += 1
            else:
                result.updated += 1

    log.info(
        "Processed %d emails: %d created, %d updated, %d errors",
        len(messages),
        result.created,
        result.updated,
        len(result.errors),
    )
    return result


async def run_ingest_job(
    source: MailSource,
    *,
    uow_factory: UowFactory = SqlAlchemyUnitOfWork,
    timeout_s: float | None = None,
    mark_processed: bool | None = None,
    clock: Callable[[], datetime] = utcnow,
) -> IngestResult:
    """
    Fetch -> ingest -> mark processed, bracketed by a JobRun row.

    A fetch failure fails the whole job (nothing to process) and re-raises.
    """
    async with uow_factory() as uow:
        jr = await start_job(uow.session, INGEST_JOB_NAME, {"mail_source": type(source).__name__})
        job_id = jr.id

    try:
        messages = await fetch_messages(source, timeout_s=timeout_s)
    except MailFetchError as e:
        log.error("Email job failed: %s", e)
        async with uow_factory() as uow:
            await finish_job_fail(uow.session, job_id, e)
        raise

    result = await ingest_messages(messages, uow_factory=uow_factory, clock=clock)

    should_mark = settings.MARK_AS_READ if mark_processed is None else mark_processed
    if should_mark and messages:
        try:
            await asyncio.to_thread(source.mark_processed, messages)
        except Exception as e:
            log.warning("Could not mark %d emails processed: %s", len(messages), e)
            result.errors.append(f"Error marking emails processed: {e}")

    async with uow_factory() as uow:
        await finish_job_success(uow.session, job_id, result.as_dict())

    return result
