# listingsync/entrypoints/api/routers/jobs.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ....adapters.mail.base import MailFetchError, MailSource
from ....schemas import IngestResultOut
from ....service_layer.unit_of_work import UowFactory
from ....service_layer.use_cases.ingest import run_ingest_job
from ..deps import get_mail_source, get_uow_factory, require_api_key

router = APIRouter(tags=["jobs"])


@router.post("/jobs/ingest", response_model=IngestResultOut, dependencies=[Depends(require_api_key)])
async def jobs_ingest(
    source: MailSource = Depends(get_mail_source),
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> IngestResultOut:
    try:
        result = await run_ingest_job(source, uow_factory=uow_factory)
    except MailFetchError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    return IngestResultOut(**result.as_dict())
