# listingsync/entrypoints/api/deps.py
from __future__ import annotations

from fastapi import Header, HTTPException

from ...adapters.mail.base import MailSource
from ...config import settings
from ...service_layer.unit_of_work import SqlAlchemyUnitOfWork, UowFactory
from ...service_layer.use_cases.ingest import build_mail_source


def require_api_key(x_api_key: str | None = Header(default=None, alias="X-API-Key")) -> None:
    if settings.API_KEY:
        if not x_api_key or x_api_key != settings.API_KEY:
            raise HTTPException(status_code=401, detail="Invalid API key")


def get_uow_factory() -> UowFactory:
    return SqlAlchemyUnitOfWork


def get_mail_source() -> MailSource:
    try:
        return build_mail_source()
    except ValueError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
