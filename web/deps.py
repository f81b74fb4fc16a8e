from __future__ import annotations

import logging

from fastapi import Request
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Receive, Scope, Send

from clinicdesk.db import get_engine
from clinicdesk.logging import bind_clinic, reset_clinic
from clinicdesk.repositories.sqlalchemy import (
    SQLAlchemyClinicRepository,
    SQLAlchemyInvoiceRepository,
    SQLAlchemySubscriptionRepository,
)
from clinicdesk.services.clinic_service import ClinicService
from clinicdesk.services.invoice_service import InvoiceService
from clinicdesk.services.subscription_service import SubscriptionService

logger = logging.getLogger(__name__)

CLINIC_HEADER = "X-Clinic-Id"


class DBConnectionMiddleware:
    """Pure ASGI middleware: creates a single DB connection per request."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        request.state.db_conn = None
        try:
            await self.app(scope, receive, send)
        finally:
            conn = getattr(request.state, "db_conn", None)
            if conn is not None:
                conn.close()
                logger.debug("DB connection closed for %s %s", request.method, request.url.path)


def _get_conn(request: Request):
    """Lazy per-request connection, created on first use, closed by middleware."""
    if request.state.db_conn is None:
        logger.debug("Creating DB connection for %s %s", request.method, request.url.path)
        request.state.db_conn = get_engine().connect()
    return request.state.db_conn


def _parse_clinic_header(raw: str) -> int | None:
    raw = raw.strip()
    if not raw.isdigit():
        if raw:
            logger.warning("Malformed %s header: %r", CLINIC_HEADER, raw)
        return None
    return int(raw)


class ClinicContextMiddleware:
    """Pure ASGI middleware: binds the tenant header to the logging context."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        raw = Headers(scope=scope).get(CLINIC_HEADER, "").strip()
        token = bind_clinic(int(raw) if raw.isdigit() else None)
        try:
            await self.app(scope, receive, send)
        finally:
            reset_clinic(token)


def get_clinic_id(request: Request) -> int | None:
    """Tenant resolved by the upstream identity gateway, or None."""
    return _parse_clinic_header(request.headers.get(CLINIC_HEADER, ""))


def get_clinic_service(request: Request) -> ClinicService:
    return ClinicService(SQLAlchemyClinicRepository(_get_conn(request)))


def get_invoice_service(request: Request) -> InvoiceService:
    return InvoiceService(SQLAlchemyInvoiceRepository(_get_conn(request)))


def get_subscription_service(request: Request) -> SubscriptionService:
    return SubscriptionService(SQLAlchemySubscriptionRepository(_get_conn(request)))
