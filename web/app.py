from __future__ import annotations

import logging
import traceback
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from clinicdesk.db import initialize_db
from clinicdesk.errors import InvalidTransition, NotAuthenticated, NotAuthorized, NotFound, ValidationError
from clinicdesk.logging import configure_logging
from web.deps import ClinicContextMiddleware, DBConnectionMiddleware
from web.routes.invoice import router as invoice_router
from web.routes.subscription import router as subscription_router

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    initialize_db()
    # Alembic's fileConfig replaces the root handlers
    configure_logging()
    logger.info("Application started")
    yield


app = FastAPI(title="clinicdesk", lifespan=lifespan)

app.add_middleware(DBConnectionMiddleware)
app.add_middleware(ClinicContextMiddleware)

app.include_router(invoice_router)
app.include_router(subscription_router)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    logger.info("Validation failed on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        {"detail": "validation_error", "errors": [e.model_dump() for e in exc.errors]},
        status_code=422,
    )


@app.exception_handler(InvalidTransition)
async def invalid_transition_handler(request: Request, exc: InvalidTransition):
    logger.info("Rejected transition on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        {
            "detail": "invalid_transition",
            "entity": exc.entity,
            "current": exc.current,
            "requested": exc.requested,
            "reason": exc.reason,
        },
        status_code=409,
    )


@app.exception_handler(NotAuthenticated)
async def not_authenticated_handler(request: Request, exc: NotAuthenticated):
    logger.info("Unauthenticated %s %s", request.method, request.url.path)
    return JSONResponse({"detail": "not_authenticated"}, status_code=401)


@app.exception_handler(NotAuthorized)
async def not_authorized_handler(request: Request, exc: NotAuthorized):
    logger.warning("Forbidden %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse({"detail": "not_authorized"}, status_code=403)


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    logger.info("Not found on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse({"detail": "not_found", "entity": exc.entity}, status_code=404)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled exception on %s %s:\n%s",
        request.method,
        request.url.path,
        traceback.format_exc(),
    )
    return JSONResponse({"detail": "Internal Server Error"}, status_code=500)


@app.get("/health")
async def health():
    return {"status": "ok"}
