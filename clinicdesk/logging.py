"""Root logger setup with the active clinic stamped on every record.

The clinic is held in a context variable: the API binds it per request from
the tenant header, the CLI binds it when the operator picks a clinic.
"""

import logging
import sys
from contextvars import ContextVar, Token

from clinicdesk.settings import settings

TEXT_FORMAT = "%(levelname)s %(name)s [clinic=%(clinic)s]: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(clinic)s %(message)s"

NO_CLINIC = "-"

_current_clinic: ContextVar[int | None] = ContextVar("current_clinic", default=None)


def bind_clinic(clinic_id: int | None) -> Token:
    return _current_clinic.set(clinic_id)


def reset_clinic(token: Token) -> None:
    _current_clinic.reset(token)


def current_clinic() -> int | None:
    return _current_clinic.get()


class ClinicContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        clinic_id = _current_clinic.get()
        record.clinic = NO_CLINIC if clinic_id is None else clinic_id
        return True


def _build_formatter() -> logging.Formatter:
    if settings.log_json:
        from pythonjsonlogger.json import JsonFormatter

        return JsonFormatter(
            fmt=JSON_FORMAT,
            rename_fields={"asctime": "timestamp", "levelname": "level", "clinic": "clinic_id"},
        )
    return logging.Formatter(TEXT_FORMAT)


def configure_logging() -> None:
    """Install a single stderr handler on the root logger.

    Safe to call again; web startup does so after Alembic's ``fileConfig``
    has replaced the root handlers.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_build_formatter())
    handler.addFilter(ClinicContextFilter())

    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
