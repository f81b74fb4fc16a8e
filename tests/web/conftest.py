"""Web test fixtures: TestClient with shared in-memory SQLite."""

from __future__ import annotations

import pytest
from sqlalchemy import create_engine, event, text
from sqlalchemy.pool import StaticPool

from clinicdesk.models.clinic import Clinic
from clinicdesk.repositories.sqlalchemy import SQLAlchemyClinicRepository, SQLAlchemyInvoiceRepository
from clinicdesk.services.invoice_service import InvoiceService
from tests.conftest import SCHEMA_DDL, _sample_form


def _make_test_engine():
    """Create a fresh in-memory SQLite engine with shared connection pool."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    with engine.connect() as conn:
        for statement in SCHEMA_DDL.strip().split(";"):
            stmt = statement.strip()
            if stmt:
                conn.execute(text(stmt))
        conn.commit()

    return engine


def create_clinic_in_db(engine, name: str = "Sunrise Clinic") -> Clinic:
    with engine.connect() as conn:
        return SQLAlchemyClinicRepository(conn).create(Clinic(name=name))


def create_invoice_in_db(engine, clinic_id: int, **overrides):
    """Create a draft invoice through the service. Shared helper for route tests."""
    with engine.connect() as conn:
        service = InvoiceService(SQLAlchemyInvoiceRepository(conn))
        return service.create_draft(clinic_id, _sample_form(**overrides))


def invoice_payload(**overrides) -> dict:
    return _sample_form(**overrides).model_dump(mode="json")


@pytest.fixture(autouse=True)
def web_test_db(monkeypatch):
    """Set up in-memory DB and patch the web app to use it."""
    engine = _make_test_engine()

    import web.deps as deps_module

    monkeypatch.setattr(deps_module, "get_engine", lambda: engine)

    import web.app as app_module

    monkeypatch.setattr(app_module, "initialize_db", lambda: None)

    yield engine

    engine.dispose()


@pytest.fixture()
def test_engine(web_test_db):
    """Expose the test engine for helpers that need direct DB access."""
    return web_test_db


@pytest.fixture()
def client():
    from starlette.testclient import TestClient

    from web.app import app

    return TestClient(app)


@pytest.fixture()
def clinic(test_engine) -> Clinic:
    return create_clinic_in_db(test_engine)


@pytest.fixture()
def clinic_client(client, clinic):
    """Client whose requests carry the clinic header set by the identity gateway."""
    client.headers["X-Clinic-Id"] = str(clinic.id)
    return client
