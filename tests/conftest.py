"""Root conftest: in-memory SQLite engine and fixtures for the full schema."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy import Connection, create_engine, event, text
from sqlalchemy.engine import Engine

from clinicdesk.constants import CLINIC_TZ
from clinicdesk.models.invoice import Invoice, InvoiceFormData, InvoiceTotals, LineItem
from clinicdesk.models.subscription import Subscription

# Matches Alembic head: 8b2e4d6f0a31 (create subscriptions)
SCHEMA_DDL = """
CREATE TABLE clinics (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid VARCHAR(26) NOT NULL UNIQUE,
    name TEXT NOT NULL,
    email VARCHAR(255) NOT NULL DEFAULT '',
    phone VARCHAR(50) NOT NULL DEFAULT '',
    address TEXT NOT NULL DEFAULT '',
    created_at DATETIME NOT NULL
);

CREATE TABLE invoices (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid VARCHAR(26) NOT NULL UNIQUE,
    clinic_id INTEGER NOT NULL REFERENCES clinics(id),
    invoice_number VARCHAR(32) NOT NULL,
    patient_id VARCHAR(64) NOT NULL,
    patient_name TEXT NOT NULL DEFAULT '',
    issue_date VARCHAR(10) NOT NULL,
    due_date VARCHAR(10),
    subtotal INTEGER NOT NULL DEFAULT 0,
    discount_rate VARCHAR(16) NOT NULL DEFAULT '0',
    discount_amount INTEGER NOT NULL DEFAULT 0,
    tax_rate VARCHAR(16) NOT NULL DEFAULT '0',
    tax_amount INTEGER NOT NULL DEFAULT 0,
    total INTEGER NOT NULL DEFAULT 0,
    status VARCHAR(20) NOT NULL DEFAULT 'draft',
    currency VARCHAR(3) NOT NULL DEFAULT 'INR',
    notes TEXT NOT NULL DEFAULT '',
    terms_and_conditions TEXT NOT NULL DEFAULT '',
    paid_amount INTEGER,
    paid_date DATETIME,
    payment_method VARCHAR(20),
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL,
    deleted_at DATETIME,
    UNIQUE (clinic_id, invoice_number)
);

CREATE TABLE invoice_line_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    invoice_id INTEGER NOT NULL REFERENCES invoices(id) ON DELETE CASCADE,
    description TEXT NOT NULL,
    quantity INTEGER NOT NULL DEFAULT 1,
    unit_price INTEGER NOT NULL DEFAULT 0,
    amount INTEGER NOT NULL DEFAULT 0,
    sort_order INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE subscriptions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    clinic_id INTEGER NOT NULL UNIQUE REFERENCES clinics(id) ON DELETE CASCADE,
    plan_id VARCHAR(32),
    status VARCHAR(20) NOT NULL DEFAULT 'none',
    trial_ends_at DATETIME,
    current_period_start DATETIME,
    current_period_end DATETIME,
    payment_id VARCHAR(64) NOT NULL DEFAULT '',
    updated_at DATETIME NOT NULL
)
"""

NOW = datetime(2025, 3, 10, 10, 0, tzinfo=CLINIC_TZ)


@pytest.fixture()
def db_engine() -> Engine:
    engine = create_engine("sqlite:///:memory:")

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    return engine


@pytest.fixture()
def db_connection(db_engine: Engine) -> Connection:
    conn = db_engine.connect()
    for statement in SCHEMA_DDL.strip().split(";"):
        stmt = statement.strip()
        if stmt:
            conn.execute(text(stmt))
    conn.commit()
    yield conn
    conn.close()


def _sample_items() -> list[LineItem]:
    return [
        LineItem(description="Consultation", quantity=1, unit_price=50000, amount=50000, sort_order=0),
        LineItem(description="Blood test", quantity=2, unit_price=30000, amount=60000, sort_order=1),
    ]


def _sample_form(**overrides) -> InvoiceFormData:
    defaults = dict(
        patient_id="P001",
        patient_name="Asha Rao",
        issue_date=date(2025, 3, 10),
        due_date=date(2025, 3, 17),
        items=_sample_items(),
        discount_rate=Decimal("10"),
        tax_rate=Decimal("18"),
        notes="Test note",
    )
    defaults.update(overrides)
    return InvoiceFormData(**defaults)


def _sample_invoice(clinic_id: int = 1, **overrides) -> Invoice:
    defaults = dict(
        id=1,
        uuid="01JQINVOICE0000000000000001",
        clinic_id=clinic_id,
        invoice_number="INV0001",
        patient_id="P001",
        patient_name="Asha Rao",
        issue_date=date(2025, 3, 10),
        due_date=date(2025, 3, 17),
        items=_sample_items(),
        totals=InvoiceTotals(
            subtotal=110000,
            discount_rate=Decimal("10"),
            discount_amount=11000,
            tax_rate=Decimal("18"),
            tax_amount=17820,
            total=116820,
        ),
    )
    defaults.update(overrides)
    return Invoice(**defaults)


def _sample_subscription(clinic_id: int = 1, **overrides) -> Subscription:
    defaults = dict(clinic_id=clinic_id)
    defaults.update(overrides)
    return Subscription(**defaults)


@pytest.fixture()
def sample_form():
    return _sample_form


@pytest.fixture()
def sample_invoice():
    return _sample_invoice


@pytest.fixture()
def sample_subscription():
    return _sample_subscription
