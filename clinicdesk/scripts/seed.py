"""Seed the database with demo data for local development.

Usage:
    python -m clinicdesk.scripts.seed
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta

from faker import Faker
from rich.console import Console
from rich.table import Table
from sqlalchemy import text

from clinicdesk.constants import CLINIC_TZ, INVOICE_STATUS_LABELS
from clinicdesk.db import get_connection, initialize_db
from clinicdesk.models import format_money
from clinicdesk.models.clinic import Clinic
from clinicdesk.models.invoice import InvoiceFormData, LineItem, PaymentMethod
from clinicdesk.models.subscription import ANNUAL, MONTHLY, PLANS, PaymentConfirmation
from clinicdesk.repositories.factory import (
    get_clinic_repository,
    get_invoice_repository,
    get_subscription_repository,
)
from clinicdesk.services.clinic_service import ClinicService
from clinicdesk.services.invoice_service import InvoiceService
from clinicdesk.services.subscription_service import SubscriptionService

console = Console()
fake = Faker("en_IN")

NUM_CLINICS = 3
INVOICES_PER_CLINIC = (6, 12)

# Child tables first so foreign keys never dangle mid-way.
TABLES_TO_CLEAR = [
    "invoice_line_items",
    "invoices",
    "subscriptions",
    "clinics",
]

# (description, unit_price_paise)
SERVICE_CATALOG = [
    ("General consultation", 50000),
    ("Specialist consultation", 120000),
    ("Follow-up visit", 30000),
    ("Complete blood count", 45000),
    ("Lipid profile", 80000),
    ("X-ray chest PA view", 60000),
    ("ECG", 35000),
    ("Dressing", 20000),
    ("Nebulization", 25000),
    ("Paracetamol 500mg (strip)", 3500),
    ("Amoxicillin 250mg (strip)", 9000),
]

INVOICE_NOTES = [
    "",
    "",
    "Review after one week.",
    "",
    "Fasting sample collected.",
    "",
]


def _clear_all(conn) -> None:
    console.print("\n[yellow]Clearing all tables...[/yellow]")
    for table in TABLES_TO_CLEAR:
        conn.execute(text(f"DELETE FROM {table}"))  # noqa: S608
        console.print(f"  Cleared [dim]{table}[/dim]")
    conn.commit()
    console.print("[green]All tables cleared.[/green]\n")


def _create_clinics(clinic_service: ClinicService) -> list[Clinic]:
    console.print("[cyan]Creating clinics...[/cyan]")

    clinics = []
    for _ in range(NUM_CLINICS):
        clinic = clinic_service.create_clinic(
            name=f"{fake.last_name()} Family Clinic",
            email=fake.company_email(),
            phone=fake.phone_number(),
            address=fake.address().replace("\n", ", "),
        )
        console.print(f"  [bold]{clinic.name}[/bold] (id={clinic.id})")
        clinics.append(clinic)

    console.print(f"[green]{len(clinics)} clinics created.[/green]\n")
    return clinics


def _create_subscriptions(subscription_service: SubscriptionService, clinics: list[Clinic]) -> None:
    console.print("[cyan]Creating subscriptions...[/cyan]")
    now = datetime.now(CLINIC_TZ)

    for i, clinic in enumerate(clinics):
        if i == 0:
            sub = subscription_service.start_trial(clinic.id, now)
        else:
            plan = PLANS[MONTHLY if i % 2 else ANNUAL]
            confirmation = PaymentConfirmation(
                plan_id=plan.id,
                amount=plan.amount,
                payment_id=f"pay_{fake.bothify('??????????????')}",
                timestamp=now,
            )
            sub = subscription_service.confirm_payment(clinic.id, confirmation, now)
        console.print(f"  {clinic.name}: {sub.status.value} ({sub.plan_id})")

    console.print("[green]Subscriptions created.[/green]\n")


def _random_items() -> list[LineItem]:
    picks = random.sample(SERVICE_CATALOG, k=random.randint(1, 4))
    return [
        LineItem(description=desc, quantity=random.randint(1, 3), unit_price=price) for desc, price in picks
    ]


def _create_invoices(invoice_service: InvoiceService, clinics: list[Clinic]) -> int:
    """Generate invoices over the last three months in every status."""
    console.print("[cyan]Generating invoices...[/cyan]")

    now = datetime.now(CLINIC_TZ)
    total = 0

    table = Table(title="Invoices generated")
    table.add_column("Clinic", style="bold")
    table.add_column("Number")
    table.add_column("Patient")
    table.add_column("Total", justify="right")
    table.add_column("Status")

    for clinic in clinics:
        for _ in range(random.randint(*INVOICES_PER_CLINIC)):
            issued = now - timedelta(days=random.randint(0, 90))
            form = InvoiceFormData(
                patient_id=f"P{fake.random_number(digits=5, fix_len=True)}",
                patient_name=fake.name(),
                issue_date=issued.date(),
                due_date=issued.date() + timedelta(days=7),
                items=_random_items(),
                discount_rate=random.choice([0, 0, 0, 5, 10]),
                notes=random.choice(INVOICE_NOTES),
            )
            invoice = invoice_service.create_draft(clinic.id, form, now)

            roll = random.random()
            if roll > 0.15:
                invoice = invoice_service.issue(clinic.id, invoice.uuid, now)
                if roll > 0.45:
                    invoice = invoice_service.record_payment(
                        clinic.id,
                        invoice.uuid,
                        invoice.totals.total,
                        random.choice(list(PaymentMethod)),
                        now,
                    )
                elif roll < 0.25:
                    invoice = invoice_service.cancel(clinic.id, invoice.uuid, now)

            table.add_row(
                clinic.name,
                invoice.invoice_number,
                invoice.patient_name,
                format_money(invoice.totals.total),
                INVOICE_STATUS_LABELS[invoice.status],
            )
            total += 1

        invoice_service.sweep_overdue(clinic.id, now)

    console.print(table)
    console.print(f"\n[green]{total} invoices generated.[/green]\n")
    return total


def main() -> None:
    console.print("[bold magenta]Clinic Desk — Database Seeder[/bold magenta]")
    console.print("=" * 40)

    initialize_db()
    conn = get_connection()

    _clear_all(conn)

    clinic_service = ClinicService(get_clinic_repository())
    invoice_service = InvoiceService(get_invoice_repository())
    subscription_service = SubscriptionService(get_subscription_repository())

    clinics = _create_clinics(clinic_service)
    _create_subscriptions(subscription_service, clinics)
    total_invoices = _create_invoices(invoice_service, clinics)

    console.print("[bold green]Seeding complete![/bold green]")
    console.print(f"  Clinics:  {len(clinics)}")
    console.print(f"  Invoices: {total_invoices}")


if __name__ == "__main__":  # pragma: no cover
    main()
