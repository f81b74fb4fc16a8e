"""Invoice status transitions.

``INVOICE_TRANSITIONS`` is the only place that decides which status changes
are legal.  Every function returns a new ``Invoice`` and leaves its input
untouched; persisting the result is the caller's job.
"""

from __future__ import annotations

import re
from datetime import datetime

from clinicdesk.constants import CLINIC_TZ
from clinicdesk.errors import InvalidTransition, ValidationError
from clinicdesk.models.invoice import Invoice, InvoiceStatus, Payment
from clinicdesk.settings import settings

INVOICE_TRANSITIONS: dict[InvoiceStatus, frozenset[InvoiceStatus]] = {
    InvoiceStatus.DRAFT: frozenset({InvoiceStatus.PENDING, InvoiceStatus.CANCELLED}),
    InvoiceStatus.PENDING: frozenset({InvoiceStatus.PAID, InvoiceStatus.OVERDUE, InvoiceStatus.CANCELLED}),
    InvoiceStatus.OVERDUE: frozenset({InvoiceStatus.PAID}),
    InvoiceStatus.PAID: frozenset(),
    InvoiceStatus.CANCELLED: frozenset(),
}


def _now() -> datetime:
    return datetime.now(CLINIC_TZ)


def can_transition(current: InvoiceStatus, target: InvoiceStatus) -> bool:
    return target in INVOICE_TRANSITIONS[current]


def _check(invoice: Invoice, target: InvoiceStatus) -> None:
    if not can_transition(invoice.status, target):
        raise InvalidTransition("invoice", invoice.status.value, target.value)


def _moved(invoice: Invoice, target: InvoiceStatus, now: datetime, **changes) -> Invoice:
    return invoice.model_copy(update={"status": target, "updated_at": now, **changes})


def issue(invoice: Invoice, now: datetime | None = None) -> Invoice:
    _check(invoice, InvoiceStatus.PENDING)
    return _moved(invoice, InvoiceStatus.PENDING, now or _now())


def cancel(invoice: Invoice, now: datetime | None = None) -> Invoice:
    _check(invoice, InvoiceStatus.CANCELLED)
    return _moved(invoice, InvoiceStatus.CANCELLED, now or _now())


def record_payment(invoice: Invoice, payment: Payment) -> Invoice:
    _check(invoice, InvoiceStatus.PAID)
    if payment.amount <= 0:
        raise ValidationError.single("amount", "Payment amount must be greater than zero")
    return _moved(
        invoice,
        InvoiceStatus.PAID,
        payment.paid_at,
        paid_amount=payment.amount,
        paid_date=payment.paid_at,
        payment_method=payment.method,
    )


def is_overdue_eligible(invoice: Invoice, now: datetime | None = None) -> bool:
    if invoice.status != InvoiceStatus.PENDING or invoice.due_date is None:
        return False
    today = (now or _now()).astimezone(CLINIC_TZ).date()
    return invoice.due_date < today


def mark_overdue(invoice: Invoice, now: datetime | None = None) -> Invoice:
    _check(invoice, InvoiceStatus.OVERDUE)
    now = now or _now()
    if not is_overdue_eligible(invoice, now):
        raise InvalidTransition(
            "invoice",
            invoice.status.value,
            InvoiceStatus.OVERDUE.value,
            reason=f"due date {invoice.due_date} has not passed",
        )
    return _moved(invoice, InvoiceStatus.OVERDUE, now)


def transition(
    invoice: Invoice,
    target: InvoiceStatus,
    *,
    now: datetime | None = None,
    payment: Payment | None = None,
) -> Invoice:
    """Move ``invoice`` to ``target`` through the matching operation."""
    _check(invoice, target)
    if target == InvoiceStatus.PENDING:
        return issue(invoice, now)
    if target == InvoiceStatus.CANCELLED:
        return cancel(invoice, now)
    if target == InvoiceStatus.OVERDUE:
        return mark_overdue(invoice, now)
    if payment is None:
        raise ValidationError.single("payment", "Amount and payment method are required")
    return record_payment(invoice, payment)


_NUMBER_RE = re.compile(r"(\d+)$")


def generate_invoice_number(latest_number: int = 0, prefix: str | None = None) -> str:
    prefix = settings.invoice_number_prefix if prefix is None else prefix
    return f"{prefix}{latest_number + 1:04d}"


def parse_invoice_number(invoice_number: str) -> int:
    match = _NUMBER_RE.search(invoice_number or "")
    if match is None:
        return 0
    return int(match.group(1))
