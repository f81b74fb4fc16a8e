from __future__ import annotations

import logging
from datetime import date, datetime, timedelta

from clinicdesk.constants import CLINIC_TZ
from clinicdesk.errors import InvalidTransition, NotFound, ValidationError
from clinicdesk.models.invoice import (
    Invoice,
    InvoiceFormData,
    InvoiceStatus,
    InvoiceTotals,
    LineItem,
    Payment,
    PaymentMethod,
)
from clinicdesk.repositories.base import InvoiceRepository
from clinicdesk.services import invoice_lifecycle
from clinicdesk.services.authorization_service import AuthorizationService
from clinicdesk.services.billing_calculator import compute_totals, normalize_items, validate_invoice_draft
from clinicdesk.settings import settings

logger = logging.getLogger(__name__)

DELETABLE_STATUSES = (InvoiceStatus.DRAFT, InvoiceStatus.CANCELLED)


def _now() -> datetime:
    return datetime.now(CLINIC_TZ)


class InvoiceService:
    def __init__(self, repo: InvoiceRepository, authz: AuthorizationService | None = None) -> None:
        self.repo = repo
        self.authz = authz or AuthorizationService()

    def _load(self, tenant_id: int | None, uuid: str) -> Invoice:
        tenant_id = self.authz.require_tenant(tenant_id)
        invoice = self.repo.get_by_uuid(uuid)
        if invoice is None:
            raise NotFound("invoice", uuid)
        self.authz.ensure_owner(tenant_id, invoice)
        return invoice

    @staticmethod
    def _prepare(form: InvoiceFormData, now: datetime) -> InvoiceFormData:
        """Fill the defaults the form leaves open, then validate."""
        today = now.astimezone(CLINIC_TZ).date()
        issue_date = form.issue_date or today
        form = form.model_copy(update={"issue_date": issue_date})
        errors = validate_invoice_draft(form)
        if errors:
            logger.info("Invoice draft rejected: %d field errors", len(errors))
            raise ValidationError(errors)
        return form

    def preview_totals(
        self,
        tenant_id: int | None,
        items: list[LineItem],
        discount_rate,
        tax_rate,
    ) -> InvoiceTotals:
        self.authz.require_tenant(tenant_id)
        return compute_totals(items, discount_rate, tax_rate)

    def default_due_date(self, now: datetime | None = None) -> date:
        return (now or _now()).astimezone(CLINIC_TZ).date() + timedelta(days=settings.invoice_due_days)

    def create_draft(self, tenant_id: int | None, form: InvoiceFormData, now: datetime | None = None) -> Invoice:
        tenant_id = self.authz.require_tenant(tenant_id)
        now = now or _now()
        form = self._prepare(form, now)

        items = normalize_items(form.items)
        totals = compute_totals(items, form.discount_rate, form.tax_rate)
        latest = self.repo.latest_invoice_number(tenant_id)
        invoice_number = invoice_lifecycle.generate_invoice_number(
            invoice_lifecycle.parse_invoice_number(latest or "")
        )

        invoice = Invoice(
            clinic_id=tenant_id,
            invoice_number=invoice_number,
            patient_id=form.patient_id,
            patient_name=form.patient_name,
            issue_date=form.issue_date,
            due_date=form.due_date,
            items=items,
            totals=totals,
            status=InvoiceStatus.DRAFT,
            currency=form.currency,
            notes=form.notes,
            terms_and_conditions=form.terms_and_conditions,
        )
        invoice = self.repo.create(invoice)
        logger.info(
            "Invoice created: id=%s, clinic=%s, number=%s, total=%d",
            invoice.id,
            tenant_id,
            invoice.invoice_number,
            invoice.totals.total,
        )
        return invoice

    def update_draft(
        self,
        tenant_id: int | None,
        uuid: str,
        form: InvoiceFormData,
        now: datetime | None = None,
    ) -> Invoice:
        invoice = self._load(tenant_id, uuid)
        if invoice.status != InvoiceStatus.DRAFT:
            raise InvalidTransition(
                "invoice",
                invoice.status.value,
                "edited",
                reason="only draft invoices can be edited",
            )
        now = now or _now()
        form = self._prepare(form, now)

        items = normalize_items(form.items)
        updated = invoice.model_copy(
            update={
                "patient_id": form.patient_id,
                "patient_name": form.patient_name,
                "issue_date": form.issue_date,
                "due_date": form.due_date,
                "items": items,
                "totals": compute_totals(items, form.discount_rate, form.tax_rate),
                "currency": form.currency,
                "notes": form.notes,
                "terms_and_conditions": form.terms_and_conditions,
                "updated_at": now,
            }
        )
        updated = self.repo.update(updated)
        logger.info("Invoice updated: id=%s, total=%d", updated.id, updated.totals.total)
        return updated

    def issue(self, tenant_id: int | None, uuid: str, now: datetime | None = None) -> Invoice:
        invoice = self._load(tenant_id, uuid)
        result = self.repo.update(invoice_lifecycle.issue(invoice, now))
        logger.info("Invoice %s issued", result.invoice_number)
        return result

    def record_payment(
        self,
        tenant_id: int | None,
        uuid: str,
        amount: int,
        method: PaymentMethod,
        now: datetime | None = None,
    ) -> Invoice:
        invoice = self._load(tenant_id, uuid)
        payment = Payment(amount=amount, method=method, paid_at=now or _now())
        result = self.repo.update(invoice_lifecycle.record_payment(invoice, payment))
        logger.info(
            "Invoice %s paid: amount=%d method=%s",
            result.invoice_number,
            amount,
            method.value,
        )
        return result

    def cancel(self, tenant_id: int | None, uuid: str, now: datetime | None = None) -> Invoice:
        invoice = self._load(tenant_id, uuid)
        result = self.repo.update(invoice_lifecycle.cancel(invoice, now))
        logger.info("Invoice %s cancelled", result.invoice_number)
        return result

    def mark_overdue(self, tenant_id: int | None, uuid: str, now: datetime | None = None) -> Invoice:
        invoice = self._load(tenant_id, uuid)
        result = self.repo.update(invoice_lifecycle.mark_overdue(invoice, now))
        logger.info("Invoice %s marked overdue", result.invoice_number)
        return result

    def sweep_overdue(self, tenant_id: int | None, now: datetime | None = None) -> list[Invoice]:
        """Move every pending invoice past its due date to overdue."""
        tenant_id = self.authz.require_tenant(tenant_id)
        now = now or _now()
        moved: list[Invoice] = []
        for invoice in self.repo.list_by_clinic(tenant_id, InvoiceStatus.PENDING):
            if invoice_lifecycle.is_overdue_eligible(invoice, now):
                moved.append(self.repo.update(invoice_lifecycle.mark_overdue(invoice, now)))
        logger.info("Overdue sweep: clinic=%s moved=%d", tenant_id, len(moved))
        return moved

    def get_invoice(self, tenant_id: int | None, uuid: str) -> Invoice:
        invoice = self._load(tenant_id, uuid)
        logger.debug("get_invoice uuid=%s", uuid)
        return invoice

    def list_invoices(self, tenant_id: int | None, status: InvoiceStatus | None = None) -> list[Invoice]:
        tenant_id = self.authz.require_tenant(tenant_id)
        result = self.repo.list_by_clinic(tenant_id, status)
        logger.debug("Listed %d invoices for clinic=%s status=%s", len(result), tenant_id, status)
        return result

    def delete_invoice(self, tenant_id: int | None, uuid: str) -> None:
        invoice = self._load(tenant_id, uuid)
        if invoice.status not in DELETABLE_STATUSES:
            raise InvalidTransition(
                "invoice",
                invoice.status.value,
                "deleted",
                reason="only draft or cancelled invoices can be deleted",
            )
        if invoice.id is None:
            raise ValueError("Cannot delete invoice without an id")
        self.repo.delete(invoice.id)
        logger.info("Invoice %s soft-deleted", invoice.invoice_number)
