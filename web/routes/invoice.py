from __future__ import annotations

import logging

from fastapi import APIRouter, Request, Response

from clinicdesk.models.invoice import Invoice, InvoiceFormData, InvoiceStatus, InvoiceTotals
from web.deps import get_clinic_id, get_invoice_service
from web.schemas import PaymentIn, TotalsIn

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoices")


@router.get("")
async def invoice_list(request: Request, status: InvoiceStatus | None = None) -> list[Invoice]:
    clinic_id = get_clinic_id(request)
    logger.info("GET /invoices — clinic=%s status=%s", clinic_id, status)
    return get_invoice_service(request).list_invoices(clinic_id, status)


@router.post("", status_code=201)
async def invoice_create(request: Request, form: InvoiceFormData) -> Invoice:
    clinic_id = get_clinic_id(request)
    logger.info("POST /invoices — clinic=%s patient=%s items=%d", clinic_id, form.patient_id, len(form.items))
    return get_invoice_service(request).create_draft(clinic_id, form)


@router.post("/totals")
async def invoice_totals(request: Request, body: TotalsIn) -> InvoiceTotals:
    clinic_id = get_clinic_id(request)
    logger.debug("POST /invoices/totals — clinic=%s items=%d", clinic_id, len(body.items))
    return get_invoice_service(request).preview_totals(clinic_id, body.items, body.discount_rate, body.tax_rate)


@router.post("/sweep-overdue")
async def invoice_sweep_overdue(request: Request) -> list[Invoice]:
    clinic_id = get_clinic_id(request)
    logger.info("POST /invoices/sweep-overdue — clinic=%s", clinic_id)
    return get_invoice_service(request).sweep_overdue(clinic_id)


@router.get("/{invoice_uuid}")
async def invoice_detail(request: Request, invoice_uuid: str) -> Invoice:
    clinic_id = get_clinic_id(request)
    logger.info("GET /invoices/%s — clinic=%s", invoice_uuid, clinic_id)
    return get_invoice_service(request).get_invoice(clinic_id, invoice_uuid)


@router.put("/{invoice_uuid}")
async def invoice_update(request: Request, invoice_uuid: str, form: InvoiceFormData) -> Invoice:
    clinic_id = get_clinic_id(request)
    logger.info("PUT /invoices/%s — clinic=%s", invoice_uuid, clinic_id)
    return get_invoice_service(request).update_draft(clinic_id, invoice_uuid, form)


@router.delete("/{invoice_uuid}", status_code=204)
async def invoice_delete(request: Request, invoice_uuid: str) -> Response:
    clinic_id = get_clinic_id(request)
    logger.info("DELETE /invoices/%s — clinic=%s", invoice_uuid, clinic_id)
    get_invoice_service(request).delete_invoice(clinic_id, invoice_uuid)
    return Response(status_code=204)


@router.post("/{invoice_uuid}/issue")
async def invoice_issue(request: Request, invoice_uuid: str) -> Invoice:
    clinic_id = get_clinic_id(request)
    logger.info("POST /invoices/%s/issue — clinic=%s", invoice_uuid, clinic_id)
    return get_invoice_service(request).issue(clinic_id, invoice_uuid)


@router.post("/{invoice_uuid}/pay")
async def invoice_pay(request: Request, invoice_uuid: str, body: PaymentIn) -> Invoice:
    clinic_id = get_clinic_id(request)
    logger.info(
        "POST /invoices/%s/pay — clinic=%s amount=%d method=%s",
        invoice_uuid,
        clinic_id,
        body.amount,
        body.method.value,
    )
    return get_invoice_service(request).record_payment(clinic_id, invoice_uuid, body.amount, body.method)


@router.post("/{invoice_uuid}/cancel")
async def invoice_cancel(request: Request, invoice_uuid: str) -> Invoice:
    clinic_id = get_clinic_id(request)
    logger.info("POST /invoices/%s/cancel — clinic=%s", invoice_uuid, clinic_id)
    return get_invoice_service(request).cancel(clinic_id, invoice_uuid)


@router.post("/{invoice_uuid}/mark-overdue")
async def invoice_mark_overdue(request: Request, invoice_uuid: str) -> Invoice:
    clinic_id = get_clinic_id(request)
    logger.info("POST /invoices/%s/mark-overdue — clinic=%s", invoice_uuid, clinic_id)
    return get_invoice_service(request).mark_overdue(clinic_id, invoice_uuid)
