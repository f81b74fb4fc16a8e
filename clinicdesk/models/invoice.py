from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from clinicdesk.settings import settings


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    UPI = "upi"
    NETBANKING = "netbanking"
    OTHER = "other"


class LineItem(BaseModel):
    id: int | None = None
    invoice_id: int | None = None
    description: str = ""
    quantity: int = 1
    unit_price: int = 0  # paise
    amount: int = 0  # paise, always quantity * unit_price
    sort_order: int = 0


class InvoiceTotals(BaseModel):
    subtotal: int = 0
    discount_rate: Decimal = Decimal("0")
    discount_amount: int = 0
    tax_rate: Decimal = Decimal("0")
    tax_amount: int = 0
    total: int = 0


class Payment(BaseModel):
    amount: int  # paise
    method: PaymentMethod
    paid_at: datetime


class InvoiceFormData(BaseModel):
    patient_id: str = ""
    patient_name: str = ""
    issue_date: date | None = None
    due_date: date | None = None
    items: list[LineItem] = Field(default_factory=lambda: [LineItem()])
    discount_rate: Decimal = Decimal("0")
    tax_rate: Decimal = Decimal(settings.default_tax_rate)
    currency: str = settings.currency
    notes: str = ""
    terms_and_conditions: str = ""


class Invoice(BaseModel):
    id: int | None = None
    uuid: str = ""
    clinic_id: int
    invoice_number: str = ""
    patient_id: str
    patient_name: str = ""
    issue_date: date
    due_date: date | None = None
    items: list[LineItem] = []
    totals: InvoiceTotals = InvoiceTotals()
    status: InvoiceStatus = InvoiceStatus.DRAFT
    currency: str = settings.currency
    notes: str = ""
    terms_and_conditions: str = ""
    paid_amount: int | None = None
    paid_date: datetime | None = None
    payment_method: PaymentMethod | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in (InvoiceStatus.PAID, InvoiceStatus.CANCELLED)
