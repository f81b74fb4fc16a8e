from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel

from clinicdesk.models.invoice import LineItem, PaymentMethod
from clinicdesk.models.subscription import Subscription


class PaymentIn(BaseModel):
    amount: int  # paise
    method: PaymentMethod


class TotalsIn(BaseModel):
    items: list[LineItem]
    discount_rate: Decimal = Decimal("0")
    tax_rate: Decimal = Decimal("0")


class SubscriptionOut(BaseModel):
    subscription: Subscription
    is_near_expiry: bool
    can_renew: bool
    days_remaining: int
