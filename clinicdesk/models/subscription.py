from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class SubscriptionStatus(str, Enum):
    NONE = "none"
    TRIALING = "trialing"
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class PlanInterval(str, Enum):
    TRIAL = "trial"
    MONTH = "month"
    YEAR = "year"


class Plan(BaseModel):
    id: str
    name: str
    amount: int  # paise
    currency: str = "INR"
    interval: PlanInterval
    billing_text: str = ""
    features: list[str] = []


FREE_TRIAL = "FREE_TRIAL"
MONTHLY = "MONTHLY"
ANNUAL = "ANNUAL"

PLANS: dict[str, Plan] = {
    FREE_TRIAL: Plan(
        id=FREE_TRIAL,
        name="Free Trial",
        amount=0,
        interval=PlanInterval.TRIAL,
        features=[
            "Full access to all features",
            "Patient management",
            "Appointment scheduling",
            "Billing and invoicing",
            "Reports and analytics",
        ],
    ),
    MONTHLY: Plan(
        id=MONTHLY,
        name="Professional Monthly",
        amount=149900,
        interval=PlanInterval.MONTH,
        billing_text="One-time payment for 1 month access",
        features=[
            "All Free Trial features",
            "Priority support",
            "Advanced analytics",
            "Custom branding",
            "API access",
        ],
    ),
    ANNUAL: Plan(
        id=ANNUAL,
        name="Professional Annual",
        amount=1438800,
        interval=PlanInterval.YEAR,
        billing_text="One-time payment for 1 year access (Save 20%)",
        features=[
            "All Monthly features",
            "Two months free",
            "Dedicated account manager",
            "Premium support",
            "Early access to new features",
        ],
    ),
}


class Subscription(BaseModel):
    id: int | None = None
    clinic_id: int
    plan_id: str | None = None
    status: SubscriptionStatus = SubscriptionStatus.NONE
    trial_ends_at: datetime | None = None
    current_period_start: datetime | None = None
    current_period_end: datetime | None = None
    payment_id: str = ""
    updated_at: datetime | None = None

    @property
    def plan(self) -> Plan | None:
        if self.plan_id is None:
            return None
        return PLANS.get(self.plan_id)


class PaymentConfirmation(BaseModel):
    plan_id: str
    amount: int  # paise
    currency: str = "INR"
    payment_id: str
    timestamp: datetime


class ProviderEventType:
    """Webhook event names sent by the hosted checkout provider."""

    SUBSCRIPTION_ACTIVATED = "subscription.activated"
    SUBSCRIPTION_CHARGED = "subscription.charged"
    SUBSCRIPTION_CANCELLED = "subscription.cancelled"
    SUBSCRIPTION_PENDING = "subscription.pending"
    PAYMENT_FAILED = "payment.failed"


class ProviderEvent(BaseModel):
    event: str
    clinic_id: int
    plan_id: str = ""
    amount: int = 0
    currency: str = "INR"
    payment_id: str = ""
    timestamp: datetime
