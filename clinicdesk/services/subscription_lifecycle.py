"""Clinic subscription status transitions and the derived renewal flags."""

from __future__ import annotations

from datetime import datetime, timedelta

from dateutil.relativedelta import relativedelta

from clinicdesk.constants import CLINIC_TZ, NEAR_EXPIRY_DAYS, TRIAL_DAYS
from clinicdesk.errors import InvalidTransition, ValidationError
from clinicdesk.models.subscription import (
    FREE_TRIAL,
    PLANS,
    PaymentConfirmation,
    PlanInterval,
    Subscription,
    SubscriptionStatus,
)

SUBSCRIPTION_TRANSITIONS: dict[SubscriptionStatus, frozenset[SubscriptionStatus]] = {
    SubscriptionStatus.NONE: frozenset({SubscriptionStatus.TRIALING, SubscriptionStatus.ACTIVE}),
    SubscriptionStatus.TRIALING: frozenset({SubscriptionStatus.ACTIVE, SubscriptionStatus.EXPIRED}),
    SubscriptionStatus.ACTIVE: frozenset(
        {
            SubscriptionStatus.ACTIVE,  # renewal or plan change
            SubscriptionStatus.PAST_DUE,
            SubscriptionStatus.CANCELLED,
            SubscriptionStatus.EXPIRED,
        }
    ),
    SubscriptionStatus.PAST_DUE: frozenset({SubscriptionStatus.ACTIVE}),
    SubscriptionStatus.CANCELLED: frozenset({SubscriptionStatus.ACTIVE}),
    SubscriptionStatus.EXPIRED: frozenset({SubscriptionStatus.ACTIVE}),
}

_PERIODS = {
    PlanInterval.MONTH: relativedelta(months=1),
    PlanInterval.YEAR: relativedelta(years=1),
}


def _now() -> datetime:
    return datetime.now(CLINIC_TZ)


def can_transition(current: SubscriptionStatus, target: SubscriptionStatus) -> bool:
    return target in SUBSCRIPTION_TRANSITIONS[current]


def _check(sub: Subscription, target: SubscriptionStatus) -> None:
    if not can_transition(sub.status, target):
        raise InvalidTransition("subscription", sub.status.value, target.value)


def is_near_expiry(current_period_end: datetime | None, now: datetime | None = None) -> bool:
    if current_period_end is None:
        return False
    return current_period_end - (now or _now()) <= timedelta(days=NEAR_EXPIRY_DAYS)


def has_lapsed(sub: Subscription, now: datetime | None = None) -> bool:
    if sub.current_period_end is None:
        return False
    return sub.current_period_end <= (now or _now())


def can_renew(sub: Subscription, plan_id: str | None = None, now: datetime | None = None) -> bool:
    """Whether checkout for ``plan_id`` should be offered.

    Only buying the plan already active is held back until the near-expiry
    window opens; switching plans is always offered. ``plan_id`` defaults to
    the current plan.
    """
    if sub.status != SubscriptionStatus.ACTIVE:
        return True
    if plan_id is not None and plan_id != sub.plan_id:
        return True
    return is_near_expiry(sub.current_period_end, now)


def days_remaining(sub: Subscription, now: datetime | None = None) -> int:
    if sub.current_period_end is None:
        return 0
    remaining = sub.current_period_end - (now or _now())
    return max(remaining.days, 0)


def start_trial(sub: Subscription, now: datetime | None = None) -> Subscription:
    _check(sub, SubscriptionStatus.TRIALING)
    now = now or _now()
    trial_end = now + timedelta(days=TRIAL_DAYS)
    return sub.model_copy(
        update={
            "plan_id": FREE_TRIAL,
            "status": SubscriptionStatus.TRIALING,
            "trial_ends_at": trial_end,
            "current_period_start": now,
            "current_period_end": trial_end,
            "updated_at": now,
        }
    )


def confirm_payment(
    sub: Subscription,
    confirmation: PaymentConfirmation,
    now: datetime | None = None,
) -> Subscription:
    """Activate, renew or switch plan after the provider confirms a payment.

    The payment has already been captured, so it is applied whatever the
    current period; the new period always starts at ``now``.
    """
    _check(sub, SubscriptionStatus.ACTIVE)
    plan = PLANS.get(confirmation.plan_id)
    if plan is None or plan.id == FREE_TRIAL:
        raise ValidationError.single("plan_id", f"Unknown paid plan: {confirmation.plan_id}")

    now = now or _now()
    return sub.model_copy(
        update={
            "plan_id": plan.id,
            "status": SubscriptionStatus.ACTIVE,
            "current_period_start": now,
            "current_period_end": now + _PERIODS[plan.interval],
            "payment_id": confirmation.payment_id,
            "updated_at": now,
        }
    )


def fail_payment(sub: Subscription, now: datetime | None = None) -> Subscription:
    _check(sub, SubscriptionStatus.PAST_DUE)
    return sub.model_copy(update={"status": SubscriptionStatus.PAST_DUE, "updated_at": now or _now()})


def cancel(sub: Subscription, now: datetime | None = None) -> Subscription:
    _check(sub, SubscriptionStatus.CANCELLED)
    return sub.model_copy(update={"status": SubscriptionStatus.CANCELLED, "updated_at": now or _now()})


def expire(sub: Subscription, now: datetime | None = None) -> Subscription:
    _check(sub, SubscriptionStatus.EXPIRED)
    now = now or _now()
    if not has_lapsed(sub, now):
        raise InvalidTransition(
            "subscription",
            sub.status.value,
            SubscriptionStatus.EXPIRED.value,
            reason="current period has not ended",
        )
    return sub.model_copy(update={"status": SubscriptionStatus.EXPIRED, "updated_at": now})


def refresh(sub: Subscription, now: datetime | None = None) -> Subscription:
    """Expire a trialing/active subscription whose period has lapsed."""
    if sub.status in (SubscriptionStatus.TRIALING, SubscriptionStatus.ACTIVE) and has_lapsed(sub, now):
        return expire(sub, now)
    return sub
