from __future__ import annotations

import logging
from datetime import datetime

from clinicdesk.constants import CLINIC_TZ
from clinicdesk.models.subscription import (
    PLANS,
    PaymentConfirmation,
    Plan,
    ProviderEvent,
    ProviderEventType,
    Subscription,
    SubscriptionStatus,
)
from clinicdesk.repositories.base import SubscriptionRepository
from clinicdesk.services import subscription_lifecycle
from clinicdesk.services.authorization_service import AuthorizationService

logger = logging.getLogger(__name__)

ACTIVATION_EVENTS = (ProviderEventType.SUBSCRIPTION_ACTIVATED, ProviderEventType.SUBSCRIPTION_CHARGED)


def _now() -> datetime:
    return datetime.now(CLINIC_TZ)


class SubscriptionService:
    def __init__(self, repo: SubscriptionRepository, authz: AuthorizationService | None = None) -> None:
        self.repo = repo
        self.authz = authz or AuthorizationService()

    @staticmethod
    def list_plans() -> list[Plan]:
        return list(PLANS.values())

    def get_subscription(self, tenant_id: int | None) -> Subscription:
        """Return the clinic's subscription, or an unsaved ``none`` one."""
        tenant_id = self.authz.require_tenant(tenant_id)
        sub = self.repo.get_by_clinic(tenant_id)
        logger.debug("get_subscription clinic=%s found=%s", tenant_id, sub is not None)
        return sub or Subscription(clinic_id=tenant_id)

    def _save(self, before: Subscription, after: Subscription) -> Subscription:
        result = self.repo.save(after)
        if before.status != after.status:
            logger.info(
                "Subscription clinic=%s: %s -> %s (plan=%s)",
                after.clinic_id,
                before.status.value,
                after.status.value,
                after.plan_id,
            )
        return result

    def start_trial(self, tenant_id: int | None, now: datetime | None = None) -> Subscription:
        sub = self.get_subscription(tenant_id)
        return self._save(sub, subscription_lifecycle.start_trial(sub, now))

    def confirm_payment(
        self,
        tenant_id: int | None,
        confirmation: PaymentConfirmation,
        now: datetime | None = None,
    ) -> Subscription:
        sub = self.get_subscription(tenant_id)
        return self._save(sub, subscription_lifecycle.confirm_payment(sub, confirmation, now))

    def payment_failed(self, tenant_id: int | None, now: datetime | None = None) -> Subscription:
        sub = self.get_subscription(tenant_id)
        return self._save(sub, subscription_lifecycle.fail_payment(sub, now))

    def cancel(self, tenant_id: int | None, now: datetime | None = None) -> Subscription:
        sub = self.get_subscription(tenant_id)
        return self._save(sub, subscription_lifecycle.cancel(sub, now))

    def refresh(self, tenant_id: int | None, now: datetime | None = None) -> Subscription:
        sub = self.get_subscription(tenant_id)
        refreshed = subscription_lifecycle.refresh(sub, now)
        if refreshed is sub:
            return sub
        return self._save(sub, refreshed)

    def expire_lapsed(self, now: datetime | None = None) -> list[Subscription]:
        """Scheduled sweep across all clinics."""
        now = now or _now()
        expired: list[Subscription] = []
        live = [SubscriptionStatus.TRIALING.value, SubscriptionStatus.ACTIVE.value]
        for sub in self.repo.list_by_status(live):
            refreshed = subscription_lifecycle.refresh(sub, now)
            if refreshed is not sub:
                expired.append(self._save(sub, refreshed))
        logger.info("Expiry sweep: expired=%d", len(expired))
        return expired

    def handle_provider_event(self, event: ProviderEvent, now: datetime | None = None) -> Subscription | None:
        """Apply a checkout-provider webhook. Returns None for ignored events."""
        now = now or _now()
        if event.event in ACTIVATION_EVENTS:
            confirmation = PaymentConfirmation(
                plan_id=event.plan_id,
                amount=event.amount,
                currency=event.currency,
                payment_id=event.payment_id,
                timestamp=event.timestamp,
            )
            return self.confirm_payment(event.clinic_id, confirmation, now)
        if event.event == ProviderEventType.SUBSCRIPTION_CANCELLED:
            return self.cancel(event.clinic_id, now)
        if event.event == ProviderEventType.PAYMENT_FAILED:
            return self.payment_failed(event.clinic_id, now)
        # subscription.pending carries no status change of its own.
        logger.info("Ignored provider event %s for clinic=%s", event.event, event.clinic_id)
        return None
