from datetime import datetime, timedelta

from clinicdesk.constants import CLINIC_TZ
from clinicdesk.models.clinic import Clinic
from clinicdesk.models.subscription import FREE_TRIAL, MONTHLY, Subscription, SubscriptionStatus

NOW = datetime(2025, 3, 10, 10, 0, tzinfo=CLINIC_TZ)


class TestSubscriptionRepo:
    def test_get_missing(self, subscription_repo, clinic):
        assert subscription_repo.get_by_clinic(clinic.id) is None

    def test_save_inserts(self, subscription_repo, clinic):
        saved = subscription_repo.save(
            Subscription(
                clinic_id=clinic.id,
                plan_id=FREE_TRIAL,
                status=SubscriptionStatus.TRIALING,
                trial_ends_at=NOW + timedelta(days=7),
                current_period_start=NOW,
                current_period_end=NOW + timedelta(days=7),
                updated_at=NOW,
            )
        )
        assert saved.id is not None
        assert saved.status == SubscriptionStatus.TRIALING
        assert saved.current_period_end == NOW + timedelta(days=7)
        assert saved.current_period_end.tzinfo is not None

    def test_save_updates(self, subscription_repo, clinic):
        first = subscription_repo.save(Subscription(clinic_id=clinic.id, status=SubscriptionStatus.TRIALING))
        second = subscription_repo.save(
            first.model_copy(update={"status": SubscriptionStatus.ACTIVE, "plan_id": MONTHLY, "payment_id": "pay_1"})
        )
        assert second.id == first.id
        assert second.status == SubscriptionStatus.ACTIVE
        assert second.payment_id == "pay_1"

    def test_list_by_status(self, subscription_repo, clinic_repo, clinic):
        other = clinic_repo.create(Clinic(name="Other"))
        subscription_repo.save(Subscription(clinic_id=clinic.id, status=SubscriptionStatus.ACTIVE))
        subscription_repo.save(Subscription(clinic_id=other.id, status=SubscriptionStatus.CANCELLED))

        result = subscription_repo.list_by_status(["trialing", "active"])
        assert [s.clinic_id for s in result] == [clinic.id]

    def test_list_by_status_empty(self, subscription_repo):
        assert subscription_repo.list_by_status([]) == []
