from datetime import date, datetime
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from clinicdesk.constants import CLINIC_TZ
from clinicdesk.errors import InvalidTransition, NotAuthenticated, NotAuthorized, NotFound, ValidationError
from clinicdesk.models.invoice import InvoiceStatus, LineItem, PaymentMethod
from clinicdesk.services.invoice_service import InvoiceService

NOW = datetime(2025, 3, 18, 9, 0, tzinfo=CLINIC_TZ)


class TestInvoiceService:
    def setup_method(self):
        self.mock_repo = MagicMock()
        self.mock_repo.create.side_effect = lambda inv: inv.model_copy(update={"id": 1, "uuid": "inv-uuid"})
        self.mock_repo.update.side_effect = lambda inv: inv
        self.service = InvoiceService(self.mock_repo)

    # --- create_draft ---

    def test_create_draft(self, sample_form):
        self.mock_repo.latest_invoice_number.return_value = None
        result = self.service.create_draft(1, sample_form(), NOW)

        assert result.invoice_number == "INV0001"
        assert result.status == InvoiceStatus.DRAFT
        assert result.clinic_id == 1
        assert result.totals.subtotal == 110000
        assert result.totals.total == 116820
        self.mock_repo.latest_invoice_number.assert_called_once_with(1)
        self.mock_repo.create.assert_called_once()

    def test_create_draft_numbers_sequentially(self, sample_form):
        self.mock_repo.latest_invoice_number.return_value = "INV0041"
        assert self.service.create_draft(1, sample_form(), NOW).invoice_number == "INV0042"

    def test_create_draft_rederives_amounts(self, sample_form):
        self.mock_repo.latest_invoice_number.return_value = None
        items = [LineItem(description="Dressing", quantity=3, unit_price=20000, amount=1, sort_order=5)]
        result = self.service.create_draft(1, sample_form(items=items, discount_rate=Decimal("0")), NOW)
        assert result.items[0].amount == 60000
        assert result.items[0].sort_order == 0

    def test_create_draft_defaults_issue_date(self, sample_form):
        self.mock_repo.latest_invoice_number.return_value = None
        result = self.service.create_draft(1, sample_form(issue_date=None, due_date=date(2025, 3, 25)), NOW)
        assert result.issue_date == date(2025, 3, 18)

    def test_create_draft_invalid(self, sample_form):
        with pytest.raises(ValidationError) as exc:
            self.service.create_draft(1, sample_form(patient_id="", due_date=None), NOW)
        assert {e.field for e in exc.value.errors} == {"patient_id", "due_date"}
        self.mock_repo.create.assert_not_called()

    def test_create_draft_requires_tenant(self, sample_form):
        with pytest.raises(NotAuthenticated):
            self.service.create_draft(None, sample_form(), NOW)
        self.mock_repo.latest_invoice_number.assert_not_called()

    def test_default_due_date(self):
        assert self.service.default_due_date(NOW) == date(2025, 3, 25)

    def test_preview_totals(self):
        items = [LineItem(description="a", quantity=2, unit_price=50000), LineItem(description="b", unit_price=100000)]
        totals = self.service.preview_totals(1, items, 10, 18)
        assert totals.total == 212400

    def test_preview_totals_requires_tenant(self):
        with pytest.raises(NotAuthenticated):
            self.service.preview_totals(None, [], 0, 0)

    # --- update_draft ---

    def test_update_draft(self, sample_invoice, sample_form):
        self.mock_repo.get_by_uuid.return_value = sample_invoice()
        result = self.service.update_draft(1, "inv-uuid", sample_form(patient_name="Asha R.", discount_rate=0), NOW)
        assert result.patient_name == "Asha R."
        assert result.totals.discount_amount == 0
        assert result.invoice_number == "INV0001"
        assert result.updated_at == NOW

    def test_update_non_draft(self, sample_invoice, sample_form):
        self.mock_repo.get_by_uuid.return_value = sample_invoice(status=InvoiceStatus.PENDING)
        with pytest.raises(InvalidTransition, match="only draft") as exc:
            self.service.update_draft(1, "inv-uuid", sample_form(), NOW)
        assert exc.value.current == "pending"
        assert exc.value.requested == "edited"
        assert "from 'pending' to 'edited'" in str(exc.value)
        self.mock_repo.update.assert_not_called()

    # --- tenancy ---

    def test_not_found(self):
        self.mock_repo.get_by_uuid.return_value = None
        with pytest.raises(NotFound):
            self.service.get_invoice(1, "missing")

    def test_other_clinic(self, sample_invoice):
        self.mock_repo.get_by_uuid.return_value = sample_invoice(clinic_id=2)
        with pytest.raises(NotAuthorized):
            self.service.issue(1, "inv-uuid", NOW)
        self.mock_repo.update.assert_not_called()

    def test_get_invoice(self, sample_invoice):
        inv = sample_invoice()
        self.mock_repo.get_by_uuid.return_value = inv
        assert self.service.get_invoice(1, inv.uuid) == inv

    def test_list_invoices(self, sample_invoice):
        self.mock_repo.list_by_clinic.return_value = [sample_invoice()]
        assert len(self.service.list_invoices(1, InvoiceStatus.DRAFT)) == 1
        self.mock_repo.list_by_clinic.assert_called_once_with(1, InvoiceStatus.DRAFT)

    def test_list_requires_tenant(self):
        with pytest.raises(NotAuthenticated):
            self.service.list_invoices(None)

    # --- lifecycle ---

    def test_issue(self, sample_invoice):
        self.mock_repo.get_by_uuid.return_value = sample_invoice()
        assert self.service.issue(1, "inv-uuid", NOW).status == InvoiceStatus.PENDING

    def test_record_payment(self, sample_invoice):
        self.mock_repo.get_by_uuid.return_value = sample_invoice(status=InvoiceStatus.OVERDUE)
        result = self.service.record_payment(1, "inv-uuid", 116820, PaymentMethod.CASH, NOW)
        assert result.status == InvoiceStatus.PAID
        assert result.paid_amount == 116820
        assert result.paid_date == NOW

    def test_cancel(self, sample_invoice):
        self.mock_repo.get_by_uuid.return_value = sample_invoice(status=InvoiceStatus.PENDING)
        assert self.service.cancel(1, "inv-uuid", NOW).status == InvoiceStatus.CANCELLED

    def test_cancel_paid(self, sample_invoice):
        self.mock_repo.get_by_uuid.return_value = sample_invoice(status=InvoiceStatus.PAID)
        with pytest.raises(InvalidTransition):
            self.service.cancel(1, "inv-uuid", NOW)

    def test_mark_overdue(self, sample_invoice):
        self.mock_repo.get_by_uuid.return_value = sample_invoice(
            status=InvoiceStatus.PENDING, due_date=date(2025, 3, 17)
        )
        assert self.service.mark_overdue(1, "inv-uuid", NOW).status == InvoiceStatus.OVERDUE

    def test_sweep_overdue(self, sample_invoice):
        self.mock_repo.list_by_clinic.return_value = [
            sample_invoice(id=1, uuid="a", status=InvoiceStatus.PENDING, due_date=date(2025, 3, 17)),
            sample_invoice(id=2, uuid="b", status=InvoiceStatus.PENDING, due_date=date(2025, 3, 30)),
        ]
        moved = self.service.sweep_overdue(1, NOW)
        assert [i.uuid for i in moved] == ["a"]
        assert moved[0].status == InvoiceStatus.OVERDUE
        self.mock_repo.list_by_clinic.assert_called_once_with(1, InvoiceStatus.PENDING)

    # --- delete ---

    def test_delete_draft(self, sample_invoice):
        self.mock_repo.get_by_uuid.return_value = sample_invoice(id=5)
        self.service.delete_invoice(1, "inv-uuid")
        self.mock_repo.delete.assert_called_once_with(5)

    def test_delete_cancelled(self, sample_invoice):
        self.mock_repo.get_by_uuid.return_value = sample_invoice(id=5, status=InvoiceStatus.CANCELLED)
        self.service.delete_invoice(1, "inv-uuid")
        self.mock_repo.delete.assert_called_once_with(5)

    def test_delete_paid_rejected(self, sample_invoice):
        self.mock_repo.get_by_uuid.return_value = sample_invoice(status=InvoiceStatus.PAID)
        with pytest.raises(InvalidTransition):
            self.service.delete_invoice(1, "inv-uuid")
        self.mock_repo.delete.assert_not_called()
