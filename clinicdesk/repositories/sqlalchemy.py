from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Connection, text
from sqlalchemy.engine import RowMapping
from ulid import ULID

from clinicdesk.constants import CLINIC_TZ
from clinicdesk.models.clinic import Clinic
from clinicdesk.models.invoice import Invoice, InvoiceStatus, InvoiceTotals, LineItem, PaymentMethod
from clinicdesk.models.subscription import Subscription, SubscriptionStatus
from clinicdesk.repositories.base import ClinicRepository, InvoiceRepository, SubscriptionRepository


def _now() -> datetime:
    return datetime.now(CLINIC_TZ)


def _aware(value: datetime | str | None) -> datetime | None:
    """Drivers hand back naive datetimes (or strings on SQLite); pin them to the clinic zone."""
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        return value.replace(tzinfo=CLINIC_TZ)
    return value


def _date(value: date | str | None) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return date.fromisoformat(value)
    return value


def _iso(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


class SQLAlchemyClinicRepository(ClinicRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    @staticmethod
    def _row_to_clinic(row: RowMapping) -> Clinic:
        return Clinic(
            id=row["id"],
            uuid=row["uuid"],
            name=row["name"],
            email=row["email"],
            phone=row["phone"],
            address=row["address"],
            created_at=_aware(row["created_at"]),
        )

    def create(self, clinic: Clinic) -> Clinic:
        result = self.conn.execute(
            text(
                "INSERT INTO clinics (uuid, name, email, phone, address, created_at) "
                "VALUES (:uuid, :name, :email, :phone, :address, :created_at)"
            ),
            {
                "uuid": str(ULID()),
                "name": clinic.name,
                "email": clinic.email,
                "phone": clinic.phone,
                "address": clinic.address,
                "created_at": _now(),
            },
        )
        self.conn.commit()
        clinic_id = result.lastrowid
        created = self.get_by_id(clinic_id)
        if created is None:
            raise RuntimeError(f"Failed to retrieve clinic after create (id={clinic_id})")
        return created

    def get_by_id(self, clinic_id: int) -> Clinic | None:
        row = self.conn.execute(text("SELECT * FROM clinics WHERE id = :id"), {"id": clinic_id}).mappings().fetchone()
        if row is None:
            return None
        return self._row_to_clinic(row)

    def get_by_uuid(self, uuid: str) -> Clinic | None:
        row = (
            self.conn.execute(text("SELECT * FROM clinics WHERE uuid = :uuid"), {"uuid": uuid})
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._row_to_clinic(row)

    def list_all(self) -> list[Clinic]:
        rows = self.conn.execute(text("SELECT * FROM clinics ORDER BY name")).mappings().fetchall()
        return [self._row_to_clinic(row) for row in rows]


class SQLAlchemyInvoiceRepository(InvoiceRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    def _insert_items(self, invoice_id: int, items: list[LineItem]) -> None:
        for i, item in enumerate(items):
            self.conn.execute(
                text(
                    "INSERT INTO invoice_line_items "
                    "(invoice_id, description, quantity, unit_price, amount, sort_order) "
                    "VALUES (:invoice_id, :description, :quantity, :unit_price, :amount, :sort_order)"
                ),
                {
                    "invoice_id": invoice_id,
                    "description": item.description,
                    "quantity": item.quantity,
                    "unit_price": item.unit_price,
                    "amount": item.quantity * item.unit_price,
                    "sort_order": i,
                },
            )

    @staticmethod
    def _params(invoice: Invoice) -> dict:
        totals = invoice.totals
        return {
            "patient_id": invoice.patient_id,
            "patient_name": invoice.patient_name,
            "issue_date": _iso(invoice.issue_date),
            "due_date": _iso(invoice.due_date),
            "subtotal": totals.subtotal,
            "discount_rate": str(totals.discount_rate),
            "discount_amount": totals.discount_amount,
            "tax_rate": str(totals.tax_rate),
            "tax_amount": totals.tax_amount,
            "total": totals.total,
            "status": invoice.status.value,
            "currency": invoice.currency,
            "notes": invoice.notes,
            "terms_and_conditions": invoice.terms_and_conditions,
            "paid_amount": invoice.paid_amount,
            "paid_date": invoice.paid_date,
            "payment_method": invoice.payment_method.value if invoice.payment_method else None,
        }

    def create(self, invoice: Invoice) -> Invoice:
        now = _now()
        params = self._params(invoice)
        params.update(
            {
                "uuid": str(ULID()),
                "clinic_id": invoice.clinic_id,
                "invoice_number": invoice.invoice_number,
                "created_at": now,
                "updated_at": now,
            }
        )
        result = self.conn.execute(
            text(
                "INSERT INTO invoices (uuid, clinic_id, invoice_number, patient_id, patient_name, "
                "issue_date, due_date, subtotal, discount_rate, discount_amount, tax_rate, tax_amount, "
                "total, status, currency, notes, terms_and_conditions, paid_amount, paid_date, "
                "payment_method, created_at, updated_at) "
                "VALUES (:uuid, :clinic_id, :invoice_number, :patient_id, :patient_name, "
                ":issue_date, :due_date, :subtotal, :discount_rate, :discount_amount, :tax_rate, :tax_amount, "
                ":total, :status, :currency, :notes, :terms_and_conditions, :paid_amount, :paid_date, "
                ":payment_method, :created_at, :updated_at)"
            ),
            params,
        )
        invoice_id = result.lastrowid
        self._insert_items(invoice_id, invoice.items)
        self.conn.commit()
        created = self.get_by_id(invoice_id)
        if created is None:
            raise RuntimeError(f"Failed to retrieve invoice after create (id={invoice_id})")
        return created

    @staticmethod
    def _build_invoice(row: RowMapping, item_rows: list[RowMapping]) -> Invoice:
        return Invoice(
            id=row["id"],
            uuid=row["uuid"],
            clinic_id=row["clinic_id"],
            invoice_number=row["invoice_number"],
            patient_id=row["patient_id"],
            patient_name=row["patient_name"],
            issue_date=_date(row["issue_date"]),
            due_date=_date(row["due_date"]),
            items=[
                LineItem(
                    id=item_row["id"],
                    invoice_id=item_row["invoice_id"],
                    description=item_row["description"],
                    quantity=item_row["quantity"],
                    unit_price=item_row["unit_price"],
                    amount=item_row["amount"],
                    sort_order=item_row["sort_order"],
                )
                for item_row in item_rows
            ],
            totals=InvoiceTotals(
                subtotal=row["subtotal"],
                discount_rate=Decimal(row["discount_rate"]),
                discount_amount=row["discount_amount"],
                tax_rate=Decimal(row["tax_rate"]),
                tax_amount=row["tax_amount"],
                total=row["total"],
            ),
            status=InvoiceStatus(row["status"]),
            currency=row["currency"],
            notes=row["notes"],
            terms_and_conditions=row["terms_and_conditions"],
            paid_amount=row["paid_amount"],
            paid_date=_aware(row["paid_date"]),
            payment_method=PaymentMethod(row["payment_method"]) if row["payment_method"] else None,
            created_at=_aware(row["created_at"]),
            updated_at=_aware(row["updated_at"]),
        )

    def _row_to_invoice(self, row: RowMapping) -> Invoice:
        items = (
            self.conn.execute(
                text("SELECT * FROM invoice_line_items WHERE invoice_id = :invoice_id ORDER BY sort_order"),
                {"invoice_id": row["id"]},
            )
            .mappings()
            .fetchall()
        )
        return self._build_invoice(row, list(items))

    def get_by_id(self, invoice_id: int) -> Invoice | None:
        row = (
            self.conn.execute(
                text("SELECT * FROM invoices WHERE id = :id AND deleted_at IS NULL"),
                {"id": invoice_id},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._row_to_invoice(row)

    def get_by_uuid(self, uuid: str) -> Invoice | None:
        row = (
            self.conn.execute(
                text("SELECT * FROM invoices WHERE uuid = :uuid AND deleted_at IS NULL"),
                {"uuid": uuid},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._row_to_invoice(row)

    def list_by_clinic(self, clinic_id: int, status: InvoiceStatus | None = None) -> list[Invoice]:
        sql = "SELECT * FROM invoices WHERE clinic_id = :clinic_id AND deleted_at IS NULL"
        params: dict = {"clinic_id": clinic_id}
        if status is not None:
            sql += " AND status = :status"
            params["status"] = status.value
        rows = self.conn.execute(text(sql + " ORDER BY id DESC"), params).mappings().fetchall()
        if not rows:
            return []
        invoice_ids = [row["id"] for row in rows]
        placeholders = ", ".join(f":id{i}" for i in range(len(invoice_ids)))
        id_params = {f"id{i}": iid for i, iid in enumerate(invoice_ids)}
        all_items = (
            self.conn.execute(
                text(f"SELECT * FROM invoice_line_items WHERE invoice_id IN ({placeholders}) ORDER BY sort_order"),
                id_params,
            )
            .mappings()
            .fetchall()
        )
        items_by_invoice: dict[int, list[RowMapping]] = {}
        for item_row in all_items:
            items_by_invoice.setdefault(item_row["invoice_id"], []).append(item_row)
        return [self._build_invoice(row, items_by_invoice.get(row["id"], [])) for row in rows]

    def latest_invoice_number(self, clinic_id: int) -> str | None:
        # Soft-deleted rows still hold their number.
        row = self.conn.execute(
            text("SELECT invoice_number FROM invoices WHERE clinic_id = :clinic_id ORDER BY id DESC LIMIT 1"),
            {"clinic_id": clinic_id},
        ).fetchone()
        return row[0] if row else None

    def update(self, invoice: Invoice) -> Invoice:
        if invoice.id is None:
            raise ValueError("Cannot update invoice without an id")
        params = self._params(invoice)
        params.update({"id": invoice.id, "updated_at": invoice.updated_at or _now()})
        self.conn.execute(
            text(
                "UPDATE invoices SET patient_id = :patient_id, patient_name = :patient_name, "
                "issue_date = :issue_date, due_date = :due_date, subtotal = :subtotal, "
                "discount_rate = :discount_rate, discount_amount = :discount_amount, "
                "tax_rate = :tax_rate, tax_amount = :tax_amount, total = :total, status = :status, "
                "currency = :currency, notes = :notes, terms_and_conditions = :terms_and_conditions, "
                "paid_amount = :paid_amount, paid_date = :paid_date, payment_method = :payment_method, "
                "updated_at = :updated_at WHERE id = :id"
            ),
            params,
        )
        self.conn.execute(
            text("DELETE FROM invoice_line_items WHERE invoice_id = :invoice_id"),
            {"invoice_id": invoice.id},
        )
        self._insert_items(invoice.id, invoice.items)
        self.conn.commit()
        result = self.get_by_id(invoice.id)
        if result is None:
            raise RuntimeError(f"Failed to retrieve invoice after update (id={invoice.id})")
        return result

    def delete(self, invoice_id: int) -> None:
        self.conn.execute(
            text("UPDATE invoices SET deleted_at = :deleted_at WHERE id = :id"),
            {"deleted_at": _now(), "id": invoice_id},
        )
        self.conn.commit()


class SQLAlchemySubscriptionRepository(SubscriptionRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    @staticmethod
    def _row_to_subscription(row: RowMapping) -> Subscription:
        return Subscription(
            id=row["id"],
            clinic_id=row["clinic_id"],
            plan_id=row["plan_id"],
            status=SubscriptionStatus(row["status"]),
            trial_ends_at=_aware(row["trial_ends_at"]),
            current_period_start=_aware(row["current_period_start"]),
            current_period_end=_aware(row["current_period_end"]),
            payment_id=row["payment_id"],
            updated_at=_aware(row["updated_at"]),
        )

    def get_by_clinic(self, clinic_id: int) -> Subscription | None:
        row = (
            self.conn.execute(
                text("SELECT * FROM subscriptions WHERE clinic_id = :clinic_id"),
                {"clinic_id": clinic_id},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._row_to_subscription(row)

    def save(self, subscription: Subscription) -> Subscription:
        params = {
            "clinic_id": subscription.clinic_id,
            "plan_id": subscription.plan_id,
            "status": subscription.status.value,
            "trial_ends_at": subscription.trial_ends_at,
            "current_period_start": subscription.current_period_start,
            "current_period_end": subscription.current_period_end,
            "payment_id": subscription.payment_id,
            "updated_at": subscription.updated_at or _now(),
        }
        existing = self.get_by_clinic(subscription.clinic_id)
        if existing is None:
            self.conn.execute(
                text(
                    "INSERT INTO subscriptions (clinic_id, plan_id, status, trial_ends_at, "
                    "current_period_start, current_period_end, payment_id, updated_at) "
                    "VALUES (:clinic_id, :plan_id, :status, :trial_ends_at, "
                    ":current_period_start, :current_period_end, :payment_id, :updated_at)"
                ),
                params,
            )
        else:
            self.conn.execute(
                text(
                    "UPDATE subscriptions SET plan_id = :plan_id, status = :status, "
                    "trial_ends_at = :trial_ends_at, current_period_start = :current_period_start, "
                    "current_period_end = :current_period_end, payment_id = :payment_id, "
                    "updated_at = :updated_at WHERE clinic_id = :clinic_id"
                ),
                params,
            )
        self.conn.commit()
        result = self.get_by_clinic(subscription.clinic_id)
        if result is None:
            raise RuntimeError(f"Failed to retrieve subscription after save (clinic={subscription.clinic_id})")
        return result

    def list_by_status(self, statuses: list[str]) -> list[Subscription]:
        if not statuses:
            return []
        placeholders = ", ".join(f":s{i}" for i in range(len(statuses)))
        params = {f"s{i}": status for i, status in enumerate(statuses)}
        rows = (
            self.conn.execute(
                text(f"SELECT * FROM subscriptions WHERE status IN ({placeholders}) ORDER BY clinic_id"),
                params,
            )
            .mappings()
            .fetchall()
        )
        return [self._row_to_subscription(row) for row in rows]
