"""Invoice arithmetic and draft validation.

Everything here is pure: inputs are never mutated and no state is kept
between calls, so the same items and rates always give the same totals.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from clinicdesk.errors import FieldError, ValidationError
from clinicdesk.models.invoice import InvoiceFormData, InvoiceTotals, LineItem

EDITABLE_FIELDS = ("description", "quantity", "unit_price")

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


def _to_paise(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def clamp_rate(rate: Decimal | int | float | str) -> Decimal:
    value = Decimal(str(rate))
    if value < _ZERO:
        return _ZERO
    if value > _HUNDRED:
        return _HUNDRED
    return value


def recompute_line_item(item: LineItem, changed_field: str, new_value: str | int) -> LineItem:
    """Return a copy of ``item`` with one field edited and ``amount`` re-derived."""
    if changed_field not in EDITABLE_FIELDS:
        raise ValidationError.single(changed_field, "Unknown line item field")

    if changed_field == "description":
        return item.model_copy(update={"description": str(new_value)})

    try:
        number = int(new_value)
    except (TypeError, ValueError):
        raise ValidationError.single(changed_field, "Must be a whole number") from None

    if changed_field == "quantity" and number < 1:
        raise ValidationError.single("quantity", "Quantity must be at least 1")
    if changed_field == "unit_price" and number < 0:
        raise ValidationError.single("unit_price", "Unit price cannot be negative")

    updated = item.model_copy(update={changed_field: number})
    updated.amount = updated.quantity * updated.unit_price
    return updated


def compute_totals(
    items: list[LineItem],
    discount_rate: Decimal | int | float | str,
    tax_rate: Decimal | int | float | str,
) -> InvoiceTotals:
    discount = clamp_rate(discount_rate)
    tax = clamp_rate(tax_rate)

    # amounts are re-derived, never trusted from the stored item
    subtotal = sum(item.quantity * item.unit_price for item in items)
    discount_amount = _to_paise(Decimal(subtotal) * discount / _HUNDRED)
    discounted_subtotal = subtotal - discount_amount
    tax_amount = _to_paise(Decimal(discounted_subtotal) * tax / _HUNDRED)
    total = discounted_subtotal + tax_amount

    return InvoiceTotals(
        subtotal=subtotal,
        discount_rate=discount,
        discount_amount=discount_amount,
        tax_rate=tax,
        tax_amount=tax_amount,
        total=max(total, 0),
    )


def normalize_items(items: list[LineItem]) -> list[LineItem]:
    """Copy items with ``amount`` and ``sort_order`` re-derived."""
    return [
        item.model_copy(update={"amount": item.quantity * item.unit_price, "sort_order": i})
        for i, item in enumerate(items)
    ]


def add_line_item(items: list[LineItem]) -> list[LineItem]:
    return [*items, LineItem(sort_order=len(items))]


def remove_line_item(items: list[LineItem], index: int) -> list[LineItem]:
    if not 0 <= index < len(items):
        raise ValidationError.single("items", f"No line item at position {index + 1}")
    if len(items) <= 1:
        raise ValidationError.single("items", "An invoice needs at least one line item")
    return [item for i, item in enumerate(items) if i != index]


def validate_invoice_draft(form: InvoiceFormData) -> list[FieldError]:
    errors: list[FieldError] = []

    if not form.patient_id.strip():
        errors.append(FieldError(field="patient_id", message="Select a patient"))

    if not form.items:
        errors.append(FieldError(field="items", message="Add at least one line item"))
    for i, item in enumerate(form.items):
        prefix = f"items[{i}]"
        if not item.description.strip():
            errors.append(FieldError(field=f"{prefix}.description", message="Description is required"))
        if item.quantity < 1:
            errors.append(FieldError(field=f"{prefix}.quantity", message="Quantity must be at least 1"))
        if item.unit_price < 0:
            errors.append(FieldError(field=f"{prefix}.unit_price", message="Unit price cannot be negative"))

    if form.due_date is None:
        errors.append(FieldError(field="due_date", message="Due date is required"))
    elif form.issue_date is not None and form.due_date < form.issue_date:
        errors.append(FieldError(field="due_date", message="Due date cannot be before the invoice date"))

    if not _ZERO <= form.discount_rate <= _HUNDRED:
        errors.append(FieldError(field="discount_rate", message="Discount must be between 0 and 100"))
    if not _ZERO <= form.tax_rate <= _HUNDRED:
        errors.append(FieldError(field="tax_rate", message="Tax rate must be between 0 and 100"))

    return errors
