from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation

import questionary
from rich.console import Console
from rich.table import Table

from clinicdesk.constants import INVOICE_STATUS_LABELS, PAYMENT_METHOD_LABELS
from clinicdesk.errors import ClinicDeskError
from clinicdesk.models import format_money, parse_money
from clinicdesk.models.invoice import Invoice, InvoiceFormData, InvoiceStatus, LineItem, PaymentMethod
from clinicdesk.services.billing_calculator import compute_totals, recompute_line_item
from clinicdesk.services.invoice_service import InvoiceService
from clinicdesk.settings import settings

console = Console()

BACK = "Back"


def _format_amount_input(paise: int) -> str:
    """Format paise for use as default input value: 149950 -> '1499.50'"""
    return f"{paise / 100:.2f}"


def _parse_rate(text: str) -> Decimal | None:
    try:
        value = Decimal(text.strip().rstrip("%").strip())
    except InvalidOperation:
        return None
    if not value.is_finite() or value < 0 or value > 100:
        return None
    return value


def _parse_date(text: str) -> date | None:
    try:
        return date.fromisoformat(text.strip())
    except ValueError:
        return None


def _show_invoice_detail(invoice: Invoice) -> None:
    table = Table(title=f"Invoice {invoice.invoice_number}")
    table.add_column("Description")
    table.add_column("Qty", justify="right")
    table.add_column("Unit price", justify="right")
    table.add_column("Amount", justify="right")

    for item in invoice.items:
        table.add_row(item.description, str(item.quantity), format_money(item.unit_price), format_money(item.amount))

    console.print(table)
    totals = invoice.totals
    console.print(f"  Subtotal: {format_money(totals.subtotal)}")
    if totals.discount_amount:
        console.print(f"  Discount ({totals.discount_rate}%): -{format_money(totals.discount_amount)}")
    console.print(f"  Tax ({totals.tax_rate}%): {format_money(totals.tax_amount)}")
    console.print(f"  [bold]Total: {format_money(totals.total)}[/bold]")
    console.print(f"  Status: {INVOICE_STATUS_LABELS[invoice.status]}")
    console.print(f"  Patient: {invoice.patient_name or invoice.patient_id}")
    console.print(f"  Issued: {invoice.issue_date}")
    if invoice.due_date:
        console.print(f"  Due: {invoice.due_date}")
    if invoice.paid_amount is not None and invoice.payment_method is not None:
        console.print(
            f"  Paid: {format_money(invoice.paid_amount)} via {PAYMENT_METHOD_LABELS[invoice.payment_method]}"
        )
    if invoice.notes:
        console.print(f"  Notes: {invoice.notes}")


def _prompt_items() -> list[LineItem]:
    items: list[LineItem] = []
    console.print()
    console.print("Add the invoice items (consultation, tests, medicines...):")

    while True:
        add = questionary.confirm("Add item?", default=not items).ask()
        if not add:
            break

        desc = questionary.text("  Description:").ask()
        if not desc:
            continue

        item = LineItem(description=desc)
        while True:
            qty = questionary.text("  Quantity:", default="1").ask() or ""
            try:
                item = recompute_line_item(item, "quantity", qty)
                break
            except ClinicDeskError as e:
                console.print(f"[red]{e}[/red]")

        while True:
            parsed = parse_money(questionary.text("  Unit price (e.g. 500.00):").ask() or "")
            if parsed is not None and parsed >= 0:
                item = recompute_line_item(item, "unit_price", parsed)
                break
            console.print("[red]Invalid amount. Try again.[/red]")

        items.append(item)
        console.print(f"  [green]Item added: {desc} = {format_money(item.amount)}[/green]")

    return items


def create_invoice_menu(clinic_id: int, invoice_service: InvoiceService) -> Invoice | None:
    console.print()
    console.print("[bold]New Invoice[/bold]", style="cyan")

    patient_id = questionary.text("Patient ID:").ask()
    if not patient_id:
        console.print("[yellow]Cancelled.[/yellow]")
        return None
    patient_name = questionary.text("Patient name (optional):").ask() or ""

    items = _prompt_items()
    if not items:
        console.print("[yellow]No items added. Invoice not created.[/yellow]")
        return None

    while True:
        discount_rate = _parse_rate(questionary.text("Discount %:", default="0").ask() or "")
        if discount_rate is not None:
            break
        console.print("[red]Enter a percentage between 0 and 100.[/red]")

    while True:
        tax_rate = _parse_rate(questionary.text("Tax %:", default=str(settings.default_tax_rate)).ask() or "")
        if tax_rate is not None:
            break
        console.print("[red]Enter a percentage between 0 and 100.[/red]")

    default_due = invoice_service.default_due_date().isoformat()
    while True:
        due_date = _parse_date(questionary.text("Due date (YYYY-MM-DD):", default=default_due).ask() or "")
        if due_date is not None:
            break
        console.print("[red]Invalid date. Use YYYY-MM-DD.[/red]")

    notes = questionary.text("Notes (optional):").ask() or ""

    preview = compute_totals(items, discount_rate, tax_rate)
    console.print(f"  Total: [bold]{format_money(preview.total)}[/bold]")

    form = InvoiceFormData(
        patient_id=patient_id,
        patient_name=patient_name,
        due_date=due_date,
        items=items,
        discount_rate=discount_rate,
        tax_rate=tax_rate,
        notes=notes,
    )
    try:
        invoice = invoice_service.create_draft(clinic_id, form)
    except ClinicDeskError as e:
        console.print(f"[red]{e}[/red]")
        return None

    console.print()
    console.print(f"[green bold]Draft {invoice.invoice_number} created.[/green bold]")
    return invoice


def _record_payment_menu(clinic_id: int, invoice: Invoice, invoice_service: InvoiceService) -> Invoice:
    while True:
        val = questionary.text("Amount received:", default=_format_amount_input(invoice.totals.total)).ask()
        amount = parse_money(val or "")
        if amount is not None and amount > 0:
            break
        console.print("[red]Invalid amount. Try again.[/red]")

    method_choices = {label: method for method, label in PAYMENT_METHOD_LABELS.items()}
    label = questionary.select("Payment method:", choices=list(method_choices.keys())).ask()
    if label is None:
        return invoice
    method: PaymentMethod = method_choices[label]
    return invoice_service.record_payment(clinic_id, invoice.uuid, amount, method)


def _invoice_actions(invoice: Invoice) -> list[str]:
    actions: list[str] = []
    if invoice.status == InvoiceStatus.DRAFT:
        actions.append("Issue")
    if invoice.status in (InvoiceStatus.PENDING, InvoiceStatus.OVERDUE):
        actions.append("Record Payment")
    if invoice.status == InvoiceStatus.PENDING:
        actions.append("Mark Overdue")
    if not invoice.is_terminal:
        actions.append("Cancel Invoice")
    if invoice.status in (InvoiceStatus.DRAFT, InvoiceStatus.CANCELLED):
        actions.append("Delete")
    return actions + [BACK]


def _invoice_detail_menu(clinic_id: int, invoice: Invoice, invoice_service: InvoiceService) -> None:
    while True:
        console.print()
        _show_invoice_detail(invoice)
        console.print()

        choice = questionary.select("Actions:", choices=_invoice_actions(invoice)).ask()
        if choice is None or choice == BACK:
            break

        try:
            if choice == "Issue":
                invoice = invoice_service.issue(clinic_id, invoice.uuid)
            elif choice == "Record Payment":
                invoice = _record_payment_menu(clinic_id, invoice, invoice_service)
            elif choice == "Mark Overdue":
                invoice = invoice_service.mark_overdue(clinic_id, invoice.uuid)
            elif choice == "Cancel Invoice":
                confirm = questionary.confirm(f"Cancel {invoice.invoice_number}?", default=False).ask()
                if confirm:
                    invoice = invoice_service.cancel(clinic_id, invoice.uuid)
            elif choice == "Delete":
                confirm = questionary.confirm(f"Delete {invoice.invoice_number}?", default=False).ask()
                if confirm:
                    invoice_service.delete_invoice(clinic_id, invoice.uuid)
                    console.print("[green]Invoice deleted.[/green]")
                    break
        except ClinicDeskError as e:
            console.print(f"[red]{e}[/red]")


def list_invoices_menu(clinic_id: int, invoice_service: InvoiceService) -> None:
    invoices = invoice_service.list_invoices(clinic_id)

    if not invoices:
        console.print("[yellow]No invoices yet.[/yellow]")
        return

    table = Table(title="Invoices")
    table.add_column("Number", style="bold")
    table.add_column("Patient")
    table.add_column("Issued")
    table.add_column("Status", justify="center")
    table.add_column("Total", justify="right")

    for inv in invoices:
        table.add_row(
            inv.invoice_number,
            inv.patient_name or inv.patient_id,
            str(inv.issue_date),
            INVOICE_STATUS_LABELS[inv.status],
            format_money(inv.totals.total),
        )

    console.print()
    console.print(table)
    console.print()

    invoice_choices = {f"{inv.invoice_number} - {inv.patient_name or inv.patient_id}": inv for inv in invoices}
    choice = questionary.select("Select an invoice:", choices=list(invoice_choices.keys()) + [BACK]).ask()

    if choice is None or choice == BACK:
        return

    _invoice_detail_menu(clinic_id, invoice_choices[choice], invoice_service)


def sweep_overdue_menu(clinic_id: int, invoice_service: InvoiceService) -> None:
    moved = invoice_service.sweep_overdue(clinic_id)
    if not moved:
        console.print("[green]No pending invoices are past their due date.[/green]")
        return
    for inv in moved:
        console.print(f"  [yellow]{inv.invoice_number}[/yellow] due {inv.due_date} is now overdue")
