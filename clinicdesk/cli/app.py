import questionary
from rich.console import Console

from clinicdesk.cli.clinic_menu import select_clinic_menu
from clinicdesk.cli.invoice_menu import create_invoice_menu, list_invoices_menu, sweep_overdue_menu
from clinicdesk.cli.subscription_menu import subscription_menu
from clinicdesk.logging import bind_clinic, reset_clinic
from clinicdesk.models.clinic import Clinic
from clinicdesk.repositories.factory import (
    get_clinic_repository,
    get_invoice_repository,
    get_subscription_repository,
)
from clinicdesk.services.clinic_service import ClinicService
from clinicdesk.services.invoice_service import InvoiceService
from clinicdesk.services.subscription_service import SubscriptionService

console = Console()


def _build_services() -> tuple[ClinicService, InvoiceService, SubscriptionService]:
    return (
        ClinicService(get_clinic_repository()),
        InvoiceService(get_invoice_repository()),
        SubscriptionService(get_subscription_repository()),
    )


def _clinic_loop(
    clinic: Clinic,
    clinic_service: ClinicService,
    invoice_service: InvoiceService,
    subscription_service: SubscriptionService,
) -> None:
    while True:
        bind_clinic(clinic.id)
        choice = questionary.select(
            f"Main Menu ({clinic.name})",
            choices=[
                "List Invoices",
                "New Invoice",
                "Mark Overdue Invoices",
                "Subscription",
                "Switch Clinic",
                "Exit",
            ],
        ).ask()

        if choice is None or choice == "Exit":
            console.print("[bold]Goodbye![/bold]")
            break
        elif choice == "List Invoices":
            list_invoices_menu(clinic.id, invoice_service)
        elif choice == "New Invoice":
            create_invoice_menu(clinic.id, invoice_service)
        elif choice == "Mark Overdue Invoices":
            sweep_overdue_menu(clinic.id, invoice_service)
        elif choice == "Subscription":
            subscription_menu(clinic.id, subscription_service)
        elif choice == "Switch Clinic":
            selected = select_clinic_menu(clinic_service)
            if selected is not None:
                clinic = selected


def main_menu() -> None:
    clinic_service, invoice_service, subscription_service = _build_services()

    console.print()
    console.print("[bold]Clinic Desk[/bold]", style="cyan")
    console.print()

    clinic = select_clinic_menu(clinic_service)
    if clinic is None:
        console.print("[bold]Goodbye![/bold]")
        return

    # Log lines from the menus carry the clinic being worked on.
    token = bind_clinic(clinic.id)
    try:
        _clinic_loop(clinic, clinic_service, invoice_service, subscription_service)
    finally:
        reset_clinic(token)
