from __future__ import annotations

import questionary
from rich.console import Console

from clinicdesk.errors import ValidationError
from clinicdesk.models.clinic import Clinic
from clinicdesk.services.clinic_service import ClinicService

console = Console()

NEW_CLINIC = "+ New clinic"
EXIT = "Exit"


def create_clinic_menu(clinic_service: ClinicService) -> Clinic | None:
    console.print()
    console.print("[bold]New Clinic[/bold]", style="cyan")

    name = questionary.text("Clinic name:").ask()
    if not name:
        console.print("[yellow]Cancelled.[/yellow]")
        return None

    email = questionary.text("Email (optional):").ask() or ""
    phone = questionary.text("Phone (optional):").ask() or ""
    address = questionary.text("Address (optional):").ask() or ""

    try:
        clinic = clinic_service.create_clinic(name, email, phone, address)
    except ValidationError as e:
        console.print(f"[red]{e}[/red]")
        return None

    console.print(f"[green bold]Clinic '{clinic.name}' created.[/green bold]")
    return clinic


def select_clinic_menu(clinic_service: ClinicService) -> Clinic | None:
    clinics = clinic_service.list_clinics()
    if not clinics:
        console.print("[yellow]No clinics yet.[/yellow]")
        return create_clinic_menu(clinic_service)

    clinic_choices = {f"{c.id} - {c.name}": c for c in clinics}
    choices = list(clinic_choices.keys()) + [NEW_CLINIC, EXIT]
    choice = questionary.select("Select a clinic:", choices=choices).ask()

    if choice is None or choice == EXIT:
        return None
    if choice == NEW_CLINIC:
        return create_clinic_menu(clinic_service)
    return clinic_choices[choice]
