from __future__ import annotations

import questionary
from rich.console import Console
from rich.table import Table

from clinicdesk.constants import SUBSCRIPTION_STATUS_LABELS
from clinicdesk.errors import ClinicDeskError
from clinicdesk.models import format_money
from clinicdesk.models.subscription import Subscription, SubscriptionStatus
from clinicdesk.services import subscription_lifecycle
from clinicdesk.services.subscription_service import SubscriptionService

console = Console()


def _show_subscription(sub: Subscription) -> None:
    console.print(f"  Status: [bold]{SUBSCRIPTION_STATUS_LABELS[sub.status]}[/bold]")
    if sub.plan is not None:
        console.print(f"  Plan: {sub.plan.name}")
    if sub.current_period_end is not None:
        console.print(f"  Period ends: {sub.current_period_end:%Y-%m-%d %H:%M}")
        console.print(f"  Days remaining: {subscription_lifecycle.days_remaining(sub)}")
    if sub.status == SubscriptionStatus.ACTIVE and subscription_lifecycle.is_near_expiry(sub.current_period_end):
        console.print("  [yellow]Your subscription ends soon. Renew to keep access.[/yellow]")


def show_plans() -> None:
    table = Table(title="Plans")
    table.add_column("Plan", style="bold")
    table.add_column("Price", justify="right")
    table.add_column("Billing")
    table.add_column("Features")

    for plan in SubscriptionService.list_plans():
        table.add_row(plan.name, format_money(plan.amount), plan.billing_text, "\n".join(plan.features))

    console.print(table)


def subscription_menu(clinic_id: int, subscription_service: SubscriptionService) -> None:
    while True:
        sub = subscription_service.refresh(clinic_id)
        console.print()
        console.print("[bold cyan]Subscription[/bold cyan]")
        _show_subscription(sub)
        console.print()

        choices = ["View Plans"]
        if sub.status == SubscriptionStatus.NONE:
            choices.append("Start Free Trial")
        if sub.status == SubscriptionStatus.ACTIVE:
            choices.append("Cancel Subscription")
        choices.append("Back")

        choice = questionary.select("Actions:", choices=choices).ask()
        if choice is None or choice == "Back":
            break

        try:
            if choice == "View Plans":
                show_plans()
            elif choice == "Start Free Trial":
                subscription_service.start_trial(clinic_id)
                console.print("[green]Trial started.[/green]")
            elif choice == "Cancel Subscription":
                confirm = questionary.confirm("Cancel the subscription?", default=False).ask()
                if confirm:
                    subscription_service.cancel(clinic_id)
                    console.print("[green]Subscription cancelled.[/green]")
        except ClinicDeskError as e:
            console.print(f"[red]{e}[/red]")
