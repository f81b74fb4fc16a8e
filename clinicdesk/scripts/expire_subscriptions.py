"""Expire every trial or paid subscription whose period has ended.

Meant to run from cron or a scheduler:
    python -m clinicdesk.scripts.expire_subscriptions
"""

from __future__ import annotations

import logging

from rich.console import Console

from clinicdesk.constants import SUBSCRIPTION_STATUS_LABELS
from clinicdesk.db import initialize_db
from clinicdesk.logging import configure_logging
from clinicdesk.repositories.factory import get_subscription_repository
from clinicdesk.services.subscription_service import SubscriptionService

logger = logging.getLogger(__name__)
console = Console()


def main() -> int:
    configure_logging()
    initialize_db()

    service = SubscriptionService(get_subscription_repository())
    expired = service.expire_lapsed()

    for sub in expired:
        console.print(f"  clinic {sub.clinic_id}: {SUBSCRIPTION_STATUS_LABELS[sub.status]}")
    console.print(f"[green]{len(expired)} subscription(s) expired.[/green]")
    return len(expired)


if __name__ == "__main__":  # pragma: no cover
    main()
