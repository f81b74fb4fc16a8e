from __future__ import annotations

from clinicdesk.models.invoice import Invoice
from clinicdesk.models.remote_change import ChangeType, RemoteChange


def apply_remote_change(current_state: list[Invoice], change: RemoteChange) -> list[Invoice]:
    """Fold one pushed or polled change into a list of invoices.

    Newest invoices come first, so additions are prepended.  The input list is
    never mutated.
    """
    if change.change_type == ChangeType.REMOVED:
        return [inv for inv in current_state if inv.uuid != change.invoice_uuid]

    incoming = change.invoice
    assert incoming is not None  # guaranteed by RemoteChange validation
    present = any(inv.uuid == incoming.uuid for inv in current_state)

    if change.change_type == ChangeType.ADDED and not present:
        return [incoming, *current_state]
    if not present:
        return list(current_state)
    return [incoming if inv.uuid == incoming.uuid else inv for inv in current_state]
