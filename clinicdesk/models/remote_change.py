from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, model_validator

from clinicdesk.models.invoice import Invoice


class ChangeType(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"


class RemoteChange(BaseModel):
    change_type: ChangeType
    invoice: Invoice | None = None
    invoice_uuid: str = ""

    @model_validator(mode="after")
    def _check_payload(self) -> RemoteChange:
        if self.change_type == ChangeType.REMOVED:
            if not self.invoice_uuid and self.invoice is not None:
                self.invoice_uuid = self.invoice.uuid
            if not self.invoice_uuid:
                raise ValueError("removed change requires invoice_uuid")
        elif self.invoice is None:
            raise ValueError(f"{self.change_type.value} change requires an invoice")
        return self
