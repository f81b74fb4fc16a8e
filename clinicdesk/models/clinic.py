from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class Clinic(BaseModel):
    id: int | None = None
    uuid: str = ""
    name: str
    email: str = ""
    phone: str = ""
    address: str = ""
    created_at: datetime | None = None
