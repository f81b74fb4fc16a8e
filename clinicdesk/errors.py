from __future__ import annotations

from pydantic import BaseModel


class FieldError(BaseModel):
    field: str
    message: str


class ClinicDeskError(Exception):
    """Base class for errors surfaced to the API and CLI."""


class ValidationError(ClinicDeskError):
    def __init__(self, errors: list[FieldError]) -> None:
        self.errors = errors
        super().__init__("; ".join(f"{e.field}: {e.message}" for e in errors))

    @classmethod
    def single(cls, field: str, message: str) -> ValidationError:
        return cls([FieldError(field=field, message=message)])


class InvalidTransition(ClinicDeskError):
    def __init__(self, entity: str, current: str, requested: str, reason: str = "") -> None:
        self.entity = entity
        self.current = current
        self.requested = requested
        self.reason = reason
        message = f"Cannot move {entity} from '{current}' to '{requested}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class NotAuthenticated(ClinicDeskError):
    def __init__(self, message: str = "No clinic context") -> None:
        super().__init__(message)


class NotAuthorized(ClinicDeskError):
    def __init__(self, entity: str, tenant_id: int) -> None:
        self.entity = entity
        self.tenant_id = tenant_id
        super().__init__(f"Clinic {tenant_id} does not own this {entity}")


class NotFound(ClinicDeskError):
    def __init__(self, entity: str, key: str) -> None:
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} not found: {key}")
