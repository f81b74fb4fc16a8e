from abc import ABC, abstractmethod

from clinicdesk.models.clinic import Clinic
from clinicdesk.models.invoice import Invoice, InvoiceStatus
from clinicdesk.models.subscription import Subscription


class ClinicRepository(ABC):
    @abstractmethod
    def create(self, clinic: Clinic) -> Clinic: ...

    @abstractmethod
    def get_by_id(self, clinic_id: int) -> Clinic | None: ...

    @abstractmethod
    def get_by_uuid(self, uuid: str) -> Clinic | None: ...

    @abstractmethod
    def list_all(self) -> list[Clinic]: ...


class InvoiceRepository(ABC):
    @abstractmethod
    def create(self, invoice: Invoice) -> Invoice: ...

    @abstractmethod
    def get_by_id(self, invoice_id: int) -> Invoice | None: ...

    @abstractmethod
    def get_by_uuid(self, uuid: str) -> Invoice | None: ...

    @abstractmethod
    def list_by_clinic(self, clinic_id: int, status: InvoiceStatus | None = None) -> list[Invoice]: ...

    @abstractmethod
    def latest_invoice_number(self, clinic_id: int) -> str | None: ...

    @abstractmethod
    def update(self, invoice: Invoice) -> Invoice: ...

    @abstractmethod
    def delete(self, invoice_id: int) -> None: ...


class SubscriptionRepository(ABC):
    @abstractmethod
    def get_by_clinic(self, clinic_id: int) -> Subscription | None: ...

    @abstractmethod
    def save(self, subscription: Subscription) -> Subscription: ...

    @abstractmethod
    def list_by_status(self, statuses: list[str]) -> list[Subscription]: ...
