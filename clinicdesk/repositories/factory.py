from clinicdesk.repositories.base import ClinicRepository, InvoiceRepository, SubscriptionRepository


def get_clinic_repository() -> ClinicRepository:
    from clinicdesk.db import get_connection
    from clinicdesk.repositories.sqlalchemy import SQLAlchemyClinicRepository

    return SQLAlchemyClinicRepository(get_connection())


def get_invoice_repository() -> InvoiceRepository:
    from clinicdesk.db import get_connection
    from clinicdesk.repositories.sqlalchemy import SQLAlchemyInvoiceRepository

    return SQLAlchemyInvoiceRepository(get_connection())


def get_subscription_repository() -> SubscriptionRepository:
    from clinicdesk.db import get_connection
    from clinicdesk.repositories.sqlalchemy import SQLAlchemySubscriptionRepository

    return SQLAlchemySubscriptionRepository(get_connection())
