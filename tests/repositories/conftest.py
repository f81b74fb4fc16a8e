import pytest
from sqlalchemy import Connection

from clinicdesk.models.clinic import Clinic
from clinicdesk.repositories.sqlalchemy import (
    SQLAlchemyClinicRepository,
    SQLAlchemyInvoiceRepository,
    SQLAlchemySubscriptionRepository,
)


@pytest.fixture()
def clinic_repo(db_connection: Connection) -> SQLAlchemyClinicRepository:
    return SQLAlchemyClinicRepository(db_connection)


@pytest.fixture()
def invoice_repo(db_connection: Connection) -> SQLAlchemyInvoiceRepository:
    return SQLAlchemyInvoiceRepository(db_connection)


@pytest.fixture()
def subscription_repo(db_connection: Connection) -> SQLAlchemySubscriptionRepository:
    return SQLAlchemySubscriptionRepository(db_connection)


@pytest.fixture()
def clinic(clinic_repo: SQLAlchemyClinicRepository) -> Clinic:
    return clinic_repo.create(Clinic(name="Sunrise Clinic", email="desk@sunrise.in"))
