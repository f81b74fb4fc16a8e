from __future__ import annotations

import logging

from clinicdesk.errors import ValidationError
from clinicdesk.models.clinic import Clinic
from clinicdesk.repositories.base import ClinicRepository

logger = logging.getLogger(__name__)


class ClinicService:
    def __init__(self, repo: ClinicRepository) -> None:
        self.repo = repo

    def create_clinic(self, name: str, email: str = "", phone: str = "", address: str = "") -> Clinic:
        name = name.strip()
        if not name:
            raise ValidationError.single("name", "Clinic name is required")
        result = self.repo.create(Clinic(name=name, email=email.strip(), phone=phone.strip(), address=address))
        logger.info("Clinic created: id=%s, name=%s", result.id, result.name)
        return result

    def get_clinic(self, clinic_id: int) -> Clinic | None:
        result = self.repo.get_by_id(clinic_id)
        logger.debug("get_clinic id=%s found=%s", clinic_id, result is not None)
        return result

    def get_clinic_by_uuid(self, uuid: str) -> Clinic | None:
        result = self.repo.get_by_uuid(uuid)
        logger.debug("get_clinic_by_uuid uuid=%s found=%s", uuid, result is not None)
        return result

    def list_clinics(self) -> list[Clinic]:
        result = self.repo.list_all()
        logger.debug("Listed %d clinics", len(result))
        return result
