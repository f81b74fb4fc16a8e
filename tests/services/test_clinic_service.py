from unittest.mock import MagicMock

import pytest

from clinicdesk.errors import ValidationError
from clinicdesk.models.clinic import Clinic
from clinicdesk.services.clinic_service import ClinicService


class TestClinicService:
    def setup_method(self):
        self.mock_repo = MagicMock()
        self.service = ClinicService(self.mock_repo)

    def test_create_clinic(self):
        self.mock_repo.create.return_value = Clinic(id=1, uuid="c", name="Sunrise Clinic")
        result = self.service.create_clinic("  Sunrise Clinic ", "desk@sunrise.in")
        assert result.id == 1
        created = self.mock_repo.create.call_args[0][0]
        assert created.name == "Sunrise Clinic"
        assert created.email == "desk@sunrise.in"

    def test_create_clinic_blank_name(self):
        with pytest.raises(ValidationError):
            self.service.create_clinic("   ")
        self.mock_repo.create.assert_not_called()

    def test_get_clinic(self):
        self.mock_repo.get_by_id.return_value = Clinic(id=1, name="A")
        assert self.service.get_clinic(1).name == "A"

    def test_get_clinic_by_uuid(self):
        self.mock_repo.get_by_uuid.return_value = None
        assert self.service.get_clinic_by_uuid("x") is None

    def test_list_clinics(self):
        self.mock_repo.list_all.return_value = [Clinic(id=1, name="A"), Clinic(id=2, name="B")]
        assert len(self.service.list_clinics()) == 2
