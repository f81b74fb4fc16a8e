from unittest.mock import MagicMock, patch

from clinicdesk.errors import ValidationError
from clinicdesk.models.clinic import Clinic


class TestSelectClinicMenu:
    @patch("clinicdesk.cli.clinic_menu.questionary")
    def test_select_existing(self, mock_q):
        from clinicdesk.cli.clinic_menu import select_clinic_menu

        service = MagicMock()
        clinic = Clinic(id=3, name="Sunrise")
        service.list_clinics.return_value = [clinic]
        mock_q.select.return_value.ask.return_value = "3 - Sunrise"

        assert select_clinic_menu(service) == clinic

    @patch("clinicdesk.cli.clinic_menu.questionary")
    def test_exit(self, mock_q):
        from clinicdesk.cli.clinic_menu import select_clinic_menu

        service = MagicMock()
        service.list_clinics.return_value = [Clinic(id=3, name="Sunrise")]
        mock_q.select.return_value.ask.return_value = "Exit"

        assert select_clinic_menu(service) is None

    @patch("clinicdesk.cli.clinic_menu.questionary")
    def test_no_clinics_prompts_create(self, mock_q):
        from clinicdesk.cli.clinic_menu import select_clinic_menu

        service = MagicMock()
        service.list_clinics.return_value = []
        service.create_clinic.return_value = Clinic(id=1, name="New")
        mock_q.text.return_value.ask.side_effect = ["New", "", "", ""]

        assert select_clinic_menu(service).id == 1
        service.create_clinic.assert_called_once_with("New", "", "", "")


class TestCreateClinicMenu:
    @patch("clinicdesk.cli.clinic_menu.questionary")
    def test_cancel_on_empty_name(self, mock_q):
        from clinicdesk.cli.clinic_menu import create_clinic_menu

        service = MagicMock()
        mock_q.text.return_value.ask.return_value = ""

        assert create_clinic_menu(service) is None
        service.create_clinic.assert_not_called()

    @patch("clinicdesk.cli.clinic_menu.questionary")
    def test_validation_error_reported(self, mock_q):
        from clinicdesk.cli.clinic_menu import create_clinic_menu

        service = MagicMock()
        service.create_clinic.side_effect = ValidationError.single("name", "Clinic name is required")
        mock_q.text.return_value.ask.side_effect = ["   ", "", "", ""]

        assert create_clinic_menu(service) is None
