"""
Unit tests for maintenance report submission.
"""

import pytest
import requests

from src.errors import DataServiceError, SubmissionFailed
from src.reporting.submission import MaintenanceDraftSession, submit_maintenance_report
from src.schemas.models import MaintenanceRecord


@pytest.fixture
def draft():
    return MaintenanceRecord(
        inspector_name="Bob",
        transformer_status="Faulty",
        voltage=230.5,
        current=15.3,
        recommended_action="Replace bushing",
        inspection_numbers=["INS-1"],
    )


class TestMaintenanceDraftSession:
    """Tests for MaintenanceDraftSession."""

    def test_submit_success(self, fake_service, draft):
        session = MaintenanceDraftSession(fake_service, "T1", draft)
        ack = session.submit()

        assert ack.transformer_number == "T1"
        assert ack.record_id == 42
        assert session.submitted
        assert session.error_message is None
        assert fake_service.submitted == [("T1", draft)]

    def test_failure_keeps_draft(self, fake_service, draft):
        fake_service.submit_error = DataServiceError("API error 500", status_code=500)
        session = MaintenanceDraftSession(fake_service, "T1", draft)

        with pytest.raises(SubmissionFailed) as exc_info:
            session.submit()

        assert exc_info.value.status_code == 500
        assert "API error 500" in exc_info.value.user_message
        assert session.draft == draft
        assert session.error_message == exc_info.value.user_message
        assert not session.submitted

    def test_single_attempt(self, fake_service, draft):
        fake_service.submit_error = DataServiceError("unavailable", status_code=503)
        session = MaintenanceDraftSession(fake_service, "T1", draft)

        with pytest.raises(SubmissionFailed):
            session.submit()

        assert len(fake_service.submitted) == 1

    def test_transport_error_wrapped(self, fake_service, draft):
        fake_service.submit_error = requests.ConnectionError("refused")

        with pytest.raises(SubmissionFailed):
            MaintenanceDraftSession(fake_service, "T1", draft).submit()

    def test_retry_after_failure(self, fake_service, draft):
        fake_service.submit_error = DataServiceError("boom")
        session = MaintenanceDraftSession(fake_service, "T1", draft)
        with pytest.raises(SubmissionFailed):
            session.submit()

        fake_service.submit_error = None
        ack = session.submit()

        assert ack.record_id == 42
        assert session.error_message is None
        assert fake_service.submitted[-1] == ("T1", draft)

    def test_inspection_numbers_override(self, fake_service, draft):
        session = MaintenanceDraftSession(fake_service, "T1", draft, inspection_numbers=["A", "B"])
        assert session.draft.inspection_numbers == ["A", "B"]
        assert draft.inspection_numbers == ["INS-1"]

    def test_update_validates(self, fake_service, draft):
        session = MaintenanceDraftSession(fake_service, "T1", draft)
        updated = session.update(transformer_status="under maintenance", voltage="")

        assert updated.transformer_status == "Under Maintenance"
        assert updated.voltage is None
        assert updated.inspector_name == "Bob"

    def test_blank_draft_by_default(self, fake_service):
        session = MaintenanceDraftSession(fake_service, "T1")
        assert session.draft.is_draft
        assert session.draft.inspector_name == ""


def test_submit_maintenance_report(fake_service, draft):
    ack = submit_maintenance_report(fake_service, "T1", draft)
    assert ack.record_id == 42
