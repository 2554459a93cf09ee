"""
Unit tests for the data service client.
"""

import json

import pytest
import requests

from src.client import DataServiceClient
from src.errors import DataServiceError, NotFound
from src.schemas.models import MaintenanceRecord


class FakeResponse:
    def __init__(self, status_code=200, payload=None, content=None, headers=None):
        self.status_code = status_code
        if content is None:
            content = json.dumps(payload).encode() if payload is not None else b""
        self.content = content
        self.text = content.decode("utf-8", errors="replace")
        self.headers = headers or {}

    def json(self):
        return json.loads(self.content)


class FakeSession:
    """Replays queued responses and records requests."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []
        self.closed = False

    def request(self, method, url, timeout=None, **kwargs):
        self.requests.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr("src.client.data_service.time.sleep", lambda seconds: None)


def client_with(*responses):
    session = FakeSession(*responses)
    return DataServiceClient(base_url="http://svc/", timeout=5, session=session), session


class TestReads:
    """Tests for read operations."""

    def test_get_transformer(self):
        client, session = client_with(FakeResponse(payload={
            "transformerNumber": "T1", "poleNumber": "P-1", "region": "West", "type": "Bulk"
        }))
        transformer = client.get_transformer("T1")

        assert transformer.transformer_number == "T1"
        assert transformer.pole_number == "P-1"
        assert session.requests[0][:2] == ("GET", "http://svc/api/v1/transformers/T1")

    def test_get_transformer_404(self):
        client, _ = client_with(FakeResponse(status_code=404))
        with pytest.raises(NotFound):
            client.get_transformer("T9")

    @pytest.mark.parametrize("content", [b"{}", b"null"])
    def test_get_transformer_empty_body(self, content):
        client, _ = client_with(FakeResponse(content=content))
        with pytest.raises(NotFound):
            client.get_transformer("T9")

    def test_get_inspections_injects_transformer(self):
        client, _ = client_with(FakeResponse(payload=[
            {"inspectionNumber": "INS-1", "status": "Completed", "branch": "Kandy"},
        ]))
        inspections = client.get_inspections("T1")

        assert inspections[0].transformer_number == "T1"
        assert inspections[0].is_completed

    def test_get_detections(self):
        client, session = client_with(FakeResponse(payload=[
            {"detectId": 1, "className": "pf", "confidence": 0.91, "x": 10, "y": 20, "width": 4, "height": 6},
        ]))
        detections = client.get_detections("INS-1")

        assert detections[0].inspection_number == "INS-1"
        assert detections[0].label == "pf"
        assert session.requests[0][1].endswith("/api/v1/inspections/INS-1/analyze")

    def test_get_comments(self):
        client, _ = client_with(FakeResponse(payload=[
            {"id": 3, "topic": "Leak", "comment": "Oil", "author": "Ann", "createdAt": "2024-03-01T10:30:00"},
        ]))
        comments = client.get_comments("INS-1")

        assert comments[0].timestamp_text == "2024-03-01 10:30"
        assert comments[0].inspection_number == "INS-1"

    def test_get_maintenance_records_envelope(self):
        client, _ = client_with(FakeResponse(payload=[
            {
                "maintenanceRecord": {"id": 5, "inspectorName": "Bob", "voltage": 230.5},
                "inspections": [{"inspectionNumber": "INS-1"}, {"inspectionNumber": "INS-2"}],
            },
        ]))
        records = client.get_maintenance_records("T1")

        assert records[0].id == 5
        assert records[0].voltage == 230.5
        assert records[0].inspection_numbers == ["INS-1", "INS-2"]

    def test_null_inspection_status(self):
        client, _ = client_with(FakeResponse(payload=[
            {"inspectionNumber": "A", "status": "Completed"},
            {"inspectionNumber": "B", "status": None},
        ]))
        inspections = client.get_inspections("T1")

        assert [i.inspection_number for i in inspections] == ["A", "B"]
        assert inspections[1].status == "N/A"
        assert not inspections[1].is_completed

    def test_malformed_items_skipped(self):
        client, _ = client_with(FakeResponse(payload=[
            {"className": "pf", "x": 1, "y": 1},
            "not-an-object",
            {"className": "f", "x": 1, "y": 1, "width": 2, "height": 2},
        ]))
        detections = client.get_detections("INS-1")
        assert [d.class_name for d in detections] == ["f"]

    def test_record_with_unknown_status_kept(self):
        client, _ = client_with(FakeResponse(payload=[
            {"id": 1, "transformerStatus": "Awaiting parts"},
            {"id": 2, "transformerStatus": "faulty"},
        ]))
        records = client.get_maintenance_records("T1")

        assert [r.transformer_status for r in records] == ["Awaiting parts", "Faulty"]

    def test_list_endpoint_rejects_object(self):
        client, _ = client_with(FakeResponse(payload={"unexpected": True}))
        with pytest.raises(DataServiceError):
            client.get_comments("INS-1")

    def test_get_image(self):
        client, _ = client_with(FakeResponse(content=b"\x89PNG...", headers={"Content-Type": "image/png; charset=binary"}))
        image = client.get_image("INS-1")

        assert image.data == b"\x89PNG..."
        assert image.content_type == "image/png"

    @pytest.mark.parametrize("response", [FakeResponse(status_code=404), FakeResponse(content=b"")])
    def test_get_image_missing(self, response):
        client, _ = client_with(response)
        assert client.get_image("INS-1") is None


class TestRetries:
    """Tests for retry logic."""

    def test_retries_on_unavailable(self):
        client, session = client_with(
            FakeResponse(status_code=503),
            requests.Timeout("slow"),
            FakeResponse(payload=[]),
        )
        assert client.get_comments("INS-1") == []
        assert len(session.requests) == 3

    def test_gives_up_after_max_retries(self):
        client, session = client_with(*[requests.ConnectionError("refused")] * 3)
        with pytest.raises(DataServiceError):
            client.get_detections("INS-1")
        assert len(session.requests) == 3

    def test_client_error_not_retried(self):
        client, session = client_with(FakeResponse(status_code=500, content=b"boom"), FakeResponse(payload=[]))
        with pytest.raises(DataServiceError) as exc_info:
            client.get_comments("INS-1")

        assert exc_info.value.status_code == 500
        assert len(session.requests) == 1


class TestSubmit:
    """Tests for maintenance report submission."""

    def test_submit_body(self):
        client, session = client_with(FakeResponse(payload={"id": 11}))
        record = MaintenanceRecord(inspector_name="Bob", voltage=230.5, inspection_numbers=["INS-1"])

        ack = client.submit_maintenance_report("T1", record)

        method, url, kwargs = session.requests[0]
        assert method == "POST"
        assert url == "http://svc/api/v1/transformers/T1/maintenance-report"
        assert kwargs["json"]["inspectorName"] == "Bob"
        assert kwargs["json"]["inspectionsNumbers"] == ["INS-1"]
        assert kwargs["json"]["current"] is None
        assert ack.record_id == 11

    def test_submit_without_json_body(self):
        client, _ = client_with(FakeResponse(content=b"created"))
        ack = client.submit_maintenance_report("T1", MaintenanceRecord())
        assert ack.record_id is None

    def test_submit_never_retried(self):
        client, session = client_with(FakeResponse(status_code=503), FakeResponse(payload={"id": 1}))
        with pytest.raises(DataServiceError):
            client.submit_maintenance_report("T1", MaintenanceRecord())
        assert len(session.requests) == 1

    def test_context_manager_closes_session(self):
        client, session = client_with()
        with client:
            pass
        assert session.closed
