"""
Tests for the command line entry point.
"""

import pytest

import main
from src.errors import DataServiceError
from tests.conftest import FakeDataService


class ServiceContext(FakeDataService):
    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


@pytest.fixture
def service(transformer, completed_inspection, fault_detections, sample_image, monkeypatch):
    service = ServiceContext(
        transformers={"T1": transformer},
        inspections={"T1": [completed_inspection]},
        detections={"INS-1": fault_detections},
        images={"INS-1": sample_image},
    )
    monkeypatch.setattr(main, "DataServiceClient", lambda: service)
    return service


class TestMain:
    """Tests for main()."""

    def test_generates_report(self, service, temp_dir):
        output = temp_dir / "cli.pdf"
        assert main.main(["T1", "--output", str(output)]) == 0
        assert output.read_bytes().startswith(b"%PDF")
        assert service.submitted == []

    def test_unknown_transformer(self, service, temp_dir):
        assert main.main(["T404", "--output", str(temp_dir / "x.pdf")]) == 1

    def test_invalid_reading(self, service):
        assert main.main(["T1", "--voltage", "lots"]) == 2
        assert service.calls == []

    def test_record_and_draft_conflict(self, service):
        assert main.main(["T1", "--record", "7", "--inspector", "Bob"]) == 2

    def test_submit_draft(self, service, temp_dir):
        code = main.main([
            "T1", "--inspector", "Bob", "--status", "faulty", "--voltage", "230.5",
            "--submit", "--output", str(temp_dir / "s.pdf"),
        ])

        assert code == 0
        transformer_number, record = service.submitted[0]
        assert transformer_number == "T1"
        assert record.inspector_name == "Bob"
        assert record.transformer_status == "Faulty"
        assert record.voltage == 230.5
        assert record.inspection_numbers == ["INS-1"]

    def test_submit_failure(self, service, temp_dir):
        service.submit_error = DataServiceError("API error 500", status_code=500)
        code = main.main(["T1", "--submit", "--output", str(temp_dir / "f.pdf")])
        assert code == 1
        assert len(service.submitted) == 1
