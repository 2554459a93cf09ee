"""
Maintenance report submission.

A draft is sent to the data service in a single call. On failure the draft
stays intact so the user can retry.
"""

from typing import List, Optional

import requests

from src.errors import DataServiceError, SubmissionFailed
from src.schemas.models import Ack, MaintenanceRecord
from utils.config import config
from utils.logger import setup_logger

logger = setup_logger(__name__, level=config.log_level, component="SUBMISSION")


class MaintenanceDraftSession:
    """Holds a maintenance draft and submits it exactly once per call."""

    def __init__(
        self,
        client,
        transformer_number: str,
        draft: Optional[MaintenanceRecord] = None,
        inspection_numbers: Optional[List[str]] = None
    ):
        self.client = client
        self.transformer_number = transformer_number
        self.draft = draft or MaintenanceRecord.blank()
        if inspection_numbers is not None:
            self.draft = self.draft.model_copy(update={"inspection_numbers": list(inspection_numbers)})
        self.error_message: Optional[str] = None
        self.ack: Optional[Ack] = None

    @property
    def submitted(self) -> bool:
        return self.ack is not None

    def update(self, **changes) -> MaintenanceRecord:
        """Apply field changes to the draft after validation."""
        merged = {**self.draft.model_dump(), **changes}
        self.draft = MaintenanceRecord.model_validate(merged)
        return self.draft

    def submit(self) -> Ack:
        """
        Submit the draft.

        Returns:
            Acknowledgement from the data service

        Raises:
            SubmissionFailed: If the service rejects the report or is unreachable
        """
        logger.info(f"Submitting maintenance report for {self.transformer_number}")
        self.error_message = None

        try:
            self.ack = self.client.submit_maintenance_report(self.transformer_number, self.draft)
        except (DataServiceError, requests.RequestException) as e:
            status_code = getattr(e, "status_code", None)
            self.error_message = f"Failed to submit maintenance record: {e}"
            logger.error(self.error_message)
            raise SubmissionFailed(self.error_message, status_code=status_code) from e

        logger.info(f"Maintenance report stored for {self.transformer_number} (id={self.ack.record_id})")
        return self.ack


def submit_maintenance_report(client, transformer_number: str, draft: MaintenanceRecord) -> Ack:
    """Submit a draft in one call."""
    return MaintenanceDraftSession(client, transformer_number, draft).submit()
