"""
REST client for the transformer data service with retry logic and error handling.
"""

import time
from typing import Any, Dict, List, Optional, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from src.errors import DataServiceError, NotFound, PartialDataLoss
from src.schemas.models import (
    Ack,
    Comment,
    Detection,
    Inspection,
    MaintenanceRecord,
    TransformerMetadata,
)
from utils.config import config
from utils.image_utils import RasterImage
from utils.logger import setup_logger

RETRYABLE_STATUS_CODES = (502, 503, 504)

ModelT = TypeVar("ModelT", bound=BaseModel)


class DataServiceClient:
    """Client for the transformer/inspection data service."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        session: Optional[requests.Session] = None
    ):
        self.base_url = (base_url or config.data_service_url).rstrip("/")
        self.timeout = timeout or config.api_timeout
        self.session = session or requests.Session()
        self.logger = setup_logger(
            "client.data_service",
            level=config.log_level,
            component="DATA_SERVICE"
        )

    def __enter__(self) -> "DataServiceClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _request(
        self,
        method: str,
        path: str,
        retries: Optional[int] = None,
        **kwargs
    ) -> requests.Response:
        """
        Call the data service with retry logic.

        Timeouts, connection errors and 502/503/504 are retried with
        exponential backoff. A 404 is returned to the caller; any other
        error status raises.

        Raises:
            DataServiceError if the call fails after all retries
        """
        retries = retries or config.api_max_retries
        last_error: Optional[DataServiceError] = None
        url = self._url(path)

        for attempt in range(retries):
            try:
                self.logger.debug(f"{method} {path} attempt {attempt + 1}/{retries}")

                response = self.session.request(method, url, timeout=self.timeout, **kwargs)

                if response.status_code < 400 or response.status_code == 404:
                    return response

                if response.status_code in RETRYABLE_STATUS_CODES:
                    last_error = DataServiceError(
                        f"Service unavailable ({response.status_code}) for {method} {path}",
                        status_code=response.status_code
                    )
                else:
                    error_msg = f"API error {response.status_code} for {method} {path}: {response.text[:200]}"
                    self.logger.error(error_msg)
                    raise DataServiceError(error_msg, status_code=response.status_code)

            except requests.Timeout:
                last_error = DataServiceError(f"Request timeout for {method} {path}")

            except requests.ConnectionError as e:
                last_error = DataServiceError(f"Connection error for {method} {path}: {e}")

            if attempt + 1 < retries:
                wait_time = config.api_retry_backoff ** attempt
                self.logger.warning(f"{last_error}, retrying in {wait_time}s...")
                time.sleep(wait_time)

        # All retries failed
        self.logger.error(f"All {retries} attempts failed for {method} {path}")
        raise last_error or DataServiceError(f"{method} {path} failed after all retries")

    def _get_json(self, path: str) -> Any:
        response = self._request("GET", path)
        if response.status_code == 404:
            raise DataServiceError(f"Not found: {path}", status_code=404)
        try:
            return response.json()
        except ValueError as e:
            raise DataServiceError(f"Invalid JSON from {path}: {e}")

    def _get_list(self, path: str) -> List[Dict[str, Any]]:
        payload = self._get_json(path)
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise DataServiceError(f"Expected a list from {path}, got {type(payload).__name__}")
        return payload

    # ========================================================================
    # READ OPERATIONS
    # ========================================================================

    def get_transformer(self, transformer_number: str) -> TransformerMetadata:
        """
        Fetch transformer metadata.

        Raises:
            NotFound: If the transformer does not exist
        """
        response = self._request("GET", f"/api/v1/transformers/{transformer_number}")
        if response.status_code == 404:
            raise NotFound(transformer_number)

        try:
            payload = response.json()
        except ValueError as e:
            raise DataServiceError(f"Invalid transformer payload: {e}")

        # The service answers unknown ids with an empty body
        if not payload:
            raise NotFound(transformer_number)

        return TransformerMetadata.model_validate(payload)

    def _parse_items(
        self,
        model: Type[ModelT],
        items: List[Any],
        kind: str,
        owner: str,
        scope: str,
        defaults: Optional[Dict[str, Any]] = None,
        overrides: Optional[Dict[str, Any]] = None
    ) -> List[ModelT]:
        """
        Validate list items one at a time.

        A malformed item is logged as partial data loss and skipped; the
        rest of the list is kept.
        """
        parsed = []
        for item in items:
            try:
                if not isinstance(item, dict):
                    raise TypeError(f"expected an object, got {type(item).__name__}")
                parsed.append(model.model_validate({**(defaults or {}), **item, **(overrides or {})}))
            except (ValidationError, TypeError) as e:
                self.logger.warning(str(PartialDataLoss(kind, owner, e, scope=scope)))
        return parsed

    def get_maintenance_records(self, transformer_number: str) -> List[MaintenanceRecord]:
        """Fetch all maintenance records of a transformer."""
        items = self._get_list(f"/api/v1/transformers/{transformer_number}/maintenance-report")
        return self._parse_items(MaintenanceRecord, items, "maintenance record", transformer_number, "transformer")

    def get_inspections(self, transformer_number: str) -> List[Inspection]:
        """Fetch all inspections of a transformer."""
        items = self._get_list(f"/api/v1/transformers/{transformer_number}/inspections")
        return self._parse_items(
            Inspection, items, "inspection", transformer_number, "transformer",
            defaults={"transformerNumber": transformer_number}
        )

    def get_detections(self, inspection_number: str) -> List[Detection]:
        """Fetch detections for an inspection."""
        items = self._get_list(f"/api/v1/inspections/{inspection_number}/analyze")
        return self._parse_items(
            Detection, items, "detection", inspection_number, "inspection",
            overrides={"inspectionNumber": inspection_number}
        )

    def get_comments(self, inspection_number: str) -> List[Comment]:
        """Fetch comments for an inspection."""
        items = self._get_list(f"/api/v1/inspections/{inspection_number}/comments")
        return self._parse_items(
            Comment, items, "comment", inspection_number, "inspection",
            overrides={"inspectionNumber": inspection_number}
        )

    def get_image(self, inspection_number: str) -> Optional[RasterImage]:
        """
        Fetch the raw inspection image.

        Returns:
            The image, or None if the inspection has no image
        """
        response = self._request("GET", f"/api/v1/inspections/{inspection_number}/image")
        if response.status_code == 404 or not response.content:
            return None

        content_type = response.headers.get("Content-Type", "image/jpeg").split(";")[0]
        return RasterImage(data=response.content, content_type=content_type)

    # ========================================================================
    # WRITE OPERATIONS
    # ========================================================================

    def submit_maintenance_report(
        self,
        transformer_number: str,
        record: MaintenanceRecord
    ) -> Ack:
        """
        Store a maintenance report. Single attempt, never retried.

        Raises:
            DataServiceError if the service rejects or cannot be reached
        """
        body = record.to_request(transformer_number)
        response = self._request(
            "POST",
            f"/api/v1/transformers/{transformer_number}/maintenance-report",
            retries=1,
            json=body
        )
        if response.status_code == 404:
            raise DataServiceError(
                f"Transformer not found: {transformer_number}",
                status_code=404
            )

        record_id = None
        if response.content:
            try:
                payload = response.json()
            except ValueError:
                self.logger.debug("Submission response carried no JSON body")
                payload = None
            if isinstance(payload, dict):
                record_id = payload.get("id")

        self.logger.info(f"Submitted maintenance report for {transformer_number}")
        return Ack(transformer_number=transformer_number, record_id=record_id)
