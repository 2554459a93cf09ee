"""
Report data aggregation.

Fetches everything one maintenance report needs from the data service,
fanning out per-inspection fetches on a thread pool and isolating failures
so that one broken inspection never aborts the report.
"""

import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, List, Optional, Tuple

from src.annotation import annotate_image
from src.errors import NotFound, PartialDataLoss
from src.schemas.models import (
    Comment,
    Detection,
    MaintenanceRecord,
    ReportData,
)
from utils.config import config
from utils.image_utils import RasterImage
from utils.logger import setup_logger

logger = setup_logger(__name__, level=config.log_level, component="AGGREGATION")

KIND_DETECTIONS = "detections"
KIND_COMMENTS = "comments"
KIND_IMAGE = "image"
KIND_ANNOTATION = "annotation"

Annotator = Callable[[RasterImage, List[Detection]], RasterImage]


class ReportDataAggregator:
    """Builds a consistent ReportData snapshot for one transformer."""

    def __init__(
        self,
        client,
        max_workers: Optional[int] = None,
        annotator: Annotator = annotate_image
    ):
        self.client = client
        self.max_workers = max_workers or config.max_concurrent_fetches
        self.annotator = annotator
        self.logger = logger

    def aggregate(self, transformer_number: str, record_id: Optional[int] = None) -> ReportData:
        """
        Aggregate transformer, records, inspections and per-inspection data.

        Args:
            transformer_number: Transformer to report on
            record_id: Existing maintenance record to bind; a blank draft otherwise

        Returns:
            ReportData with annotated images

        Raises:
            NotFound: If the transformer lookup fails
        """
        start = time.time()
        self.logger.info(f"Aggregating report data for transformer {transformer_number}")

        try:
            transformer = self.client.get_transformer(transformer_number)
        except NotFound:
            self.logger.error(f"Transformer {transformer_number} does not exist")
            raise
        except Exception as e:
            self.logger.error(f"Transformer lookup failed for {transformer_number}: {e}")
            raise NotFound(transformer_number) from e

        records = self._fetch_or_default(
            "maintenance records",
            lambda: self.client.get_maintenance_records(transformer_number),
            []
        )
        inspections = self._fetch_or_default(
            "inspections",
            lambda: self.client.get_inspections(transformer_number),
            []
        )

        numbers = list(dict.fromkeys(i.inspection_number for i in inspections))
        detections, comments, images = self._fan_out(numbers)

        record = self._select_record(records, record_id, numbers)

        data = ReportData(
            transformer=transformer,
            record=record,
            existing_records=records,
            inspections=inspections,
            detections=detections,
            comments=comments,
            images=images,
        )

        self.logger.info(
            f"Aggregated {len(inspections)} inspection(s), "
            f"{sum(len(d) for d in detections.values())} detection(s), "
            f"{sum(len(c) for c in comments.values())} comment(s), "
            f"{len(images)} image(s) in {time.time() - start:.2f}s"
        )
        return data

    def _fetch_or_default(self, what: str, fetch: Callable[[], Any], default: Any) -> Any:
        try:
            return fetch()
        except Exception as e:
            self.logger.warning(f"Failed to fetch {what}, continuing without them: {e}")
            return default

    def _isolated(self, kind: str, inspection_number: str, fetch: Callable[[str], Any], default: Any) -> Any:
        """Run one per-inspection fetch; failures degrade to the default."""
        try:
            return fetch(inspection_number)
        except Exception as e:
            self.logger.warning(str(PartialDataLoss(kind, inspection_number, e)))
            return default

    def _annotate(self, inspection_number: str, image: RasterImage, detections: List[Detection]) -> RasterImage:
        try:
            return self.annotator(image, detections)
        except Exception as e:
            self.logger.error(f"Annotation failed for inspection {inspection_number}, using raw image: {e}")
            return image

    def _fan_out(
        self,
        numbers: List[str]
    ) -> Tuple[Dict[str, List[Detection]], Dict[str, List[Comment]], Dict[str, RasterImage]]:
        """
        Fetch detections, comments and images for all inspections concurrently.

        Each inspection is annotated as soon as both its image and its
        detections have arrived. Results are merged by inspection number on
        this thread only.
        """
        detections: Dict[str, List[Detection]] = {}
        comments: Dict[str, List[Comment]] = {}
        raw_images: Dict[str, Optional[RasterImage]] = {}
        images: Dict[str, RasterImage] = {}

        if not numbers:
            return detections, comments, images

        scheduled = set()

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="report-fetch") as executor:
            tasks: Dict[Future, Tuple[str, str]] = {}

            for number in numbers:
                tasks[executor.submit(self._isolated, KIND_DETECTIONS, number, self.client.get_detections, [])] = (KIND_DETECTIONS, number)
                tasks[executor.submit(self._isolated, KIND_COMMENTS, number, self.client.get_comments, [])] = (KIND_COMMENTS, number)
                tasks[executor.submit(self._isolated, KIND_IMAGE, number, self.client.get_image, None)] = (KIND_IMAGE, number)

            pending = set(tasks)
            while pending:
                done, pending = wait(pending, return_when=FIRST_COMPLETED)

                for future in done:
                    kind, number = tasks.pop(future)
                    result = future.result()

                    if kind == KIND_DETECTIONS:
                        detections[number] = result
                    elif kind == KIND_COMMENTS:
                        comments[number] = result
                    elif kind == KIND_IMAGE:
                        raw_images[number] = result
                    else:
                        images[number] = result
                        continue

                    ready = number in detections and number in raw_images
                    if ready and number not in scheduled:
                        scheduled.add(number)
                        raw = raw_images[number]
                        if raw is None:
                            continue
                        annotation = executor.submit(self._annotate, number, raw, detections[number])
                        tasks[annotation] = (KIND_ANNOTATION, number)
                        pending.add(annotation)

        return (
            {n: detections.get(n, []) for n in numbers},
            {n: comments.get(n, []) for n in numbers},
            {n: images[n] for n in numbers if n in images},
        )

    def _select_record(
        self,
        records: List[MaintenanceRecord],
        record_id: Optional[int],
        inspection_numbers: List[str]
    ) -> MaintenanceRecord:
        if record_id is not None:
            for record in records:
                if record.id == record_id:
                    return record
            self.logger.warning(f"Maintenance record {record_id} not found, using a blank draft")

        return MaintenanceRecord(inspection_numbers=inspection_numbers)


def aggregate_report_data(client, transformer_number: str, record_id: Optional[int] = None) -> ReportData:
    """Aggregate report data with default settings."""
    return ReportDataAggregator(client).aggregate(transformer_number, record_id)
