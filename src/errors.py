"""
Error taxonomy for report generation.

Only NotFound is fatal to report generation. PartialDataLoss and
RenderDegraded are logged at the point of failure and degrade to empty or
placeholder values. SubmissionFailed is surfaced to the user.
"""

from typing import Optional


class ReportError(Exception):
    """Base class for report pipeline errors."""


class DataServiceError(ReportError):
    """Transport-level failure talking to the data service."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NotFound(ReportError):
    """The requested transformer does not exist."""

    def __init__(self, transformer_number: str):
        super().__init__(f"Transformer not found: {transformer_number}")
        self.transformer_number = transformer_number


class PartialDataLoss(ReportError):
    """
    A fetch or a single fetched item failed; the entry degrades to an empty
    value or is skipped.
    """

    def __init__(self, kind: str, owner: str, cause: Exception, scope: str = "inspection"):
        super().__init__(f"Failed to fetch {kind} for {scope} {owner}: {cause}")
        self.kind = kind
        self.owner = owner
        self.scope = scope
        self.cause = cause


class RenderDegraded(ReportError):
    """Annotation or image embedding failed; a fallback was rendered."""


class SubmissionFailed(ReportError):
    """The maintenance report could not be stored by the data service."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.user_message = message
        self.status_code = status_code


__all__ = [
    "ReportError",
    "DataServiceError",
    "NotFound",
    "PartialDataLoss",
    "RenderDegraded",
    "SubmissionFailed",
]
