"""Exception hierarchy for the ConstruCost dashboard."""

from __future__ import annotations

from typing import List


class ConstruCostError(Exception):
    """Base class for all dashboard errors."""


class SessionClosedError(ConstruCostError):
    """Raised when a committed form session is mutated again."""


class SubmissionBlocked(ConstruCostError):
    """Raised when a draft has blocking warnings and no override was given."""

    def __init__(self, warnings: List[str]):
        self.warnings = list(warnings)
        super().__init__("; ".join(self.warnings) or "Submission blocked")


class GeminiServiceError(ConstruCostError):
    """Opaque failure talking to the hosted AI service."""


class ExtractionError(GeminiServiceError):
    """Document extraction failed; no fields should be applied."""


class ImageTransformError(GeminiServiceError):
    """Image editing failed or returned no image."""
