"""Summaries returned by the administrative media jobs."""
from __future__ import annotations

from pydantic import BaseModel, Field


class JobReport(BaseModel):
    """Outcome of one batch job run. Failed items are listed in ``errors``."""

    processed: int = Field(0, description="Items that were changed by this run", examples=[12])
    skipped: int = Field(0, description="Items that needed no work (already canonical, no image, ...)")
    failed: int = Field(0, description="Items that could not be handled")
    errors: list[str] = Field(default_factory=list, description="One message per failed item")

    @property
    def message(self) -> str:
        return f"Processed {self.processed} images, {self.skipped} skipped, {self.failed} failed"


class CleanupReport(JobReport):
    """Cleanup of media records whose original file disappeared."""

    checked: int = Field(0, description="Media records inspected")
    broken: int = Field(0, description="Records whose original file is missing")
    removed: int = Field(0, description="Broken records deleted")
    references_removed: int = Field(0, description="Content references to broken images removed")

    @property
    def message(self) -> str:
        return (
            f"Checked {self.checked} files. Removed {self.removed} broken images "
            f"and {self.references_removed} content references."
        )


class JobReportResponse(BaseModel):
    success: bool = Field(True, description="False only when the job could not run at all")
    message: str = Field(..., description="Human readable summary")
    report: JobReport


class CleanupReportResponse(BaseModel):
    success: bool = Field(True)
    message: str = Field(...)
    report: CleanupReport


class LegacyCleanupReport(JobReport):
    """Deletion of legacy image files nothing points at any more."""

    checked: int = Field(0, description="Legacy image files inspected")
    deleted: int = Field(0, description="Unreferenced files deleted")

    @property
    def message(self) -> str:
        return f"Checked {self.checked} files. Deleted {self.deleted} old images, {self.failed} failed"


class LegacyCleanupReportResponse(BaseModel):
    success: bool = Field(True)
    message: str = Field(...)
    report: LegacyCleanupReport
