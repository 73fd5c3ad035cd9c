"""JSON batch reports for pipeline runs."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel

from .models import BatchResult, FileOutcome


class FileReport(BaseModel):
    path: str
    status: str
    reference: Optional[str] = None
    message: str = ""
    artifact: Optional[str] = None


class BatchReport(BaseModel):
    pipeline: str
    success: bool
    files: List[FileReport]
    upstream: Optional["BatchReport"] = None


BatchReport.model_rebuild()


def _file_report(outcome: FileOutcome) -> FileReport:
    return FileReport(
        path=str(outcome.path),
        status=outcome.status,
        reference=outcome.reference,
        message=outcome.message,
        artifact=str(outcome.artifact) if outcome.artifact is not None else None,
    )


def build_report(result: BatchResult) -> BatchReport:
    """Convert a batch result into its serialisable report."""
    return BatchReport(
        pipeline=result.pipeline,
        success=not result.failed,
        files=[_file_report(outcome) for outcome in result.outcomes],
        upstream=build_report(result.upstream) if result.upstream is not None else None,
    )


def write_report(result: BatchResult, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(build_report(result).model_dump_json(indent=2) + "\n", encoding="utf-8")
    return path


__all__ = ["BatchReport", "FileReport", "build_report", "write_report"]
