"""
Schema for remote fine-tune jobs.

The provider owns job state; these objects are read-only snapshots taken each
time the pipeline polls.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel


class JobStatus(str, Enum):
    """Pipeline view of a provider job status."""

    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @classmethod
    def from_provider(cls, raw: str) -> "JobStatus":
        """
        Collapse provider statuses onto the four pipeline states.

        validating_files counts as queued; cancelled counts as failed.
        """
        value = (raw or "").strip().lower()
        if value in {"validating_files", "queued", "pending", "created"}:
            return cls.QUEUED
        if value == "running":
            return cls.RUNNING
        if value == "succeeded":
            return cls.SUCCEEDED
        if value in {"failed", "cancelled"}:
            return cls.FAILED
        raise ValueError(f"Unknown fine-tune job status: {raw!r}")


TERMINAL_STATUSES = frozenset({JobStatus.SUCCEEDED, JobStatus.FAILED})


class FineTuneJob(BaseModel):
    """
    Snapshot of a fine-tune job.

    Fields:
    - job_id: provider job identifier
    - status: collapsed pipeline status
    - result_model_id: model id, set only once the job succeeded
    - base_model: model the job trains from
    - training_file: uploaded file id
    - provider_status: raw provider status string
    - error: provider error message for failed jobs
    """

    job_id: str
    status: JobStatus
    result_model_id: Optional[str] = None
    base_model: Optional[str] = None
    training_file: Optional[str] = None
    provider_status: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @classmethod
    def from_provider(cls, job: Any) -> "FineTuneJob":
        error = getattr(job, "error", None)
        message = getattr(error, "message", None) if error is not None else None
        return cls(
            job_id=job.id,
            status=JobStatus.from_provider(job.status),
            result_model_id=getattr(job, "fine_tuned_model", None) or None,
            base_model=getattr(job, "model", None),
            training_file=getattr(job, "training_file", None),
            provider_status=job.status,
            error=message,
        )
