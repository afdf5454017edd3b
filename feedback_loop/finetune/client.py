"""
Fine-tune job client for the OpenAI API.

Uploads a JSONL training file, creates a fine-tuning job from it and waits for
the job to reach a terminal state under a PollingPolicy.
"""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Any, Callable, Optional, Union

from openai import OpenAI, OpenAIError

from feedback_loop.core.exceptions import (
    JobStatusError,
    JobSubmissionError,
    JobTimeoutError,
    PollingCancelledError,
    UploadError,
)

from .polling import PollingPolicy
from .schema import FineTuneJob, JobStatus

logger = logging.getLogger(__name__)


class FineTuneClient:
    """
    Thin wrapper over the provider's files and fine_tuning.jobs endpoints.

    Args:
        api_key: Provider credential. Ignored when client is given.
        client: Pre-built OpenAI client (or a compatible fake).
        sleep: Replacement for the wait between polls; receives seconds.
        clock: Monotonic time source used for the polling deadline.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        client: Optional[Any] = None,
        sleep: Optional[Callable[[float], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if client is None:
            if not api_key:
                raise ValueError("api_key is required when no client is supplied")
            client = OpenAI(api_key=api_key)
        self._client = client
        self._sleep = sleep
        self._clock = clock

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def upload_dataset(self, path: Union[str, Path]) -> str:
        """
        Upload a JSONL training file and return the provider file id.
        """

        path = Path(path)
        logger.info("Uploading %s to the fine-tune provider", path.name)
        try:
            with open(path, "rb") as f:
                response = self._client.files.create(file=f, purpose="fine-tune")
        except OSError as exc:
            raise UploadError(f"Cannot read training file {path}: {exc}") from exc
        except OpenAIError as exc:
            raise UploadError(f"Upload of {path.name} rejected: {exc}") from exc

        logger.info("File uploaded. ID: %s", response.id)
        return response.id

    # ------------------------------------------------------------------
    # Job management
    # ------------------------------------------------------------------

    def start_job(self, file_id: str, base_model: str, suffix: Optional[str] = None) -> FineTuneJob:
        params = {"training_file": file_id, "model": base_model}
        if suffix:
            params["suffix"] = suffix

        logger.info("Starting fine-tune job with base model: %s", base_model)
        try:
            response = self._client.fine_tuning.jobs.create(**params)
        except OpenAIError as exc:
            raise JobSubmissionError(f"Fine-tune job for {base_model} not accepted: {exc}") from exc

        job = self._to_job(response)
        logger.info("Fine-tune job started. ID: %s status: %s", job.job_id, job.provider_status)
        return job

    def get_job(self, job_id: str) -> FineTuneJob:
        try:
            response = self._client.fine_tuning.jobs.retrieve(job_id)
        except OpenAIError as exc:
            raise JobStatusError(f"Cannot read status of job {job_id}: {exc}") from exc
        return self._to_job(response)

    def await_completion(
        self,
        job: FineTuneJob,
        policy: Optional[PollingPolicy] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> FineTuneJob:
        """
        Block until the job is succeeded or failed.

        A job that is already terminal is returned without another read.
        Raises JobTimeoutError when the policy deadline passes and
        PollingCancelledError when cancel_event is set.
        """

        policy = policy or PollingPolicy()
        deadline = policy.deadline(self._clock())
        delays = policy.delays()

        while not job.is_terminal:
            delay = next(delays)
            if deadline is not None:
                remaining = deadline - self._clock()
                if remaining <= 0:
                    raise JobTimeoutError(
                        f"Job {job.job_id} still {job.status.value} after {policy.timeout_seconds:.0f}s"
                    )
                delay = min(delay, remaining)

            logger.info("Current fine-tune status: %s ... waiting %.0fs", job.provider_status, delay)
            if self._pause(delay, cancel_event):
                raise PollingCancelledError(f"Stopped waiting for job {job.job_id}")
            job = self.get_job(job.job_id)

        if job.status == JobStatus.SUCCEEDED and not job.result_model_id:
            raise JobStatusError(f"Job {job.job_id} succeeded without a fine-tuned model id")

        logger.info("Fine-tune job %s finished with status %s", job.job_id, job.status.value)
        return job

    def _pause(self, delay: float, cancel_event: Optional[threading.Event]) -> bool:
        if cancel_event is not None and cancel_event.is_set():
            return True
        if self._sleep is not None:
            self._sleep(delay)
        elif cancel_event is not None:
            cancel_event.wait(delay)
        else:
            time.sleep(delay)
        return cancel_event is not None and cancel_event.is_set()

    @staticmethod
    def _to_job(response: Any) -> FineTuneJob:
        try:
            return FineTuneJob.from_provider(response)
        except ValueError as exc:
            raise JobStatusError(str(exc)) from exc
