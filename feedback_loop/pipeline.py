"""
Fine-tune pipeline driver.

Runs one pass of the feedback loop:

    high-rated feedback (database)
        ↓
    JSONL training dataset (local working file)
        ↓
    upload + fine-tune job (model provider), polled to a terminal state
        ↓
    FINE_TUNED_MODEL_NAME upsert + redeploy (hosting platform)

Stages run strictly in sequence. There is no resume: a failed run is
re-triggered from the beginning.
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from feedback_loop.core.config import PIPELINE_REQUIRED, PUBLISH_REQUIRED, Config
from feedback_loop.core.exceptions import ConfigPublishError, JobFailedError, PipelineError
from feedback_loop.core.logging_config import setup_logging
from feedback_loop.feedback.store import SupabaseFeedbackStore
from feedback_loop.finetune.client import FineTuneClient
from feedback_loop.finetune.dataset import build_dataset, write_dataset
from feedback_loop.finetune.schema import FineTuneJob, JobStatus
from feedback_loop.publish.netlify import MODEL_ENV_KEY, NetlifyEnvPublisher, PublishResult

logger = logging.getLogger(__name__)


class PipelineOutcome(str, Enum):
    """Terminal outcomes of a run that exit with status 0."""

    NO_FEEDBACK = "no_feedback"
    PUBLISHED = "published"
    PUBLISH_FAILED = "publish_failed"
    PUBLISH_SKIPPED = "publish_skipped"


@dataclass
class PipelineResult:
    outcome: PipelineOutcome
    record_count: int = 0
    dataset_path: Optional[Path] = None
    job: Optional[FineTuneJob] = None
    model_id: Optional[str] = None
    publish: Optional[PublishResult] = None


@dataclass
class FineTunePipeline:
    """
    One end-to-end fine-tune run.

    - store: anything with fetch_high_rated_feedback(min_rating)
    - tuner: anything with upload_dataset/start_job/await_completion
    - publisher: anything with publish_model(model_id); None skips publishing
    """

    config: Config
    store: Any
    tuner: Any
    publisher: Optional[Any] = None
    cancel_event: Optional[threading.Event] = None

    def run(self) -> PipelineResult:
        records = self.store.fetch_high_rated_feedback(self.config.min_rating)
        if not records:
            logger.info("No high-rated feedback found. Exiting.")
            return PipelineResult(outcome=PipelineOutcome.NO_FEEDBACK)

        logger.info("Found %d high-rated feedback entries.", len(records))
        dataset = build_dataset(records)
        path = write_dataset(dataset, self.config.dataset_path)
        logger.info("Wrote JSONL with %d lines to %s", len(dataset), path)

        file_id = self.tuner.upload_dataset(path)
        job = self.tuner.start_job(file_id, self.config.base_model)
        job = self.tuner.await_completion(job, self.config.polling, self.cancel_event)

        if job.status != JobStatus.SUCCEEDED:
            raise JobFailedError(
                f"Fine-tune job {job.job_id} failed: {job.error or job.provider_status}", job=job
            )

        model_id = job.result_model_id
        logger.info("Fine-tune succeeded! New model = %s", model_id)
        result = PipelineResult(
            outcome=PipelineOutcome.PUBLISHED,
            record_count=len(records),
            dataset_path=path,
            job=job,
            model_id=model_id,
        )

        if self.publisher is None:
            logger.warning("Publishing disabled. Please manually set %s to: %s", MODEL_ENV_KEY, model_id)
            result.outcome = PipelineOutcome.PUBLISH_SKIPPED
            return result

        try:
            result.publish = self.publisher.publish_model(model_id)
        except ConfigPublishError as exc:
            logger.error("Could not update site configuration: %s", exc)
            logger.warning("Please manually set %s to: %s", MODEL_ENV_KEY, model_id)
            result.outcome = PipelineOutcome.PUBLISH_FAILED
            return result

        logger.info("Site configuration %s: %s=%s", result.publish.action, MODEL_ENV_KEY, model_id)
        return result


def build_pipeline(
    config: Config,
    publish: bool = True,
    cancel_event: Optional[threading.Event] = None,
) -> FineTunePipeline:
    """
    Wire real clients from configuration.

    Credentials are checked before any component is created, so a missing
    value aborts the run before the first network call.
    """

    required = PIPELINE_REQUIRED + (PUBLISH_REQUIRED if publish else ())
    config.require(*required)

    store = SupabaseFeedbackStore(
        config.supabase_url,
        config.supabase_service_role_key,
        table=config.feedback_table,
    )
    tuner = FineTuneClient(api_key=config.openai_api_key)
    publisher = None
    if publish:
        publisher = NetlifyEnvPublisher(config.netlify_auth_token, config.netlify_site_id)
    return FineTunePipeline(
        config=config,
        store=store,
        tuner=tuner,
        publisher=publisher,
        cancel_event=cancel_event,
    )


class _ArgumentParser(argparse.ArgumentParser):
    """Usage errors exit 1 like every other fatal error of the run."""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = _ArgumentParser(
        description="Build a dataset from high-rated feedback, fine-tune, and publish the model id"
    )
    parser.add_argument("--min-rating", type=int, default=None, help="Lowest rating included (1-7)")
    parser.add_argument("--base-model", default=None, help="Provider base model to fine-tune")
    parser.add_argument("--dataset-path", type=Path, default=None, help="Working JSONL file")
    parser.add_argument("--poll-interval", type=float, default=None, help="Seconds between status reads")
    parser.add_argument("--timeout", type=float, default=None, help="Polling deadline in seconds (0 = none)")
    parser.add_argument(
        "--no-publish",
        action="store_true",
        help="Skip the hosting update and print the model id instead",
    )
    return parser.parse_args(argv)


def _apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    updates = {}
    if args.min_rating is not None:
        if not 1 <= args.min_rating <= 7:
            raise ValueError("--min-rating must be between 1 and 7")
        updates["min_rating"] = args.min_rating
    if args.base_model:
        updates["base_model"] = args.base_model
    if args.dataset_path is not None:
        updates["dataset_path"] = args.dataset_path

    polling = {}
    if args.poll_interval is not None:
        polling["interval_seconds"] = args.poll_interval
    if args.timeout is not None:
        polling["timeout_seconds"] = args.timeout or None
    if polling:
        updates["polling"] = config.polling.model_validate({**config.polling.model_dump(), **polling})

    return config.model_copy(update=updates) if updates else config


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = _parse_args(argv)

    try:
        config = _apply_overrides(Config(), args)
    except (ValidationError, ValueError) as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    log = setup_logging("feedback_loop", config)
    cancel_event = threading.Event()

    def _cancel(signum, frame):
        log.warning("Received signal %s; cancelling run", signum)
        cancel_event.set()

    previous = {}
    if threading.current_thread() is threading.main_thread():
        for sig in (signal.SIGINT, signal.SIGTERM):
            previous[sig] = signal.signal(sig, _cancel)

    try:
        pipeline = build_pipeline(config, publish=not args.no_publish, cancel_event=cancel_event)
        pipeline.run()
    except PipelineError as exc:
        log.error("Fine-tune pipeline aborted: %s", exc)
        return 1
    except Exception as exc:
        log.exception("Fine-tune script error: %s", exc)
        return 1
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)

    return 0


if __name__ == "__main__":
    sys.exit(main())
