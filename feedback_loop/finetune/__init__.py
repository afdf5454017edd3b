"""
Provider-side fine-tuning: dataset assembly, job submission and polling.
"""

from .polling import PollingPolicy
from .schema import FineTuneJob, JobStatus
from .dataset import (
    TrainingExample,
    build_dataset,
    build_training_prompt,
    format_completion,
    load_dataset,
    serialize_dataset,
    write_dataset,
)
from .client import FineTuneClient

__all__ = [
    "PollingPolicy",
    "FineTuneJob",
    "JobStatus",
    "TrainingExample",
    "build_dataset",
    "build_training_prompt",
    "format_completion",
    "load_dataset",
    "serialize_dataset",
    "write_dataset",
    "FineTuneClient",
]
