"""
Core module: Configuration, logging, and exception handling.
"""

from .config import Config, ReportSettings
from .exceptions import (
    PipelineError,
    ConfigurationMissingError,
    DataAccessError,
    MalformedRecordError,
    UploadError,
    JobSubmissionError,
    JobStatusError,
    JobFailedError,
    JobTimeoutError,
    PollingCancelledError,
    ConfigPublishError,
    ReportGenerationError,
)

__all__ = [
    "Config",
    "ReportSettings",
    "PipelineError",
    "ConfigurationMissingError",
    "DataAccessError",
    "MalformedRecordError",
    "UploadError",
    "JobSubmissionError",
    "JobStatusError",
    "JobFailedError",
    "JobTimeoutError",
    "PollingCancelledError",
    "ConfigPublishError",
    "ReportGenerationError",
]
