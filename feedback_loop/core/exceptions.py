"""
Custom exceptions for the report feedback loop.

Every pipeline stage raises one of these so the driver can tell a benign
outcome from a fatal one. Only ConfigPublishError is non-fatal: the training
job already succeeded and its model id must not be lost.
"""


class PipelineError(Exception):
    """Base exception for pipeline failures."""
    pass


class ConfigurationMissingError(PipelineError):
    """Raised when a required credential or setting is absent."""
    pass


class DataAccessError(PipelineError):
    """Raised when reading or writing feedback rows fails."""
    pass


class MalformedRecordError(PipelineError):
    """Raised when a feedback row cannot become a training example."""
    pass


class UploadError(PipelineError):
    """Raised when the provider rejects or never receives the dataset file."""
    pass


class JobSubmissionError(PipelineError):
    """Raised when a fine-tune job cannot be created."""
    pass


class JobStatusError(PipelineError):
    """Raised when a job status cannot be read or is inconsistent."""
    pass


class JobFailedError(PipelineError):
    """Raised when the remote fine-tune job ends in a failed state."""

    def __init__(self, message: str, job=None):
        super().__init__(message)
        self.job = job


class JobTimeoutError(PipelineError):
    """Raised when a job does not finish before the polling deadline."""
    pass


class PollingCancelledError(PipelineError):
    """Raised when an operator cancels the wait for a job."""
    pass


class ConfigPublishError(PipelineError):
    """Raised when the hosting configuration cannot be updated."""
    pass


class ReportGenerationError(Exception):
    """Raised when the language model call for a report section fails."""
    pass
