class JobServiceError(Exception):
    """Base exception for errors reported to callers of the job service."""


class InvalidInputError(JobServiceError):
    """Raised when a submission is missing fields or has no files."""


class NotConfiguredError(JobServiceError):
    """Raised when the generation client has no usable endpoint or credentials."""


class JobNotFoundError(JobServiceError):
    """Raised when a job id is unknown or has been evicted."""


class AlreadyTerminalError(JobServiceError):
    """Raised when cancelling a job that has already finished."""


class JobNotFinishedError(JobServiceError):
    """Raised when results are requested for a job that is still running."""
