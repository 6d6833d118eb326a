from enum import Enum

from bulkgen.jobs.exceptions import JobNotFoundError
from bulkgen.jobs.registry import JobRegistry
from bulkgen.logging.logger import Log


class CancelOutcome(str, Enum):
    OK = "ok"
    ALREADY_TERMINAL = "already_terminal"


class CancellationController:
    """Sets the cooperative cancel flag that the engine checks between files."""

    def __init__(self, registry: JobRegistry) -> None:
        self._registry = registry

    def request_cancel(self, job_id: str) -> CancelOutcome:
        """Request cancellation of a job.

        The flag is only observed at the next file boundary; an in-flight
        generation call is allowed to finish.

        Raises:
            JobNotFoundError: if the job id is unknown.
        """
        record = self._registry.get(job_id)
        if record is None:
            raise JobNotFoundError(f"Job not found: {job_id}")
        if not record.request_cancel():
            Log.info(f"Cancel ignored for job {job_id}: already {record.status.value}")
            return CancelOutcome.ALREADY_TERMINAL
        Log.info(f"Cancellation requested for job {job_id}")
        return CancelOutcome.OK
