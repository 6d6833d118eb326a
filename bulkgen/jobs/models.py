"""Job record data model and lifecycle state machine."""

import threading
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobStatus(str, Enum):
    STARTING = "starting"
    PROCESSING = "processing"
    COMPLETED = "completed"
    COMPLETED_WITH_ERRORS = "completed_with_errors"
    ERROR = "error"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({
    JobStatus.COMPLETED,
    JobStatus.COMPLETED_WITH_ERRORS,
    JobStatus.ERROR,
    JobStatus.CANCELLED,
})


@dataclass(frozen=True)
class JobResult:
    """A file that was processed successfully."""

    file_id: str
    output_path: str
    processed_at: datetime


@dataclass(frozen=True)
class JobError:
    """A file whose processing failed."""

    file_id: str
    error_message: str
    timestamp: datetime


def compute_progress_percent(processed: int, total: int) -> int:
    """Whole percentage rounded half-up; 0 when there is nothing to process."""
    if total <= 0:
        return 0
    return (200 * processed + total) // (2 * total)


@dataclass
class JobRecord:
    """Mutable state of one batch job.

    Every mutator takes the record lock, so compound updates (an appended
    result together with its count) are observed atomically by readers that
    snapshot under the same lock. A terminal record rejects all mutation.
    """

    project_id: str
    file_ids: tuple[str, ...]
    agent_config: Mapping[str, object]
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: JobStatus = JobStatus.STARTING
    processed_count: int = 0
    results: list[JobResult] = field(default_factory=list)
    errors: list[JobError] = field(default_factory=list)
    cancel_requested: bool = False
    current_file_id: str | None = None
    failure: str | None = None
    summary_path: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    started_at: datetime | None = None
    ended_at: datetime | None = None
    lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    @property
    def total_files(self) -> int:
        return len(self.file_ids)

    @property
    def progress_percent(self) -> int:
        return compute_progress_percent(self.processed_count, self.total_files)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def mark_processing(self) -> None:
        with self.lock:
            self._require_status(JobStatus.STARTING)
            self.status = JobStatus.PROCESSING
            self.started_at = utcnow()

    def begin_file(self, file_id: str) -> None:
        with self.lock:
            self._require_status(JobStatus.PROCESSING)
            self.current_file_id = file_id

    def add_result(self, file_id: str, output_path: Path | str) -> None:
        with self.lock:
            self._require_status(JobStatus.PROCESSING)
            self.results.append(
                JobResult(file_id=file_id, output_path=str(output_path), processed_at=utcnow())
            )
            self._advance()

    def add_error(self, file_id: str, error_message: str) -> None:
        with self.lock:
            self._require_status(JobStatus.PROCESSING)
            self.errors.append(
                JobError(file_id=file_id, error_message=error_message, timestamp=utcnow())
            )
            self._advance()

    def set_summary_path(self, path: Path | str) -> None:
        with self.lock:
            self._require_status(JobStatus.PROCESSING)
            self.summary_path = str(path)

    def is_cancel_requested(self) -> bool:
        with self.lock:
            return self.cancel_requested

    def request_cancel(self) -> bool:
        """Set the cancel flag. Returns False when the job is already terminal."""
        with self.lock:
            if self.status.is_terminal:
                return False
            self.cancel_requested = True
            return True

    def finish(self) -> JobStatus:
        """Leave the processing loop and settle on the final status."""
        with self.lock:
            self._require_status(JobStatus.PROCESSING)
            if self.cancel_requested:
                status = JobStatus.CANCELLED
            elif not self.errors:
                status = JobStatus.COMPLETED
            elif self.results:
                status = JobStatus.COMPLETED_WITH_ERRORS
            else:
                status = JobStatus.ERROR
            self._terminate(status)
            return status

    def fail(self, message: str) -> None:
        """Abort the whole job after a fault outside the per-file scope."""
        with self.lock:
            if self.status.is_terminal:
                raise RuntimeError(f"Job {self.id} is already {self.status.value}")
            self.failure = message
            self._terminate(JobStatus.ERROR)

    def _advance(self) -> None:
        if self.processed_count >= self.total_files:
            raise RuntimeError(f"Job {self.id} processed more files than submitted")
        self.processed_count += 1
        self.current_file_id = None

    def _terminate(self, status: JobStatus) -> None:
        self.status = status
        self.current_file_id = None
        self.ended_at = utcnow()

    def _require_status(self, expected: JobStatus) -> None:
        if self.status is not expected:
            raise RuntimeError(
                f"Job {self.id} is {self.status.value}, expected {expected.value}"
            )


@dataclass(frozen=True)
class JobSnapshot:
    """Read-only view of a job at one instant."""

    id: str
    project_id: str
    status: JobStatus
    progress_percent: int
    processed_count: int
    total_files: int
    results: tuple[JobResult, ...]
    errors: tuple[JobError, ...]
    current_file_id: str | None
    failure: str | None
    created_at: datetime
    started_at: datetime | None
    ended_at: datetime | None
    summary_path: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def to_dict(self) -> dict[str, object]:
        """JSON-ready representation for an outer API layer."""
        return {
            "job_id": self.id,
            "project_id": self.project_id,
            "status": self.status.value,
            "progress_percent": self.progress_percent,
            "processed_count": self.processed_count,
            "total_files": self.total_files,
            "current_file_id": self.current_file_id,
            "results": [
                {
                    "file_id": r.file_id,
                    "output_path": r.output_path,
                    "processed_at": r.processed_at.isoformat(),
                }
                for r in self.results
            ],
            "errors": [
                {
                    "file_id": e.file_id,
                    "error_message": e.error_message,
                    "timestamp": e.timestamp.isoformat(),
                }
                for e in self.errors
            ],
            "failure": self.failure,
            "summary_path": self.summary_path,
            "created_at": self.created_at.isoformat(),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
        }
