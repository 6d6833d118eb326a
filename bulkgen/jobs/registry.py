import threading
from datetime import datetime

from bulkgen.jobs.models import JobRecord


class JobRegistry:
    """In-memory map of job id to record, safe for concurrent access.

    Holds no policy: the registry lock only guards the map itself, record
    fields are guarded by each record's own lock.
    """

    def __init__(self) -> None:
        self._jobs: dict[str, JobRecord] = {}
        self._lock = threading.Lock()

    def put(self, record: JobRecord) -> None:
        with self._lock:
            self._jobs[record.id] = record

    def get(self, job_id: str) -> JobRecord | None:
        with self._lock:
            return self._jobs.get(job_id)

    def delete(self, job_id: str) -> None:
        with self._lock:
            self._jobs.pop(job_id, None)

    def records(self) -> list[JobRecord]:
        with self._lock:
            return list(self._jobs.values())

    def reap_older_than(self, cutoff: datetime) -> list[str]:
        """Evict terminal records that ended before ``cutoff``.

        Returns:
            Ids of the evicted jobs. Running jobs are never evicted.
        """
        with self._lock:
            expired = [
                job_id
                for job_id, record in self._jobs.items()
                if record.ended_at is not None and record.ended_at < cutoff
            ]
            for job_id in expired:
                del self._jobs[job_id]
        return expired

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)
