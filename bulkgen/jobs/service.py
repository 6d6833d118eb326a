import threading
from collections.abc import Mapping, Sequence
from datetime import datetime, timedelta
from pathlib import Path
from types import MappingProxyType

from bulkgen.config.settings import Settings
from bulkgen.generation.base import BaseGenerationClient
from bulkgen.generation.factory import GeneratorFactory
from bulkgen.generation.prompt_builder import PromptBuilder
from bulkgen.jobs.cancellation import CancellationController, CancelOutcome
from bulkgen.jobs.engine import ProcessingEngine
from bulkgen.jobs.exceptions import (
    AlreadyTerminalError,
    InvalidInputError,
    JobNotFinishedError,
    JobNotFoundError,
    NotConfiguredError,
)
from bulkgen.jobs.models import JobRecord, JobSnapshot, utcnow
from bulkgen.jobs.projector import StatusProjector
from bulkgen.jobs.registry import JobRegistry
from bulkgen.logging.logger import Log
from bulkgen.storage.base import BaseFileStore
from bulkgen.storage.local_file_store import LocalFileStore


class JobService:
    """Public contract of the job system: submit, poll, cancel.

    ``submit`` returns as soon as the job is registered; the work runs on a
    dedicated daemon thread per job.
    """

    def __init__(
        self,
        registry: JobRegistry,
        engine: ProcessingEngine,
        generation_client: BaseGenerationClient,
        *,
        retention: timedelta = timedelta(hours=24),
        projector: StatusProjector | None = None,
        cancellation: CancellationController | None = None,
    ) -> None:
        self._registry = registry
        self._engine = engine
        self._generation_client = generation_client
        self._retention = retention
        self._projector = projector or StatusProjector()
        self._cancellation = cancellation or CancellationController(registry)
        self._threads: dict[str, threading.Thread] = {}
        self._threads_lock = threading.Lock()

    def submit(
        self,
        project_id: str,
        file_ids: Sequence[str],
        agent_config: Mapping[str, object] | None,
    ) -> str:
        """Register a job and start processing it in the background.

        Raises:
            InvalidInputError: if project_id or file_ids are missing, or
                agent_config is absent.
            NotConfiguredError: if the generation client is not usable.
        """
        if not project_id or not file_ids or isinstance(file_ids, str):
            raise InvalidInputError("Missing required fields")
        if any(not isinstance(f, str) or not f.strip() for f in file_ids):
            raise InvalidInputError("File ids must be non-empty strings")
        if agent_config is None:
            raise InvalidInputError("Missing AI agent configuration")
        if not isinstance(agent_config, Mapping):
            raise InvalidInputError("AI agent configuration must be an object")
        if not self._generation_client.is_configured():
            raise NotConfiguredError(
                "Generation provider endpoint and API key must be configured"
            )

        record = JobRecord(
            project_id=project_id,
            file_ids=tuple(file_ids),
            agent_config=MappingProxyType(dict(agent_config)),
        )
        self._registry.put(record)
        thread = threading.Thread(
            target=self._engine.run,
            args=(record.id,),
            name=f"job-{record.id}",
            daemon=True,
        )
        with self._threads_lock:
            self._threads[record.id] = thread
        thread.start()
        Log.info(
            f"Submitted job {record.id} for project {project_id} "
            f"with {record.total_files} file(s)"
        )
        return record.id

    def get_status(self, job_id: str) -> JobSnapshot:
        return self._projector.project(self._require(job_id))

    def cancel(self, job_id: str) -> JobSnapshot:
        """Request cooperative cancellation.

        Raises:
            JobNotFoundError: if the job id is unknown.
            AlreadyTerminalError: if the job has already finished.
        """
        outcome = self._cancellation.request_cancel(job_id)
        if outcome is CancelOutcome.ALREADY_TERMINAL:
            raise AlreadyTerminalError(
                f"Cannot cancel job {job_id}: it has already finished"
            )
        return self.get_status(job_id)

    def get_results(self, job_id: str) -> JobSnapshot:
        """Return the final snapshot of a finished job."""
        snapshot = self.get_status(job_id)
        if not snapshot.is_terminal:
            raise JobNotFinishedError(f"Job {job_id} not completed yet")
        return snapshot

    def list_jobs(self, project_id: str | None = None) -> list[JobSnapshot]:
        snapshots = [self._projector.project(r) for r in self._registry.records()]
        if project_id is not None:
            snapshots = [s for s in snapshots if s.project_id == project_id]
        return sorted(snapshots, key=lambda s: s.created_at)

    def wait(self, job_id: str, timeout: float | None = None) -> JobSnapshot:
        """Block until the job's thread exits or ``timeout`` elapses."""
        record = self._require(job_id)
        with self._threads_lock:
            thread = self._threads.get(job_id)
        if thread is not None:
            thread.join(timeout)
        return self._projector.project(record)

    def reap(self, now: datetime | None = None) -> list[str]:
        """Evict finished jobs whose retention window has passed."""
        cutoff = (now or utcnow()) - self._retention
        evicted = self._registry.reap_older_than(cutoff)
        with self._threads_lock:
            for job_id in evicted:
                self._threads.pop(job_id, None)
        if evicted:
            Log.info(f"Evicted {len(evicted)} expired job(s)")
        return evicted

    def shutdown(self, wait: bool = True) -> None:
        """Drop pending collaborator calls; with ``wait``, join job threads."""
        self._engine.shutdown()
        if not wait:
            return
        with self._threads_lock:
            threads = list(self._threads.values())
        for thread in threads:
            thread.join()

    def _require(self, job_id: str) -> JobRecord:
        record = self._registry.get(job_id)
        if record is None:
            raise JobNotFoundError(f"Job not found: {job_id}")
        return record


def build_job_service(
    settings: Settings,
    file_store: BaseFileStore | None = None,
    generation_client: BaseGenerationClient | None = None,
) -> JobService:
    """Build a JobService with all required adapters."""
    if file_store is None:
        file_store = LocalFileStore(
            files_root=Path(settings.files_root),
            output_dir_name=settings.output_dir_name,
        )
    if generation_client is None:
        generation_client = GeneratorFactory.create(settings)
    registry = JobRegistry()
    engine = ProcessingEngine(
        registry,
        file_store,
        generation_client,
        PromptBuilder(),
        file_read_timeout_seconds=settings.file_read_timeout_seconds,
        generation_timeout_seconds=settings.generation_timeout_seconds,
        inter_file_delay_seconds=settings.inter_file_delay_seconds,
    )
    return JobService(
        registry,
        engine,
        generation_client,
        retention=timedelta(hours=settings.job_retention_hours),
    )
