import json
import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import TypeVar

from bulkgen.generation.base import BaseGenerationClient
from bulkgen.generation.exceptions import GenerationTimeoutError
from bulkgen.generation.prompt_builder import PromptBuilder
from bulkgen.jobs.models import JobRecord, utcnow
from bulkgen.jobs.registry import JobRegistry
from bulkgen.logging.logger import Log
from bulkgen.storage.base import BaseFileStore
from bulkgen.storage.exceptions import FileStoreError, FileStoreUnavailableError

T = TypeVar("T")

SUMMARY_FILE_NAME = "summary-{job_id}.json"


class _JobCalls:
    """Timeout-bounded collaborator calls owned by a single job.

    Calls run on a one-worker executor private to the job, so time spent
    waiting never depends on other jobs. After a timeout the stuck worker is
    abandoned and later calls get a fresh executor.
    """

    def __init__(self, job_id: str) -> None:
        self._thread_name_prefix = f"job-{job_id}-call"
        self._executor = self._new_executor()

    def call(
        self,
        fn: Callable[..., T],
        timeout: float,
        on_timeout: Callable[[], Exception],
        *args: object,
    ) -> T:
        future = self._executor.submit(fn, *args)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError as exc:
            future.cancel()
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = self._new_executor()
            raise on_timeout() from exc

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _new_executor(self) -> ThreadPoolExecutor:
        return ThreadPoolExecutor(
            max_workers=1, thread_name_prefix=self._thread_name_prefix
        )


class ProcessingEngine:
    """Runs the per-job loop: read -> prompt -> generate -> write, file by file.

    The engine is the only writer of a job's record while ``run`` executes.
    Slow collaborator calls run on an executor owned by the job so each one
    can be abandoned once its timeout elapses.
    """

    def __init__(
        self,
        registry: JobRegistry,
        file_store: BaseFileStore,
        generation_client: BaseGenerationClient,
        prompt_builder: PromptBuilder,
        *,
        file_read_timeout_seconds: float = 30.0,
        generation_timeout_seconds: float = 30.0,
        inter_file_delay_seconds: float = 0.0,
    ) -> None:
        self._registry = registry
        self._file_store = file_store
        self._generation_client = generation_client
        self._prompt_builder = prompt_builder
        self._file_read_timeout = file_read_timeout_seconds
        self._generation_timeout = generation_timeout_seconds
        self._inter_file_delay = inter_file_delay_seconds
        self._active_calls: dict[str, _JobCalls] = {}
        self._active_lock = threading.Lock()

    def run(self, job_id: str) -> None:
        """Process every file of a registered job in order.

        Must be called exactly once per job, with the record in ``starting``.
        """
        record = self._registry.get(job_id)
        if record is None:
            Log.error(f"Job {job_id} is not registered, nothing to run")
            return

        Log.info(
            f"Starting job {job_id} for project {record.project_id}: "
            f"{record.total_files} file(s)"
        )
        calls = _JobCalls(job_id)
        with self._active_lock:
            self._active_calls[job_id] = calls
        try:
            record.mark_processing()
            if not record.file_ids:
                raise RuntimeError("Job has no files to process")
            self._check_store(calls, record.project_id)
            self._process_files(calls, record)
            self._write_summary(record)
            status = record.finish()
        except Exception as exc:
            Log.exception(f"Job {job_id} aborted: {exc}")
            if not record.is_terminal:
                record.fail(f"{type(exc).__name__}: {exc}")
            return
        finally:
            with self._active_lock:
                self._active_calls.pop(job_id, None)
            calls.close()

        Log.info(
            f"Job {job_id} finished as {status.value}: "
            f"{len(record.results)} succeeded, {len(record.errors)} failed"
        )

    def shutdown(self) -> None:
        """Drop pending collaborator calls of every job still running."""
        with self._active_lock:
            active = list(self._active_calls.values())
        for calls in active:
            calls.close()

    def _process_files(self, calls: _JobCalls, record: JobRecord) -> None:
        for index, file_id in enumerate(record.file_ids):
            if index and self._inter_file_delay > 0:
                time.sleep(self._inter_file_delay)
            if record.is_cancel_requested():
                Log.info(
                    f"Job {record.id} cancelled before file {file_id} "
                    f"({record.processed_count}/{record.total_files} processed)"
                )
                return
            self._process_file(calls, record, file_id)

    def _process_file(self, calls: _JobCalls, record: JobRecord, file_id: str) -> None:
        record.begin_file(file_id)
        try:
            output_path = self._generate_output(calls, record, file_id)
        except Exception as exc:
            message = str(exc) or type(exc).__name__
            Log.warning(f"Job {record.id}: file {file_id} failed: {message}")
            record.add_error(file_id, message)
            return
        record.add_result(file_id, output_path)
        Log.info(
            f"Job {record.id}: file {file_id} processed "
            f"({record.processed_count}/{record.total_files})"
        )

    def _generate_output(self, calls: _JobCalls, record: JobRecord, file_id: str) -> str:
        raw_bytes = calls.call(
            self._file_store.read_file,
            self._file_read_timeout,
            lambda: FileStoreError(
                f"File read timed out after {self._file_read_timeout:g}s"
            ),
            record.project_id,
            file_id,
        )
        try:
            content = raw_bytes.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise FileStoreError(f"File is not valid UTF-8 text: {exc}") from exc

        prompt = self._prompt_builder.build(
            file_name=file_id,
            file_content=content,
            agent_config=record.agent_config,
        )
        text = calls.call(
            self._generation_client.generate,
            self._generation_timeout,
            lambda: GenerationTimeoutError(
                f"Request timeout. The generation service took longer than "
                f"{self._generation_timeout:g}s to respond."
            ),
            prompt,
            record.agent_config,
        )
        output_path = self._file_store.write_output(
            record.project_id, file_id, text.encode("utf-8")
        )
        return str(output_path)

    def _write_summary(self, record: JobRecord) -> None:
        with record.lock:
            results = list(record.results)
        if not results:
            return
        summary = {
            "job_id": record.id,
            "project_id": record.project_id,
            "total_files": len(results),
            "completed_at": utcnow().isoformat(),
            "files": [
                {
                    "file_id": r.file_id,
                    "output_path": r.output_path,
                    "processed_at": r.processed_at.isoformat(),
                }
                for r in results
            ],
        }
        try:
            path = self._file_store.write_output(
                record.project_id,
                SUMMARY_FILE_NAME.format(job_id=record.id),
                json.dumps(summary, indent=2).encode("utf-8"),
            )
        except FileStoreError as exc:
            Log.warning(f"Job {record.id}: summary not written: {exc}")
            return
        record.set_summary_path(path)

    def _check_store(self, calls: _JobCalls, project_id: str) -> None:
        calls.call(
            self._file_store.check_available,
            self._file_read_timeout,
            lambda: FileStoreUnavailableError(
                f"File store did not answer within {self._file_read_timeout:g}s"
            ),
            project_id,
        )
