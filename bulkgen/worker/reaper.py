import threading

from bulkgen.config.settings import Settings
from bulkgen.jobs.service import JobService
from bulkgen.logging.logger import Log


class Reaper:
    """Periodic sweep: wait -> evict expired jobs, on its own daemon thread."""

    def __init__(self, job_service: JobService, settings: Settings) -> None:
        self._job_service = job_service
        self._settings = settings
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self.run, name="job-reaper", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def run(self, max_sweeps: int | None = None) -> None:
        """Sweep every ``reaper_interval_seconds`` until stopped.

        If max_sweeps is set, stop after that many sweeps (for testing).
        """
        Log.info("Reaper started")
        sweeps = 0
        while not self._stop.wait(self._settings.reaper_interval_seconds):
            self.sweep()
            sweeps += 1
            if max_sweeps is not None and sweeps >= max_sweeps:
                break
        Log.info("Reaper stopped")

    def sweep(self) -> list[str]:
        """Evict expired jobs. Errors are logged and retried on the next sweep."""
        try:
            return self._job_service.reap()
        except Exception as exc:
            Log.warning(f"Job eviction failed, will retry: {exc}")
            return []
