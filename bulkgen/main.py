import argparse
import json
import time

from bulkgen.config.settings import Settings
from bulkgen.jobs.exceptions import AlreadyTerminalError, JobServiceError
from bulkgen.jobs.models import JobStatus
from bulkgen.jobs.service import build_job_service
from bulkgen.logging.logger import Log
from bulkgen.worker.reaper import Reaper

POLL_INTERVAL_SECONDS = 1.0


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="bulkgen",
        description="Run one project's files through the generation service.",
    )
    parser.add_argument("project_id", help="Project directory under FILES_ROOT")
    parser.add_argument("file_ids", nargs="+", help="Files to process, in order")
    parser.add_argument(
        "--agent-config",
        default="{}",
        help="Agent configuration as a JSON object",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entry point: build dependencies -> submit one job -> poll until it ends."""
    args = _parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)

    try:
        agent_config = json.loads(args.agent_config)
    except json.JSONDecodeError as exc:
        Log.error(f"--agent-config is not valid JSON: {exc}")
        return 2

    service = build_job_service(settings)
    reaper = Reaper(service, settings)
    reaper.start()
    try:
        try:
            job_id = service.submit(args.project_id, args.file_ids, agent_config)
        except JobServiceError as exc:
            Log.error(f"Job rejected: {exc}")
            return 2

        snapshot = service.get_status(job_id)
        try:
            while not snapshot.is_terminal:
                time.sleep(POLL_INTERVAL_SECONDS)
                snapshot = service.get_status(job_id)
                Log.info(
                    f"Job {job_id}: {snapshot.status.value} "
                    f"{snapshot.progress_percent}% "
                    f"({snapshot.processed_count}/{snapshot.total_files})"
                )
        except KeyboardInterrupt:
            Log.info(f"Interrupted, cancelling job {job_id}")
            try:
                service.cancel(job_id)
            except AlreadyTerminalError:
                Log.info(f"Job {job_id} finished before the cancel was seen")
            snapshot = service.wait(job_id)

        print(json.dumps(snapshot.to_dict(), indent=2))
        return 0 if snapshot.status is JobStatus.COMPLETED else 1
    finally:
        reaper.stop()
        service.shutdown(wait=False)


if __name__ == "__main__":
    raise SystemExit(main())
