from bulkgen.jobs.models import JobRecord, JobSnapshot


class StatusProjector:
    """Builds read-only snapshots of job records."""

    def project(self, record: JobRecord) -> JobSnapshot:
        # The record lock is held only for the copy; the engine never holds it
        # across a slow call, so this does not wait on upstream work.
        with record.lock:
            return JobSnapshot(
                id=record.id,
                project_id=record.project_id,
                status=record.status,
                progress_percent=record.progress_percent,
                processed_count=record.processed_count,
                total_files=record.total_files,
                results=tuple(record.results),
                errors=tuple(record.errors),
                current_file_id=record.current_file_id,
                failure=record.failure,
                created_at=record.created_at,
                started_at=record.started_at,
                ended_at=record.ended_at,
                summary_path=record.summary_path,
            )
