from bulkgen.jobs.models import JobSnapshot, JobStatus
from bulkgen.jobs.service import JobService, build_job_service

__all__ = ["JobService", "JobSnapshot", "JobStatus", "build_job_service"]
