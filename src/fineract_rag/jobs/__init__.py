from .scheduler import JobRunResult, JobScheduler, ScheduledJob
from .background import (
    BackgroundJobs,
    CACHE_CLEANUP_JOB,
    HEALTH_CHECK_JOB,
    INDEXING_JOB,
)

__all__ = [
    "JobRunResult",
    "JobScheduler",
    "ScheduledJob",
    "BackgroundJobs",
    "CACHE_CLEANUP_JOB",
    "HEALTH_CHECK_JOB",
    "INDEXING_JOB",
]
