"""
Job Routes

Inspect and control the background job scheduler. Unknown job names are
reported as 404 with the failed result in the body.
"""

from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Query

from .dependencies import get_scheduler, verify_admin
from .models import JobRestartResponse, JobTriggerResponse
from ..jobs import JobScheduler

router = APIRouter(
    prefix="/jobs",
    tags=["jobs"],
    dependencies=[Depends(verify_admin)],
)


@router.get("")
async def job_status(
    scheduler: Annotated[JobScheduler, Depends(get_scheduler)],
    detailed: bool = Query(False),
) -> Dict[str, Any]:
    return scheduler.get_job_status(detailed=detailed)


@router.post("/{job_name}/trigger", response_model=JobTriggerResponse)
async def trigger_job(
    job_name: str,
    scheduler: Annotated[JobScheduler, Depends(get_scheduler)],
) -> JobTriggerResponse:
    result = await scheduler.trigger_now(job_name)
    if result is None:
        raise HTTPException(
            status_code=404,
            detail={"job_name": job_name, "ran": False, "error": "Job not found"},
        )

    return JobTriggerResponse(
        job_name=result.job_name,
        ran=result.ran,
        error=result.error,
        started_at=result.started_at,
        finished_at=result.finished_at,
    )


@router.post("/{job_name}/restart", response_model=JobRestartResponse)
async def restart_job(
    job_name: str,
    scheduler: Annotated[JobScheduler, Depends(get_scheduler)],
) -> JobRestartResponse:
    if not scheduler.restart(job_name):
        raise HTTPException(
            status_code=404,
            detail={"job_name": job_name, "restarted": False},
        )
    return JobRestartResponse(job_name=job_name, restarted=True)
