"""Generation job routes: start, poll, fetch and export."""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from coinforge.dependencies import get_launcher, get_tracker
from coinforge.errors.exceptions import JobNotReadyError, UnknownJobError
from coinforge.logging_config import bind_wallet_context
from coinforge.models.enums import JobStatus
from coinforge.models.job import (
    ProgressResponse,
    ResultResponse,
    StartGenerationRequest,
    StartGenerationResponse,
)
from coinforge.services.export import parse_export_format, render_export

router = APIRouter(tags=["Generation"])


def job_id_param(
    job_id: str | None = Query(None, alias="jobId"),
    request_id: str | None = Query(None, alias="requestId"),
) -> str:
    value = job_id or request_id
    if not value:
        raise UnknownJobError("")
    return value


def _finished_artifact(tracker, job_id: str) -> str:
    job = tracker.get(job_id)
    if job.status != JobStatus.DONE or job.artifact is None:
        raise JobNotReadyError(job_id, job.status)
    return job.artifact


@router.post("/start-generation", response_model=StartGenerationResponse, status_code=200)
async def start_generation(body: StartGenerationRequest, launcher=Depends(get_launcher)):
    bind_wallet_context(body.wallet_address)
    job_id = await launcher.start(body.wallet_address, body.user_inputs)
    return StartGenerationResponse(job_id=job_id)


@router.get("/progress", response_model=ProgressResponse)
async def get_progress(job_id: str = Depends(job_id_param), tracker=Depends(get_tracker)):
    job = tracker.get(job_id)
    return ProgressResponse(status=job.status, percent=job.percent)


@router.get("/result", response_model=ResultResponse)
async def get_result(job_id: str = Depends(job_id_param), tracker=Depends(get_tracker)):
    return ResultResponse(artifact=_finished_artifact(tracker, job_id))


@router.get("/export")
async def export_result(
    job_id: str = Depends(job_id_param),
    export_format: str | None = Query(None, alias="format"),
    export_type: str | None = Query(None, alias="type"),
    tracker=Depends(get_tracker),
):
    fmt = parse_export_format(export_format or export_type)
    artifact = _finished_artifact(tracker, job_id)
    export = render_export(job_id, artifact, fmt)
    return Response(
        content=export.content,
        media_type=export.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )
