from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, UploadFile
from domain.errors import AnalysisInProgress
from domain.ports import AuthState, UploadedDocument
from domain.schemas import AnalyzeResponse, ResumeContext, RunStatusResponse
from domain.services.analysis_pipeline import AnalysisRun
from app.settings import settings
from api.deps import Services, get_auth, get_services, get_session_id

router = APIRouter()

PDF_CONTENT_TYPES = ("application/pdf", "application/x-pdf")


def _is_pdf(upload: UploadFile) -> bool:
    if (upload.content_type or "").lower() in PDF_CONTENT_TYPES:
        return True
    return (upload.filename or "").lower().endswith(".pdf")


def _status(run: AnalysisRun) -> RunStatusResponse:
    return RunStatusResponse(
        record_id=run.record_id,
        stage=run.stage.value,
        status=run.status,
        history=list(run.history),
        used_fallback=run.used_fallback,
        error=run.error,
    )


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze(
    background_tasks: BackgroundTasks,
    resume: Optional[UploadFile] = File(default=None),
    company_name: str = Form(default=""),
    job_title: str = Form(default=""),
    job_description: str = Form(default=""),
    auth: AuthState = Depends(get_auth),
    session_id: str = Depends(get_session_id),
    services: Services = Depends(get_services),
) -> AnalyzeResponse:
    if not auth.is_authenticated:
        raise HTTPException(status_code=401, detail="Sign in to analyze a resume")
    if resume is None:
        raise HTTPException(status_code=400, detail="Please select a file first")
    if not _is_pdf(resume):
        raise HTTPException(status_code=400, detail="Only PDF files are accepted")
    content = await resume.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="File is too large")
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    pipeline = services.pipeline_for(session_id)
    try:
        run = pipeline.prepare(ResumeContext(
            org=company_name, role=job_title, role_description=job_description))
    except AnalysisInProgress as exc:
        raise HTTPException(status_code=409, detail=str(exc))

    services.track_run(run)
    document = UploadedDocument(
        name=resume.filename or "resume.pdf",
        content=content,
        content_type=resume.content_type or "application/pdf",
    )
    background_tasks.add_task(pipeline.execute, run, document)
    return AnalyzeResponse(record_id=run.record_id, stage=run.stage.value, status=run.status)


@router.get("/analyze/{record_id}", response_model=RunStatusResponse)
async def analysis_status(record_id: str, services: Services = Depends(get_services)) -> RunStatusResponse:
    run = services.runs.get(record_id)
    if not run:
        raise HTTPException(status_code=404, detail="analysis not found")
    return _status(run)
