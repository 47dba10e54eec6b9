import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence

from domain.errors import AnalysisInProgress, ConversionFailure, ResumeReviewError, UploadFailure
from domain.feedback_defaults import FALLBACK_FEEDBACK, PLACEHOLDER_FEEDBACK
from domain.ports import BlobStorage, Rasterizer, StoredFile, UploadedDocument
from domain.schemas import AIRequest, EvaluationRecord, Feedback, ResumeContext
from domain.services.provider_resolver import ProviderResolver
from domain.services.response_parser import parse_feedback
from domain.services.timeout_guard import run_with_timeout
from domain.prompts import prepare_instructions
from domain.services.records import RecordsRepository, record_key

logger = logging.getLogger(__name__)


class PipelineStage(str, Enum):
    IDLE = "idle"
    UPLOADING_SOURCE = "uploading_source"
    CONVERTING_PREVIEW = "converting_preview"
    UPLOADING_PREVIEW = "uploading_preview"
    PERSISTING_INITIAL = "persisting_initial"
    ANALYZING_WITH_AI = "analyzing_with_ai"
    SANITIZING = "sanitizing"
    USING_FALLBACK_FEEDBACK = "using_fallback_feedback"
    PERSISTING_FINAL = "persisting_final"
    DONE = "done"
    FAILED = "failed"


STATUS_TEXT = {
    PipelineStage.IDLE: "Waiting to start...",
    PipelineStage.UPLOADING_SOURCE: "Uploading the file...",
    PipelineStage.CONVERTING_PREVIEW: "Converting to image...",
    PipelineStage.UPLOADING_PREVIEW: "Uploading the image...",
    PipelineStage.PERSISTING_INITIAL: "Preparing data...",
    PipelineStage.ANALYZING_WITH_AI: "Analyzing with AI...",
    PipelineStage.SANITIZING: "Reading the AI feedback...",
    PipelineStage.USING_FALLBACK_FEEDBACK: "AI service unavailable - using demo feedback...",
    PipelineStage.PERSISTING_FINAL: "Saving the results...",
    PipelineStage.DONE: "Analysis complete!",
}
DEMO_DONE_TEXT = "Demo analysis complete!"

TERMINAL_STAGES = (PipelineStage.DONE, PipelineStage.FAILED)


@dataclass
class AnalysisRun:
    record_id: str
    context: ResumeContext
    stage: PipelineStage = PipelineStage.IDLE
    status: str = STATUS_TEXT[PipelineStage.IDLE]
    history: List[str] = field(default_factory=list)
    record: Optional[EvaluationRecord] = None
    provider: Optional[str] = None
    used_fallback: bool = False
    error: Optional[str] = None

    @property
    def key(self) -> str:
        return record_key(self.record_id)

    @property
    def finished(self) -> bool:
        return self.stage in TERMINAL_STAGES


StatusListener = Callable[[AnalysisRun], None]


class AnalysisPipeline:
    """Upload, preview, checkpoint, analyze and persist one resume.

    Stages run strictly in sequence. Upload, conversion and the initial save
    are fatal on failure; anything that goes wrong while asking the providers
    or decoding their answer degrades to ``FALLBACK_FEEDBACK`` instead, so a
    run that got past its first checkpoint always ends in ``DONE`` unless the
    final save itself fails.

    One run is in flight per pipeline; ``prepare`` claims the pipeline and
    ``execute`` releases it when the run settles.
    """

    def __init__(
        self,
        storage: BlobStorage,
        rasterizer: Rasterizer,
        records: RecordsRepository,
        resolver: ProviderResolver,
        providers: Sequence[str],
        *,
        upload_timeout: float = 30.0,
        fallback_notice_seconds: float = 0.0,
        fallback_feedback: Feedback = FALLBACK_FEEDBACK,
        on_status: Optional[StatusListener] = None,
    ):
        self._storage = storage
        self._rasterizer = rasterizer
        self._records = records
        self._resolver = resolver
        self.providers = list(providers)
        self.upload_timeout = upload_timeout
        self.fallback_notice_seconds = fallback_notice_seconds
        self.fallback_feedback = fallback_feedback
        self._on_status = on_status
        self._active: Optional[AnalysisRun] = None

    @property
    def busy(self) -> bool:
        return self._active is not None

    def prepare(self, context: ResumeContext) -> AnalysisRun:
        if self._active is not None:
            raise AnalysisInProgress("An analysis is already running")
        run = AnalysisRun(record_id=uuid.uuid4().hex, context=context)
        self._active = run
        return run

    async def analyze(self, document: UploadedDocument, context: ResumeContext) -> AnalysisRun:
        return await self.execute(self.prepare(context), document)

    async def execute(self, run: AnalysisRun, document: UploadedDocument) -> AnalysisRun:
        if self._active is not run:
            raise AnalysisInProgress("Run was not prepared by this pipeline or another run is active")
        logger.info("=== Starting analysis %s (%s) ===", run.record_id, document.name)
        try:
            await self._run_stages(run, document)
        except ResumeReviewError as exc:
            logger.error("Analysis %s failed at %s: %s", run.record_id, run.stage.value, exc)
            self._fail(run, exc)
        except Exception as exc:
            logger.exception("Analysis %s crashed at %s", run.record_id, run.stage.value)
            self._fail(run, exc)
        finally:
            self._active = None
        return run

    async def _run_stages(self, run: AnalysisRun, document: UploadedDocument) -> None:
        self._transition(run, PipelineStage.UPLOADING_SOURCE)
        source = await run_with_timeout(self._upload(document), self.upload_timeout, "Upload")

        self._transition(run, PipelineStage.CONVERTING_PREVIEW)
        preview_doc = await self._convert(document)

        self._transition(run, PipelineStage.UPLOADING_PREVIEW)
        preview = await run_with_timeout(self._upload(preview_doc), self.upload_timeout, "Image upload")

        self._transition(run, PipelineStage.PERSISTING_INITIAL)
        record = EvaluationRecord(
            id=run.record_id,
            source_path=source.path,
            preview_path=preview.path,
            context=run.context,
            evaluation=PLACEHOLDER_FEEDBACK,
        )
        await self._records.save(run.key, record)
        run.record = record

        feedback = await self._analyze(run, record)

        self._transition(run, PipelineStage.PERSISTING_FINAL)
        record = record.with_evaluation(feedback)
        await self._records.save(run.key, record)
        run.record = record

        self._transition(run, PipelineStage.DONE, DEMO_DONE_TEXT if run.used_fallback else None)
        logger.info("=== Analysis %s completed (provider=%s, fallback=%s) ===",
                    run.record_id, run.provider, run.used_fallback)

    async def _upload(self, document: UploadedDocument) -> StoredFile:
        try:
            stored = await self._storage.upload([document])
        except UploadFailure:
            raise
        except Exception as exc:
            raise UploadFailure(f"Failed to upload {document.name}: {exc}") from exc
        if not stored or not stored.path:
            raise UploadFailure(f"Upload of {document.name} returned no file")
        return stored

    async def _convert(self, document: UploadedDocument) -> UploadedDocument:
        try:
            result = await self._rasterizer.convert(document)
        except Exception as exc:
            raise ConversionFailure(str(exc)) from exc
        if result.error or result.image is None:
            raise ConversionFailure(result.error or "Unknown error")
        return result.image

    async def _analyze(self, run: AnalysisRun, record: EvaluationRecord) -> Feedback:
        self._transition(run, PipelineStage.ANALYZING_WITH_AI)
        request = AIRequest(
            source_path=record.source_path,
            prompt=prepare_instructions(
                role=run.context.role,
                role_description=run.context.role_description,
                org=run.context.org,
            ),
        )
        try:
            resolved = await self._resolver.resolve(self.providers, request)
            run.provider = resolved.provider
            self._transition(run, PipelineStage.SANITIZING)
            return parse_feedback(resolved.response)
        except Exception as exc:
            logger.warning("AI analysis for %s unavailable, using fallback feedback: %s", run.record_id, exc)

        run.provider = None
        run.used_fallback = True
        self._transition(run, PipelineStage.USING_FALLBACK_FEEDBACK)
        if self.fallback_notice_seconds > 0:
            await asyncio.sleep(self.fallback_notice_seconds)
        return self.fallback_feedback

    def _transition(self, run: AnalysisRun, stage: PipelineStage, status: Optional[str] = None) -> None:
        run.stage = stage
        run.status = status or STATUS_TEXT[stage]
        run.history.append(run.status)
        logger.info("[%s] %s", run.record_id, run.status)
        if self._on_status is not None:
            self._on_status(run)

    def _fail(self, run: AnalysisRun, exc: Exception) -> None:
        run.error = str(exc) or exc.__class__.__name__
        self._transition(run, PipelineStage.FAILED, f"Error: {run.error}")
