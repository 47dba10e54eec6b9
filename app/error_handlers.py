from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import logging
from domain.errors import AnalysisInProgress, PersistenceFailure, ResumeReviewError

logger = logging.getLogger(__name__)

def _status_for(exc: ResumeReviewError) -> int:
    if isinstance(exc, AnalysisInProgress):
        return 409
    if isinstance(exc, PersistenceFailure):
        return 503
    return 502

def attach_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ResumeReviewError)
    async def _review_error(request: Request, exc: ResumeReviewError):
        logger.error("%s on %s: %s", exc.__class__.__name__, request.url.path, exc)
        return JSONResponse(status_code=_status_for(exc),
                            content={"detail": str(exc), "error": exc.__class__.__name__})

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        logger.exception("Unhandled: %s", exc)
        return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})
