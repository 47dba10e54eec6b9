from typing import Optional


class ResumeReviewError(Exception):
    """Base class for every failure the review core reports."""


class UploadFailure(ResumeReviewError):
    pass


class ConversionFailure(ResumeReviewError):
    def __init__(self, reason: str):
        super().__init__(f"Failed to convert PDF to image: {reason}")
        self.reason = reason


class TimedOut(ResumeReviewError):
    def __init__(self, label: str, seconds: float):
        super().__init__(f"{label} timed out after {seconds:g} seconds")
        self.label = label
        self.seconds = seconds


class PersistenceFailure(ResumeReviewError):
    pass


class ProviderFailure(ResumeReviewError):
    def __init__(self, provider: str, detail: str):
        super().__init__(f"{provider}: {detail}")
        self.provider = provider
        self.detail = detail


class ProviderHardFailure(ProviderFailure):
    """The provider call raised."""


class ProviderSoftFailure(ProviderFailure):
    """The provider answered with a response flagged as unsuccessful."""


class AggregateProviderFailure(ResumeReviewError):
    def __init__(self, attempted: list, last_failure: Optional[ProviderFailure]):
        if last_failure is None:
            message = "No AI providers configured"
        else:
            message = f"All AI providers failed; last error: {last_failure}"
        super().__init__(message)
        self.attempted = list(attempted)
        self.last_failure = last_failure


class MalformedResponse(ResumeReviewError):
    pass


class AnalysisInProgress(ResumeReviewError):
    pass
