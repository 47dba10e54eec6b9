from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Literal, Optional, Union

CATEGORY_NAMES = ("ATS", "toneAndStyle", "content", "structure", "skills")

_TIP_KINDS = {"good": "good", "positive": "good", "improve": "improve", "improvement": "improve"}


class Tip(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: Literal["good", "improve"] = Field(..., alias="type")
    summary: str = Field(..., alias="tip")
    detail: Optional[str] = Field(default=None, alias="explanation")

    @field_validator("kind", mode="before")
    @classmethod
    def _normalize_kind(cls, value):
        if isinstance(value, str) and value.strip().lower() in _TIP_KINDS:
            return _TIP_KINDS[value.strip().lower()]
        raise ValueError("tip type must be one of: good, improve")


class Category(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: int = Field(..., ge=0, le=100)
    tips: List[Tip]


class Feedback(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    overall_score: int = Field(..., ge=0, le=100, alias="overallScore")
    ats: Category = Field(..., alias="ATS")
    tone_and_style: Category = Field(..., alias="toneAndStyle")
    content: Category
    structure: Category
    skills: Category

    def categories(self) -> Dict[str, Category]:
        return {name: getattr(self, field) for name, field in zip(
            CATEGORY_NAMES, ("ats", "tone_and_style", "content", "structure", "skills"))}


class ResumeContext(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    org: str = ""
    role: str = ""
    role_description: str = Field(default="", alias="roleDescription")


class EvaluationRecord(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    source_path: str = Field(..., alias="sourcePath")
    preview_path: str = Field(..., alias="previewPath")
    context: ResumeContext
    evaluation: Feedback

    def with_evaluation(self, evaluation: Feedback) -> "EvaluationRecord":
        return self.model_copy(update={"evaluation": evaluation})

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


# AI capability payloads

class ContentBlock(BaseModel):
    type: str = "text"
    text: Optional[str] = None


class SuccessResponse(BaseModel):
    success: Literal[True] = True
    content: Union[str, List[ContentBlock]]


class SoftFailureResponse(BaseModel):
    success: Literal[False] = False
    reason: str = "Provider reported an unsuccessful response"


AIResponse = Union[SuccessResponse, SoftFailureResponse]


def parse_ai_response(payload: Dict[str, Any]) -> AIResponse:
    """Decide the response variant from its ``success`` discriminant.

    Anything not explicitly flagged ``success: false`` is a success carrying
    the message content.
    """
    if payload.get("success") is False:
        reason = payload.get("error") or payload.get("reason") or "Provider reported an unsuccessful response"
        if isinstance(reason, dict):
            reason = reason.get("message") or str(reason)
        return SoftFailureResponse(reason=str(reason))
    message = payload.get("message") or {}
    content = message.get("content") if isinstance(message, dict) else None
    return SuccessResponse(content=content if content is not None else "")


class AIRequest(BaseModel):
    prompt: str
    source_path: Optional[str] = None


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str


# HTTP payloads

class AnalyzeResponse(BaseModel):
    record_id: str
    stage: str
    status: str


class RunStatusResponse(BaseModel):
    record_id: str
    stage: str
    status: str
    history: List[str] = []
    used_fallback: bool = False
    error: Optional[str] = None


class ChatSessionResponse(BaseModel):
    session_id: str
    messages: List[ChatMessage] = []


class ChatMessageRequest(BaseModel):
    content: str
