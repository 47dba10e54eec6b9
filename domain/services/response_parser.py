import json
import re
from pydantic import ValidationError

from domain.errors import MalformedResponse
from domain.schemas import AIResponse, Feedback, SuccessResponse

_FENCE_OPEN = re.compile(r"^```[\w+-]*[ \t]*\r?\n?")
_FENCE_CLOSE = re.compile(r"\r?\n?```$")


def extract_text(response: AIResponse) -> str:
    if not isinstance(response, SuccessResponse):
        raise MalformedResponse("Response was flagged as unsuccessful")
    content = response.content
    if isinstance(content, str):
        return content
    for block in content:
        if block.type == "text" and block.text is not None:
            return block.text
    raise MalformedResponse("Response contained no text block")


def strip_code_fences(text: str) -> str:
    # ```json ... ``` or bare ``` ... ```, with arbitrary surrounding whitespace
    cleaned = text.strip()
    cleaned = _FENCE_OPEN.sub("", cleaned, count=1)
    cleaned = _FENCE_CLOSE.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_feedback_text(text: str) -> Feedback:
    cleaned = strip_code_fences(text)
    if not cleaned:
        raise MalformedResponse("AI response was empty")
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise MalformedResponse("AI response was not valid JSON") from exc
    if not isinstance(payload, dict):
        raise MalformedResponse("AI response JSON was not an object")
    try:
        return Feedback.model_validate(payload)
    except ValidationError as exc:
        raise MalformedResponse(f"AI response failed validation: {exc}") from exc


def parse_feedback(response: AIResponse) -> Feedback:
    return parse_feedback_text(extract_text(response))
