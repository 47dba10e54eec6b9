import asyncio
import logging
from typing import Dict, List, Optional

import httpx

from app.settings import settings
from domain.ports import BlobStorage
from domain.schemas import AIRequest, AIResponse, SoftFailureResponse, parse_ai_response
from infra.pdf.parser import parse_pdf_text
from domain.prompts import ANALYSIS_SYSTEM_PROMPT

logger = logging.getLogger(__name__)

MAX_DOCUMENT_CHARS = 12000


async def _post_with_retries(
    url: str,
    headers: Dict[str, str],
    payload: Dict,
    *,
    timeout: float = 15,
    max_attempts: int = 3,
) -> Dict:
    backoff = 1.0
    for attempt in range(1, max_attempts + 1):
        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.post(url, headers=headers, json=payload)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            retriable = status >= 500 or status in {408, 429}
            if not retriable or attempt == max_attempts:
                raise
        except httpx.RequestError:
            if attempt == max_attempts:
                raise
        await asyncio.sleep(backoff)
        backoff *= 2
    raise RuntimeError("Unexpected retry exhaustion")


class OpenRouterAI:
    """AI capability speaking the OpenAI-compatible chat-completions protocol.

    ``model=None`` selects the configured default model. Requests carrying a
    ``source_path`` have the referenced PDF read from blob storage and its
    text inlined after the instructions.
    """

    def __init__(
        self,
        storage: BlobStorage,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        default_model: Optional[str] = None,
        timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
    ):
        self._storage = storage
        self.api_key = api_key if api_key is not None else settings.OPENROUTER_API_KEY
        self.base_url = (base_url or settings.OPENROUTER_BASE_URL).rstrip("/")
        self.default_model = default_model or settings.OPENROUTER_MODEL
        self.timeout = timeout or settings.LLM_TIMEOUT_SECONDS
        self.max_attempts = max_attempts or settings.LLM_MAX_ATTEMPTS

    async def _build_messages(self, request: AIRequest) -> List[Dict]:
        if not request.source_path:
            return [{"role": "user", "content": request.prompt}]
        data = await self._storage.read(request.source_path)
        if data is None:
            raise FileNotFoundError(f"Document not found: {request.source_path}")
        document_text = await asyncio.to_thread(parse_pdf_text, data)
        content = f"{request.prompt}\n\nResume:\n{document_text[:MAX_DOCUMENT_CHARS]}"
        return [
            {"role": "system", "content": ANALYSIS_SYSTEM_PROMPT},
            {"role": "user", "content": content},
        ]

    async def invoke(self, request: AIRequest, model: Optional[str] = None) -> AIResponse:
        if not self.api_key:
            raise RuntimeError("No LLM provider configured")
        chosen = model or self.default_model
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "HTTP-Referer": "http://localhost",
            "X-Title": settings.APP_NAME,
        }
        payload = {
            "model": chosen,
            "messages": await self._build_messages(request),
            "temperature": 0.2,
        }
        data = await _post_with_retries(
            f"{self.base_url}/chat/completions",
            headers,
            payload,
            timeout=self.timeout,
            max_attempts=self.max_attempts,
        )
        if data.get("error"):
            return parse_ai_response({"success": False, "error": data["error"]})
        choices = data.get("choices") or []
        if not choices:
            return SoftFailureResponse(reason=f"{chosen} returned no choices")
        logger.debug("Model %s answered", chosen)
        return parse_ai_response({"message": choices[0].get("message") or {}})
