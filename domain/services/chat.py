import logging
from typing import List, Optional, Sequence

from domain.ports import AuthState
from domain.schemas import AIRequest, ChatMessage
from domain.services.provider_resolver import ProviderResolver
from domain.services.response_parser import extract_text
from domain.prompts import CHAT_SYSTEM_PROMPT

logger = logging.getLogger(__name__)

EMPTY_REPLY = "Sorry, I couldn't generate a response."
ERROR_REPLY = "Sorry, I encountered an error. Please try again or rephrase your question."


def render_prompt(history: Sequence[ChatMessage], question: str) -> str:
    if not history:
        return f"{CHAT_SYSTEM_PROMPT}\n\nUser: {question}"
    transcript = "\n".join(f"{m.role}: {m.content}" for m in history)
    return f"{CHAT_SYSTEM_PROMPT}\n\nConversation history:\n{transcript}\n\nUser: {question}"


class ChatSession:
    """In-memory career-assistant conversation for one session."""

    def __init__(self, resolver: ProviderResolver, providers: Sequence[str]):
        self._resolver = resolver
        self.providers = list(providers)
        self._messages: List[ChatMessage] = []
        self._pending = False

    @property
    def messages(self) -> List[ChatMessage]:
        return list(self._messages)

    @property
    def pending(self) -> bool:
        return self._pending

    async def send(self, text: str, auth: AuthState) -> Optional[ChatMessage]:
        """Ask one question; returns the assistant reply, or None when ignored."""
        question = (text or "").strip()
        if not question or self._pending or not auth.is_authenticated:
            return None

        history = list(self._messages)
        self._messages.append(ChatMessage(role="user", content=question))
        self._pending = True
        try:
            reply = await self._answer(history, question)
        finally:
            self._pending = False
        self._messages.append(reply)
        return reply

    async def _answer(self, history: Sequence[ChatMessage], question: str) -> ChatMessage:
        request = AIRequest(prompt=render_prompt(history, question))
        try:
            resolved = await self._resolver.resolve(self.providers, request)
            content = extract_text(resolved.response).strip()
        except Exception as exc:
            logger.error("Chat error: %s", exc)
            return ChatMessage(role="assistant", content=ERROR_REPLY)
        return ChatMessage(role="assistant", content=content or EMPTY_REPLY)
