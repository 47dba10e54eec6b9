from fastapi import APIRouter, Depends, HTTPException
from domain.ports import AuthState
from domain.schemas import ChatMessageRequest, ChatSessionResponse
from domain.services.chat import ChatSession
from api.deps import Services, get_auth, get_services

router = APIRouter()


def _session(services: Services, session_id: str) -> ChatSession:
    session = services.chat(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="chat session not found")
    return session


@router.post("/chat/sessions", response_model=ChatSessionResponse)
async def create_session(services: Services = Depends(get_services)) -> ChatSessionResponse:
    return ChatSessionResponse(session_id=services.open_chat())


@router.get("/chat/sessions/{session_id}", response_model=ChatSessionResponse)
async def get_session(session_id: str, services: Services = Depends(get_services)) -> ChatSessionResponse:
    return ChatSessionResponse(session_id=session_id, messages=_session(services, session_id).messages)


@router.post("/chat/sessions/{session_id}/messages", response_model=ChatSessionResponse)
async def send_message(
    session_id: str,
    body: ChatMessageRequest,
    auth: AuthState = Depends(get_auth),
    services: Services = Depends(get_services),
) -> ChatSessionResponse:
    session = _session(services, session_id)
    await session.send(body.content, auth)
    return ChatSessionResponse(session_id=session_id, messages=session.messages)
