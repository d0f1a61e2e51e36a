"""
Assistant Routes - AI legal consultant

Endpoints:
- POST /api/assistant/chat - Ask a question (optionally with Maps grounding)
- GET /api/assistant/messages - Conversation so far
- DELETE /api/assistant/messages - Start a new conversation
"""

from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from trafficguard.models import ChatMessage
from trafficguard.state import AppState

from .common import message_response, require_state

router = APIRouter(tags=["assistant"])


class ChatRequest(BaseModel):
    query: str = Field(..., description="Question for the legal assistant")
    useMaps: bool = False
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)

    class Config:
        json_schema_extra = {
            "example": {
                "query": "Nearest RTO office",
                "useMaps": True,
                "lat": 18.5204,
                "lng": 73.8567
            }
        }


class ChatMessageResponse(BaseModel):
    id: str
    role: str
    text: str
    grounding: Optional[List[Any]] = None
    timestamp: str


def _message_response(message: ChatMessage) -> ChatMessageResponse:
    return ChatMessageResponse(
        id=message.id,
        role=message.role,
        text=message.text,
        grounding=message.grounding,
        timestamp=message.timestamp.isoformat(),
    )


@router.post("/api/assistant/chat", response_model=ChatMessageResponse)
async def chat(request: ChatRequest, state: AppState = Depends(require_state)):
    """
    Ask the legal assistant

    With ``useMaps`` and a location the answer is grounded in nearby
    places (police stations, RTO offices, etc.).
    """
    try:
        reply = await state.assistant.ask(request.query, use_maps=request.useMaps,
                                          lat=request.lat, lng=request.lng)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _message_response(reply)


@router.get("/api/assistant/messages", response_model=List[ChatMessageResponse])
async def get_messages(state: AppState = Depends(require_state)):
    return [_message_response(m) for m in state.assistant.messages]


@router.delete("/api/assistant/messages")
async def reset_conversation(state: AppState = Depends(require_state)):
    state.assistant.reset()
    return message_response("Conversation reset")
