"""
Legal assistant chat models
"""

from datetime import datetime, timezone
from pydantic import BaseModel, Field
from typing import Any, List, Literal, Optional
from uuid import uuid4


class ChatMessage(BaseModel):
    """One turn in the assistant conversation"""
    id: str = Field(default_factory=lambda: uuid4().hex[:12])
    role: Literal['user', 'model']
    text: str
    grounding: Optional[List[Any]] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class GroundedAnswer(BaseModel):
    """Answer text plus map grounding chunks, when the maps tool was used"""
    text: str
    grounding_chunks: Optional[List[Any]] = None
