from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class AppendTurnRequest(BaseModel):
    prompt: str
    response: Optional[str] = None
    session_id: Optional[str] = None
    origin: Optional[str] = None  # Falls back to the Origin header


class ConversationRecord(BaseModel):
    id: int
    user_id: str
    session_id: str
    prompt: str
    response: Optional[str] = None
    timestamp: datetime

    class Config:
        from_attributes = True


class SessionSummary(BaseModel):
    session_id: str
    user_id: str
    last_message_at: datetime
