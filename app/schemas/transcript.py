from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel


class TranscriptMessage(BaseModel):
    role: Literal["user", "system", "assistant"]
    content: str


class TranscriptResponse(BaseModel):
    id: int
    interview_id: int
    user_id: Optional[str] = None
    messages: List[TranscriptMessage]
    grouped_messages: List[TranscriptMessage]
    created_at: datetime
