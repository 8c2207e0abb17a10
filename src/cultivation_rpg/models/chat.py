from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ChatMessage(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int = 0
    sender_id: str
    sender_name: str
    text: str
    timestamp: str = ""
