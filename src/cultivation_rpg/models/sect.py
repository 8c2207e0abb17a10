from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, Field


class Sect(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    sect_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    founder_id: str
    description: str = "A mysterious sect."
    members: list[str] = Field(default_factory=list)
    sect_power: int = 0
