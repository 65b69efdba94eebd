from datetime import datetime
from typing import List, Literal

from pydantic import BaseModel, Field


class AssistantMessage(BaseModel):
    id: str
    content: str
    role: Literal["user", "assistant"]
    timestamp: datetime


class AssistantPrompt(BaseModel):
    content: str = Field(min_length=1)


class AssistantState(BaseModel):
    messages: List[AssistantMessage]
    is_loading: bool = False
    is_generating_report: bool = False
