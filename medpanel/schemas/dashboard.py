from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel


class DashboardStats(BaseModel):
    total_patients: int = 0
    unread_messages: int = 0
    pending_complaints: int = 0


class UnreadMessage(BaseModel):
    id: str
    content: str
    sender_name: str
    sender_surname: str
    created_at: Optional[datetime] = None


class RecentActivity(BaseModel):
    id: str
    type: Literal["message", "complaint", "measurement"]
    patient_name: str
    description: str
    timestamp: Optional[datetime] = None
    status: str


class PaneWidths(BaseModel):
    left: float
    right: float
    middle: Optional[float] = None
