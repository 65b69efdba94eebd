from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field


class MessageOut(BaseModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    content: str
    sender_id: str
    receiver_id: str
    type: int = 1
    created_at: datetime
    is_read: bool = False


class MessageCreate(BaseModel):
    content: str


class DeviceRegistration(BaseModel):
    token: str = Field(min_length=1)
    platform: str = "fcm"
