from datetime import datetime
from typing import TypedDict


TEXT_MESSAGE = 1


class MessageDocument(TypedDict, total=False):
    _id: str
    content: str
    sender_id: str
    receiver_id: str
    # message type id, TEXT_MESSAGE for plain chat
    type: int
    created_at: datetime
    # the only field that changes after insert
    is_read: bool
    is_deleted: bool
