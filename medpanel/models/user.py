from datetime import datetime
from typing import Literal, TypedDict


UserRole = Literal["doctor", "patient"]


class UserDocument(TypedDict, total=False):

    _id: str
    email: str
    hashed_password: str
    role: UserRole
    created_at: datetime
