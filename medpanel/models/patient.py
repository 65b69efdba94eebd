from datetime import datetime
from typing import Literal, Optional, TypedDict


Gender = Literal["male", "female", "other"]


class PatientDocument(TypedDict, total=False):
    _id: str
    user_id: str
    name: str
    surname: str
    birth_date: Optional[datetime]
    gender: Gender
    patient_note: Optional[str]
    is_deleted: bool
    created_at: datetime
