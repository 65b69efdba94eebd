from datetime import datetime
from typing import Optional, TypedDict


class DoctorDocument(TypedDict, total=False):
    _id: str
    user_id: str
    name: Optional[str]
    surname: Optional[str]
    specialization_id: Optional[int]
    patient_count: int
    is_deleted: bool
    created_at: datetime
    updated_at: Optional[datetime]


class SpecializationDocument(TypedDict, total=False):
    _id: int
    name: str


class DoctorPatientDocument(TypedDict, total=False):
    _id: str
    doctor_id: str
    patient_id: str
    is_deleted: bool
    created_at: datetime
