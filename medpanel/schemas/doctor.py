from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field


class DoctorProfile(BaseModel):
    id: str
    name: Optional[str] = None
    surname: Optional[str] = None
    email: str
    specialization_name: Optional[str] = None
    patient_count: Optional[int] = None
    created_at: Optional[datetime] = None


class DoctorProfileUpdate(BaseModel):
    name: Optional[str] = None
    surname: Optional[str] = None
    specialization_id: Optional[int] = None


class Specialization(BaseModel):
    id: int = Field(validation_alias=AliasChoices("_id", "id"))
    name: str
