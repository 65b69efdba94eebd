from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel


class PatientCreate(BaseModel):
    # checked by PatientService so the caller gets the first failing rule as text
    email: str = ""
    password: str = ""
    name: str = ""
    surname: str = ""
    birth_date: Optional[date] = None
    gender: str = ""
    patient_note: Optional[str] = None


class PatientSummary(BaseModel):
    id: str
    user_id: Optional[str] = None
    name: str
    surname: str
    age: int
    gender: Optional[str] = None
    diagnosis: Optional[str] = None
    email: Optional[str] = None
    last_visit: Optional[datetime] = None
    status: Literal["active", "inactive"] = "active"

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.surname}".strip()
