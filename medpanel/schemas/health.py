from datetime import date, datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field


class MeasurementType(BaseModel):
    name: Optional[str] = None
    unit: Optional[str] = None


class Measurement(BaseModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    patient_id: str
    measurement_type_id: Optional[int] = None
    measurement_type: Optional[MeasurementType] = None
    value: Optional[float] = None
    method: Optional[str] = None
    measured_at: Optional[datetime] = None


class ComplaintSubcategory(BaseModel):
    name: Optional[str] = None
    priority_level: Optional[str] = None


class Complaint(BaseModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    patient_id: str
    description: Optional[str] = None
    subcategory: Optional[ComplaintSubcategory] = None
    is_active: bool = True
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    created_at: Optional[datetime] = None


class Exercise(BaseModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    name: str
    description: Optional[str] = None
    difficulty: Optional[str] = None


class ExercisePlan(BaseModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    patient_id: str
    exercise_id: str
    exercise: Optional[Exercise] = None
    frequency: str
    duration_min: int
    duration_label: str = ""
    start_date: datetime
    end_date: Optional[datetime] = None
    active: bool = False


class ExercisePlanCreate(BaseModel):
    exercise_id: str
    frequency: str = ""
    duration_min: int = Field(default=30, ge=1)
    start_date: Optional[date] = None
