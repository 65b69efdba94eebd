from datetime import datetime
from typing import Optional, TypedDict


class MeasurementTypeDocument(TypedDict, total=False):
    _id: int
    name: str
    unit: str


class HealthMeasurementDocument(TypedDict, total=False):
    _id: str
    patient_id: str
    measurement_type_id: int
    value: float
    method: Optional[str]
    measured_at: datetime
    is_deleted: bool


class ComplaintSubcategory(TypedDict, total=False):
    name: str
    priority_level: str


class ComplaintDocument(TypedDict, total=False):
    _id: str
    patient_id: str
    description: str
    subcategory: Optional[ComplaintSubcategory]
    is_active: bool
    start_date: Optional[datetime]
    end_date: Optional[datetime]
    is_deleted: bool
    created_at: datetime
