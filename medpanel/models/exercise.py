from datetime import datetime
from typing import Optional, TypedDict


class ExerciseDocument(TypedDict, total=False):
    _id: str
    name: str
    description: Optional[str]
    # easy | medium | hard
    difficulty: Optional[str]


class ExercisePlanDocument(TypedDict, total=False):
    _id: str
    patient_id: str
    exercise_id: str
    frequency: str
    duration_min: int
    start_date: datetime
    end_date: Optional[datetime]
    is_deleted: bool
    created_at: datetime
