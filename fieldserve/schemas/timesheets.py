from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .common import PatchModel


class TimesheetCreate(BaseModel):
    task_id: int
    user_id: int
    start_time: datetime
    end_time: Optional[datetime] = None
    # Derived from start/end when omitted
    duration_minutes: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = None


class TimesheetUpdate(PatchModel):
    NULLABLE = frozenset({"end_time", "notes"})

    task_id: Optional[int] = None
    user_id: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration_minutes: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = None


class TimesheetResponse(BaseModel):
    id: int
    task_id: int
    user_id: int
    start_time: datetime
    end_time: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    notes: Optional[str] = None
    created_at: datetime
