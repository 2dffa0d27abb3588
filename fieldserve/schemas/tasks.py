from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.models import TaskPriority, TaskStatus
from .clients import ClientResponse
from .common import PatchModel
from .notes import NoteResponse, PhotoResponse
from .products import ProductUsageResponse
from .service_sheets import ServiceSheetResponse
from .timesheets import TimesheetResponse
from .users import UserResponse


def _required_text(v):
    if v is None:
        return v
    v = str(v).strip()
    if not v:
        raise ValueError("must not be empty")
    return v


class TaskBase(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    title: str
    description: Optional[str] = None
    location_name: str
    location_address: str
    scheduled_date: datetime
    status: TaskStatus = TaskStatus.scheduled
    priority: TaskPriority = TaskPriority.medium
    progress: int = Field(default=0, ge=0, le=100)
    client_id: Optional[int] = None

    @field_validator("title", "location_name", "location_address", mode="before")
    @classmethod
    def strip_required(cls, v):
        return _required_text(v)


class TaskCreate(TaskBase):
    assigned_user_ids: Optional[List[int]] = None


class TaskUpdate(PatchModel):
    """Mutable task fields; id, created_at and updated_at are server-managed."""

    NULLABLE = frozenset({"description", "client_id"})
    EXTRA = frozenset({"assigned_user_ids"})

    title: Optional[str] = None
    description: Optional[str] = None
    location_name: Optional[str] = None
    location_address: Optional[str] = None
    scheduled_date: Optional[datetime] = None
    # Any listed status is accepted; transitions are not policed.
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    client_id: Optional[int] = None
    assigned_user_ids: Optional[List[int]] = None

    @field_validator("title", "location_name", "location_address", mode="before")
    @classmethod
    def strip_required(cls, v):
        return _required_text(v)


class TaskResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    location_name: str
    location_address: str
    scheduled_date: datetime
    status: str
    priority: str
    progress: int
    client_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class TaskWithAssignees(TaskResponse):
    assigned_users: List[UserResponse] = Field(default_factory=list)


class TaskDetail(TaskWithAssignees):
    service_sheet: Optional[ServiceSheetResponse] = None
    notes: List[NoteResponse] = Field(default_factory=list)
    photos: List[PhotoResponse] = Field(default_factory=list)
    product_usage: List[ProductUsageResponse] = Field(default_factory=list)
    timesheets: List[TimesheetResponse] = Field(default_factory=list)
    client: Optional[ClientResponse] = None
