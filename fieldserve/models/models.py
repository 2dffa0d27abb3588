import enum
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class TaskStatus(str, enum.Enum):
    scheduled = "scheduled"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"


class TaskPriority(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"


class NoteType(str, enum.Enum):
    text = "text"
    voice = "voice"


class Record(BaseModel):
    """Base for every stored row. Records are replaced, never mutated in place."""

    id: int


class User(Record):
    username: str
    password: str
    name: str
    avatar: Optional[str] = None
    role: str = "technician"


class Client(Record):
    name: str
    contact_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    created_at: datetime


class Task(Record):
    title: str
    description: Optional[str] = None
    location_name: str
    location_address: str
    scheduled_date: datetime
    status: str = TaskStatus.scheduled.value
    priority: str = TaskPriority.medium.value
    progress: int = 0
    client_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class TaskAssignment(Record):
    task_id: int
    user_id: int
    assigned_at: datetime


class ChecklistItem(BaseModel):
    id: int
    name: str
    completed: bool = False


class ServiceSheet(Record):
    task_id: int
    service_type: str  # maintenance|repair|installation|inspection
    equipment_type: str
    checklist: List[ChecklistItem] = Field(default_factory=list)
    technician_signature: Optional[str] = None
    customer_signature: Optional[str] = None
    customer_name: Optional[str] = None
    completion_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class Note(Record):
    task_id: int
    user_id: int
    content: str = ""
    note_type: str = NoteType.text.value
    voice_recording_url: Optional[str] = None
    duration: Optional[int] = None  # seconds, voice notes only
    created_at: datetime


class Photo(Record):
    task_id: int
    user_id: int
    filename: str
    description: Optional[str] = None
    uploaded_at: datetime


class Product(Record):
    name: str
    sku: str
    description: Optional[str] = None
    unit_price: float
    stock_quantity: int = 0
    low_stock_threshold: int = 5
    category: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @property
    def is_low_stock(self) -> bool:
        return self.stock_quantity <= self.low_stock_threshold


class ProductUsage(Record):
    task_id: int
    product_id: int
    quantity: int
    used_at: datetime


class Timesheet(Record):
    task_id: int
    user_id: int
    start_time: datetime
    end_time: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    notes: Optional[str] = None
    created_at: datetime
