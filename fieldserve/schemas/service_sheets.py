from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..models.models import ChecklistItem
from .common import PatchModel


def _normalize_checklist(v):
    # Rows may arrive as {id, label, checked}
    if not isinstance(v, list):
        return v
    items = []
    for row in v:
        if isinstance(row, dict):
            row = dict(row)
            if "name" not in row and "label" in row:
                row["name"] = row.pop("label")
            if "completed" not in row and "checked" in row:
                row["completed"] = row.pop("checked")
        items.append(row)
    return items


class ServiceSheetBase(BaseModel):
    task_id: int
    service_type: str
    equipment_type: str
    checklist: List[ChecklistItem] = Field(default_factory=list)
    # Signatures are image data URLs captured on the device
    technician_signature: Optional[str] = None
    customer_signature: Optional[str] = None
    customer_name: Optional[str] = None
    completion_date: Optional[datetime] = None

    @field_validator("checklist", mode="before")
    @classmethod
    def normalize_checklist(cls, v):
        return _normalize_checklist(v)


class ServiceSheetCreate(ServiceSheetBase):
    pass


class ServiceSheetUpdate(PatchModel):
    """The checklist, when sent, replaces the stored one wholesale."""

    NULLABLE = frozenset({"technician_signature", "customer_signature", "customer_name", "completion_date"})

    service_type: Optional[str] = None
    equipment_type: Optional[str] = None
    checklist: Optional[List[ChecklistItem]] = None
    technician_signature: Optional[str] = None
    customer_signature: Optional[str] = None
    customer_name: Optional[str] = None
    completion_date: Optional[datetime] = None

    @field_validator("checklist", mode="before")
    @classmethod
    def normalize_checklist(cls, v):
        return _normalize_checklist(v)


class ServiceSheetResponse(ServiceSheetBase):
    id: int
    created_at: datetime
    updated_at: datetime
