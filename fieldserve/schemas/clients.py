from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from .common import PatchModel, empty_to_none


class ClientBase(BaseModel):
    name: str
    contact_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None

    @field_validator("contact_name", "phone", "email", "address", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        return empty_to_none(v)


class ClientCreate(ClientBase):
    pass


class ClientUpdate(PatchModel):
    NULLABLE = frozenset({"contact_name", "phone", "email", "address"})

    name: Optional[str] = None
    contact_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None

    @field_validator("contact_name", "phone", "email", "address", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        return empty_to_none(v)


class ClientResponse(ClientBase):
    id: int
    created_at: datetime
