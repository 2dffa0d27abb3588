from typing import Optional

from pydantic import BaseModel, field_validator


class UserCreate(BaseModel):
    username: str
    password: str
    name: str
    avatar: Optional[str] = None
    role: str = "technician"

    @field_validator("username", "name", mode="before")
    @classmethod
    def strip_required(cls, v):
        if v is None:
            return v
        v = str(v).strip()
        if not v:
            raise ValueError("must not be empty")
        return v


class UserResponse(BaseModel):
    id: int
    username: str
    name: str
    avatar: Optional[str] = None
    role: str
