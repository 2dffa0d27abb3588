from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..models.models import NoteType


class NoteCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    task_id: int
    user_id: int
    content: str = ""
    note_type: NoteType = NoteType.text
    voice_recording_url: Optional[str] = None
    duration: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_body(self):
        if self.note_type == NoteType.voice.value:
            if not self.voice_recording_url:
                raise ValueError("voice notes require voice_recording_url")
        elif not self.content.strip():
            raise ValueError("text notes require content")
        return self


class NoteResponse(BaseModel):
    id: int
    task_id: int
    user_id: int
    content: str
    note_type: str
    voice_recording_url: Optional[str] = None
    duration: Optional[int] = None
    created_at: datetime


class PhotoResponse(BaseModel):
    id: int
    task_id: int
    user_id: int
    filename: str
    description: Optional[str] = None
    uploaded_at: datetime
    url: str
