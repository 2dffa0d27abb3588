from typing import List

from fastapi import APIRouter, Depends, Response

from ..db import get_store
from ..errors import NotFoundError
from ..schemas.notes import NoteCreate, NoteResponse
from ..store.memory import MemoryStore


router = APIRouter(prefix="/api", tags=["notes"])


@router.get("/tasks/{task_id}/notes", response_model=List[NoteResponse])
def list_task_notes(task_id: int, store: MemoryStore = Depends(get_store)):
    return store.get_task_notes(task_id)


@router.post("/notes", response_model=NoteResponse, status_code=201)
def create_note(payload: NoteCreate, store: MemoryStore = Depends(get_store)):
    if not store.get_task(payload.task_id):
        raise NotFoundError("Task not found")
    if not store.get_user(payload.user_id):
        raise NotFoundError("User not found")
    return store.create_note(payload.model_dump())


@router.delete("/notes/{note_id}", status_code=204)
def delete_note(note_id: int, store: MemoryStore = Depends(get_store)):
    if not store.delete_note(note_id):
        raise NotFoundError("Note not found")
    return Response(status_code=204)
