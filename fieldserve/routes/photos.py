from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile
import structlog

from ..config import Settings
from ..db import get_settings, get_storage, get_store
from ..errors import NotFoundError, ValidationError
from ..schemas.notes import PhotoResponse
from ..services.task_service import photo_to_dict
from ..storage.local_provider import unique_filename
from ..storage.provider import StorageProvider
from ..store.memory import MemoryStore


router = APIRouter(prefix="/api", tags=["photos"])
logger = structlog.get_logger(__name__)


@router.post("/photos/upload", response_model=PhotoResponse, status_code=201)
async def upload_photo(
    photo: Optional[UploadFile] = File(None),
    task_id: int = Form(...),
    user_id: int = Form(...),
    description: str = Form(""),
    store: MemoryStore = Depends(get_store),
    storage: StorageProvider = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    if photo is None:
        raise ValidationError("No file uploaded", detail={"field": "photo"})
    content_type = (photo.content_type or "").lower()
    if not content_type.startswith("image/"):
        raise ValidationError("Only images are allowed", detail={"field": "photo", "content_type": content_type})
    content = await photo.read()
    if len(content) > settings.max_upload_bytes:
        raise ValidationError(
            "File too large",
            detail={"field": "photo", "size_bytes": len(content), "max_bytes": settings.max_upload_bytes},
        )
    if not store.get_task(task_id):
        raise NotFoundError("Task not found")
    if not store.get_user(user_id):
        raise NotFoundError("User not found")

    filename = unique_filename(photo.filename or "photo")
    storage.copy_in(content, filename)
    row = store.create_photo({
        "task_id": task_id,
        "user_id": user_id,
        "filename": filename,
        "description": description or "",
    })
    logger.info("photo_uploaded", photo_id=row.id, task_id=task_id, size_bytes=len(content))
    return photo_to_dict(row, storage)


@router.get("/tasks/{task_id}/photos", response_model=List[PhotoResponse])
def list_task_photos(
    task_id: int,
    store: MemoryStore = Depends(get_store),
    storage: StorageProvider = Depends(get_storage),
):
    return [photo_to_dict(p, storage) for p in store.get_task_photos(task_id)]


@router.delete("/photos/{photo_id}", status_code=204)
def delete_photo(
    photo_id: int,
    store: MemoryStore = Depends(get_store),
    storage: StorageProvider = Depends(get_storage),
):
    row = store.get_photo(photo_id)
    if not row:
        raise NotFoundError("Photo not found")
    storage.delete(row.filename)
    store.delete_photo(photo_id)
    return Response(status_code=204)
