from fastapi import APIRouter, Depends
import structlog

from ..db import get_store
from ..errors import ConflictError, NotFoundError
from ..schemas.service_sheets import ServiceSheetCreate, ServiceSheetResponse, ServiceSheetUpdate
from ..store.memory import MemoryStore


router = APIRouter(prefix="/api", tags=["service-sheets"])
logger = structlog.get_logger(__name__)


@router.get("/tasks/{task_id}/service-sheet", response_model=ServiceSheetResponse)
def get_service_sheet(task_id: int, store: MemoryStore = Depends(get_store)):
    sheet = store.get_service_sheet(task_id)
    if not sheet:
        raise NotFoundError("Service sheet not found")
    return sheet


@router.post("/service-sheets", response_model=ServiceSheetResponse, status_code=201)
def create_service_sheet(payload: ServiceSheetCreate, store: MemoryStore = Depends(get_store)):
    if not store.get_task(payload.task_id):
        raise NotFoundError("Task not found")
    existing = store.get_service_sheet(payload.task_id)
    if existing:
        logger.warning("service_sheet_conflict", task_id=payload.task_id, existing_id=existing.id)
        raise ConflictError(
            "Service sheet already exists for this task",
            detail={"task_id": payload.task_id, "service_sheet_id": existing.id},
        )
    return store.create_service_sheet(payload.model_dump())


@router.patch("/service-sheets/{sheet_id}", response_model=ServiceSheetResponse)
def update_service_sheet(sheet_id: int, payload: ServiceSheetUpdate, store: MemoryStore = Depends(get_store)):
    if not store.get_service_sheet_by_id(sheet_id):
        raise NotFoundError("Service sheet not found")
    return store.update_service_sheet(sheet_id, payload.to_patch())
