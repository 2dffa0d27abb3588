from typing import List, Optional

from fastapi import APIRouter, Depends, Response
import structlog

from ..db import get_store
from ..errors import NotFoundError
from ..schemas.timesheets import TimesheetCreate, TimesheetResponse, TimesheetUpdate
from ..services.time_rules import ensure_valid_interval
from ..store.memory import MemoryStore


router = APIRouter(prefix="/api/timesheets", tags=["timesheets"])
logger = structlog.get_logger(__name__)


@router.get("", response_model=List[TimesheetResponse])
def list_timesheets(
    user_id: Optional[int] = None,
    task_id: Optional[int] = None,
    store: MemoryStore = Depends(get_store),
):
    if user_id is not None:
        rows = store.get_user_timesheets(user_id)
    elif task_id is not None:
        rows = store.get_task_timesheets(task_id)
    else:
        return store.get_timesheets()
    if task_id is not None:
        rows = [t for t in rows if t.task_id == task_id]
    return rows


@router.get("/{timesheet_id}", response_model=TimesheetResponse)
def get_timesheet(timesheet_id: int, store: MemoryStore = Depends(get_store)):
    row = store.get_timesheet(timesheet_id)
    if not row:
        raise NotFoundError("Timesheet not found")
    return row


@router.post("", response_model=TimesheetResponse, status_code=201)
def create_timesheet(payload: TimesheetCreate, store: MemoryStore = Depends(get_store)):
    if not store.get_task(payload.task_id):
        raise NotFoundError("Task not found")
    if not store.get_user(payload.user_id):
        raise NotFoundError("User not found")
    ensure_valid_interval(payload.start_time, payload.end_time, store.tz_name)
    row = store.create_timesheet(payload.model_dump())
    logger.info(
        "timesheet_duration_computed",
        timesheet_id=row.id,
        duration_minutes=row.duration_minutes,
        explicit=payload.duration_minutes is not None,
    )
    return row


@router.patch("/{timesheet_id}", response_model=TimesheetResponse)
def update_timesheet(timesheet_id: int, payload: TimesheetUpdate, store: MemoryStore = Depends(get_store)):
    existing = store.get_timesheet(timesheet_id)
    if not existing:
        raise NotFoundError("Timesheet not found")
    patch = payload.to_patch()
    start = patch.get("start_time", existing.start_time)
    end = patch["end_time"] if "end_time" in patch else existing.end_time
    ensure_valid_interval(start, end, store.tz_name)
    row = store.update_timesheet(timesheet_id, patch)
    logger.info(
        "timesheet_duration_computed",
        timesheet_id=row.id,
        duration_minutes=row.duration_minutes,
        explicit="duration_minutes" in patch,
    )
    return row


@router.delete("/{timesheet_id}", status_code=204)
def delete_timesheet(timesheet_id: int, store: MemoryStore = Depends(get_store)):
    if not store.delete_timesheet(timesheet_id):
        raise NotFoundError("Timesheet not found")
    return Response(status_code=204)
