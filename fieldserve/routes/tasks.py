from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
import structlog

from ..config import Settings
from ..db import get_settings, get_storage, get_store
from ..errors import NotFoundError
from ..reports.service_report import build_report_data, render_service_report_pdf
from ..schemas.tasks import TaskCreate, TaskDetail, TaskResponse, TaskUpdate, TaskWithAssignees
from ..services.task_service import (
    assign_users,
    expand_task,
    filter_tasks,
    reconcile_assignments,
    task_with_assignees,
)
from ..storage.provider import StorageProvider
from ..store.memory import MemoryStore


router = APIRouter(prefix="/api/tasks", tags=["tasks"])
logger = structlog.get_logger(__name__)


def _get_task_or_404(store: MemoryStore, task_id: int):
    task = store.get_task(task_id)
    if not task:
        raise NotFoundError("Task not found")
    return task


@router.get("", response_model=List[TaskWithAssignees])
def list_tasks(
    status: Optional[str] = None,
    priority: Optional[str] = None,
    day: Optional[date] = Query(default=None, alias="date"),
    user_id: Optional[int] = None,
    store: MemoryStore = Depends(get_store),
):
    tasks = filter_tasks(store, status=status, priority=priority, day=day, user_id=user_id)
    return [task_with_assignees(store, t) for t in tasks]


@router.get("/{task_id}", response_model=TaskDetail)
def get_task(
    task_id: int,
    store: MemoryStore = Depends(get_store),
    storage: StorageProvider = Depends(get_storage),
):
    return expand_task(store, _get_task_or_404(store, task_id), storage)


@router.post("", response_model=TaskResponse, status_code=201)
def create_task(payload: TaskCreate, store: MemoryStore = Depends(get_store)):
    task = store.create_task(payload.model_dump(exclude={"assigned_user_ids"}))
    if payload.assigned_user_ids:
        assign_users(store, task.id, payload.assigned_user_ids)
    logger.info("task_created", task_id=task.id, assigned=payload.assigned_user_ids or [])
    return task


@router.patch("/{task_id}", response_model=TaskResponse)
def update_task(task_id: int, payload: TaskUpdate, store: MemoryStore = Depends(get_store)):
    task = store.update_task(task_id, payload.to_patch())
    if not task:
        raise NotFoundError("Task not found")
    if payload.assigned_user_ids is not None:
        changes = reconcile_assignments(store, task_id, payload.assigned_user_ids)
        logger.info("task_assignments_reconciled", task_id=task_id, **changes)
    return task


@router.delete("/{task_id}", status_code=204)
def delete_task(task_id: int, store: MemoryStore = Depends(get_store)):
    if not store.delete_task(task_id):
        raise NotFoundError("Task not found")
    return Response(status_code=204)


# ---------- SERVICE REPORT ----------
@router.get("/{task_id}/report")
def get_task_report(
    task_id: int,
    store: MemoryStore = Depends(get_store),
    storage: StorageProvider = Depends(get_storage),
):
    return build_report_data(store, _get_task_or_404(store, task_id), storage)


@router.get("/{task_id}/report.pdf")
def get_task_report_pdf(
    task_id: int,
    store: MemoryStore = Depends(get_store),
    storage: StorageProvider = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    task = _get_task_or_404(store, task_id)
    report = build_report_data(store, task, storage)
    pdf = render_service_report_pdf(report, settings.report_company_name, settings.tz_default)
    filename = f"service-report-{task.id}.pdf"
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
