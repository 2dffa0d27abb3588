from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from ..models.models import Photo, Product, ProductUsage, Task, User
from ..storage.provider import StorageProvider
from ..store.memory import MemoryStore


def _user_to_dict(u: User) -> Dict[str, Any]:
    return {"id": u.id, "username": u.username, "name": u.name, "avatar": u.avatar, "role": u.role}


def resolve_assigned_users(store: MemoryStore, task_id: int) -> List[User]:
    users = (store.get_user(a.user_id) for a in store.get_task_assignments(task_id))
    # Dangling user ids are dropped
    return [u for u in users if u is not None]


def photo_to_dict(photo: Photo, storage: StorageProvider) -> Dict[str, Any]:
    return {**photo.model_dump(), "url": storage.url_for(photo.filename)}


def usage_to_dict(usage: ProductUsage, product: Optional[Product]) -> Dict[str, Any]:
    return {**usage.model_dump(), "product": product.model_dump() if product else None}


def resolve_product_usage(store: MemoryStore, task_id: int) -> List[Dict[str, Any]]:
    return [usage_to_dict(u, store.get_product(u.product_id)) for u in store.get_task_product_usage(task_id)]


def task_with_assignees(store: MemoryStore, task: Task) -> Dict[str, Any]:
    return {
        **task.model_dump(),
        "assigned_users": [_user_to_dict(u) for u in resolve_assigned_users(store, task.id)],
    }


def expand_task(store: MemoryStore, task: Task, storage: StorageProvider) -> Dict[str, Any]:
    """Join a task with everything hanging off it. Recomputed on every call."""
    sheet = store.get_service_sheet(task.id)
    client = store.get_client(task.client_id) if task.client_id else None
    return {
        **task_with_assignees(store, task),
        "service_sheet": sheet.model_dump() if sheet else None,
        "notes": [n.model_dump() for n in store.get_task_notes(task.id)],
        "photos": [photo_to_dict(p, storage) for p in store.get_task_photos(task.id)],
        "product_usage": resolve_product_usage(store, task.id),
        "timesheets": [t.model_dump() for t in store.get_task_timesheets(task.id)],
        "client": client.model_dump() if client else None,
    }


def filter_tasks(
    store: MemoryStore,
    *,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    day: Optional[date] = None,
    user_id: Optional[int] = None,
) -> List[Task]:
    """All given filters must match. Insertion order is kept."""
    selections = []
    if user_id is not None:
        selections.append(store.get_tasks_for_user(user_id))
    if day is not None:
        selections.append(store.get_tasks_by_date(day))
    if status is not None:
        selections.append(store.get_tasks_by_status(status))
    if priority is not None:
        selections.append(store.get_tasks_by_priority(priority))

    tasks = store.get_tasks()
    for selected in selections:
        ids = {t.id for t in selected}
        tasks = [t for t in tasks if t.id in ids]
    return tasks


def assign_users(store: MemoryStore, task_id: int, user_ids: Iterable[int]) -> None:
    seen = set()
    for user_id in user_ids:
        if user_id in seen:
            continue
        seen.add(user_id)
        store.create_task_assignment(task_id, user_id)


def reconcile_assignments(store: MemoryStore, task_id: int, desired_user_ids: Iterable[int]) -> Dict[str, List[int]]:
    """
    Bring a task's assignments to `desired_user_ids` by set difference.

    Assignments that stay keep their original assigned_at.
    """
    desired = list(dict.fromkeys(desired_user_ids))
    current = [a.user_id for a in store.get_task_assignments(task_id)]
    removed = [uid for uid in current if uid not in desired]
    added = [uid for uid in desired if uid not in current]
    for uid in removed:
        store.remove_task_assignment(task_id, uid)
    for uid in added:
        store.create_task_assignment(task_id, uid)
    return {"added": added, "removed": removed}
