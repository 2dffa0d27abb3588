"""
In-memory entity store.

Each entity type lives in its own keyed collection with an independent id
counter starting at 1. The store never raises for a missing id: lookups return
None and deletes return False, leaving the "is this an error" decision to the
caller.
"""
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Generic, Iterator, List, Optional, Type, TypeVar

from ..models.models import (
    Client,
    Note,
    Photo,
    Product,
    ProductUsage,
    Record,
    ServiceSheet,
    Task,
    TaskAssignment,
    Timesheet,
    User,
)
from ..services.time_rules import local_day, resolve_duration_on_create, resolve_duration_on_update


R = TypeVar("R", bound=Record)

# Fields the server owns; patches can never overwrite them.
_SERVER_FIELDS = {"id", "created_at", "updated_at", "assigned_at", "uploaded_at", "used_at"}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IdAllocator:
    """Monotonic integer id source for one entity type."""

    def __init__(self, start: int = 1):
        self._next = start

    def allocate(self) -> int:
        value = self._next
        self._next += 1
        return value


class Collection(Generic[R]):
    def __init__(self, model: Type[R]):
        self.model = model
        self.ids = IdAllocator()
        self._rows: Dict[int, R] = {}

    def __iter__(self) -> Iterator[R]:
        return iter(list(self._rows.values()))

    def __len__(self) -> int:
        return len(self._rows)

    def get(self, id: int) -> Optional[R]:
        return self._rows.get(id)

    def insert(self, data: Dict[str, Any]) -> R:
        clean = {k: v for k, v in data.items() if k != "id"}
        row = self.model(id=self.ids.allocate(), **clean)
        self._rows[row.id] = row
        return row

    def put(self, row: R) -> R:
        self._rows[row.id] = row
        return row

    def merge(self, id: int, patch: Dict[str, Any]) -> Optional[R]:
        """Shallow merge: nested values in `patch` replace the stored ones wholesale."""
        row = self._rows.get(id)
        if row is None:
            return None
        clean = {k: v for k, v in patch.items() if k not in _SERVER_FIELDS}
        merged = self.model(**{**row.model_dump(), **clean})
        self._rows[id] = merged
        return merged

    def remove(self, id: int) -> bool:
        return self._rows.pop(id, None) is not None

    def filter(self, predicate: Callable[[R], bool]) -> List[R]:
        return [row for row in self._rows.values() if predicate(row)]

    def first(self, predicate: Callable[[R], bool]) -> Optional[R]:
        for row in self._rows.values():
            if predicate(row):
                return row
        return None


class MemoryStore:
    def __init__(self, clock: Callable[[], datetime] = _utcnow, tz_name: str = "UTC"):
        self.clock = clock
        self.tz_name = tz_name
        self.users: Collection[User] = Collection(User)
        self.tasks: Collection[Task] = Collection(Task)
        self.task_assignments: Collection[TaskAssignment] = Collection(TaskAssignment)
        self.service_sheets: Collection[ServiceSheet] = Collection(ServiceSheet)
        self.notes: Collection[Note] = Collection(Note)
        self.photos: Collection[Photo] = Collection(Photo)
        self.products: Collection[Product] = Collection(Product)
        self.product_usage: Collection[ProductUsage] = Collection(ProductUsage)
        self.timesheets: Collection[Timesheet] = Collection(Timesheet)
        self.clients: Collection[Client] = Collection(Client)

    # ---------- USERS ----------
    def get_user(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.users.first(lambda u: u.username == username)

    def get_users(self) -> List[User]:
        return list(self.users)

    def create_user(self, data: Dict[str, Any]) -> User:
        return self.users.insert(data)

    # ---------- TASKS ----------
    def get_tasks(self) -> List[Task]:
        return list(self.tasks)

    def get_task(self, task_id: int) -> Optional[Task]:
        return self.tasks.get(task_id)

    def create_task(self, data: Dict[str, Any]) -> Task:
        now = self.clock()
        return self.tasks.insert({**data, "created_at": now, "updated_at": now})

    def update_task(self, task_id: int, patch: Dict[str, Any]) -> Optional[Task]:
        row = self.tasks.merge(task_id, patch)
        if row is None:
            return None
        return self.tasks.put(row.model_copy(update={"updated_at": self.clock()}))

    def delete_task(self, task_id: int) -> bool:
        return self.tasks.remove(task_id)

    def get_tasks_by_status(self, status: str) -> List[Task]:
        return self.tasks.filter(lambda t: t.status == status)

    def get_tasks_by_priority(self, priority: str) -> List[Task]:
        return self.tasks.filter(lambda t: t.priority == priority)

    def get_tasks_by_date(self, day: date) -> List[Task]:
        return self.tasks.filter(lambda t: local_day(t.scheduled_date, self.tz_name) == day)

    def get_tasks_for_user(self, user_id: int) -> List[Task]:
        task_ids = {a.task_id for a in self.task_assignments if a.user_id == user_id}
        return self.tasks.filter(lambda t: t.id in task_ids)

    # ---------- TASK ASSIGNMENTS ----------
    def get_task_assignments(self, task_id: int) -> List[TaskAssignment]:
        return self.task_assignments.filter(lambda a: a.task_id == task_id)

    def create_task_assignment(self, task_id: int, user_id: int) -> TaskAssignment:
        return self.task_assignments.insert({"task_id": task_id, "user_id": user_id, "assigned_at": self.clock()})

    def remove_task_assignment(self, task_id: int, user_id: int) -> bool:
        row = self.task_assignments.first(lambda a: a.task_id == task_id and a.user_id == user_id)
        if row is None:
            return False
        return self.task_assignments.remove(row.id)

    # ---------- SERVICE SHEETS ----------
    def get_service_sheet(self, task_id: int) -> Optional[ServiceSheet]:
        return self.service_sheets.first(lambda s: s.task_id == task_id)

    def get_service_sheet_by_id(self, sheet_id: int) -> Optional[ServiceSheet]:
        return self.service_sheets.get(sheet_id)

    def create_service_sheet(self, data: Dict[str, Any]) -> ServiceSheet:
        now = self.clock()
        return self.service_sheets.insert({**data, "created_at": now, "updated_at": now})

    def update_service_sheet(self, sheet_id: int, patch: Dict[str, Any]) -> Optional[ServiceSheet]:
        row = self.service_sheets.merge(sheet_id, patch)
        if row is None:
            return None
        return self.service_sheets.put(row.model_copy(update={"updated_at": self.clock()}))

    # ---------- NOTES ----------
    def get_task_notes(self, task_id: int) -> List[Note]:
        return self.notes.filter(lambda n: n.task_id == task_id)

    def create_note(self, data: Dict[str, Any]) -> Note:
        return self.notes.insert({**data, "created_at": self.clock()})

    def delete_note(self, note_id: int) -> bool:
        return self.notes.remove(note_id)

    # ---------- PHOTOS ----------
    def get_task_photos(self, task_id: int) -> List[Photo]:
        return self.photos.filter(lambda p: p.task_id == task_id)

    def get_photo(self, photo_id: int) -> Optional[Photo]:
        return self.photos.get(photo_id)

    def create_photo(self, data: Dict[str, Any]) -> Photo:
        return self.photos.insert({**data, "uploaded_at": self.clock()})

    def delete_photo(self, photo_id: int) -> bool:
        return self.photos.remove(photo_id)

    # ---------- PRODUCTS ----------
    def get_products(self) -> List[Product]:
        return list(self.products)

    def get_product(self, product_id: int) -> Optional[Product]:
        return self.products.get(product_id)

    def get_product_by_sku(self, sku: str) -> Optional[Product]:
        return self.products.first(lambda p: p.sku == sku)

    def create_product(self, data: Dict[str, Any]) -> Product:
        now = self.clock()
        return self.products.insert({**data, "created_at": now, "updated_at": now})

    def update_product(self, product_id: int, patch: Dict[str, Any]) -> Optional[Product]:
        row = self.products.merge(product_id, patch)
        if row is None:
            return None
        return self.products.put(row.model_copy(update={"updated_at": self.clock()}))

    def delete_product(self, product_id: int) -> bool:
        return self.products.remove(product_id)

    def get_low_stock_products(self) -> List[Product]:
        return self.products.filter(lambda p: p.is_low_stock)

    def shift_stock(self, product_id: int, delta: int) -> Optional[Product]:
        """Add `delta` units to a product's stock, flooring at zero."""
        row = self.products.get(product_id)
        if row is None:
            return None
        stock = max(0, row.stock_quantity + delta)
        return self.products.put(row.model_copy(update={"stock_quantity": stock, "updated_at": self.clock()}))

    # ---------- PRODUCT USAGE ----------
    # Stock bookkeeping lives in services.inventory.InventoryLedger; these are raw rows.
    def get_product_usages(self) -> List[ProductUsage]:
        return list(self.product_usage)

    def get_task_product_usage(self, task_id: int) -> List[ProductUsage]:
        return self.product_usage.filter(lambda u: u.task_id == task_id)

    def get_product_usage(self, usage_id: int) -> Optional[ProductUsage]:
        return self.product_usage.get(usage_id)

    def insert_product_usage(self, data: Dict[str, Any]) -> ProductUsage:
        return self.product_usage.insert({**data, "used_at": self.clock()})

    def replace_product_usage(self, usage_id: int, patch: Dict[str, Any]) -> Optional[ProductUsage]:
        row = self.product_usage.merge(usage_id, patch)
        if row is None:
            return None
        return self.product_usage.put(row.model_copy(update={"used_at": self.clock()}))

    def remove_product_usage(self, usage_id: int) -> bool:
        return self.product_usage.remove(usage_id)

    # ---------- TIMESHEETS ----------
    def get_timesheets(self) -> List[Timesheet]:
        return list(self.timesheets)

    def get_timesheet(self, timesheet_id: int) -> Optional[Timesheet]:
        return self.timesheets.get(timesheet_id)

    def get_user_timesheets(self, user_id: int) -> List[Timesheet]:
        return self.timesheets.filter(lambda t: t.user_id == user_id)

    def get_task_timesheets(self, task_id: int) -> List[Timesheet]:
        return self.timesheets.filter(lambda t: t.task_id == task_id)

    def create_timesheet(self, data: Dict[str, Any]) -> Timesheet:
        duration = resolve_duration_on_create(
            data["start_time"], data.get("end_time"), data.get("duration_minutes"), self.tz_name
        )
        return self.timesheets.insert({**data, "duration_minutes": duration, "created_at": self.clock()})

    def update_timesheet(self, timesheet_id: int, patch: Dict[str, Any]) -> Optional[Timesheet]:
        row = self.timesheets.get(timesheet_id)
        if row is None:
            return None
        duration = resolve_duration_on_update(row, patch, self.tz_name)
        return self.timesheets.merge(timesheet_id, {**patch, "duration_minutes": duration})

    def delete_timesheet(self, timesheet_id: int) -> bool:
        return self.timesheets.remove(timesheet_id)

    # ---------- CLIENTS ----------
    def get_clients(self) -> List[Client]:
        return list(self.clients)

    def get_client(self, client_id: int) -> Optional[Client]:
        return self.clients.get(client_id)

    def create_client(self, data: Dict[str, Any]) -> Client:
        return self.clients.insert({**data, "created_at": self.clock()})

    def update_client(self, client_id: int, patch: Dict[str, Any]) -> Optional[Client]:
        return self.clients.merge(client_id, patch)

    def delete_client(self, client_id: int) -> bool:
        return self.clients.remove(client_id)
