"""
Sample data for a fresh in-memory store: technicians, clients, products and a
day's worth of tasks with their service sheets, usage, notes and timesheets.

Seeding is idempotent: users are matched by username, clients by name and
products by SKU, and tasks are only created when the store has none.
"""
from datetime import datetime, time, timedelta
from typing import Any, Dict

import structlog

from ..models.models import Client, Product, User
from ..store.memory import MemoryStore
from .inventory import InventoryLedger
from .time_rules import localize


logger = structlog.get_logger(__name__)


TECHNICIANS = [
    {"username": "john.smith", "password": "password123", "name": "John Smith"},
    {"username": "tech2", "password": "password123", "name": "Thomas Miller"},
    {"username": "tech3", "password": "password123", "name": "Robert King"},
    {"username": "tech4", "password": "password123", "name": "Amy Lee"},
]

CLIENTS = [
    {"name": "ABC Corporation", "contact_name": "Jane Doe", "phone": "555-123-4567",
     "email": "jane@abccorp.com", "address": "123 Main St, Suite 101"},
    {"name": "XYZ Industries", "contact_name": "Bob Johnson", "phone": "555-987-6543",
     "email": "bob@xyzindustries.com", "address": "456 Park Ave, Floor 2"},
    {"name": "Acme Co.", "contact_name": "Susan Brown", "phone": "555-456-7890",
     "email": "susan@acmeco.com", "address": "789 Oak St, Unit 5"},
]

PRODUCTS = [
    {"name": "HVAC Air Filter", "sku": "HVF-001", "unit_price": 24.99, "stock_quantity": 4,
     "low_stock_threshold": 5, "category": "HVAC",
     "description": "High-efficiency air filter for commercial HVAC systems"},
    {"name": 'Copper Fittings (3/4")', "sku": "CPF-001", "unit_price": 8.50, "stock_quantity": 2,
     "low_stock_threshold": 10, "category": "Plumbing",
     "description": "3/4-inch copper pipe fittings for plumbing installations"},
    {"name": "Wire Connectors", "sku": "WRC-001", "unit_price": 5.99, "stock_quantity": 5,
     "low_stock_threshold": 10, "category": "Electrical",
     "description": "Electrical wire connectors for secure connections"},
    {"name": "Thermostat", "sku": "THR-001", "unit_price": 89.99, "stock_quantity": 15,
     "low_stock_threshold": 3, "category": "HVAC",
     "description": "Digital programmable thermostat"},
]

STANDARD_CHECKLIST = ["Inspect equipment", "Test functionality", "Clean components", "Replace parts as needed"]


def ensure_user(store: MemoryStore, data: Dict[str, Any]) -> User:
    return store.get_user_by_username(data["username"]) or store.create_user({**data, "role": "technician"})


def ensure_client(store: MemoryStore, data: Dict[str, Any]) -> Client:
    existing = next((c for c in store.get_clients() if c.name == data["name"]), None)
    return existing or store.create_client(data)


def ensure_product(store: MemoryStore, data: Dict[str, Any]) -> Product:
    return store.get_product_by_sku(data["sku"]) or store.create_product(data)


def _checklist(labels, done: int):
    return [{"id": i + 1, "name": label, "completed": i < done} for i, label in enumerate(labels)]


def seed_sample_data(store: MemoryStore, tz_name: str) -> None:
    users = [ensure_user(store, u) for u in TECHNICIANS]
    clients = [ensure_client(store, c) for c in CLIENTS]
    products = [ensure_product(store, p) for p in PRODUCTS]

    if store.get_tasks():
        logger.info("sample_data_seeded", tasks_created=0)
        return

    now = store.clock()
    today = localize(now, tz_name).date()

    def at(day, hour, minute=0) -> datetime:
        return localize(datetime.combine(day, time(hour, minute)), tz_name)

    john, thomas, robert, amy = users
    ledger = InventoryLedger(store)

    hvac = store.create_task({
        "title": "HVAC Maintenance",
        "description": "Commercial AC unit maintenance and filter replacement. "
                       "Customer reported uneven cooling in office space.",
        "location_name": "Acme Co. Office",
        "location_address": "789 Oak St, Unit 5",
        "scheduled_date": at(today, 13),
        "status": "in_progress",
        "priority": "high",
        "progress": 65,
        "client_id": clients[2].id,
    })
    store.create_task_assignment(hvac.id, john.id)
    store.create_task_assignment(hvac.id, thomas.id)
    store.create_service_sheet({
        "task_id": hvac.id,
        "service_type": "maintenance",
        "equipment_type": "HVAC System",
        "checklist": _checklist(STANDARD_CHECKLIST, 2),
    })
    # Leaves the filter at 2 units, under its threshold of 5
    ledger.record_usage(hvac.id, products[0].id, 2)
    store.create_note({
        "task_id": hvac.id,
        "user_id": john.id,
        "content": "Found dust build-up in ventilation system. Will need additional cleaning.",
    })
    store.create_timesheet({
        "task_id": hvac.id,
        "user_id": john.id,
        "start_time": now - timedelta(hours=1),
        "duration_minutes": 60,
        "notes": "Initial inspection and filter replacement",
    })

    electrical = store.create_task({
        "title": "Electrical Repair",
        "description": "Circuit breaker replacement and electrical panel inspection. "
                       "Customer reported frequent power outages.",
        "location_name": "XYZ Industries Office",
        "location_address": "456 Park Ave, Floor 2",
        "scheduled_date": at(today, 11, 30),
        "status": "completed",
        "priority": "medium",
        "progress": 100,
        "client_id": clients[1].id,
    })
    store.create_task_assignment(electrical.id, john.id)
    store.create_service_sheet({
        "task_id": electrical.id,
        "service_type": "repair",
        "equipment_type": "Electrical Panel",
        "checklist": _checklist(
            ["Inspect circuit breakers", "Test electrical load", "Replace faulty components", "Verify operation"], 4
        ),
    })
    started = now - timedelta(hours=3)
    store.create_timesheet({
        "task_id": electrical.id,
        "user_id": john.id,
        "start_time": started,
        "end_time": started + timedelta(hours=2),
        "notes": "Complete electrical panel inspection and repair",
    })

    security = store.create_task({
        "title": "Security System Check",
        "description": "Annual security system check and camera alignment. Update firmware on security devices.",
        "location_name": "Pine Residence",
        "location_address": "321 Pine Ave",
        "scheduled_date": at(today, 15, 30),
        "priority": "low",
    })
    store.create_task_assignment(security.id, robert.id)

    kitchen = store.create_task({
        "title": "Equipment Servicing",
        "description": "Quarterly maintenance of industrial kitchen equipment. "
                       "Inspect refrigeration units and cooking appliances.",
        "location_name": "Cedar Road Restaurant",
        "location_address": "567 Cedar Rd, Floor 3",
        "scheduled_date": at(today, 17),
    })
    store.create_task_assignment(kitchen.id, john.id)
    store.create_task_assignment(kitchen.id, amy.id)

    store.create_task({
        "title": "Plumbing Installation",
        "description": "Install new plumbing fixtures in restroom area. Replace old piping and ensure proper drainage.",
        "location_name": "Downtown Office Building",
        "location_address": "888 Main St, Suite 200",
        "scheduled_date": at(today + timedelta(days=1), 10),
    })

    logger.info(
        "sample_data_seeded",
        users=len(store.get_users()),
        clients=len(store.get_clients()),
        products=len(store.get_products()),
        tasks_created=len(store.get_tasks()),
    )
