"""
Dashboard aggregates, computed from the store on every call.
"""
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from ..config import Settings
from ..models.models import TaskStatus
from ..store.memory import MemoryStore
from .time_rules import local_day, localize, start_of_week


def compute_stats(store: MemoryStore, settings: Settings, now: Optional[datetime] = None) -> Dict[str, Any]:
    tz_name = settings.tz_default
    now = now or store.clock()
    today = localize(now, tz_name).date()
    week_start = start_of_week(today)
    week_end = week_start + timedelta(days=7)
    completed = TaskStatus.completed.value

    tasks = store.get_tasks()
    todays = [t for t in tasks if local_day(t.scheduled_date, tz_name) == today]
    todays_completed = sum(1 for t in todays if t.status == completed)
    completed_this_week = sum(
        1 for t in tasks
        if t.status == completed and week_start <= local_day(t.scheduled_date, tz_name) < week_end
    )

    total_minutes = sum(ts.duration_minutes or 0 for ts in store.get_timesheets())
    materials_used = sum(u.quantity for u in store.get_product_usages())
    completed_total = sum(1 for t in tasks if t.status == completed)
    # Empty task set counts as a denominator of 1
    completion_rate = int(completed_total / max(1, len(tasks)) * 100 + 0.5)

    return {
        "todays_task_count": len(todays),
        "todays_tasks_completed": todays_completed,
        "todays_tasks_pending": len(todays) - todays_completed,
        "completed_this_week": completed_this_week,
        "hours_logged": total_minutes / 60,
        "weekly_hours_target": settings.weekly_hours_target,
        "materials_used": materials_used,
        "low_stock_count": len(store.get_low_stock_products()),
        "task_completion_rate": completion_rate,
        "customer_satisfaction": settings.customer_satisfaction,
        "first_time_fix_rate": settings.first_time_fix_rate,
    }
