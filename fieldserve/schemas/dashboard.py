from pydantic import BaseModel


class DashboardStats(BaseModel):
    todays_task_count: int
    todays_tasks_completed: int
    todays_tasks_pending: int
    completed_this_week: int
    hours_logged: float
    weekly_hours_target: int
    materials_used: int
    low_stock_count: int
    task_completion_rate: int
    customer_satisfaction: int
    first_time_fix_rate: int
