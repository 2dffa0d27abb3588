from fastapi import APIRouter, Depends

from ..config import Settings
from ..db import get_settings, get_store
from ..schemas.dashboard import DashboardStats
from ..services.dashboard import compute_stats
from ..store.memory import MemoryStore


router = APIRouter(prefix="/api", tags=["dashboard"])


@router.get("/dashboard/stats", response_model=DashboardStats)
def dashboard_stats(
    store: MemoryStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    return compute_stats(store, settings)


@router.get("/health")
def health(settings: Settings = Depends(get_settings)):
    return {"status": "ok", "app": settings.app_name}
