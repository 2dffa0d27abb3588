from typing import Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
import structlog

from .config import Settings, settings as default_settings
from .errors import ServiceError, service_error_handler
from .logging import setup_logging, RequestIdMiddleware
from .routes.users import router as users_router
from .routes.clients import router as clients_router
from .routes.tasks import router as tasks_router
from .routes.service_sheets import router as service_sheets_router
from .routes.notes import router as notes_router
from .routes.photos import router as photos_router
from .routes.products import router as products_router
from .routes.product_usage import router as product_usage_router
from .routes.timesheets import router as timesheets_router
from .routes.dashboard import router as dashboard_router
from .services.seed import seed_sample_data
from .storage.local_provider import URL_PREFIX, LocalStorageProvider
from .store.memory import MemoryStore


def create_app(settings: Optional[Settings] = None, store: Optional[MemoryStore] = None) -> FastAPI:
    settings = settings or default_settings
    setup_logging(settings.log_level)
    app = FastAPI(title=settings.app_name)

    # Middlewares
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    app.add_exception_handler(ServiceError, service_error_handler)

    # State shared by request dependencies (see db.py)
    app.state.settings = settings
    app.state.store = store if store is not None else MemoryStore(tz_name=settings.tz_default)
    app.state.storage = LocalStorageProvider(settings.upload_dir)

    app.include_router(users_router)
    app.include_router(clients_router)
    app.include_router(tasks_router)
    app.include_router(service_sheets_router)
    app.include_router(notes_router)
    app.include_router(photos_router)
    app.include_router(products_router)
    app.include_router(product_usage_router)
    app.include_router(timesheets_router)
    app.include_router(dashboard_router)

    # Uploaded photos
    app.mount(URL_PREFIX, StaticFiles(directory=settings.upload_dir), name="uploads")

    # Metrics
    if settings.enable_metrics:
        Instrumentator().instrument(app).expose(app)

    if settings.seed_sample_data:
        seed_sample_data(app.state.store, settings.tz_default)

    structlog.get_logger(__name__).info(
        "app_created",
        environment=settings.environment,
        tz=settings.tz_default,
        upload_dir=settings.upload_dir,
        metrics=settings.enable_metrics,
    )

    return app
