from fastapi import Request

from .config import Settings
from .storage.provider import StorageProvider
from .store.memory import MemoryStore


# One store per application instance, created in main.create_app
def get_store(request: Request) -> MemoryStore:
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> StorageProvider:
    return request.app.state.storage
