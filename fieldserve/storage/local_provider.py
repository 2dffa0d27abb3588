"""
Local filesystem storage for uploaded task photos.
Files live flat under the upload directory and are served at /uploads/<key>.
"""
import os
import random
import time
from pathlib import Path
from typing import BinaryIO
from urllib.parse import quote

import structlog
from slugify import slugify

from .provider import StorageProvider


logger = structlog.get_logger(__name__)

URL_PREFIX = "/uploads"


def unique_filename(original_name: str) -> str:
    """<epoch-ms>-<random>[-<slug>]<ext>, so repeated uploads of the same name never collide."""
    stem, ext = os.path.splitext(original_name or "")
    suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    slug = slugify(stem)[:40]
    return f"{suffix}-{slug}{ext.lower()}" if slug else f"{suffix}{ext.lower()}"


class LocalStorageProvider(StorageProvider):
    def __init__(self, base_dir: str = "uploads"):
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _get_path(self, key: str) -> Path:
        # Flat namespace: strip any directory parts
        clean_key = Path(key.replace("\\", "/")).name
        return self.base_dir / clean_key

    def url_for(self, key: str) -> str:
        return f"{URL_PREFIX}/{quote(key.lstrip('/'))}"

    def copy_in(self, src: bytes | BinaryIO, key: str) -> None:
        path = self._get_path(key)
        with open(path, "wb") as f:
            if hasattr(src, "read"):
                f.write(src.read())
            else:
                f.write(src)

    def delete(self, key: str) -> None:
        path = self._get_path(key)
        try:
            if path.exists():
                path.unlink()
        except OSError as e:
            logger.warning("upload_delete_failed", key=key, error=str(e))
