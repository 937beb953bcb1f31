# aviasafe/services/storage.py
"""
Object storage for attachments.

Objects live under ATTACHMENTS_DIR/<bucket>/<path>; the public URL is
ATTACHMENTS_PUBLIC_BASE_URL/<bucket>/<path>. Failures raise StorageError,
which the global error handlers map to a 500 response.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional

log = logging.getLogger("aviasafe.storage")

ATTACHMENTS_BUCKET = os.getenv("ATTACHMENTS_BUCKET", "attachments")


class StorageError(Exception):
    """Object storage failure; message is safe to surface as an upstream error."""


class ObjectStorage:
    def __init__(
        self,
        root: str,
        bucket: str = ATTACHMENTS_BUCKET,
        public_base_url: str = "/files",
    ):
        self.root = Path(root)
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")

    # -----------------------------
    # Bucket
    # -----------------------------
    @property
    def bucket_dir(self) -> Path:
        return self.root / self.bucket

    def bucket_exists(self) -> bool:
        return self.bucket_dir.is_dir()

    def ensure_bucket(self) -> bool:
        """Create the bucket if missing. Returns True when it was created."""
        if self.bucket_exists():
            return False
        try:
            self.bucket_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to create bucket: {e}") from e
        log.info("storage bucket created bucket=%s root=%s", self.bucket, self.root)
        return True

    # -----------------------------
    # Objects
    # -----------------------------
    def _resolve(self, path: str) -> Path:
        target = (self.bucket_dir / path).resolve()
        base = self.bucket_dir.resolve()
        if base != target and base not in target.parents:
            raise StorageError(f"Invalid object path: {path}")
        return target

    def upload(self, path: str, data: bytes, upsert: bool = False) -> str:
        """Store bytes at `path` and return the stored path."""
        target = self._resolve(path)
        if target.exists() and not upsert:
            raise StorageError(f"The resource already exists: {path}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Failed to upload object: {e}") from e
        log.info("storage upload path=%s bytes=%s", path, len(data))
        return path

    def remove(self, paths: Iterable[str]) -> List[str]:
        """Remove objects; returns the paths actually removed. Missing objects are skipped."""
        removed: List[str] = []
        for p in paths:
            target = self._resolve(p)
            if not target.exists():
                continue
            try:
                target.unlink()
            except OSError as e:
                raise StorageError(f"Failed to remove object: {e}") from e
            removed.append(p)
        if removed:
            log.info("storage remove paths=%s", removed)
        return removed

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def local_path(self, path: str) -> Path:
        target = self._resolve(path)
        if not target.is_file():
            raise StorageError(f"Object not found: {path}")
        return target

    def public_url(self, path: str) -> str:
        return f"{self.public_base_url}/{self.bucket}/{path}"


_storage: Optional[ObjectStorage] = None


def get_storage() -> ObjectStorage:
    """FastAPI dependency; configured from env on first use."""
    global _storage
    if _storage is None:
        _storage = ObjectStorage(
            root=os.getenv("ATTACHMENTS_DIR", "./storage"),
            bucket=ATTACHMENTS_BUCKET,
            public_base_url=os.getenv("ATTACHMENTS_PUBLIC_BASE_URL", "/files"),
        )
    return _storage
