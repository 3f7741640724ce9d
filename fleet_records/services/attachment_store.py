# fleet_records/services/attachment_store.py
"""
File-backed attachment store.

Layout:  <root>/vehicles/<vehicle_id>/<category>/<token>_<sanitized name>
Staging: <root>/temp/   (incoming uploads land here first)

Uploads are staged inside the store root so the final placement is a
same-filesystem os.replace: a stored path either holds the complete file or
doesn't exist. Removal is best-effort; a missing file is not an error.
"""

import os
import re
import shutil
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

from fastapi import Request

from fleet_records.config import settings
from fleet_records.errors import StorageFailure, ValidationFailed, NotFound
from fleet_records.models.document import DOCUMENT_CATEGORIES
from fleet_records.utils.logger import get_logger

logger = get_logger(__name__)

ALLOWED_MIME_TYPES = frozenset({
    "application/pdf",
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
    "text/csv",
})

VEHICLES_DIR = "vehicles"
STAGING_DIR = "temp"
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9.-]")
_COPY_CHUNK = 1024 * 1024


def sanitize_filename(name: str) -> str:
    """Drop any directory part and replace characters outside [A-Za-z0-9.-]."""
    base = (name or "").replace("\\", "/").split("/")[-1]
    return _UNSAFE_CHARS.sub("_", base) or "upload"


@dataclass
class IncomingFile:
    """An upload sitting in the staging directory, not yet placed."""
    path: Path
    original_name: str
    size: int
    mime_type: str


@dataclass
class StoredFile:
    stored_name: str
    relative_path: str
    size: int
    mime_type: str
    original_name: str


class AttachmentStore:
    def __init__(self, root: str | os.PathLike, max_bytes: Optional[int] = None):
        self.root = Path(root).resolve()
        self.max_bytes = max_bytes if max_bytes is not None else settings.MAX_UPLOAD_BYTES
        self._last_token = 0
        (self.root / VEHICLES_DIR).mkdir(parents=True, exist_ok=True)
        (self.root / STAGING_DIR).mkdir(parents=True, exist_ok=True)

    # ── Paths ─────────────────────────────────────────────────────────────────

    def resolve(self, relative_path: str) -> Path:
        """Absolute path for a stored relative path; refuses paths outside the root."""
        full = (self.root / relative_path).resolve()
        if full != self.root and self.root not in full.parents:
            raise NotFound(f"Invalid attachment path: {relative_path}")
        return full

    def vehicle_dir(self, vehicle_id: int) -> Path:
        return self.root / VEHICLES_DIR / str(vehicle_id)

    def _next_token(self) -> int:
        # Strictly increasing even when two calls land in the same nanosecond
        token = max(time.time_ns(), self._last_token + 1)
        self._last_token = token
        return token

    # ── Validation ────────────────────────────────────────────────────────────

    def check(self, category: str, size: int, mime_type: str):
        errors = []
        if category not in DOCUMENT_CATEGORIES:
            errors.append(f"Invalid category: {category}. Allowed: {', '.join(DOCUMENT_CATEGORIES)}")
        if mime_type not in ALLOWED_MIME_TYPES:
            errors.append(f"File type not allowed: {mime_type}. Allowed types: PDF, Images, Excel, Word, Text.")
        if size > self.max_bytes:
            errors.append(f"File too large: exceeds the {self.max_bytes} byte limit")
        if errors:
            raise ValidationFailed("File rejected", errors)

    # ── Writes ────────────────────────────────────────────────────────────────

    def stage_upload(self, stream: BinaryIO, original_name: str, mime_type: str) -> IncomingFile:
        """Copy an incoming stream into the staging directory."""
        staged = self.root / STAGING_DIR / f"upload-{uuid.uuid4().hex}"
        size = 0
        try:
            with open(staged, "wb") as out:
                while True:
                    chunk = stream.read(_COPY_CHUNK)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_bytes:
                        break
                    out.write(chunk)
        except OSError as e:
            staged.unlink(missing_ok=True)
            raise StorageFailure(f"Could not stage upload: {e}") from e
        return IncomingFile(path=staged, original_name=original_name, size=size, mime_type=mime_type)

    def discard(self, incoming: IncomingFile):
        try:
            incoming.path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"[ATTACHMENT] Could not discard staged file {incoming.path}: {e}")

    def save_file(self, vehicle_id: int, category: str, incoming: IncomingFile) -> StoredFile:
        """Validate, then move the staged file into its final position."""
        try:
            self.check(category, incoming.size, incoming.mime_type)
        except ValidationFailed:
            self.discard(incoming)
            raise

        target_dir = self.vehicle_dir(vehicle_id) / category
        stored_name = f"{self._next_token()}_{sanitize_filename(incoming.original_name)}"
        target = target_dir / stored_name
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            os.replace(incoming.path, target)
        except OSError as e:
            raise StorageFailure(f"Could not store attachment: {e}") from e

        relative_path = target.relative_to(self.root).as_posix()
        logger.info(f"[ATTACHMENT] Stored {relative_path} ({incoming.size} bytes)")
        return StoredFile(
            stored_name=stored_name,
            relative_path=relative_path,
            size=incoming.size,
            mime_type=incoming.mime_type,
            original_name=incoming.original_name,
        )

    # ── Removal ───────────────────────────────────────────────────────────────

    def delete_file(self, relative_path: str) -> bool:
        """Best-effort removal. Returns True only if a file was actually removed."""
        try:
            path = self.resolve(relative_path)
            path.unlink()
            logger.info(f"[ATTACHMENT] Removed {relative_path}")
            return True
        except FileNotFoundError:
            return False
        except (OSError, NotFound) as e:
            logger.warning(f"[ATTACHMENT] Could not remove {relative_path}: {e}")
            return False

    def remove_vehicle_dir(self, vehicle_id: int):
        shutil.rmtree(self.vehicle_dir(vehicle_id), ignore_errors=True)

    # ── Inventory ─────────────────────────────────────────────────────────────

    def iter_stored_files(self) -> Iterator[str]:
        """Relative paths of every placed file (staging excluded)."""
        base = self.root / VEHICLES_DIR
        for path in sorted(base.rglob("*")):
            if path.is_file():
                yield path.relative_to(self.root).as_posix()


def get_attachments(request: Request) -> AttachmentStore:
    """FastAPI dependency: the attachment store created on startup."""
    return request.app.state.attachments
