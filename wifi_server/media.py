"""
Media file store for uploads from devices.

Files are grouped by category under a single upload root and named
``<device_id>_<epoch_ms><ext>``. Device ids are treated as opaque
labels; nothing here consults the device registry.
"""

import base64
import binascii
import itertools
import logging
import os
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

PHOTOS = "photos"
RECORDINGS = "recordings"
SCREENSHOTS = "screenshots"
SCREEN_RECORDINGS = "screen_recordings"

CATEGORIES = (PHOTOS, RECORDINGS, SCREENSHOTS, SCREEN_RECORDINGS)

# Download path segment -> category directory
DOWNLOAD_TYPES: Dict[str, str] = {
    "photo": PHOTOS,
    "audio": RECORDINGS,
    "screenshot": SCREENSHOTS,
    "screen_recording": SCREEN_RECORDINGS,
}

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".bmp"}

_DATA_URL_PREFIX = re.compile(r"^data:image/\w+;base64,")


class MediaError(Exception):
    """Invalid upload payload or unknown media type."""


@dataclass
class StoredFile:
    filename: str
    path: Path
    size: int
    created: datetime
    modified: datetime

    @property
    def device_id(self) -> str:
        if "_" in self.filename:
            return self.filename.split("_", 1)[0]
        return "unknown"


def format_file_size(size: int) -> str:
    """Human-readable size: bytes, KB or MB."""
    if size < 1024:
        return f"{size} bytes"
    if size < 1024 * 1024:
        return f"{size / 1024:.2f} KB"
    return f"{size / (1024 * 1024):.2f} MB"


def size_kb(size: int) -> str:
    return f"{size / 1024:.2f}"


def size_mb(size: int) -> str:
    return f"{size / (1024 * 1024):.2f}"


def _safe_name(name: str) -> str:
    # Drop any directory components a client may have sent
    return Path(name.replace("\\", "/")).name


def _timestamp_ms() -> int:
    return int(time.time() * 1000)


class MediaStore:
    """Stores uploaded media under ``root/<category>/``."""

    def __init__(self, root: str | os.PathLike) -> None:
        self.root = Path(root)

    def ensure_dirs(self) -> None:
        """Create the upload root and every category directory."""
        for category in CATEGORIES:
            (self.root / category).mkdir(parents=True, exist_ok=True)

    def directory(self, category: str) -> Path:
        if category not in CATEGORIES:
            raise MediaError(f"Unknown media category '{category}'")
        return self.root / category

    def save(
        self,
        category: str,
        device_id: Optional[str],
        original_filename: Optional[str],
        content: bytes,
    ) -> StoredFile:
        """Write an uploaded file as ``<device_id>_<epoch_ms><ext>``."""
        device_label = _safe_name(device_id or "unknown") or "unknown"
        ext = os.path.splitext(_safe_name(original_filename or ""))[1]
        return self._write(category, f"{device_label}_{_timestamp_ms()}", ext, content)

    def save_base64_photo(
        self,
        device_id: Optional[str],
        data: str,
        filename: Optional[str] = None,
    ) -> StoredFile:
        """
        Decode a base64 photo (optionally a ``data:image/...`` URL) and
        store it as ``<device_id>_<epoch_ms>_<filename>``.
        """
        payload = _DATA_URL_PREFIX.sub("", data)
        try:
            content = base64.b64decode(payload)
        except (binascii.Error, ValueError) as e:
            raise MediaError(f"Invalid base64 photo data: {e}") from e

        timestamp = _timestamp_ms()
        name = _safe_name(filename or f"photo_{timestamp}.jpg")
        device_label = _safe_name(device_id or "unknown") or "unknown"
        return self._write(PHOTOS, f"{device_label}_{timestamp}", f"_{name}", content)

    def _write(self, category: str, stem: str, suffix: str, content: bytes) -> StoredFile:
        """
        Create ``stem + suffix`` without replacing an existing file; on a
        name clash ``_1``, ``_2``, ... is appended to the stem.
        """
        directory = self.directory(category)
        directory.mkdir(parents=True, exist_ok=True)
        for attempt in itertools.count():
            filename = f"{stem}_{attempt}{suffix}" if attempt else f"{stem}{suffix}"
            path = directory / filename
            try:
                with open(path, "xb") as f:
                    f.write(content)
                break
            except FileExistsError:
                continue
        logger.info(f"Stored {category} file {filename} ({format_file_size(len(content))})")
        return self._stat(path)

    @staticmethod
    def _stat(path: Path) -> StoredFile:
        stats = path.stat()
        return StoredFile(
            filename=path.name,
            path=path,
            size=stats.st_size,
            created=datetime.fromtimestamp(stats.st_ctime, tz=timezone.utc),
            modified=datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc),
        )

    def find(self, category: str, filename: str) -> Optional[StoredFile]:
        """Look up a stored file; None if absent or the name is unsafe."""
        if not filename or _safe_name(filename) != filename:
            return None
        path = self.directory(category) / filename
        if not path.is_file():
            return None
        return self._stat(path)

    def find_download(self, file_type: str, filename: str) -> Optional[StoredFile]:
        category = DOWNLOAD_TYPES.get(file_type)
        if category is None:
            raise MediaError(f"Invalid file type '{file_type}'")
        return self.find(category, filename)

    def list_photos(self) -> List[StoredFile]:
        """All stored images, newest first."""
        directory = self.directory(PHOTOS)
        if not directory.is_dir():
            return []
        photos = [
            self._stat(path)
            for path in directory.iterdir()
            if path.is_file() and path.suffix.lower() in IMAGE_EXTENSIONS
        ]
        photos.sort(key=lambda photo: photo.created, reverse=True)
        return photos

    def delete_photo(self, filename: str) -> bool:
        photo = self.find(PHOTOS, filename)
        if photo is None:
            return False
        photo.path.unlink()
        logger.info(f"Photo deleted: {filename}")
        return True

    def clear_photos(self) -> int:
        """Remove every file in the photo directory; returns the count."""
        directory = self.directory(PHOTOS)
        if not directory.is_dir():
            return 0
        deleted = 0
        for path in directory.iterdir():
            if path.is_file():
                path.unlink()
                deleted += 1
        logger.info(f"Cleared all photos ({deleted} files)")
        return deleted
