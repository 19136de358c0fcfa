# Directory listing: one storage-agnostic table of entries for any backend.
# Created: 2026-10-16
#
# Listings are transient: rebuilt from a single non-recursive backend call on
# every request and never cached.

from __future__ import annotations

import logging
import posixpath
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel

from pocketdrive.errors import ListingFailed
from pocketdrive.storage.base import StorageAttributes, StorageBackend, normalize_path

logger = logging.getLogger(__name__)

PARENT_NAME = ".."
FOLDER_TYPE = "Folder"


class EntryKind(StrEnum):
    FILE = "File"
    FOLDER = "Folder"


class Entry(BaseModel):
    """One row of a directory listing."""

    name: str
    path: str
    kind: EntryKind
    modified_at: datetime | None = None
    size: int | None = None
    media_type: str | None = None

    @property
    def is_folder(self) -> bool:
        return self.kind == EntryKind.FOLDER

    @property
    def is_parent(self) -> bool:
        """True for the synthetic "go up one directory" entry."""
        return self.name == PARENT_NAME

    @property
    def display_size(self) -> str:
        return format_size(self.size) if self.size is not None else ""

    @classmethod
    def parent_of(cls, path: str) -> Entry:
        return cls(name=PARENT_NAME, path=parent_path(path), kind=EntryKind.FOLDER)

    @classmethod
    def from_storage(cls, attrs: StorageAttributes, name: str) -> Entry:
        if attrs.is_file:
            return cls(
                name=name,
                path=normalize_path(attrs.path),
                kind=EntryKind.FILE,
                modified_at=attrs.modified_at,
                size=attrs.size,
                media_type=attrs.media_type or "file",
            )
        return cls(
            name=name,
            path=normalize_path(attrs.path),
            kind=EntryKind.FOLDER,
            modified_at=attrs.modified_at,
            media_type=FOLDER_TYPE,
        )


def parent_path(path: str) -> str:
    """Drop the last segment of *path*; a single-segment path's parent is the root ``""``."""
    parent, _, _ = normalize_path(path).rpartition("/")
    return parent


def join_path(base: str, name: str) -> str:
    base = normalize_path(base)
    return f"{base}/{name}" if base else name


def format_size(size: int) -> str:
    """Human-readable byte count, e.g. ``1.5 KB``."""
    value = float(size)
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if value < 1024 or unit == "TB":
            return f"{int(value)} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{size} B"


def _display_name(child_path: str, directory: str) -> str:
    prefix = f"{directory}/" if directory else ""
    if prefix and child_path.startswith(prefix):
        return child_path[len(prefix) :]
    return posixpath.basename(child_path)


async def list_directory(backend: StorageBackend, path: str = "") -> list[Entry]:
    """List *path* on *backend*: the ``..`` entry first (non-root only), then children by name.

    Names sort case-sensitively, folders and files interleaved.

    Raises:
        ListingFailed: The backend could not list the path.
    """
    path = normalize_path(path)

    try:
        children = await backend.list(path)
    except Exception as e:
        logger.warning("Listing %r on %s failed: %s", path, backend.name, e)
        raise ListingFailed(path, e) from e

    entries = [
        Entry.from_storage(child, _display_name(normalize_path(child.path), path))
        for child in children
    ]
    entries.sort(key=lambda entry: entry.name)

    if path:
        entries.insert(0, Entry.parent_of(path))
    return entries
