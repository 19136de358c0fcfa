# Storage backend protocol: the capability surface every disk adapter provides.
# Created: 2026-10-16

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Protocol, runtime_checkable


class Visibility(StrEnum):
    PUBLIC = "public"
    PRIVATE = "private"


@dataclass
class StorageAttributes:
    """One child reported by a backend's non-recursive listing.

    ``path`` is backend-relative (no leading slash, root is ``""``).
    """

    path: str
    is_file: bool
    size: int | None = None
    modified_at: datetime | None = None
    media_type: str | None = None


@runtime_checkable
class StorageBackend(Protocol):
    """Hierarchical byte store addressed by ``/``-separated relative paths.

    Adapters raise ``FileNotFoundError`` for missing paths and let transport
    errors propagate; callers wrap them in the file manager errors.
    """

    name: str

    async def list(self, path: str = "") -> list[StorageAttributes]: ...

    async def exists(self, path: str) -> bool: ...

    async def delete(self, path: str) -> bool: ...

    async def delete_directory(self, path: str) -> bool: ...

    async def make_directory(self, path: str) -> bool: ...

    async def put(self, path: str, content: bytes) -> bool: ...

    async def download(self, path: str) -> bytes: ...

    async def get_visibility(self, path: str) -> Visibility: ...

    async def url(self, path: str) -> str: ...


def normalize_path(path: str | None) -> str:
    """Strip surrounding slashes and collapse empty segments. Root is ``""``."""
    if not path:
        return ""
    return "/".join(part for part in path.replace("\\", "/").split("/") if part and part != ".")
