# Storage backends and the factory that builds one per configured disk.
# Created: 2026-10-16

from __future__ import annotations

from typing import TYPE_CHECKING

from pocketdrive.storage.base import StorageAttributes, StorageBackend, Visibility, normalize_path
from pocketdrive.storage.local import LocalBackend
from pocketdrive.storage.onedrive import OneDriveBackend

if TYPE_CHECKING:
    from pocketdrive.config import DiskConfig, Settings
    from pocketdrive.sessions import Session

__all__ = [
    "LocalBackend",
    "OneDriveBackend",
    "StorageAttributes",
    "StorageBackend",
    "Visibility",
    "build_backend",
    "normalize_path",
]


def build_backend(
    name: str,
    disk: DiskConfig,
    session: Session,
    settings: Settings,
) -> StorageBackend:
    """Build the adapter for *disk*. OneDrive disks authenticate through the session's token."""
    if disk.driver == "local":
        return LocalBackend(
            root=disk.root,
            name=name,
            visibility=disk.visibility,
            public_url=disk.public_url,
        )

    if disk.driver == "onedrive":
        from pocketdrive.integrations.oauth import TokenCache

        cache = TokenCache(disk, timeout=settings.http_timeout)

        async def _token() -> str:
            return await cache.get_token(session)

        return OneDriveBackend(
            token_provider=_token,
            root=disk.root,
            name=name,
            drive_id=disk.drive_id,
            user=disk.user,
            timeout=settings.http_timeout,
        )

    raise ValueError(f"Unknown storage driver: {disk.driver}")
