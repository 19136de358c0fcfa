# Settings: env/.env backed configuration for disks, HTTP timeouts and the API server.
# Created: 2026-10-16
#
# Environment variables use the POCKETDRIVE_ prefix; nested disk fields use "__",
# e.g. POCKETDRIVE_DISKS__ONEDRIVE__CLIENT_SECRET=...

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pocketdrive.errors import UnknownDisk

GRAPH_SCOPE = "https://graph.microsoft.com/.default"
MICROSOFT_AUTHORITY = "https://login.microsoftonline.com"


def get_config_dir() -> Path:
    """Get/create the config directory at ~/.pocketdrive."""
    d = Path.home() / ".pocketdrive"
    d.mkdir(exist_ok=True)
    return d


class DiskConfig(BaseModel):
    """One named storage disk."""

    driver: Literal["local", "onedrive"] = "local"
    root: str = ""
    visibility: Literal["public", "private"] = "private"
    public_url: str | None = None  # Base URL for public local files

    # OneDrive / Graph client-credentials
    tenant_id: str = ""
    client_id: str = ""
    client_secret: str = ""
    scope: str = GRAPH_SCOPE
    authority: str = MICROSOFT_AUTHORITY
    drive_id: str | None = None
    user: str | None = None  # UPN or id; used when drive_id is not set


def _default_disks() -> dict[str, DiskConfig]:
    return {"local": DiskConfig(driver="local", root=str(Path.home() / "pocketdrive"))}


class Settings(BaseSettings):
    """pocketdrive settings."""

    model_config = SettingsConfigDict(
        env_prefix="POCKETDRIVE_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    default_disk: str = "local"
    disks: dict[str, DiskConfig] = Field(default_factory=_default_disks)

    http_timeout: float = 15.0
    session_cookie: str = "pocketdrive_session"
    session_idle_timeout: float = 3600.0  # seconds without a request before a session is dropped

    host: str = "127.0.0.1"
    port: int = 8890
    api_cors_allowed_origins: list[str] = Field(default_factory=list)

    @classmethod
    def load(cls) -> Settings:
        """Build a fresh settings instance from the environment."""
        return cls()

    def get_disk(self, name: str | None = None) -> DiskConfig:
        """Return the named disk config (default disk when *name* is empty)."""
        key = name or self.default_disk
        disk = self.disks.get(key)
        if disk is None:
            raise UnknownDisk(key)
        return disk


@lru_cache
def get_settings() -> Settings:
    """Cached process-wide settings."""
    return Settings.load()
