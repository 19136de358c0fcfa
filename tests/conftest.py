# Shared fixtures: an in-memory storage backend, a local disk and sessions over both.

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from pocketdrive.config import DiskConfig, Settings
from pocketdrive.sessions import Session, SessionManager
from pocketdrive.storage.base import StorageAttributes, Visibility, normalize_path

FIXED_MTIME = datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC)


class MemoryBackend:
    """Dict-backed backend that records every call."""

    def __init__(self, name: str = "memory"):
        self.name = name
        self.files: dict[str, bytes] = {}
        self.dirs: set[str] = set()
        self.public: set[str] = set()
        self.calls: list[tuple[str, str]] = []
        self.fail_on: dict[str, Exception] = {}

    def _call(self, op: str, path: str) -> str:
        path = normalize_path(path)
        self.calls.append((op, path))
        if op in self.fail_on:
            raise self.fail_on[op]
        return path

    def add_file(self, path: str, content: bytes = b"", public: bool = False) -> None:
        path = normalize_path(path)
        self.files[path] = content
        parent = path.rpartition("/")[0]
        while parent:
            self.dirs.add(parent)
            parent = parent.rpartition("/")[0]
        if public:
            self.public.add(path)

    def add_dir(self, path: str) -> None:
        self.dirs.add(normalize_path(path))

    def _children(self, path: str) -> list[str]:
        prefix = f"{path}/" if path else ""
        names = set()
        for p in list(self.files) + list(self.dirs):
            if p.startswith(prefix) and p != path:
                names.add(prefix + p[len(prefix) :].split("/")[0])
        return sorted(names)

    async def list(self, path: str = "") -> list[StorageAttributes]:
        path = self._call("list", path)
        if path and path not in self.dirs:
            raise FileNotFoundError(path)
        items = []
        for child in self._children(path):
            if child in self.files:
                items.append(
                    StorageAttributes(
                        path=child,
                        is_file=True,
                        size=len(self.files[child]),
                        modified_at=FIXED_MTIME,
                        media_type="text/plain" if child.endswith(".txt") else None,
                    )
                )
            else:
                items.append(StorageAttributes(path=child, is_file=False))
        return items

    async def exists(self, path: str) -> bool:
        path = self._call("exists", path)
        return path in self.files or path in self.dirs

    async def delete(self, path: str) -> bool:
        path = self._call("delete", path)
        return self.files.pop(path, None) is not None

    async def delete_directory(self, path: str) -> bool:
        path = self._call("delete_directory", path)
        if path not in self.dirs:
            return False
        prefix = f"{path}/"
        self.dirs = {d for d in self.dirs if d != path and not d.startswith(prefix)}
        self.files = {f: c for f, c in self.files.items() if not f.startswith(prefix)}
        return True

    async def make_directory(self, path: str) -> bool:
        path = self._call("make_directory", path)
        if path in self.dirs or path in self.files:
            raise FileExistsError(path)
        self.dirs.add(path)
        return True

    async def put(self, path: str, content: bytes) -> bool:
        path = self._call("put", path)
        self.add_file(path, content)
        return True

    async def download(self, path: str) -> bytes:
        path = self._call("download", path)
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]

    async def get_visibility(self, path: str) -> Visibility:
        path = self._call("get_visibility", path)
        return Visibility.PUBLIC if path in self.public else Visibility.PRIVATE

    async def url(self, path: str) -> str:
        path = self._call("url", path)
        return f"https://files.example.com/{path}"


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def session(backend):
    return Session(id="test-session", disk="memory", backend=backend)


@pytest.fixture
def local_settings(tmp_path):
    root = tmp_path / "disk"
    return Settings(
        default_disk="local",
        disks={
            "local": DiskConfig(driver="local", root=str(root)),
            "public": DiskConfig(
                driver="local",
                root=str(tmp_path / "public"),
                visibility="public",
                public_url="https://cdn.example.com/files",
            ),
        },
    )


@pytest.fixture
def session_manager(local_settings):
    return SessionManager(local_settings)
