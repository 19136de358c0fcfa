# Local disk backend: a directory tree on the local filesystem.
# Created: 2026-10-16

from __future__ import annotations

import logging
import mimetypes
import shutil
from datetime import UTC, datetime
from pathlib import Path
from urllib.parse import quote

from pocketdrive.storage.base import StorageAttributes, Visibility, normalize_path

logger = logging.getLogger(__name__)


class LocalBackend:
    """Disk adapter rooted at a local directory.

    Every path is resolved inside ``root``; anything that would escape it
    (``..`` segments, symlinks pointing outside) raises ``ValueError``.
    """

    def __init__(
        self,
        root: str | Path,
        name: str = "local",
        visibility: Visibility | str = Visibility.PRIVATE,
        public_url: str | None = None,
    ):
        self.name = name
        self.root = Path(root).expanduser().resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        self.visibility = Visibility(visibility)
        self.public_url = public_url.rstrip("/") if public_url else None

    def _resolve(self, path: str) -> Path:
        rel = normalize_path(path)
        target = (self.root / rel).resolve()
        if target != self.root and not target.is_relative_to(self.root):
            raise ValueError(f"Path escapes disk root: {path}")
        return target

    def _relative(self, target: Path) -> str:
        return target.relative_to(self.root).as_posix()

    async def list(self, path: str = "") -> list[StorageAttributes]:
        directory = self._resolve(path)
        if not directory.exists():
            raise FileNotFoundError(f"Path does not exist: {path or '/'}")
        if not directory.is_dir():
            raise NotADirectoryError(f"Not a directory: {path}")

        items: list[StorageAttributes] = []
        for child in directory.iterdir():
            try:
                st = child.stat()
            except OSError as e:
                # dangling symlink or unreadable entry
                logger.debug("Skipping %s: %s", child, e)
                continue
            is_file = child.is_file()
            items.append(
                StorageAttributes(
                    path=self._relative(child),
                    is_file=is_file,
                    size=st.st_size if is_file else None,
                    modified_at=datetime.fromtimestamp(st.st_mtime, tz=UTC),
                    media_type=mimetypes.guess_type(child.name)[0] if is_file else None,
                )
            )
        return items

    async def exists(self, path: str) -> bool:
        return self._resolve(path).exists()

    async def delete(self, path: str) -> bool:
        target = self._resolve(path)
        if not target.is_file():
            return False
        target.unlink()
        return True

    async def delete_directory(self, path: str) -> bool:
        target = self._resolve(path)
        if target == self.root:
            raise ValueError("Refusing to delete the disk root")
        if not target.is_dir():
            return False
        shutil.rmtree(target)
        return True

    async def make_directory(self, path: str) -> bool:
        target = self._resolve(path)
        if target.exists():
            raise FileExistsError(f"Already exists: {path}")
        target.mkdir(parents=True)
        return True

    async def put(self, path: str, content: bytes) -> bool:
        target = self._resolve(path)
        if target.is_dir():
            raise IsADirectoryError(f"A folder with this name exists: {path}")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        return True

    async def download(self, path: str) -> bytes:
        target = self._resolve(path)
        if not target.is_file():
            raise FileNotFoundError(f"File not found: {path}")
        return target.read_bytes()

    async def get_visibility(self, path: str) -> Visibility:
        if not self._resolve(path).exists():
            raise FileNotFoundError(f"Path does not exist: {path}")
        return self.visibility

    async def url(self, path: str) -> str:
        rel = normalize_path(path)
        if self.public_url:
            return f"{self.public_url}/{quote(rel)}"
        return self._resolve(rel).as_uri()
