# Navigation controller: turns file manager actions into backend calls and path changes.
# Created: 2026-10-16

from __future__ import annotations

import logging
import posixpath
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from pocketdrive.errors import (
    CreateFolderFailed,
    DeleteFailed,
    DownloadFailed,
    FileManagerError,
    UploadFailed,
)
from pocketdrive.listing import Entry, EntryKind, join_path, list_directory
from pocketdrive.sessions import Session
from pocketdrive.storage.base import StorageBackend, Visibility, normalize_path

logger = logging.getLogger(__name__)


@dataclass
class UploadedFile:
    """An uploaded file: the client's original filename plus its bytes."""

    filename: str
    content: bytes


@dataclass
class BulkDeleteResult:
    deleted: list[str] = field(default_factory=list)
    failed: list[tuple[str, FileManagerError]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class NavigationController:
    """File manager operations for one session.

    ``current_path`` only changes through :meth:`open` / :meth:`navigate`, and
    only after the target is known to be a folder. Mutations never touch it, so
    a failed delete or upload leaves the session exactly as it was. Listings are
    not cached; call :meth:`list` again after a mutation.
    """

    def __init__(self, session: Session):
        if session.backend is None:
            raise ValueError(f"Session {session.id} has no storage backend")
        self.session = session

    @property
    def backend(self) -> StorageBackend:
        return self.session.backend

    @property
    def current_path(self) -> str:
        return self.session.current_path

    @property
    def heading(self) -> str:
        return self.current_path or "Root"

    def on_path_changed(self, callback: Callable[[str], None]) -> None:
        self.session.path_listeners.append(callback)

    def _set_path(self, path: str) -> None:
        self.session.current_path = path
        for callback in list(self.session.path_listeners):
            callback(path)

    async def list(self) -> list[Entry]:
        return await list_directory(self.backend, self.current_path)

    async def navigate(self, path: str) -> list[Entry]:
        """Jump straight to *path*. The path is committed only once it lists successfully."""
        path = normalize_path(path)
        entries = await list_directory(self.backend, path)
        if path != self.current_path:
            self._set_path(path)
        return entries

    def open(self, entry: Entry) -> bool:
        """Enter a folder entry (including ``..``). Files are ignored."""
        if entry.kind != EntryKind.FOLDER:
            return False
        self._set_path(normalize_path(entry.path))
        return True

    async def delete(self, entry: Entry) -> None:
        """Delete a file, or a folder with everything in it.

        Raises:
            DeleteFailed: ``..`` was targeted, the backend refused, or it errored.
        """
        if entry.is_parent:
            raise DeleteFailed(entry.path, "the parent directory entry cannot be deleted")

        try:
            if entry.is_folder:
                ok = await self.backend.delete_directory(entry.path)
            else:
                ok = await self.backend.delete(entry.path)
        except Exception as e:
            logger.warning("Delete of %s failed: %s", entry.path, e)
            raise DeleteFailed(entry.path, e) from e

        if not ok:
            raise DeleteFailed(entry.path)
        logger.info("Deleted %s %s", entry.kind.value.lower(), entry.path)

    async def bulk_delete(self, entries: Iterable[Entry]) -> BulkDeleteResult:
        """Delete each entry independently. Successes are kept when others fail."""
        result = BulkDeleteResult()
        for entry in entries:
            try:
                await self.delete(entry)
            except DeleteFailed as e:
                result.failed.append((entry.path, e))
            else:
                result.deleted.append(entry.path)
        return result

    async def create_folder(self, name: str) -> str:
        """Create *name* inside the current folder and return its path."""
        name = (name or "").strip()
        target = join_path(self.current_path, name)
        if not name:
            raise CreateFolderFailed(target, "folder name is required")
        if "/" in name or "\\" in name or name in (".", ".."):
            raise CreateFolderFailed(target, "folder name must be a single path segment")

        try:
            ok = await self.backend.make_directory(target)
        except Exception as e:
            logger.warning("Creating folder %s failed: %s", target, e)
            raise CreateFolderFailed(target, e) from e

        if not ok:
            raise CreateFolderFailed(target)
        logger.info("Created folder %s", target)
        return target

    async def upload_files(self, files: Iterable[UploadedFile]) -> list[str]:
        """Store each file in the current folder under its original name.

        Existing files with the same name are overwritten. Stops at the first
        failure; files written before it stay written.
        """
        written: list[str] = []
        for upload in files:
            filename = posixpath.basename(upload.filename.replace("\\", "/"))
            if not filename:
                raise UploadFailed(upload.filename, ValueError("empty filename"))

            target = join_path(self.current_path, filename)
            try:
                ok = await self.backend.put(target, upload.content)
            except Exception as e:
                logger.warning("Upload of %s failed: %s", target, e)
                raise UploadFailed(filename, e) from e
            if not ok:
                raise UploadFailed(filename, RuntimeError("backend refused the write"))

            written.append(target)
            logger.info("Uploaded %s (%d bytes)", target, len(upload.content))
        return written

    async def can_open_directly(self, entry: Entry) -> bool:
        """Whether *entry* is a public file that a browser could open by URL."""
        if entry.kind != EntryKind.FILE:
            return False
        if not await self.backend.exists(entry.path):
            return False
        return await self.backend.get_visibility(entry.path) == Visibility.PUBLIC

    async def download(self, entry: Entry) -> bytes:
        if entry.kind != EntryKind.FILE:
            raise DownloadFailed(entry.path, "folders cannot be downloaded")
        try:
            return await self.backend.download(entry.path)
        except Exception as e:
            logger.warning("Download of %s failed: %s", entry.path, e)
            raise DownloadFailed(entry.path, e) from e

    async def url(self, entry: Entry) -> str | None:
        """Public URL for a directly openable file, else None."""
        if not await self.can_open_directly(entry):
            return None
        return await self.backend.url(entry.path)
