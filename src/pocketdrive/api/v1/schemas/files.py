# File manager schemas.
# Created: 2026-10-16

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from pocketdrive.listing import Entry, EntryKind


class FileEntry(BaseModel):
    """A single file or folder row."""

    name: str
    path: str
    kind: EntryKind
    modified_at: datetime | None = None
    size: int | None = None
    display_size: str = ""
    media_type: str | None = None
    is_parent: bool = False

    @classmethod
    def from_entry(cls, entry: Entry) -> FileEntry:
        return cls(
            name=entry.name,
            path=entry.path,
            kind=entry.kind,
            modified_at=entry.modified_at,
            size=entry.size,
            display_size=entry.display_size,
            media_type=entry.media_type,
            is_parent=entry.is_parent,
        )


class EntryRef(BaseModel):
    """Client reference to a listed entry."""

    name: str = ""
    path: str
    kind: EntryKind

    def to_entry(self) -> Entry:
        return Entry(name=self.name or self.path.rsplit("/", 1)[-1], path=self.path, kind=self.kind)


class BrowseResponse(BaseModel):
    """Directory listing for the session's current path."""

    disk: str
    path: str
    heading: str
    files: list[FileEntry] = []


class DiskListResponse(BaseModel):
    disks: list[str]
    default: str


class BulkDeleteRequest(BaseModel):
    entries: list[EntryRef]


class BulkDeleteFailure(BaseModel):
    path: str
    error: str


class BulkDeleteResponse(BaseModel):
    deleted: list[str] = []
    failed: list[BulkDeleteFailure] = []


class CreateFolderRequest(BaseModel):
    name: str


class CreateFolderResponse(BaseModel):
    path: str


class UploadResponse(BaseModel):
    paths: list[str] = []


class UrlResponse(BaseModel):
    path: str
    url: str | None = None
    can_open: bool = False
