# File manager router: browse, open, delete, create folder, upload, download.
# Created: 2026-10-16

from __future__ import annotations

import logging
import mimetypes
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Response, UploadFile

from pocketdrive.api.deps import get_controller, http_error
from pocketdrive.api.v1.schemas.common import ErrorResponse, StatusResponse
from pocketdrive.api.v1.schemas.files import (
    BrowseResponse,
    BulkDeleteFailure,
    BulkDeleteRequest,
    BulkDeleteResponse,
    CreateFolderRequest,
    CreateFolderResponse,
    DiskListResponse,
    EntryRef,
    FileEntry,
    UploadResponse,
    UrlResponse,
)
from pocketdrive.errors import DownloadFailed, FileManagerError
from pocketdrive.listing import Entry, EntryKind
from pocketdrive.navigation import NavigationController, UploadedFile

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Files"],
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)


async def _browse(
    controller: NavigationController, entries: list[Entry] | None = None
) -> BrowseResponse:
    if entries is None:
        try:
            entries = await controller.list()
        except FileManagerError as e:
            raise http_error(e) from e
    return BrowseResponse(
        disk=controller.session.disk,
        path=controller.current_path,
        heading=controller.heading,
        files=[FileEntry.from_entry(e) for e in entries],
    )


def _file_ref(path: str) -> Entry:
    return EntryRef(path=path, kind=EntryKind.FILE).to_entry()


@router.get("/files/disks", response_model=DiskListResponse)
async def list_disks():
    """Configured disk names."""
    from pocketdrive.config import get_settings

    settings = get_settings()
    return DiskListResponse(disks=sorted(settings.disks), default=settings.default_disk)


@router.get("/files/browse", response_model=BrowseResponse)
async def browse_files(
    path: str | None = None,
    controller: NavigationController = Depends(get_controller),
):
    """List the session's current folder, or navigate to ``path`` first."""
    if path is None:
        return await _browse(controller)
    try:
        entries = await controller.navigate(path)
    except FileManagerError as e:
        raise http_error(e) from e
    return await _browse(controller, entries)


@router.post("/files/open", response_model=BrowseResponse)
async def open_entry(ref: EntryRef, controller: NavigationController = Depends(get_controller)):
    """Open a folder (or ``..``) and return the new listing. Files leave the path unchanged.

    Folders go through ``navigate`` so the path is only committed once the backend lists it.
    """
    if ref.kind != EntryKind.FOLDER:
        return await _browse(controller)
    try:
        entries = await controller.navigate(ref.path)
    except FileManagerError as e:
        raise http_error(e) from e
    return await _browse(controller, entries)


@router.post("/files/delete", response_model=StatusResponse)
async def delete_entry(ref: EntryRef, controller: NavigationController = Depends(get_controller)):
    try:
        await controller.delete(ref.to_entry())
    except FileManagerError as e:
        raise http_error(e) from e
    return StatusResponse(status="Folder deleted" if ref.kind == EntryKind.FOLDER else "File deleted")


@router.post("/files/bulk-delete", response_model=BulkDeleteResponse)
async def bulk_delete(
    body: BulkDeleteRequest,
    controller: NavigationController = Depends(get_controller),
):
    """Delete many entries. Each is reported separately; successes are not rolled back."""
    result = await controller.bulk_delete(ref.to_entry() for ref in body.entries)
    return BulkDeleteResponse(
        deleted=result.deleted,
        failed=[BulkDeleteFailure(path=p, error=str(e)) for p, e in result.failed],
    )


@router.post("/files/folders", response_model=CreateFolderResponse, status_code=201)
async def create_folder(
    body: CreateFolderRequest,
    controller: NavigationController = Depends(get_controller),
):
    try:
        path = await controller.create_folder(body.name)
    except FileManagerError as e:
        raise http_error(e) from e
    return CreateFolderResponse(path=path)


@router.post("/files/upload", response_model=UploadResponse)
async def upload_files(
    files: list[UploadFile] = File(...),
    controller: NavigationController = Depends(get_controller),
):
    """Upload into the current folder, keeping the original filenames."""
    uploads = [UploadedFile(filename=f.filename or "", content=await f.read()) for f in files]
    try:
        paths = await controller.upload_files(uploads)
    except FileManagerError as e:
        raise http_error(e) from e
    return UploadResponse(paths=paths)


@router.get("/files/download")
async def download_file(
    path: str,
    response: Response,
    controller: NavigationController = Depends(get_controller),
):
    entry = _file_ref(path)
    try:
        content = await controller.download(entry)
    except FileManagerError as e:
        raise http_error(e) from e

    media_type = mimetypes.guess_type(entry.name)[0] or "application/octet-stream"
    result = Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(entry.name)}"},
    )
    # carry over the session cookie set by get_controller
    for cookie in response.headers.getlist("set-cookie"):
        result.headers.append("set-cookie", cookie)
    return result


@router.get("/files/url", response_model=UrlResponse)
async def file_url(path: str, controller: NavigationController = Depends(get_controller)):
    """Public URL for the "View" action, when the file is publicly visible."""
    entry = _file_ref(path)
    try:
        url = await controller.url(entry)
    except Exception as e:
        raise http_error(DownloadFailed(entry.path, e)) from e
    return UrlResponse(path=entry.path, url=url, can_open=url is not None)
