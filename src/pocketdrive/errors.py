# File manager errors: one type per failed operation, each with a machine-readable code.
# Created: 2026-10-16

from __future__ import annotations


class FileManagerError(Exception):
    """Base class for file manager failures."""

    code = "file_manager_error"

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


class ListingFailed(FileManagerError):
    code = "listing_failed"

    def __init__(self, path: str, cause: BaseException | None = None):
        super().__init__(f"Could not list '{path or '/'}': {cause}", cause)
        self.path = path


class DeleteFailed(FileManagerError):
    code = "delete_failed"

    def __init__(self, path: str, cause: BaseException | str | None = None):
        if isinstance(cause, str):
            message, cause = cause, None
        else:
            message = str(cause) if cause else "backend refused"
        super().__init__(f"Could not delete '{path}': {message}", cause)
        self.path = path


class CreateFolderFailed(FileManagerError):
    code = "create_folder_failed"

    def __init__(self, path: str, cause: BaseException | str | None = None):
        if isinstance(cause, str):
            message, cause = cause, None
        else:
            message = str(cause) if cause else "backend refused"
        super().__init__(f"Could not create folder '{path}': {message}", cause)
        self.path = path


class UploadFailed(FileManagerError):
    code = "upload_failed"

    def __init__(self, filename: str, cause: BaseException | None = None):
        super().__init__(f"Could not upload '{filename}': {cause}", cause)
        self.filename = filename


class DownloadFailed(FileManagerError):
    code = "download_failed"

    def __init__(self, path: str, cause: BaseException | str | None = None):
        if isinstance(cause, str):
            message, cause = cause, None
        else:
            message = str(cause)
        super().__init__(f"Could not download '{path}': {message}", cause)
        self.path = path


class AuthenticationFailed(FileManagerError):
    code = "authentication_failed"

    def __init__(self, cause: BaseException | str | None = None):
        if isinstance(cause, str):
            message, cause = cause, None
        else:
            message = str(cause)
        super().__init__(f"Authentication failed: {message}", cause)


class UnknownDisk(FileManagerError):
    code = "unknown_disk"

    def __init__(self, name: str):
        super().__init__(f"Unknown disk: {name}")
        self.name = name
