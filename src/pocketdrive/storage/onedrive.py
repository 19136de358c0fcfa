# OneDrive backend: Microsoft Graph v1.0 drive adapter over httpx.
# Created: 2026-10-16
#
# Bearer tokens come from a caller-supplied coroutine (the session's TokenCache),
# so navigating folders never re-authenticates while the token is still valid.

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any
from urllib.parse import quote

import httpx

from pocketdrive.storage.base import StorageAttributes, Visibility, normalize_path

logger = logging.getLogger(__name__)

_GRAPH_BASE = "https://graph.microsoft.com/v1.0"

# Graph accepts single-request PUT uploads up to 4 MiB; larger files go through an upload session.
_SIMPLE_UPLOAD_LIMIT = 4 * 1024 * 1024
_CHUNK_SIZE = 32 * 327_680  # must be a multiple of 320 KiB

TokenProvider = Callable[[], Awaitable[str]]


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


class OneDriveBackend:
    """HTTP client for a OneDrive drive via Microsoft Graph.

    Args:
        token_provider: Coroutine factory returning a valid access token.
        root: Folder inside the drive that acts as this disk's root.
        drive_id: Explicit drive ID. Without it, ``user``'s drive is used,
            falling back to ``me/drive``.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        token_provider: TokenProvider,
        root: str = "",
        name: str = "onedrive",
        drive_id: str | None = None,
        user: str | None = None,
        timeout: float = 15.0,
        base_url: str = _GRAPH_BASE,
    ):
        self.name = name
        self.root = normalize_path(root)
        self.timeout = timeout
        self._token_provider = token_provider

        if drive_id:
            self._drive = f"{base_url}/drives/{drive_id}"
        elif user:
            self._drive = f"{base_url}/users/{quote(user)}/drive"
        else:
            self._drive = f"{base_url}/me/drive"

    # -- path helpers -------------------------------------------------------

    def _full(self, path: str) -> str:
        rel = normalize_path(path)
        return "/".join(p for p in (self.root, rel) if p)

    def _item_url(self, path: str, suffix: str = "") -> str:
        """Address an item by path: ``root:/a/b:`` (+ suffix) or ``root`` for the drive root."""
        full = self._full(path)
        if not full:
            return f"{self._drive}/root{('/' + suffix) if suffix else ''}"
        url = f"{self._drive}/root:/{quote(full)}"
        return f"{url}:/{suffix}" if suffix else url

    async def _headers(self) -> dict[str, str]:
        token = await self._token_provider()
        return {"Authorization": f"Bearer {token}"}

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        headers = await self._headers()
        headers.update(kwargs.pop("headers", {}))
        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
            return await client.request(method, url, headers=headers, **kwargs)

    async def _get_item(self, path: str) -> dict[str, Any] | None:
        resp = await self._request("GET", self._item_url(path))
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return resp.json()

    # -- capability surface -------------------------------------------------

    async def list(self, path: str = "") -> list[StorageAttributes]:
        rel = normalize_path(path)
        url: str | None = self._item_url(rel, "children")
        params: dict[str, Any] | None = {"$top": 200}
        items: list[StorageAttributes] = []

        while url:
            resp = await self._request("GET", url, params=params)
            if resp.status_code == 404:
                raise FileNotFoundError(f"Path does not exist: {rel or '/'}")
            resp.raise_for_status()
            data = resp.json()

            for child in data.get("value", []):
                is_file = "folder" not in child
                items.append(
                    StorageAttributes(
                        path="/".join(p for p in (rel, child["name"]) if p),
                        is_file=is_file,
                        size=child.get("size") if is_file else None,
                        modified_at=_parse_timestamp(child.get("lastModifiedDateTime")),
                        media_type=child.get("file", {}).get("mimeType") if is_file else None,
                    )
                )

            # nextLink already carries the query string
            url = data.get("@odata.nextLink")
            params = None

        return items

    async def exists(self, path: str) -> bool:
        return await self._get_item(path) is not None

    async def delete(self, path: str) -> bool:
        resp = await self._request("DELETE", self._item_url(path))
        if resp.status_code == 404:
            return False
        resp.raise_for_status()
        logger.info("Deleted OneDrive item %s", self._full(path))
        return True

    async def delete_directory(self, path: str) -> bool:
        if not normalize_path(path):
            raise ValueError("Refusing to delete the disk root")
        # Graph deletes folders recursively
        return await self.delete(path)

    async def make_directory(self, path: str) -> bool:
        rel = normalize_path(path)
        parent, _, name = rel.rpartition("/")
        resp = await self._request(
            "POST",
            self._item_url(parent, "children"),
            json={
                "name": name,
                "folder": {},
                "@microsoft.graph.conflictBehavior": "fail",
            },
        )
        if resp.status_code == 409:
            raise FileExistsError(f"Already exists: {rel}")
        resp.raise_for_status()
        return True

    async def put(self, path: str, content: bytes) -> bool:
        if len(content) <= _SIMPLE_UPLOAD_LIMIT:
            resp = await self._request(
                "PUT",
                self._item_url(path, "content"),
                content=content,
                headers={"Content-Type": "application/octet-stream"},
            )
            resp.raise_for_status()
            return True
        return await self._put_large(path, content)

    async def _put_large(self, path: str, content: bytes) -> bool:
        resp = await self._request(
            "POST",
            self._item_url(path, "createUploadSession"),
            json={"item": {"@microsoft.graph.conflictBehavior": "replace"}},
        )
        resp.raise_for_status()
        upload_url = resp.json()["uploadUrl"]

        total = len(content)
        # The upload URL is pre-authorized; sending a bearer token to it is rejected.
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for start in range(0, total, _CHUNK_SIZE):
                chunk = content[start : start + _CHUNK_SIZE]
                end = start + len(chunk) - 1
                resp = await client.put(
                    upload_url,
                    content=chunk,
                    headers={
                        "Content-Length": str(len(chunk)),
                        "Content-Range": f"bytes {start}-{end}/{total}",
                    },
                )
                resp.raise_for_status()
        return True

    async def download(self, path: str) -> bytes:
        resp = await self._request("GET", self._item_url(path, "content"))
        if resp.status_code == 404:
            raise FileNotFoundError(f"File not found: {path}")
        resp.raise_for_status()
        return resp.content

    async def get_visibility(self, path: str) -> Visibility:
        item = await self._get_item(path)
        if item is None:
            raise FileNotFoundError(f"Path does not exist: {path}")
        shared = item.get("shared") or {}
        if shared.get("scope") == "anonymous":
            return Visibility.PUBLIC
        return Visibility.PRIVATE

    async def url(self, path: str) -> str:
        item = await self._get_item(path)
        if item is None:
            raise FileNotFoundError(f"Path does not exist: {path}")
        return item.get("webUrl", "")
