# OAuth token cache: client-credentials grant with a lazily refreshed, session-scoped token.
# Created: 2026-10-16

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx

from pocketdrive.errors import AuthenticationFailed

if TYPE_CHECKING:
    from pocketdrive.config import DiskConfig
    from pocketdrive.sessions import Session

logger = logging.getLogger(__name__)


@dataclass
class OAuthToken:
    """Bearer token obtained from the token endpoint."""

    access_token: str
    expires_at: float  # Unix timestamp
    token_type: str = "Bearer"

    def is_expired(self, now: float | None = None) -> bool:
        return (time.time() if now is None else now) >= self.expires_at


def token_url(authority: str, tenant_id: str) -> str:
    return f"{authority.rstrip('/')}/{tenant_id}/oauth2/v2.0/token"


class TokenCache:
    """Client-credentials token cache for one disk.

    The token lives on the session, so two browsing sessions never share
    credentials. Refresh is lazy: an expired token is replaced on the next
    call, never ahead of time. Failures are not retried.
    """

    def __init__(
        self,
        disk: DiskConfig,
        timeout: float = 15.0,
        clock: Callable[[], float] = time.time,
    ):
        self.disk = disk
        self.timeout = timeout
        self._clock = clock

    async def get_token(self, session: Session) -> str:
        """Return the session's access token, exchanging credentials when absent or expired."""
        async with session.token_lock:
            cached = session.token
            if cached is not None and not cached.is_expired(self._clock()):
                return cached.access_token

            token = await self._exchange()
            session.token = token
            logger.info("Obtained access token for session %s", session.id)
            return token.access_token

    def invalidate(self, session: Session) -> None:
        """Drop the session's cached token so the next call re-authenticates."""
        session.token = None

    async def _exchange(self) -> OAuthToken:
        disk = self.disk
        url = token_url(disk.authority, disk.tenant_id)
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    url,
                    data={
                        "client_id": disk.client_id,
                        "scope": disk.scope,
                        "grant_type": "client_credentials",
                        "client_secret": disk.client_secret,
                    },
                    headers={"Accept": "application/json"},
                )
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as e:
            logger.warning("Token endpoint returned %s", e.response.status_code)
            raise AuthenticationFailed(e) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Token exchange failed: %s", e)
            raise AuthenticationFailed(e) from e

        access_token = data.get("access_token") if isinstance(data, dict) else None
        if not access_token:
            raise AuthenticationFailed("token response has no access_token")

        try:
            expires_in = float(data["expires_in"])
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Token response has no usable expires_in: %r", data.get("expires_in"))
            raise AuthenticationFailed("token response has no valid expires_in") from e

        return OAuthToken(
            access_token=access_token,
            expires_at=self._clock() + expires_in,
            token_type=data.get("token_type", "Bearer"),
        )
