# Tests for integrations/oauth.py: client-credentials TokenCache.

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from pocketdrive.config import DiskConfig
from pocketdrive.errors import AuthenticationFailed
from pocketdrive.integrations.oauth import OAuthToken, TokenCache, token_url
from pocketdrive.sessions import Session


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def disk():
    return DiskConfig(
        driver="onedrive",
        tenant_id="tenant-1",
        client_id="client-1",
        client_secret="s3cret",
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(disk, clock):
    return TokenCache(disk, timeout=5, clock=clock)


@pytest.fixture
def remote_session():
    return Session(id="sess-1", disk="onedrive")


def _mock_http(response_json=None, status_code=200, post_side_effect=None):
    """Patch httpx.AsyncClient so POST returns a canned token response."""
    mock_client = AsyncMock()
    mock_resp = MagicMock()
    mock_resp.status_code = status_code
    mock_resp.json.return_value = response_json
    if status_code >= 400:
        request = httpx.Request("POST", "https://login.example.com/token")
        mock_resp.raise_for_status.side_effect = httpx.HTTPStatusError(
            "error", request=request, response=httpx.Response(status_code, request=request)
        )
    else:
        mock_resp.raise_for_status = MagicMock()
    mock_client.post = AsyncMock(return_value=mock_resp, side_effect=post_side_effect)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    return patch("httpx.AsyncClient", return_value=mock_client), mock_client


# ---------------------------------------------------------------------------
# OAuthToken
# ---------------------------------------------------------------------------


class TestOAuthToken:
    def test_defaults(self):
        t = OAuthToken(access_token="a", expires_at=10.0)
        assert t.token_type == "Bearer"

    def test_expiry_boundary(self):
        t = OAuthToken(access_token="a", expires_at=100.0)
        assert not t.is_expired(99.9)
        assert t.is_expired(100.0)
        assert t.is_expired(150.0)

    def test_token_url(self):
        url = token_url("https://login.microsoftonline.com/", "tenant-1")
        assert url == "https://login.microsoftonline.com/tenant-1/oauth2/v2.0/token"


# ---------------------------------------------------------------------------
# TokenCache.get_token
# ---------------------------------------------------------------------------


class TestGetToken:
    async def test_first_call_exchanges_credentials(self, cache, remote_session, clock):
        patcher, client = _mock_http({"access_token": "tok-1", "expires_in": 3600})
        with patcher:
            token = await cache.get_token(remote_session)

        assert token == "tok-1"
        assert remote_session.token.expires_at == clock.now + 3600
        url = client.post.call_args.args[0]
        assert url == "https://login.microsoftonline.com/tenant-1/oauth2/v2.0/token"
        data = client.post.call_args.kwargs["data"]
        assert data == {
            "client_id": "client-1",
            "scope": "https://graph.microsoft.com/.default",
            "grant_type": "client_credentials",
            "client_secret": "s3cret",
        }

    async def test_fresh_token_returned_without_network(self, cache, remote_session, clock):
        remote_session.token = OAuthToken(access_token="cached", expires_at=clock.now + 60)
        with patch("httpx.AsyncClient") as mock_cls:
            token = await cache.get_token(remote_session)
        assert token == "cached"
        mock_cls.assert_not_called()

    async def test_expired_token_refreshed(self, cache, remote_session, clock):
        remote_session.token = OAuthToken(access_token="old", expires_at=clock.now - 1)
        patcher, client = _mock_http({"access_token": "new", "expires_in": 60})
        with patcher:
            token = await cache.get_token(remote_session)
        assert token == "new"
        assert client.post.call_count == 1

    async def test_lazy_refresh_after_clock_passes_expiry(self, cache, remote_session, clock):
        patcher, client = _mock_http({"access_token": "tok", "expires_in": 100})
        with patcher:
            await cache.get_token(remote_session)
            clock.now += 99
            await cache.get_token(remote_session)
            assert client.post.call_count == 1
            clock.now += 1
            await cache.get_token(remote_session)
            assert client.post.call_count == 2

    async def test_sessions_do_not_share_tokens(self, cache, clock):
        a = Session(id="a", disk="onedrive")
        b = Session(id="b", disk="onedrive")
        a.token = OAuthToken(access_token="token-a", expires_at=clock.now + 600)

        patcher, client = _mock_http({"access_token": "token-b", "expires_in": 600})
        with patcher:
            assert await cache.get_token(b) == "token-b"
            assert await cache.get_token(a) == "token-a"
        assert client.post.call_count == 1

    async def test_concurrent_calls_refresh_once(self, cache, remote_session):
        patcher, client = _mock_http({"access_token": "tok", "expires_in": 600})
        resp = client.post.return_value

        async def delayed(*args, **kwargs):
            await asyncio.sleep(0.01)
            return resp

        client.post = AsyncMock(side_effect=delayed)
        with patcher:
            tokens = await asyncio.gather(*(cache.get_token(remote_session) for _ in range(5)))

        assert tokens == ["tok"] * 5
        assert client.post.call_count == 1

    def test_invalidate(self, cache, remote_session):
        remote_session.token = OAuthToken(access_token="x", expires_at=1e12)
        cache.invalidate(remote_session)
        assert remote_session.token is None


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestFailures:
    async def test_non_2xx(self, cache, remote_session):
        patcher, _ = _mock_http({"error": "invalid_client"}, status_code=401)
        with patcher, pytest.raises(AuthenticationFailed):
            await cache.get_token(remote_session)
        assert remote_session.token is None

    async def test_missing_access_token(self, cache, remote_session):
        patcher, _ = _mock_http({"expires_in": 3600})
        with patcher, pytest.raises(AuthenticationFailed, match="access_token"):
            await cache.get_token(remote_session)

    @pytest.mark.parametrize("payload", [{}, {"expires_in": "soon"}, {"expires_in": None}])
    async def test_invalid_expires_in(self, cache, remote_session, payload):
        patcher, _ = _mock_http({"access_token": "tok", **payload})
        with patcher, pytest.raises(AuthenticationFailed, match="expires_in"):
            await cache.get_token(remote_session)
        assert remote_session.token is None

    async def test_timeout(self, cache, remote_session):
        patcher, _ = _mock_http(post_side_effect=httpx.ConnectTimeout("timed out"))
        with patcher, pytest.raises(AuthenticationFailed):
            await cache.get_token(remote_session)

    async def test_no_automatic_retry(self, cache, remote_session):
        patcher, client = _mock_http(post_side_effect=httpx.ConnectError("refused"))
        with patcher, pytest.raises(AuthenticationFailed):
            await cache.get_token(remote_session)
        assert client.post.call_count == 1
