"""Tests for the token manager."""

import asyncio
import json
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import httpx
import pytest

from translate_proxy.errors import CredentialStoreError, ErrorKind, TokenRefreshError
from translate_proxy.services.auth import (
    Credentials,
    CredentialStore,
    StoredConfig,
    TokenManager,
)
from translate_proxy.services.request_executor import HttpSession

IAM_URL = "https://iam.test/iam/v1/tokens"


def _future() -> datetime:
    return datetime.now(timezone.utc) + timedelta(hours=1)


def _past() -> datetime:
    return datetime.now(timezone.utc) - timedelta(minutes=1)


def _config(access_token: str = "", expiry=None) -> StoredConfig:
    return StoredConfig(
        folder_id="b1gfolder",
        credentials=Credentials("oauth-token", access_token, expiry),
    )


class IamServer:
    """Mock IAM endpoint counting token exchanges."""

    def __init__(
        self,
        status_code: int = 200,
        delay: float = 0.0,
        expires_at: str = "2099-01-01T00:00:00.123456789Z",
    ):
        self.status_code = status_code
        self.delay = delay
        self.expires_at = expires_at
        self.requests = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.status_code != 200:
            return httpx.Response(self.status_code, text="denied")
        body = {"iamToken": f"iam-{len(self.requests)}"}
        if self.expires_at is not None:
            body["expiresAt"] = self.expires_at
        return httpx.Response(200, json=body)


def _manager(config, server, **kwargs) -> TokenManager:
    http = HttpSession(transport=httpx.MockTransport(server))
    return TokenManager(config, http, IAM_URL, **kwargs)


class TestGetAccessToken:
    """Tests for TokenManager.get_access_token."""

    @pytest.mark.asyncio
    async def test_valid_token_makes_no_network_call(self):
        """A valid token should make no network call."""
        server = IamServer()
        manager = _manager(_config("cached", _future()), server)

        token = await manager.get_access_token()

        assert token == "cached"
        assert server.requests == []

    @pytest.mark.asyncio
    async def test_expired_token_refreshes_once(self):
        """An expired token should be exchanged once."""
        server = IamServer()
        manager = _manager(_config("stale", _past()), server)

        token = await manager.get_access_token()

        assert token == "iam-1"
        assert len(server.requests) == 1
        request = server.requests[0]
        assert request.method == "POST"
        assert json.loads(request.content) == {
            "yandexPassportOauthToken": "oauth-token"
        }
        creds = manager.credentials
        assert creds.access_token == "iam-1"
        assert creds.access_token_expiry.year == 2099

    @pytest.mark.asyncio
    async def test_empty_token_refreshes_once(self):
        """An empty token should be exchanged once."""
        server = IamServer()
        manager = _manager(_config("", _future()), server)

        assert await manager.get_access_token() == "iam-1"
        assert len(server.requests) == 1

    @pytest.mark.asyncio
    async def test_refreshed_token_is_cached(self):
        """A refreshed token should be cached."""
        server = IamServer()
        manager = _manager(_config(), server)

        await manager.get_access_token()
        await manager.get_access_token()

        assert len(server.requests) == 1

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_refresh(self):
        """Concurrent callers should share one exchange."""
        server = IamServer(delay=0.01)
        manager = _manager(_config(), server)

        tokens = await asyncio.gather(*(manager.get_access_token() for _ in range(5)))

        assert set(tokens) == {"iam-1"}
        assert len(server.requests) == 1

    @pytest.mark.asyncio
    async def test_failed_exchange_raises_refresh_error(self):
        """A failed exchange should raise TokenRefreshError."""
        server = IamServer(status_code=401)
        manager = _manager(_config(), server)

        with pytest.raises(TokenRefreshError) as exc_info:
            await manager.get_access_token()

        error = exc_info.value
        assert error.is_status(401)
        assert error.cause.kind is ErrorKind.STATUS
        assert error.cause.body == "denied"
        assert len(server.requests) == 1
        assert manager.credentials.access_token == ""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("expires_at", [None, "", "whenever"])
    async def test_unusable_expiry_is_rejected(self, expires_at):
        """A token without a parseable expiry is not cached or retried."""
        server = IamServer(expires_at=expires_at)
        manager = _manager(_config(), server)

        with pytest.raises(TokenRefreshError) as exc_info:
            await manager.get_access_token()

        assert exc_info.value.cause.kind is ErrorKind.TRANSPORT
        assert "expiry" in str(exc_info.value)
        assert len(server.requests) == 1
        assert manager.credentials.access_token == ""


class TestPersistence:
    """Tests for saving the config after a refresh."""

    @pytest.mark.asyncio
    async def test_persists_when_enabled(self):
        """Config should be saved when persistence is on."""
        store = MagicMock(spec=CredentialStore)
        manager = _manager(_config(), IamServer(), store=store, persist_on_refresh=True)

        await manager.get_access_token()

        store.save.assert_called_once_with(manager.config)

    @pytest.mark.asyncio
    async def test_no_persist_when_disabled(self):
        """Config should not be saved when persistence is off."""
        store = MagicMock(spec=CredentialStore)
        manager = _manager(_config(), IamServer(), store=store, persist_on_refresh=False)

        await manager.get_access_token()

        store.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_argument_overrides_default(self):
        """The argument should override the default."""
        store = MagicMock(spec=CredentialStore)
        manager = _manager(_config(), IamServer(), store=store, persist_on_refresh=True)

        await manager.get_access_token(persist_on_refresh=False)

        store.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_persist_failure_is_not_fatal(self):
        """A save failure should not fail the refresh."""
        store = MagicMock(spec=CredentialStore)
        store.save.side_effect = CredentialStoreError("disk full")
        manager = _manager(_config(), IamServer(), store=store, persist_on_refresh=True)

        token = await manager.get_access_token()

        assert token == "iam-1"
        assert manager.credentials.access_token == "iam-1"

    @pytest.mark.asyncio
    async def test_writes_config_file(self, tmp_path):
        """Refresh should write the config file."""
        store = CredentialStore(str(tmp_path / "config.json"))
        manager = _manager(_config(), IamServer(), store=store, persist_on_refresh=True)

        await manager.get_access_token()

        data = json.loads((tmp_path / "config.json").read_text())
        assert data["access_token"] == "iam-1"
        assert data["folder_id"] == "b1gfolder"
        assert data["access_token_expiry"].startswith("2099-01-01")


class TestRefreshAccessToken:
    """Tests for forced refresh."""

    @pytest.mark.asyncio
    async def test_forces_exchange_for_valid_token(self):
        """A rejected token should be exchanged even if unexpired."""
        server = IamServer()
        manager = _manager(_config("cached", _future()), server)

        token = await manager.refresh_access_token(rejected_token="cached")

        assert token == "iam-1"
        assert len(server.requests) == 1

    @pytest.mark.asyncio
    async def test_skips_exchange_when_already_replaced(self):
        """An already replaced token should be returned as is."""
        server = IamServer()
        manager = _manager(_config("fresh", _future()), server)

        token = await manager.refresh_access_token(rejected_token="rejected")

        assert token == "fresh"
        assert server.requests == []
