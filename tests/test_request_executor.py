"""Tests for HttpSession and RequestExecutor."""

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from translate_proxy.errors import ErrorKind, RequestError
from translate_proxy.schemas import CloudsResponse, CreateFolderRequest
from translate_proxy.services.auth import TokenManager
from translate_proxy.services.request_executor import HttpSession, RequestExecutor

URL = "https://api.test/resource"


def _session(handler) -> HttpSession:
    return HttpSession(transport=httpx.MockTransport(handler))


class TestHttpSessionSend:
    """Tests for HttpSession.send."""

    @pytest.mark.asyncio
    async def test_decodes_success_response(self):
        """A 200 response should decode into the model."""
        def handler(request):
            return httpx.Response(
                200,
                json={"clouds": [{"id": "c1", "name": "main"}], "nextPageToken": ""},
            )

        resp = await _session(handler).send(
            "clouds", "GET", URL, response_model=CloudsResponse
        )

        assert isinstance(resp, CloudsResponse)
        assert resp.clouds[0].id == "c1"
        assert resp.clouds[0].name == "main"

    @pytest.mark.asyncio
    async def test_sets_bearer_token_and_encodes_payload(self):
        """Bearer token and JSON payload should be sent."""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={})

        await _session(handler).send(
            "create folder",
            "POST",
            URL,
            token="iam-token",
            payload=CreateFolderRequest(cloud_id="c1", name="proxy"),
        )

        request = seen[0]
        assert request.headers["Authorization"] == "Bearer iam-token"
        assert request.headers["Content-Type"] == "application/json"
        # None fields are not sent
        assert json.loads(request.content) == {"cloudId": "c1", "name": "proxy"}

    @pytest.mark.asyncio
    async def test_no_authorization_without_token(self):
        """No Authorization header should be sent without a token."""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200)

        await _session(handler).send("ping", "GET", URL, params={"cloudId": "c1"})

        assert "Authorization" not in seen[0].headers
        assert seen[0].url.params["cloudId"] == "c1"

    @pytest.mark.asyncio
    async def test_non_200_raises_status_error(self):
        """A non-200 response should raise a STATUS error."""
        def handler(request):
            return httpx.Response(404, text='{"message": "not found"}')

        with pytest.raises(RequestError) as exc_info:
            await _session(handler).send(
                "get folder", "GET", URL, response_model=CloudsResponse
            )

        error = exc_info.value
        assert error.kind is ErrorKind.STATUS
        assert error.status_code == 404
        assert error.status_text == "Not Found"
        assert error.body == '{"message": "not found"}'
        assert error.is_status(404)
        assert not error.is_status(401)
        assert "get folder" in str(error)

    @pytest.mark.asyncio
    async def test_other_2xx_is_a_status_error(self):
        """Other 2xx codes should be STATUS errors too."""
        def handler(request):
            return httpx.Response(204)

        with pytest.raises(RequestError) as exc_info:
            await _session(handler).send("clouds", "GET", URL)

        assert exc_info.value.is_status(204)

    @pytest.mark.asyncio
    async def test_network_failure_raises_transport_error(self):
        """A network failure should raise a TRANSPORT error."""
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(RequestError) as exc_info:
            await _session(handler).send("clouds", "GET", URL)

        error = exc_info.value
        assert error.kind is ErrorKind.TRANSPORT
        assert error.status_code is None
        assert "connection refused" in str(error)

    @pytest.mark.asyncio
    async def test_timeout_raises_transport_error(self):
        """A timeout should raise a TRANSPORT error."""
        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        with pytest.raises(RequestError) as exc_info:
            await _session(handler).send("clouds", "GET", URL)

        assert exc_info.value.kind is ErrorKind.TRANSPORT
        assert "timed out" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_invalid_json_raises_transport_error(self):
        """Invalid JSON should raise a TRANSPORT error."""
        def handler(request):
            return httpx.Response(200, text="<html>oops</html>")

        with pytest.raises(RequestError) as exc_info:
            await _session(handler).send(
                "clouds", "GET", URL, response_model=CloudsResponse
            )

        assert exc_info.value.kind is ErrorKind.TRANSPORT

    @pytest.mark.asyncio
    async def test_empty_body_decodes_defaults(self):
        """An empty body should decode into defaults."""
        def handler(request):
            return httpx.Response(200, content=b"")

        resp = await _session(handler).send(
            "clouds", "GET", URL, response_model=CloudsResponse
        )

        assert resp.clouds == []

    @pytest.mark.asyncio
    async def test_no_model_skips_decoding(self):
        """No response model should skip decoding."""
        def handler(request):
            return httpx.Response(200, text="not json at all")

        assert await _session(handler).send("ping", "GET", URL) is None

    @pytest.mark.asyncio
    async def test_unserializable_payload_raises_transport_error(self):
        """An unserializable payload should raise a TRANSPORT error."""
        def handler(request):
            return httpx.Response(200)

        with pytest.raises(RequestError) as exc_info:
            await _session(handler).send("ping", "POST", URL, payload={"x": object()})

        assert exc_info.value.kind is ErrorKind.TRANSPORT


class TestRequestExecutor:
    """Tests for RequestExecutor.execute and its 401 retry policy."""

    def _token_manager(self) -> AsyncMock:
        manager = AsyncMock(spec=TokenManager)
        manager.get_access_token.return_value = "old-token"
        manager.refresh_access_token.return_value = "new-token"
        return manager

    def _executor(self, statuses, token_manager):
        """Executor whose upstream answers with the given statuses in order."""
        seen = []
        statuses = list(statuses)

        def handler(request):
            seen.append(request)
            status = statuses.pop(0)
            if status == 200:
                return httpx.Response(200, json={"clouds": [{"id": "c1"}]})
            return httpx.Response(status, text="error")

        return RequestExecutor(_session(handler), token_manager), seen

    @pytest.mark.asyncio
    async def test_attaches_current_token(self):
        """The current token should be attached."""
        manager = self._token_manager()
        executor, seen = self._executor([200], manager)

        resp = await executor.execute(
            "clouds", "GET", URL, response_model=CloudsResponse
        )

        assert resp.clouds[0].id == "c1"
        assert seen[0].headers["Authorization"] == "Bearer old-token"
        manager.refresh_access_token.assert_not_called()

    @pytest.mark.asyncio
    async def test_401_then_success_refreshes_once(self):
        """A 401 should refresh once and retry with the new token."""
        manager = self._token_manager()
        executor, seen = self._executor([401, 200], manager)

        resp = await executor.execute(
            "translate",
            "POST",
            URL,
            payload={"texts": ["hi"]},
            response_model=CloudsResponse,
            retry_unauthorized=True,
        )

        assert resp.clouds[0].id == "c1"
        manager.refresh_access_token.assert_awaited_once_with(rejected_token="old-token")
        assert [r.headers["Authorization"] for r in seen] == [
            "Bearer old-token",
            "Bearer new-token",
        ]
        assert json.loads(seen[1].content) == {"texts": ["hi"]}

    @pytest.mark.asyncio
    async def test_401_twice_surfaces_second_error(self):
        """A second 401 should be raised."""
        manager = self._token_manager()
        executor, seen = self._executor([401, 401], manager)

        with pytest.raises(RequestError) as exc_info:
            await executor.execute("translate", "POST", URL, retry_unauthorized=True)

        assert exc_info.value.is_status(401)
        assert len(seen) == 2
        manager.refresh_access_token.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_401_without_retry_policy_propagates(self):
        """A 401 without retry policy should propagate."""
        manager = self._token_manager()
        executor, seen = self._executor([401], manager)

        with pytest.raises(RequestError) as exc_info:
            await executor.execute("clouds", "GET", URL)

        assert exc_info.value.is_status(401)
        assert len(seen) == 1
        manager.refresh_access_token.assert_not_called()

    @pytest.mark.asyncio
    async def test_other_status_is_not_retried(self):
        """Other statuses should not be retried."""
        manager = self._token_manager()
        executor, seen = self._executor([500], manager)

        with pytest.raises(RequestError) as exc_info:
            await executor.execute("translate", "POST", URL, retry_unauthorized=True)

        assert exc_info.value.is_status(500)
        assert len(seen) == 1
        manager.refresh_access_token.assert_not_called()
