"""
Authenticated request executor - the one place upstream HTTP calls are made,
their status classified and their payloads decoded.
"""

import json
import logging
from typing import TYPE_CHECKING, Any, Dict, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ..config import CONNECT_TIMEOUT, REQUEST_TIMEOUT
from ..errors import RequestError
from ..utils import get_user_agent

if TYPE_CHECKING:
    from .auth.token_manager import TokenManager

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _encode_payload(operation: str, payload: Any) -> bytes:
    try:
        if isinstance(payload, BaseModel):
            return payload.model_dump_json(by_alias=True, exclude_none=True).encode(
                "utf-8"
            )
        return json.dumps(payload).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise RequestError.transport(operation, f"request marshal: {e}") from e


class HttpSession:
    """
    Sends JSON requests and decodes JSON responses into pydantic models.

    A fresh `httpx.AsyncClient` is opened for each call, so the connection is
    released on every exit path.
    """

    def __init__(
        self,
        timeout: float = REQUEST_TIMEOUT,
        verify: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = httpx.Timeout(timeout, connect=CONNECT_TIMEOUT)
        self.verify = verify
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout, verify=self.verify, transport=self._transport
        )

    async def send(
        self,
        operation: str,
        method: str,
        url: str,
        *,
        token: Optional[str] = None,
        payload: Any = None,
        params: Optional[Dict[str, str]] = None,
        response_model: Optional[Type[ModelT]] = None,
        log_payloads: bool = False,
    ) -> Optional[ModelT]:
        """
        Send one request and decode the response.

        Args:
            operation: Logical name of the call, used in errors and logs
            method: HTTP method
            url: Target URL
            token: Bearer token; no Authorization header when None
            payload: JSON body (pydantic model or plain data)
            params: Query parameters
            response_model: Model to decode a 200 response into; None skips decoding
            log_payloads: Log request and response bodies at DEBUG level

        Returns:
            Decoded response model, or None when no model is expected

        Raises:
            RequestError: STATUS for any non-200 response, TRANSPORT for
                network, marshalling and decoding failures
        """
        headers = {
            "Content-Type": "application/json",
            "User-Agent": get_user_agent(),
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        content = None
        if payload is not None:
            content = _encode_payload(operation, payload)
            if log_payloads:
                logger.debug(f"-> : {content.decode('utf-8')}")

        try:
            async with self._client() as client:
                resp = await client.request(
                    method, url, content=content, params=params, headers=headers
                )
        except httpx.TimeoutException as e:
            raise RequestError.transport(operation, f"request timed out: {e}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise RequestError.transport(operation, f"response: {e}") from e

        if resp.status_code != 200:
            logger.debug(f"{operation} failed with status {resp.status_code}")
            raise RequestError.status(
                operation, resp.status_code, resp.reason_phrase, resp.text
            )

        if response_model is None:
            return None

        body = resp.content
        if log_payloads:
            logger.debug(f"<- : {resp.text}")
        try:
            if not body.strip():
                return response_model.model_validate({})
            return response_model.model_validate_json(body)
        except ValidationError as e:
            raise RequestError.transport(
                operation, f"response payload unmarshal {resp.text[:500]!r}: {e}"
            ) from e


class RequestExecutor:
    """Attaches the current access token to requests sent through `HttpSession`."""

    def __init__(self, http: HttpSession, token_manager: "TokenManager"):
        self.http = http
        self.token_manager = token_manager

    async def execute(
        self,
        operation: str,
        method: str,
        url: str,
        *,
        payload: Any = None,
        params: Optional[Dict[str, str]] = None,
        response_model: Optional[Type[ModelT]] = None,
        retry_unauthorized: bool = False,
        log_payloads: bool = False,
    ) -> Optional[ModelT]:
        """
        Execute an authenticated request.

        With `retry_unauthorized`, a 401 response forces one token refresh and
        the request is retried exactly once. Any other error, and any error of
        the retry, propagates unchanged.

        Raises:
            RequestError: See `HttpSession.send`
            TokenRefreshError: If an access token cannot be obtained
        """
        token = await self.token_manager.get_access_token()
        try:
            return await self.http.send(
                operation,
                method,
                url,
                token=token,
                payload=payload,
                params=params,
                response_model=response_model,
                log_payloads=log_payloads,
            )
        except RequestError as e:
            if not (retry_unauthorized and e.is_status(401)):
                raise
            logger.debug(
                f"Unauthorized {operation} request, refreshing access token: {e}"
            )

        token = await self.token_manager.refresh_access_token(rejected_token=token)
        return await self.http.send(
            operation,
            method,
            url,
            token=token,
            payload=payload,
            params=params,
            response_model=response_model,
            log_payloads=log_payloads,
        )
