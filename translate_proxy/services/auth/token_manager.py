"""
Token manager: owns the in-memory credentials and refreshes the access token.
"""

import asyncio
import logging
from typing import Optional

from ...errors import CredentialStoreError, RequestError, TokenRefreshError
from ...schemas import IamTokenRequest, IamTokenResponse
from ..request_executor import HttpSession
from .credential_store import CredentialStore, StoredConfig
from .credentials import Credentials, parse_expiry

logger = logging.getLogger(__name__)


class TokenManager:
    """
    Hands out access tokens, exchanging the OAuth token for a new one when the
    cached token is missing or expired.

    All mutation of the credentials happens under one lock, with the expiry
    re-checked after acquiring it, so concurrent callers never issue duplicate
    exchanges or overwrite a fresh token with a stale one.
    """

    def __init__(
        self,
        config: StoredConfig,
        http: HttpSession,
        iam_token_url: str,
        store: Optional[CredentialStore] = None,
        persist_on_refresh: bool = False,
    ):
        self.config = config
        self.http = http
        self.iam_token_url = iam_token_url
        self.store = store
        self.persist_on_refresh = persist_on_refresh
        self._lock = asyncio.Lock()

    @property
    def credentials(self) -> Credentials:
        return self.config.credentials

    async def get_access_token(self, persist_on_refresh: Optional[bool] = None) -> str:
        """
        Return a valid access token, refreshing it if expired.

        Args:
            persist_on_refresh: Save the config after a refresh; defaults to
                the manager's setting

        Raises:
            TokenRefreshError: If the token exchange fails
        """
        if not self.credentials.is_expired():
            return self.credentials.access_token

        async with self._lock:
            if not self.credentials.is_expired():
                return self.credentials.access_token
            return await self._refresh(persist_on_refresh)

    async def refresh_access_token(
        self,
        rejected_token: Optional[str] = None,
        persist_on_refresh: Optional[bool] = None,
    ) -> str:
        """
        Force a token exchange, bypassing the expiry check.

        If `rejected_token` was already replaced by a valid token while
        waiting for the lock, that token is returned instead.

        Raises:
            TokenRefreshError: If the token exchange fails
        """
        async with self._lock:
            current = self.credentials
            if (
                rejected_token is not None
                and current.access_token != rejected_token
                and not current.is_expired()
            ):
                logger.debug("Access token already refreshed by another request")
                return current.access_token
            return await self._refresh(persist_on_refresh)

    async def request_access_token(self) -> IamTokenResponse:
        """Exchange the OAuth token for a new access token."""
        request = IamTokenRequest(
            yandex_passport_oauth_token=self.credentials.oauth_token
        )
        return await self.http.send(
            "request access token",
            "POST",
            self.iam_token_url,
            payload=request,
            response_model=IamTokenResponse,
        )

    async def _refresh(self, persist_on_refresh: Optional[bool]) -> str:
        # Caller holds self._lock
        try:
            token_resp = await self.request_access_token()
        except RequestError as e:
            logger.error(f"Failed to refresh access token: {e}")
            raise TokenRefreshError(e) from e

        if not token_resp.iam_token:
            raise TokenRefreshError(
                RequestError.transport(
                    "request access token", "empty access token in response"
                )
            )

        expiry = parse_expiry(token_resp.expires_at)
        if expiry is None:
            # A cached token needs a known expiry
            raise TokenRefreshError(
                RequestError.transport(
                    "request access token",
                    f"invalid access token expiry {token_resp.expires_at!r}",
                )
            )
        self.credentials.update_access_token(token_resp.iam_token, expiry)
        logger.info(f"Access token refreshed, expires at {token_resp.expires_at}")

        persist = (
            self.persist_on_refresh if persist_on_refresh is None else persist_on_refresh
        )
        if persist:
            self._persist()
        return token_resp.iam_token

    def _persist(self) -> None:
        if self.store is None:
            return
        try:
            self.store.save(self.config)
        except CredentialStoreError as e:
            logger.error(f"Could not persist refreshed access token: {e}")
