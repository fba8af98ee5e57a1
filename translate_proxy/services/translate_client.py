"""
Translation gateway - the single domain call exposed to the HTTP layer.
"""

import logging
from typing import List, Optional

from ..schemas import TranslateRequest, TranslateResponse
from .folder_resolver import ResolvedScope
from .request_executor import RequestExecutor

logger = logging.getLogger(__name__)


class TranslationGateway:
    """
    Sends translate requests on behalf of clients.

    `scope` is filled in after startup resolution; requests that do not name a
    folder run under the resolved one.
    """

    def __init__(
        self,
        executor: RequestExecutor,
        translate_url: str,
        scope: Optional[ResolvedScope] = None,
        log_payloads: bool = False,
    ):
        self.executor = executor
        self.translate_url = translate_url
        self.scope = scope
        self.log_payloads = log_payloads

    @property
    def folder_id(self) -> str:
        return self.scope.folder_id if self.scope else ""

    async def translate(
        self,
        texts: List[str],
        target_language: str,
        source_language: Optional[str] = None,
        folder_id: Optional[str] = None,
    ) -> TranslateResponse:
        """
        Translate texts, retrying once with a fresh token on 401.

        Raises:
            RequestError: The translate call failed
            TokenRefreshError: An access token could not be obtained
        """
        request = TranslateRequest(
            folder_id=folder_id or self.folder_id or None,
            texts=texts,
            source_language_code=source_language or None,
            target_language_code=target_language,
        )
        logger.debug(
            f"Translating {len(texts)} text(s) to {target_language} "
            f"in folder {request.folder_id}"
        )
        return await self.executor.execute(
            "translate",
            "POST",
            self.translate_url,
            payload=request,
            response_model=TranslateResponse,
            retry_unauthorized=True,
            log_payloads=self.log_payloads,
        )
