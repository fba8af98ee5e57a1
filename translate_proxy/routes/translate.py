"""
Translate Routes - the proxy's own endpoint and the emulated legacy v1.5 API.
"""

import json
import logging
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from ..config import (
    ERROR_TYPE_API,
    ERROR_TYPE_INVALID_REQUEST,
    create_error_response,
)
from ..errors import ErrorKind, RequestError, TokenRefreshError, TranslateProxyError
from ..schemas import LegacyTranslateResponse, ProxyTranslateRequest
from ..services.translate_client import TranslationGateway

logger = logging.getLogger(__name__)
router = APIRouter()

LEGACY_TRANSLATE_PATH = "/api/v1.5/tr.json/translate"


def get_gateway(request: Request) -> TranslationGateway:
    return request.app.state.gateway


def _create_json_error_response(
    message: str, status_code: int, error_type: str = ERROR_TYPE_API
) -> Response:
    """Create a JSON error response."""
    return Response(
        content=json.dumps(create_error_response(message, error_type, status_code)),
        status_code=status_code,
        media_type="application/json",
    )


def _upstream_error_response(error: TranslateProxyError) -> Response:
    """Map a failed upstream call to a 502 error response."""
    logger.error(f"Translate failed: {error}")
    if isinstance(error, TokenRefreshError):
        error = error.cause
    if isinstance(error, RequestError) and error.kind is ErrorKind.STATUS:
        message = f"Upstream error {error.status_code}: {error.body or error.status_text}"
    else:
        message = f"Upstream request failed: {error}"
    return _create_json_error_response(message, 502)


def extract_language(lang_country: str) -> str:
    """Cut a region suffix from a language code: "en-US" -> "en"."""
    if "-" in lang_country:
        return lang_country.split("-")[0]
    return lang_country


def split_languages(language: str) -> Tuple[str, str]:
    """
    Split a legacy "SRC-DST" language pair.

    Examples:
    - "en-ru" -> ("en", "ru")

    Raises:
        ValueError: If the pair is empty or malformed
    """
    if not language:
        raise ValueError(
            "empty source-destination languages format (expected SRC-DST)"
        )
    if "-" not in language:
        raise ValueError(
            f"bad source-destination languages format {language} (expected SRC-DST)"
        )
    parts = language.split("-")
    if len(parts) != 2:
        raise ValueError(
            f"unexpected source-destination languages format {language} "
            "(expected SRC-DST)"
        )
    src_lang, dest_lang = parts
    if not src_lang:
        raise ValueError(f"bad source language: {language}")
    if not dest_lang:
        raise ValueError(f"bad destination language: {language}")
    return src_lang, dest_lang


@router.get("/", response_class=PlainTextResponse, include_in_schema=False)
async def root() -> str:
    return "ok"


@router.get("/health", tags=["Health"])
async def health_check(gateway: TranslationGateway = Depends(get_gateway)) -> dict:
    """Health check endpoint."""
    return {"status": "healthy", "folder_id": gateway.folder_id}


@router.post(
    "/",
    tags=["Translate"],
    summary="Translate texts",
    description="""
Translate texts with Yandex Cloud Translate.

The body uses the Translate v2 format (`texts`, `targetLanguageCode`,
optional `sourceLanguageCode` and `folderId`). Language codes with a region
suffix such as `en-US` are reduced to `en`.
""",
)
async def translate(
    request: Request, gateway: TranslationGateway = Depends(get_gateway)
) -> Response:
    body = await request.body()
    try:
        payload = ProxyTranslateRequest.model_validate_json(body or b"{}")
    except ValidationError as e:
        logger.error(f"Invalid translate request: {e}")
        return _create_json_error_response(
            f"request unmarshal: {e}", 400, ERROR_TYPE_INVALID_REQUEST
        )

    try:
        result = await gateway.translate(
            payload.texts,
            extract_language(payload.target_language_code),
            source_language=extract_language(payload.source_language_code) or None,
            folder_id=payload.folder_id or None,
        )
    except TranslateProxyError as e:
        return _upstream_error_response(e)

    logger.info(f"Translated {len(payload.texts)} text(s)")
    return Response(
        content=result.model_dump_json(by_alias=True),
        status_code=200,
        media_type="application/json; charset=utf-8",
    )


@router.options(LEGACY_TRANSLATE_PATH, include_in_schema=False)
async def legacy_translate_options() -> Response:
    return Response(status_code=200, headers={"Allow": "GET,OPTIONS"})


@router.get(
    LEGACY_TRANSLATE_PATH,
    tags=["Translate"],
    summary="Legacy translate (v1.5)",
    description="Emulates the old `tr.json/translate` API: `?lang=en-ru&text=...`.",
)
async def legacy_translate(
    lang: str = "",
    text: Optional[str] = None,
    gateway: TranslationGateway = Depends(get_gateway),
) -> Response:
    try:
        src_lang, dest_lang = split_languages(lang)
    except ValueError as e:
        return _create_json_error_response(str(e), 400, ERROR_TYPE_INVALID_REQUEST)

    try:
        result = await gateway.translate(
            [text or ""], dest_lang, source_language=src_lang
        )
    except TranslateProxyError as e:
        return _upstream_error_response(e)

    legacy = LegacyTranslateResponse(text=[t.text for t in result.translations])
    return Response(
        content=legacy.model_dump_json(),
        status_code=200,
        media_type="application/json; charset=utf-8",
    )
