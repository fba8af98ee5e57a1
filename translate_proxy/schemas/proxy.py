"""
Pydantic schemas for the proxy's own HTTP surface.
"""

from typing import List

from pydantic import BaseModel, Field

from .yandex import CamelModel


class ProxyTranslateRequest(CamelModel):
    """
    Request body for `POST /`.

    Same shape as the upstream translate request; language codes may carry a
    region suffix (`en-US`), which is stripped before forwarding.
    """

    folder_id: str = Field(
        default="",
        description="Cloud folder to bill the request to. Defaults to the resolved folder.",
    )
    texts: List[str] = Field(
        ...,
        description="Texts to translate",
        min_length=1,
        examples=[["Hello, world!"]],
    )
    source_language_code: str = Field(
        default="",
        description="Source language; detected by the service when empty",
        examples=["en", "en-US"],
    )
    target_language_code: str = Field(
        ...,
        description="Target language",
        examples=["ru"],
    )


class LegacyTranslateResponse(BaseModel):
    """Response of the emulated `/api/v1.5/tr.json/translate` endpoint."""

    text: List[str] = Field(default_factory=list)
