"""Pydantic schemas for upstream APIs and the proxy surface."""

from .proxy import LegacyTranslateResponse, ProxyTranslateRequest
from .yandex import (
    Cloud,
    CloudsResponse,
    CreateFolderMetadata,
    CreateFolderRequest,
    Folder,
    FolderOperation,
    FoldersResponse,
    IamTokenRequest,
    IamTokenResponse,
    OperationError,
    TranslateRequest,
    TranslateResponse,
    Translation,
)

__all__ = [
    "Cloud",
    "CloudsResponse",
    "CreateFolderMetadata",
    "CreateFolderRequest",
    "Folder",
    "FolderOperation",
    "FoldersResponse",
    "IamTokenRequest",
    "IamTokenResponse",
    "LegacyTranslateResponse",
    "OperationError",
    "ProxyTranslateRequest",
    "TranslateRequest",
    "TranslateResponse",
    "Translation",
]
