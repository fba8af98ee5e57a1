"""
Pydantic schemas for the Yandex Cloud IAM, Resource Manager and Translate APIs.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model mapping snake_case fields to the API's camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


# --- IAM ---


class IamTokenRequest(CamelModel):
    yandex_passport_oauth_token: str


class IamTokenResponse(CamelModel):
    iam_token: str = ""
    # Kept as a string: the API returns nanosecond precision
    expires_at: str = ""


# --- Resource Manager ---


class Cloud(CamelModel):
    id: str = ""
    created_at: str = ""
    name: str = ""
    description: str = ""
    organization_id: str = ""
    labels: Dict[str, str] = Field(default_factory=dict)


class CloudsResponse(CamelModel):
    clouds: List[Cloud] = Field(default_factory=list)
    next_page_token: str = ""


class Folder(CamelModel):
    id: str = ""
    cloud_id: str = ""
    created_at: str = ""
    name: str = ""
    description: str = ""
    labels: Dict[str, str] = Field(default_factory=dict)
    status: str = ""


class FoldersResponse(CamelModel):
    folders: List[Folder] = Field(default_factory=list)
    next_page_token: str = ""


class CreateFolderRequest(CamelModel):
    cloud_id: str
    name: str
    description: Optional[str] = None


class OperationError(CamelModel):
    code: str = ""
    message: str = ""


class CreateFolderMetadata(CamelModel):
    folder_id: str = ""


class FolderOperation(CamelModel):
    """Long-running operation returned by folder creation."""

    id: str = ""
    description: str = ""
    created_at: str = ""
    created_by: str = ""
    modified_at: str = ""
    done: bool = False
    metadata: Optional[CreateFolderMetadata] = None
    error: Optional[OperationError] = None
    response: Optional[Folder] = None

    @property
    def folder_id(self) -> str:
        """ID of the created folder, falling back to the operation ID."""
        if self.response and self.response.id:
            return self.response.id
        if self.metadata and self.metadata.folder_id:
            return self.metadata.folder_id
        return self.id


# --- Translate ---


class TranslateRequest(CamelModel):
    folder_id: Optional[str] = None
    texts: List[str] = Field(default_factory=list)
    source_language_code: Optional[str] = None
    target_language_code: str = ""


class Translation(CamelModel):
    text: str = ""
    detected_language_code: str = ""


class TranslateResponse(CamelModel):
    translations: List[Translation] = Field(default_factory=list)
