"""
Credential store: loads and saves the proxy's config file.

The file is a small JSON document:

    {
      "folder_id": "...",
      "oauth_token": "...",
      "access_token": "...",
      "access_token_expiry": "2024-01-01T00:00:00+00:00"
    }
"""

import json
import logging
import os
from dataclasses import dataclass, field

from ...errors import CredentialStoreError
from .credentials import Credentials, format_expiry, parse_expiry

logger = logging.getLogger(__name__)


@dataclass
class StoredConfig:
    """Durable state of the proxy: the selected folder and the credentials."""

    folder_id: str = ""
    credentials: Credentials = field(default_factory=Credentials)

    def to_dict(self) -> dict:
        creds = self.credentials
        data = {
            "folder_id": self.folder_id,
            "oauth_token": creds.oauth_token,
            "access_token": creds.access_token,
        }
        expiry = format_expiry(creds.access_token_expiry)
        if expiry:
            data["access_token_expiry"] = expiry
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "StoredConfig":
        credentials = Credentials(
            oauth_token=data.get("oauth_token") or "",
            access_token=data.get("access_token") or "",
            access_token_expiry=parse_expiry(data.get("access_token_expiry") or ""),
        )
        return cls(folder_id=data.get("folder_id") or "", credentials=credentials)


class CredentialStore:
    """Reads and writes a `StoredConfig` at a fixed path."""

    def __init__(self, path: str):
        self.path = path

    def load(self) -> StoredConfig:
        """
        Load the config file.

        A missing file yields empty defaults.

        Raises:
            CredentialStoreError: If the file exists but cannot be read or parsed
        """
        logger.debug(f"Reading config file {self.path}")
        if not os.path.exists(self.path):
            logger.debug("Config file not found, using defaults")
            return StoredConfig()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw_data = json.load(f)
        except (IOError, json.JSONDecodeError) as e:
            raise CredentialStoreError(f"read config file {self.path}: {e}") from e

        if not isinstance(raw_data, dict):
            raise CredentialStoreError(
                f"read config file {self.path}: expected a JSON object"
            )
        return StoredConfig.from_dict(raw_data)

    def save(self, config: StoredConfig) -> None:
        """
        Write the config file, creating parent directories as needed.

        Raises:
            CredentialStoreError: If the file cannot be written
        """
        logger.debug(f"Writing config file {self.path}")
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(config.to_dict(), f, indent=2)
        except (IOError, TypeError, ValueError) as e:
            raise CredentialStoreError(f"write config file {self.path}: {e}") from e
