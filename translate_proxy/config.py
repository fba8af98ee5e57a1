"""
Configuration constants for the translate-proxy server.
Centralizes all configuration to avoid duplication across modules.
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

# App Info
APP_VERSION = "1.0.0"
APP_NAME = "translate-proxy"

# API Endpoints
OAUTH_TOKEN_URL = (
    "https://oauth.yandex.ru/authorize/?response_type=token"
    "&client_id=1a6990aa636648e9b2ef855fa7bec2fb"
)
IAM_TOKEN_URL = "https://iam.api.cloud.yandex.net/iam/v1/tokens"
CLOUDS_URL = "https://resource-manager.api.cloud.yandex.net/resource-manager/v1/clouds"
FOLDERS_URL = "https://resource-manager.api.cloud.yandex.net/resource-manager/v1/folders"
TRANSLATE_URL = "https://translate.api.cloud.yandex.net/translate/v2/translate"

# Server
DEFAULT_ADDRESS = "localhost:8080"

# Timeouts
REQUEST_TIMEOUT = 60  # seconds
CONNECT_TIMEOUT = 10.0

# Resource selection
FOLDER_STATUS_ACTIVE = "ACTIVE"
DEFAULT_NEW_FOLDER_NAME = APP_NAME
PROMPT_MAX_ATTEMPTS = 10  # numbered choices and OAuth token entry

# Error type constants
ERROR_TYPE_API = "api_error"
ERROR_TYPE_INVALID_REQUEST = "invalid_request_error"

# File Paths
CONFIG_FILE_NAME = "config.json"


def default_config_file() -> str:
    """Config file owned by this process: ~/.config/translate-proxy/config.json"""
    return os.path.join(os.path.expanduser("~"), ".config", APP_NAME, CONFIG_FILE_NAME)


@dataclass
class ProxySettings:
    """
    Settings built once at startup and handed to every component.

    `writeable_config` is True only when the config file path was not given
    explicitly, meaning the process owns the file and may rewrite it.
    """

    config_file: str
    writeable_config: bool = False
    new_folder_name: str = DEFAULT_NEW_FOLDER_NAME
    all_folders: bool = False
    oauth_token_url: str = OAUTH_TOKEN_URL
    iam_token_url: str = IAM_TOKEN_URL
    clouds_url: str = CLOUDS_URL
    folders_url: str = FOLDERS_URL
    translate_url: str = TRANSLATE_URL
    host: str = "localhost"
    port: int = 8080
    insecure: bool = False
    access_log: bool = False
    tls_cert_file: Optional[str] = None
    tls_key_file: Optional[str] = None
    log_payloads: bool = False
    request_timeout: float = REQUEST_TIMEOUT

    @property
    def tls_enabled(self) -> bool:
        return bool(self.tls_cert_file) and bool(self.tls_key_file)


def parse_address(address: str) -> tuple:
    """
    Split a "host:port" listen address.

    Raises:
        ValueError: If the port part is missing or not a number
    """
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid listen address {address!r} (expected HOST:PORT)")
    return host or "0.0.0.0", int(port)


def create_error_response(
    message: str, error_type: str = ERROR_TYPE_API, code: Optional[int] = None
) -> Dict[str, Any]:
    """
    Create a standardized error response dictionary.

    Args:
        message: Error message to display
        error_type: Type of error (e.g., "api_error", "invalid_request_error")
        code: Optional HTTP status code

    Returns:
        Standardized error response dictionary
    """
    error: Dict[str, Any] = {
        "message": message,
        "type": error_type,
    }
    if code is not None:
        error["code"] = code
    return {"error": error}
