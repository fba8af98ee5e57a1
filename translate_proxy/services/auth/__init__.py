"""
Authentication module for translate-proxy.
Handles the OAuth token, access token refresh and the config file.

This module is split into focused submodules:
- credentials: Credentials record and expiry parsing
- credential_store: Config file loading/saving
- token_manager: Access token caching and refresh
- oauth: Interactive OAuth token entry
"""

from .credentials import (
    Credentials,
    format_expiry,
    parse_expiry,
)

from .credential_store import (
    CredentialStore,
    StoredConfig,
)

from .token_manager import (
    TokenManager,
)

from .oauth import (
    ensure_oauth_token,
)

__all__ = [
    # Credentials
    "Credentials",
    "format_expiry",
    "parse_expiry",
    # Store
    "CredentialStore",
    "StoredConfig",
    # Token manager
    "TokenManager",
    # OAuth
    "ensure_oauth_token",
]
