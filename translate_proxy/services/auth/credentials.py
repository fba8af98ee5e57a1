"""
Credentials module: the in-memory OAuth/access token record and expiry handling.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

logger = logging.getLogger(__name__)

# Fractional seconds beyond microseconds (the IAM API sends nanoseconds)
_EXCESS_FRACTION = re.compile(r"(\.\d{6})\d+")


@dataclass
class Credentials:
    """OAuth token plus the short-lived access token derived from it."""

    oauth_token: str = ""
    access_token: str = ""
    access_token_expiry: Optional[datetime] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """An empty token or unknown expiry counts as expired."""
        if not self.access_token or self.access_token_expiry is None:
            return True
        now = now or datetime.now(timezone.utc)
        return now >= self.access_token_expiry

    def update_access_token(self, token: str, expiry: Optional[datetime]) -> None:
        self.access_token = token
        self.access_token_expiry = expiry

    def clear_access_token(self) -> None:
        self.access_token = ""
        self.access_token_expiry = None


def parse_expiry(expiry_str: str) -> Optional[datetime]:
    """
    Parse an expiry timestamp to an aware UTC datetime.

    Args:
        expiry_str: Expiry timestamp string in ISO 8601 form ("Z" or offset)

    Returns:
        Aware datetime or None if parsing fails
    """
    if not isinstance(expiry_str, str) or not expiry_str:
        return None

    try:
        value = _EXCESS_FRACTION.sub(r"\1", expiry_str.strip())
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        parsed_expiry = datetime.fromisoformat(value)
        if parsed_expiry.tzinfo is None:
            parsed_expiry = parsed_expiry.replace(tzinfo=timezone.utc)
        return parsed_expiry.astimezone(timezone.utc)
    except ValueError as e:
        logger.warning(f"Could not parse expiry format '{expiry_str}': {e}")
        return None


def format_expiry(expiry: Optional[datetime]) -> Optional[str]:
    if expiry is None:
        return None
    if expiry.tzinfo is None:
        expiry = expiry.replace(tzinfo=timezone.utc)
    return expiry.astimezone(timezone.utc).isoformat()
