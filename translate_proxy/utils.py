"""Small shared helpers."""

import platform

from .config import APP_NAME, APP_VERSION


def get_user_agent() -> str:
    """User-Agent sent with every upstream request."""
    return f"{APP_NAME}/{APP_VERSION} ({platform.system()}; {platform.machine()})"
