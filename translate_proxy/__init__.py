"""translate-proxy: local credential-holding proxy for Yandex Cloud Translate."""

from .config import APP_VERSION

__version__ = APP_VERSION
