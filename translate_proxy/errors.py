"""
Error types shared by the credential, request and resolution layers.
"""

from enum import Enum
from typing import Optional


class TranslateProxyError(Exception):
    """Base class for all errors raised by translate-proxy."""


class ErrorKind(str, Enum):
    """What went wrong with an upstream request."""

    STATUS = "status"  # a non-200 response was received
    TRANSPORT = "transport"  # failed before a usable response was obtained


class RequestError(TranslateProxyError):
    """
    Failure of a single upstream API call.

    Consumers branch on `kind` and `status_code` (see `is_status`) rather
    than on exception subclasses.
    """

    def __init__(
        self,
        operation: str,
        kind: ErrorKind,
        message: str = "",
        status_code: Optional[int] = None,
        status_text: str = "",
        body: str = "",
    ):
        self.operation = operation
        self.kind = kind
        self.message = message
        self.status_code = status_code
        self.status_text = status_text
        self.body = body
        super().__init__(str(self))

    @classmethod
    def status(
        cls, operation: str, status_code: int, status_text: str = "", body: str = ""
    ) -> "RequestError":
        return cls(
            operation,
            ErrorKind.STATUS,
            status_code=status_code,
            status_text=status_text,
            body=body,
        )

    @classmethod
    def transport(cls, operation: str, message: str) -> "RequestError":
        return cls(operation, ErrorKind.TRANSPORT, message=message)

    def is_status(self, code: int) -> bool:
        return self.kind is ErrorKind.STATUS and self.status_code == code

    def __str__(self) -> str:
        if self.kind is ErrorKind.STATUS:
            return (
                f"{self.operation}: invalid status {self.status_code} "
                f"{self.status_text}, response\n{self.body}"
            )
        return f"{self.operation}: {self.message}"


class TokenRefreshError(TranslateProxyError):
    """The OAuth token could not be exchanged for an access token."""

    def __init__(self, cause: RequestError):
        self.cause = cause
        super().__init__(f"request access token: {cause}")

    def is_status(self, code: int) -> bool:
        return self.cause.is_status(code)


class CredentialStoreError(TranslateProxyError):
    """The config file exists but could not be read or parsed."""


class PromptInputError(TranslateProxyError):
    """Interactive input could not be obtained (e.g. end of input)."""


class ResolutionError(TranslateProxyError):
    """The target folder could not be resolved."""


class FolderCreationError(ResolutionError):
    """A new folder could not be created."""

    def __init__(self, folder_name: str, reason: str):
        self.folder_name = folder_name
        self.reason = reason
        super().__init__(f"create cloud folder {folder_name}: {reason}")
