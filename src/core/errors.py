"""Error types shared by the core and adapters."""

from __future__ import annotations

from typing import Optional


class FetchError(Exception):
    """A transport failure: timeout, connection error or non-2xx status."""

    def __init__(self, url: str, message: str, status: Optional[int] = None) -> None:
        super().__init__(f"{message} ({url})")
        self.url = url
        self.status = status


class MessageFetchError(Exception):
    """The message source could not deliver a batch."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class MissingCredentialsError(RuntimeError):
    """Outbound messaging is not configured."""


class SendFailedError(RuntimeError):
    """Outbound message was rejected by the API."""

    def __init__(self, status: int, body: str = "") -> None:
        super().__init__(f"Send failed with HTTP {status}: {body}".rstrip(": "))
        self.status = status
