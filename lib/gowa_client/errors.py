from __future__ import annotations


class GowaClientError(Exception):
    """Base client error."""


class ConfigError(GowaClientError):
    """Invalid client configuration."""


class ValidationError(GowaClientError, ValueError):
    """Missing or invalid endpoint parameters; raised before any request is sent."""


class TransportError(GowaClientError):
    """Transport/network layer error."""


NetworkError = TransportError


class RequestCancelled(TransportError):
    """The caller's cancel signal was set."""


class HTTPStatusError(GowaClientError):
    def __init__(self, status_code: int, body: bytes = b"", message: str | None = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message or f"http {status_code}: {self.text}")

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    @property
    def details(self) -> str | None:
        text = self.text.strip()
        return text[:1000] if text else None


class AuthError(HTTPStatusError):
    """Auth-related API error."""


class DecodeError(GowaClientError):
    """Response payload was not valid JSON or had an unexpected shape."""


class UploadError(GowaClientError):
    """Local file could not be streamed into a multipart body."""
