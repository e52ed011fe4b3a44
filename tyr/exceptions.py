"""Error types raised by the provider layer and the analyzer."""

from __future__ import annotations


class TyrError(Exception):
    """Base class for all errors raised by tyr."""


class ConfigurationError(TyrError, ValueError):
    """Unknown backend name or a missing credential for the selected backend."""


class ProviderError(TyrError, RuntimeError):
    """A backend call failed: transport error, refused connection or non-2xx status."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ResponseParseError(TyrError, ValueError):
    """The model reply could not be turned into a threat list.

    ``payload`` is the substring that was handed to the JSON parser.
    """

    def __init__(self, message: str, payload: str) -> None:
        super().__init__(f"{message}. Response was: {payload}")
        self.diagnostic = message
        self.payload = payload
