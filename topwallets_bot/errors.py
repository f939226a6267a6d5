"""Error taxonomy shared by clients, the cache gate and the assistant."""

from __future__ import annotations

from typing import Optional


class TopWalletsBotError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(TopWalletsBotError):
    """Malformed or unsupported input (bad timeframe, bad extracted params).

    Always fatal for the current request and never retried.
    """


class UpstreamError(TopWalletsBotError):
    """A remote service failed or answered with ``success: false``.

    Attributes:
        message: Human-readable reason, suitable for showing to a user.
        service: Name of the remote service ("topwallets", "birdeye", ...).
        status_code: HTTP status when the failure came with a response.
    """

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.service = service
        self.status_code = status_code

    def __str__(self) -> str:
        return self.message


__all__ = ["TopWalletsBotError", "UpstreamError", "ValidationError"]
