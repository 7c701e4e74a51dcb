"""Bridge domain exceptions."""

from __future__ import annotations


class BridgeError(Exception):
    """Base for bridge domain errors."""

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, object] | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}
        self.original_error = original_error


class BridgeConfigurationError(BridgeError):
    """Config validation or load failure."""


class CommandDecodeError(BridgeError):
    """Datagram payload could not be decoded into a Command."""


class SessionConnectError(BridgeError):
    """Initial IRC connection failed. Fatal."""


class IngressError(BridgeError):
    """UDP listener could not be bound or read. Fatal."""
