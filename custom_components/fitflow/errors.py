"""Errors raised by the FitFlow data layer."""

from __future__ import annotations

from homeassistant.exceptions import HomeAssistantError


class FitflowError(HomeAssistantError):
    """Base class for errors surfaced to callers of the data layer."""


class ConfigurationError(FitflowError):
    """Raised when a remote call lacks the configuration or input it needs."""


class NotAuthenticatedError(ConfigurationError):
    """Raised when a remote call needs a session and none is established."""


class TransportError(FitflowError):
    """Raised when the remote service answers with a non-success status."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ParseError(FitflowError):
    """Raised when a successful response body is not valid JSON."""

    def __init__(self, message: str = "Failed to parse response from server") -> None:
        super().__init__(message)


class UnsupportedOperation(FitflowError):
    """Raised when an adapter does not offer the requested operation."""

    def __init__(self, entity_type: str, operation: str) -> None:
        super().__init__(f"{entity_type} does not support {operation}")
        self.entity_type = entity_type
        self.operation = operation
