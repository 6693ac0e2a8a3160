"""Domain exception hierarchy for the Oatmeal session core."""

from __future__ import annotations


class OatmealError(RuntimeError):
    """Base class for all domain-level errors."""


class ConfigError(OatmealError):
    """Raised when a theme, backend or editor identifier cannot be resolved."""


class ConnectorUnavailableError(OatmealError):
    """Raised when a backend or editor cannot be reached."""


class ModelNotFoundError(OatmealError):
    """Raised when the requested model is unavailable on the backend."""


class NoContextError(OatmealError):
    """Raised when the editor has no context to offer."""


class CodeBlockSelectionError(OatmealError):
    """Raised when slash command arguments do not select valid code blocks."""


class StoreError(OatmealError):
    """Raised when a session cannot be read from or written to storage."""


class SessionNotFoundError(StoreError):
    """Raised when no session exists for the requested identifier."""


class SessionFormatError(StoreError):
    """Raised when a persisted session cannot be decoded safely."""


class ChannelClosedError(OatmealError):
    """Raised when sending on a channel whose consumer has gone away."""
