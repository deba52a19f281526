"""Exception hierarchy shared by the tblock components."""
from __future__ import annotations


class TblockError(Exception):
    """Base class for all errors raised by the tool."""


class ConfigError(TblockError):
    """Raised when the tool settings file cannot be loaded."""


class StorageError(TblockError, OSError):
    """Raised when reading or writing the config or its backups fails."""


class ValidationError(TblockError):
    """Raised when a merged document does not pass validation."""


class InputError(ValidationError):
    """Raised when the bot token or chat id is empty."""


class ServiceError(TblockError):
    """Raised when a system command (systemctl, editor, tail) fails."""


class WebhookError(TblockError):
    """Raised when the test notification cannot be delivered."""


__all__ = [
    "ConfigError",
    "InputError",
    "ServiceError",
    "StorageError",
    "TblockError",
    "ValidationError",
    "WebhookError",
]
