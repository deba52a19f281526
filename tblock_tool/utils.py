"""Helper utilities for the tblock configuration tool."""
from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional


def ensure_directory(path: Path) -> Path:
    """Create *path* if it does not exist and return it."""

    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def timestamp_for_filename(dt: Optional[datetime] = None) -> str:
    dt = dt or datetime.now()
    return dt.strftime("%Y%m%d-%H%M%S")


def is_root() -> bool:
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


def mask_sensitive(value: str, secrets: Iterable[Optional[str]]) -> str:
    """Replace occurrences of secret values in *value* with '***'."""

    masked = value
    for secret in secrets:
        if secret:
            masked = masked.replace(secret, "***")
    return masked


__all__ = [
    "ensure_directory",
    "is_root",
    "mask_sensitive",
    "timestamp_for_filename",
]
