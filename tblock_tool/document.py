"""YAML parsing and serialization for configuration documents."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

import yaml

from .errors import StorageError, ValidationError


def load_document(text: str) -> Optional[Dict]:
    """Parse *text* and return the top-level mapping.

    Empty input (or a document holding only comments) yields ``None``.
    Anything that is not a mapping at the top level is rejected.
    """

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValidationError(f"Документ не является корректным YAML: {exc}") from exc
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ValidationError(
            f"Ожидался словарь на верхнем уровне документа, получен {type(data).__name__}."
        )
    return data


def dump_document(document: Optional[Dict]) -> str:
    if not document:
        return ""
    return yaml.safe_dump(
        document,
        allow_unicode=True,
        sort_keys=False,
        default_flow_style=False,
        width=4096,
    )


def read_document(path: Path) -> Optional[Dict]:
    """Read and parse the document at *path*; a missing file counts as empty."""

    path = Path(path)
    if not path.exists():
        return None
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise StorageError(f"Не удалось прочитать файл '{path}': {exc}") from exc
    return load_document(text)


__all__ = ["dump_document", "load_document", "read_document"]
