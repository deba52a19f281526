"""Checks applied to a merged configuration before it is installed."""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Optional

from .document import load_document
from .errors import ValidationError


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    reason: str = ""

    def raise_for_error(self) -> None:
        if not self.ok:
            raise ValidationError(self.reason)

    def __bool__(self) -> bool:
        return self.ok


def validate(merged_text: str, chat_id: str, bot_token: Optional[str] = None) -> ValidationResult:
    """Validate a serialized merge result.

    The document must be non-empty YAML with a mapping at the top level,
    and the ``chat_id`` must be readable back out of ``WebhookTemplate``.
    Parsing the template again catches quoting problems that a plain YAML
    parse would accept. When *bot_token* is given, ``WebhookURL`` must
    contain it as well.

    Malformed input is reported through the result, never raised.
    """

    if not merged_text or not merged_text.strip():
        return ValidationResult(False, "Итоговый файл пуст.")
    try:
        document = load_document(merged_text)
    except ValidationError as exc:
        return ValidationResult(False, str(exc))
    if not document:
        return ValidationResult(False, "Итоговый документ не содержит ни одного ключа.")

    template = document.get("WebhookTemplate")
    if not isinstance(template, str) or not template.strip():
        return ValidationResult(False, "В итоговом документе отсутствует WebhookTemplate.")
    try:
        payload = json.loads(template)
    except ValueError as exc:
        return ValidationResult(False, f"WebhookTemplate не является корректным JSON: {exc}")
    if not isinstance(payload, dict):
        return ValidationResult(False, "WebhookTemplate должен быть JSON-объектом.")

    embedded = payload.get("chat_id")
    if embedded is None or not str(embedded).strip():
        return ValidationResult(False, "Не удалось извлечь chat_id из WebhookTemplate.")
    if str(embedded) != chat_id:
        return ValidationResult(
            False,
            f"chat_id в WebhookTemplate ('{embedded}') не совпадает с ожидаемым ('{chat_id}').",
        )

    if bot_token is not None:
        url = document.get("WebhookURL")
        if not isinstance(url, str) or bot_token not in url:
            return ValidationResult(False, "WebhookURL не содержит токен бота.")
    return ValidationResult(True)


__all__ = ["ValidationResult", "validate"]
