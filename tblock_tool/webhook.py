"""Test notification through the webhook configured for tblocker."""
from __future__ import annotations

import json
import logging
import socket
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Mapping, Optional, Tuple

import requests

from .errors import WebhookError
from .utils import mask_sensitive

LOGGER = logging.getLogger(__name__)

SAMPLE_USER = "test-user"
SAMPLE_IP = "203.0.113.10"
SAMPLE_ACTION = "test"
SAMPLE_DURATION = 0


@dataclass
class WebhookTester:
    timeout: int = 10
    logger: logging.Logger = LOGGER

    def send_test_message(self, document: Optional[Mapping]) -> Dict:
        """Render ``WebhookTemplate`` with sample values and post it to ``WebhookURL``."""

        url, payload = self.build_request(document)
        token = _token_from_url(url)
        masked_url = mask_sensitive(url, [token])
        self.logger.info("Отправка тестового сообщения на %s", masked_url)
        try:
            response = requests.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            raise WebhookError(
                f"Не удалось отправить запрос на {masked_url}: {mask_sensitive(str(exc), [token])}"
            ) from exc
        if response.status_code != 200:
            raise WebhookError(
                f"Webhook вернул HTTP {response.status_code}: {mask_sensitive(response.text, [token])}"
            )
        try:
            body = response.json()
        except ValueError:
            body = {}
        if isinstance(body, dict) and body.get("ok") is False:
            raise WebhookError(f"Telegram отклонил сообщение: {body.get('description', 'без описания')}")
        self.logger.info("Тестовое сообщение доставлено.")
        return body if isinstance(body, dict) else {}

    # ------------------------------------------------------------------
    def build_request(self, document: Optional[Mapping]) -> Tuple[str, Dict]:
        if not document:
            raise WebhookError("Конфигурация пуста, webhook не настроен.")
        if not document.get("SendWebhook"):
            raise WebhookError("Отправка webhook отключена (SendWebhook: false).")
        url = document.get("WebhookURL")
        template = document.get("WebhookTemplate")
        if not isinstance(url, str) or not url:
            raise WebhookError("В конфигурации не задан WebhookURL.")
        if not isinstance(template, str) or not template:
            raise WebhookError("В конфигурации не задан WebhookTemplate.")
        try:
            payload = json.loads(template)
        except ValueError as exc:
            raise WebhookError(f"WebhookTemplate не является корректным JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise WebhookError("WebhookTemplate должен быть JSON-объектом.")
        text = payload.get("text")
        if isinstance(text, str):
            payload["text"] = render_sample_text(text)
        return url, payload


def render_sample_text(text: str) -> str:
    values = (
        SAMPLE_USER,
        SAMPLE_IP,
        socket.gethostname(),
        SAMPLE_ACTION,
        SAMPLE_DURATION,
        datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
    )
    try:
        return text % values
    except (TypeError, ValueError) as exc:
        raise WebhookError(f"Шаблон сообщения не соответствует ожидаемым полям: {exc}") from exc


def _token_from_url(url: str) -> Optional[str]:
    marker = "/bot"
    if marker not in url:
        return None
    return url.split(marker, 1)[1].split("/", 1)[0] or None


__all__ = ["WebhookTester", "render_sample_text"]
