"""Managed keys written into the tblocker configuration on every update."""
from __future__ import annotations

import json
from typing import Dict, List, Tuple

from .errors import InputError

DEFAULT_STORAGE_DIR = "/opt/tblocker"

WEBHOOK_URL_TEMPLATE = "https://api.telegram.org/bot{bot_token}/sendMessage"

# Loopback plus the published Cloudflare ranges; these are never blocked.
BYPASS_IPS: Tuple[str, ...] = (
    "127.0.0.1",
    "::1",
    # Cloudflare IPv4
    "103.21.244.0/22",
    "103.22.200.0/22",
    "103.31.4.0/22",
    "104.16.0.0/13",
    "104.24.0.0/14",
    "108.162.192.0/18",
    "131.0.72.0/22",
    "141.101.64.0/18",
    "162.158.0.0/15",
    "172.64.0.0/13",
    "173.245.48.0/20",
    "188.114.96.0/20",
    "190.93.240.0/20",
    "197.234.240.0/22",
    "198.41.128.0/17",
    # Cloudflare IPv6
    "2400:cb00::/32",
    "2606:4700::/32",
    "2803:f800::/32",
    "2405:b500::/32",
    "2405:8100::/32",
    "2a06:98c0::/29",
    "2c0f:f248::/32",
)

# Slots are filled by tblocker itself: user, IP, server, action, duration, time.
MESSAGE_TEXT = (
    "🚨 <b>Torrent Detected!</b>\n\n"
    "👤 <b>User:</b> %s\n"
    "🌍 <b>IP:</b> %s\n"
    "🖥 <b>Server:</b> %s\n"
    "⚡️ <b>Action:</b> %s\n"
    "⏱️ <b>Duration:</b> %d minutes\n"
    "🕒 <b>Time:</b> %s"
)

MANAGED_KEYS = ("BypassIPS", "StorageDir", "SendWebhook", "WebhookURL", "WebhookTemplate")


def clean_credentials(bot_token: str, chat_id: str) -> Tuple[str, str]:
    """Strip both values and reject empty ones."""

    token = (bot_token or "").strip()
    chat = (chat_id or "").strip()
    missing: List[str] = []
    if not token:
        missing.append("токен бота")
    if not chat:
        missing.append("chat id")
    if missing:
        raise InputError(f"Не заданы обязательные значения: {', '.join(missing)}.")
    return token, chat


def build_webhook_url(bot_token: str) -> str:
    return WEBHOOK_URL_TEMPLATE.format(bot_token=bot_token)


def build_webhook_template(chat_id: str) -> str:
    payload = {"chat_id": chat_id, "parse_mode": "HTML", "text": MESSAGE_TEXT}
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def build_snippet(bot_token: str, chat_id: str) -> Dict[str, object]:
    """Return the managed part of the configuration for the given credentials."""

    token, chat = clean_credentials(bot_token, chat_id)
    return {
        "BypassIPS": list(BYPASS_IPS),
        "StorageDir": DEFAULT_STORAGE_DIR,
        "SendWebhook": True,
        "WebhookURL": build_webhook_url(token),
        "WebhookTemplate": build_webhook_template(chat),
    }


__all__ = [
    "BYPASS_IPS",
    "DEFAULT_STORAGE_DIR",
    "MANAGED_KEYS",
    "build_snippet",
    "build_webhook_template",
    "build_webhook_url",
    "clean_credentials",
]
