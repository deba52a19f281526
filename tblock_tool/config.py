"""Settings model and helpers for the tblock tool."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

import yaml

from .errors import ConfigError

SETTINGS_FILENAME = "tblock.yaml"

DEFAULT_CONFIG_PATH = "/opt/tblocker/config.yaml"
DEFAULT_BACKUP_DIR = "/opt/tblocker/backups"
DEFAULT_SERVICE_NAME = "tblocker"
DEFAULT_ACCESS_LOG = "/usr/local/x-ui/access.log"
DEFAULT_EDITOR = "nano"


@dataclass
class ToolSettings:
    config_path: Path = Path(DEFAULT_CONFIG_PATH)
    backup_dir: Path = Path(DEFAULT_BACKUP_DIR)
    service_name: str = DEFAULT_SERVICE_NAME
    access_log: Path = Path(DEFAULT_ACCESS_LOG)
    editor: str = DEFAULT_EDITOR
    restart_timeout: Optional[int] = 60
    webhook_timeout: int = 10
    extra: Dict[str, object] = field(default_factory=dict)

    def validate(self) -> None:
        if not str(self.config_path):
            raise ConfigError("Поле 'config_path' не может быть пустым.")
        if not str(self.backup_dir):
            raise ConfigError("Поле 'backup_dir' не может быть пустым.")
        if not self.service_name:
            raise ConfigError("Поле 'service_name' не может быть пустым.")
        if self.restart_timeout is not None and self.restart_timeout <= 0:
            raise ConfigError("Поле 'restart_timeout' должно быть положительным.")
        if self.webhook_timeout <= 0:
            raise ConfigError("Поле 'webhook_timeout' должно быть положительным.")

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> "ToolSettings":
        data = data or {}
        known_keys = {
            "config_path",
            "backup_dir",
            "service_name",
            "access_log",
            "editor",
            "restart_timeout",
            "webhook_timeout",
        }
        extra = {key: value for key, value in data.items() if key not in known_keys}
        settings = cls(
            config_path=Path(data.get("config_path") or DEFAULT_CONFIG_PATH).expanduser(),
            backup_dir=Path(data.get("backup_dir") or DEFAULT_BACKUP_DIR).expanduser(),
            service_name=data.get("service_name") or DEFAULT_SERVICE_NAME,
            access_log=Path(data.get("access_log") or DEFAULT_ACCESS_LOG).expanduser(),
            editor=data.get("editor") or DEFAULT_EDITOR,
            restart_timeout=_safe_int(data.get("restart_timeout"), default=60),
            webhook_timeout=_safe_int(data.get("webhook_timeout"), default=10),
            extra=extra,
        )
        settings.validate()
        return settings

    def to_dict(self) -> Dict:
        result: Dict[str, object] = {
            "config_path": str(self.config_path),
            "backup_dir": str(self.backup_dir),
            "service_name": self.service_name,
            "access_log": str(self.access_log),
            "editor": self.editor,
            "restart_timeout": self.restart_timeout,
            "webhook_timeout": self.webhook_timeout,
        }
        result.update(self.extra)
        return {key: value for key, value in result.items() if value is not None}


# ---------------------------------------------------------------------------
def _safe_int(value, default: Optional[int] = None) -> Optional[int]:
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Значение '{value}' не может быть преобразовано в целое число.")


# ---------------------------------------------------------------------------
def load_settings(path: Optional[Path] = None) -> ToolSettings:
    """Read tool settings from *path*, falling back to defaults when it is absent."""

    if path is None:
        return ToolSettings()
    path = Path(path)
    if not path.exists():
        return ToolSettings()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Файл настроек '{path}' содержит некорректный YAML: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Не удалось прочитать файл настроек '{path}': {exc}") from exc
    if not data:
        return ToolSettings()
    if not isinstance(data, dict):
        raise ConfigError("Файл настроек должен содержать словарь параметров.")
    return ToolSettings.from_dict(data)


def save_settings(settings: ToolSettings, path: Path = Path(SETTINGS_FILENAME)) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        yaml.safe_dump(
            settings.to_dict(),
            fh,
            allow_unicode=True,
            sort_keys=False,
            default_flow_style=False,
        )


__all__ = [
    "ConfigError",
    "ToolSettings",
    "load_settings",
    "save_settings",
]
