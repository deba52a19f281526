"""Snapshots of the tblocker configuration taken before every change."""
from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .errors import StorageError
from .utils import ensure_directory, timestamp_for_filename

LOGGER = logging.getLogger(__name__)


@dataclass
class BackupManager:
    backup_dir: Path
    logger: logging.Logger = LOGGER

    def create_backup(self, config_path: Path, now: Optional[datetime] = None) -> Path:
        """Copy *config_path* into the backup directory and return the copy's path.

        The name is ``<basename>.bak.<YYYYMMDD-HHMMSS>``. A backup is never
        overwritten: when two backups fall into the same second the later
        one gets a ``.1``, ``.2``... suffix.
        """

        config_path = Path(config_path)
        if not config_path.is_file():
            raise StorageError(f"Файл конфигурации '{config_path}' не найден.")
        if not os.access(config_path, os.R_OK):
            raise StorageError(f"Нет прав на чтение файла '{config_path}'.")
        try:
            backup_dir = ensure_directory(Path(self.backup_dir).expanduser())
        except OSError as exc:
            raise StorageError(f"Не удалось создать каталог бэкапов '{self.backup_dir}': {exc}") from exc

        base_name = f"{config_path.name}.bak.{timestamp_for_filename(now)}"
        backup_path = backup_dir / base_name
        counter = 0
        while backup_path.exists():
            counter += 1
            backup_path = backup_dir / f"{base_name}.{counter}"

        try:
            shutil.copy2(config_path, backup_path)
        except OSError as exc:
            raise StorageError(f"Не удалось создать бэкап '{backup_path}': {exc}") from exc
        self._copy_owner(config_path, backup_path)
        self.logger.info("Создан бэкап: %s", backup_path)
        return backup_path

    # ------------------------------------------------------------------
    def list_backups(self, config_path: Path) -> List[Path]:
        """Return existing backups of *config_path*, oldest first."""

        backup_dir = Path(self.backup_dir).expanduser()
        if not backup_dir.is_dir():
            return []
        prefix = f"{Path(config_path).name}.bak."
        backups = [
            path
            for path in backup_dir.iterdir()
            if path.is_file() and path.name.startswith(prefix)
        ]
        return sorted(backups, key=_backup_sort_key)

    def latest_backup(self, config_path: Path) -> Optional[Path]:
        backups = self.list_backups(config_path)
        return backups[-1] if backups else None

    # ------------------------------------------------------------------
    def restore(self, backup_path: Path, config_path: Path) -> None:
        """Copy *backup_path* back over *config_path* byte for byte."""

        backup_path = Path(backup_path)
        config_path = Path(config_path)
        if not backup_path.is_file():
            raise StorageError(f"Бэкап '{backup_path}' не найден.")
        try:
            shutil.copy2(backup_path, config_path)
        except OSError as exc:
            raise StorageError(
                f"Не удалось восстановить '{config_path}' из бэкапа '{backup_path}': {exc}"
            ) from exc
        self._copy_owner(backup_path, config_path)
        self.logger.info("Файл '%s' восстановлен из бэкапа '%s'.", config_path, backup_path)

    # ------------------------------------------------------------------
    def _copy_owner(self, source: Path, target: Path) -> None:
        # shutil.copy2 keeps mode and times but not ownership.
        chown = getattr(os, "chown", None)
        if chown is None:
            return
        stat = source.stat()
        try:
            chown(target, stat.st_uid, stat.st_gid)
        except OSError as exc:
            self.logger.debug("Не удалось сохранить владельца для '%s': %s", target, exc)


def _backup_sort_key(path: Path):
    stamp, _, counter = path.name.rpartition(".bak.")[2].partition(".")
    return stamp, int(counter) if counter.isdigit() else 0


__all__ = ["BackupManager"]
