"""Atomic replacement of the live configuration and rollback from backup."""
from __future__ import annotations

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .errors import StorageError

LOGGER = logging.getLogger(__name__)


@dataclass
class Installer:
    logger: logging.Logger = LOGGER

    def install(self, merged_text: str, config_path: Path, backup_path: Optional[Path]) -> List[str]:
        """Replace *config_path* with *merged_text*.

        The new content is written to a temporary file next to the target
        and moved into place with :func:`os.replace`, so readers see either
        the old or the new file. Mode and ownership are then copied from
        *backup_path*; failures there are logged and returned as warnings.
        """

        config_path = Path(config_path)
        directory = config_path.parent
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=f".{config_path.name}.", suffix=".tmp", dir=directory)
        except OSError as exc:
            raise StorageError(f"Не удалось создать временный файл в '{directory}': {exc}") from exc
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(merged_text)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, config_path)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            raise StorageError(f"Не удалось записать '{config_path}': {exc}") from exc

        warnings = self.copy_metadata(backup_path, config_path)
        self.logger.info("Конфигурация успешно записана в %s", config_path)
        return warnings

    # ------------------------------------------------------------------
    def copy_metadata(self, reference: Optional[Path], target: Path) -> List[str]:
        warnings: List[str] = []
        if reference is None or not Path(reference).is_file():
            return warnings
        try:
            shutil.copymode(reference, target)
        except OSError as exc:
            warnings.append(f"Не удалось скопировать права доступа с '{reference}': {exc}")
        chown = getattr(os, "chown", None)
        if chown is not None:
            try:
                stat = Path(reference).stat()
                chown(target, stat.st_uid, stat.st_gid)
            except OSError as exc:
                warnings.append(f"Не удалось скопировать владельца с '{reference}': {exc}")
        for message in warnings:
            self.logger.warning(message)
        return warnings

    # ------------------------------------------------------------------
    def rollback(self, config_path: Path, backup_path: Optional[Path]) -> bool:
        """Restore *config_path* from *backup_path*.

        Returns ``False`` when there is nothing to restore because no backup
        was taken (the config did not exist before the update).
        """

        if backup_path is None:
            self.logger.info("Бэкап отсутствует, восстанавливать нечего: '%s' не изменялся.", config_path)
            return False
        try:
            shutil.copy2(backup_path, config_path)
        except OSError as exc:
            raise StorageError(
                f"Не удалось откатить '{config_path}' из бэкапа '{backup_path}': {exc}"
            ) from exc
        self.copy_metadata(backup_path, config_path)
        self.logger.warning("Конфигурация '%s' восстановлена из бэкапа '%s'.", config_path, backup_path)
        return True


__all__ = ["Installer"]
