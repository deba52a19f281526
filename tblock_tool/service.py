"""System commands around the tblocker service: restart, editor and logs."""
from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .config import ToolSettings
from .errors import ServiceError
from .utils import is_root

LOGGER = logging.getLogger(__name__)


@dataclass
class ServiceController:
    settings: ToolSettings
    logger: logging.Logger = LOGGER

    def restart(self) -> str:
        """Restart the service, falling back to a plain start.

        Returns the systemctl action that succeeded.
        """

        name = self.settings.service_name
        self.logger.info("Перезапуск службы %s...", name)
        errors: List[str] = []
        for action in ("restart", "start"):
            try:
                self._run(["systemctl", action, name], timeout=self.settings.restart_timeout)
            except ServiceError as exc:
                errors.append(str(exc))
                self.logger.warning("systemctl %s %s не выполнен: %s", action, name, exc)
                continue
            self.logger.info("systemctl %s %s OK", action, name)
            return action
        raise ServiceError(
            f"Не удалось перезапустить или запустить службу {name} через systemctl. "
            f"Возможно, служба не существует или systemd недоступен. ({'; '.join(errors)})"
        )

    # ------------------------------------------------------------------
    def edit_config(self) -> None:
        config_path = Path(self.settings.config_path)
        if not config_path.is_file():
            raise ServiceError(f"Файл конфигурации '{config_path}' не найден.")
        self.logger.info("Открываем %s в %s.", config_path, self.settings.editor)
        self._run_foreground([self.settings.editor, str(config_path)])

    def tail_access_log(self) -> None:
        access_log = Path(self.settings.access_log)
        if not access_log.is_file():
            raise ServiceError(f"Журнал доступа '{access_log}' не найден.")
        self._run_foreground(["tail", "-f", str(access_log)], privileged=False)

    def follow_journal(self) -> None:
        self._run_foreground(["journalctl", "-u", self.settings.service_name, "-f"])

    # ------------------------------------------------------------------
    def _command(self, command: Sequence[str], privileged: bool = True) -> List[str]:
        if privileged and not is_root():
            return ["sudo", *command]
        return list(command)

    def _run(self, command: Sequence[str], *, timeout: Optional[int] = None) -> None:
        full_command = self._command(command)
        self.logger.debug("Выполнение команды: %s", " ".join(full_command))
        try:
            result = subprocess.run(
                full_command,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise ServiceError(f"Команда '{' '.join(command)}' превысила таймаут {timeout} секунд.") from exc
        except FileNotFoundError as exc:
            raise ServiceError(f"Команда '{full_command[0]}' не найдена.") from exc
        if result.stdout:
            self.logger.debug("STDOUT: %s", result.stdout.strip())
        if result.returncode != 0:
            raise ServiceError(
                f"Команда '{' '.join(command)}' завершилась с кодом {result.returncode}: {result.stderr.strip()}"
            )

    def _run_foreground(self, command: Sequence[str], privileged: bool = True) -> None:
        full_command = self._command(command, privileged=privileged)
        self.logger.debug("Запуск интерактивной команды: %s", " ".join(full_command))
        try:
            subprocess.run(full_command, check=False)
        except FileNotFoundError as exc:
            raise ServiceError(f"Команда '{full_command[0]}' не найдена.") from exc
        except KeyboardInterrupt:
            self.logger.info("Команда '%s' остановлена пользователем.", command[0])


__all__ = ["ServiceController"]
