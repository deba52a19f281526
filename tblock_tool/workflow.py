"""The backup → merge → validate → install sequence behind ``tblock update``."""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .backup import BackupManager
from .config import ToolSettings
from .document import dump_document, read_document
from .errors import InputError, ServiceError, StorageError, TblockError, ValidationError
from .installer import Installer
from .merge import merge
from .service import ServiceController
from .snippet import build_snippet, clean_credentials
from .utils import mask_sensitive
from .validator import ValidationResult, validate

LOGGER = logging.getLogger(__name__)


class WorkflowState(enum.Enum):
    START = "start"
    BACKED_UP = "backed-up"
    MERGED = "merged"
    VALIDATED = "validated"
    INSTALLED = "installed"
    INVALID = "invalid"
    ROLLED_BACK = "rolled-back"


class Outcome(enum.Enum):
    SUCCESS = "success"
    VALIDATION_FAILED = "validation-failure-rolled-back"
    IO_FAILURE = "io-failure"
    INPUT_ERROR = "input-error"


STAGE_TITLES = {
    "input": "проверка входных данных",
    "backup": "создание бэкапа",
    "merge": "слияние конфигурации",
    "validate": "проверка итогового файла",
    "install": "запись конфигурации",
    "rollback": "откат из бэкапа",
}


@dataclass
class UpdateResult:
    state: WorkflowState = WorkflowState.START
    outcome: Optional[Outcome] = None
    failed_stage: Optional[str] = None
    error: Optional[TblockError] = None
    backup_path: Optional[Path] = None
    merged: Optional[Dict] = None
    rolled_back: bool = False
    warnings: List[str] = field(default_factory=list)
    service_restarted: Optional[bool] = None
    service_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    @property
    def live_config_changed(self) -> bool:
        return self.state is WorkflowState.INSTALLED

    def describe(self) -> str:
        if self.ok:
            return "Конфигурация обновлена."
        stage = STAGE_TITLES.get(self.failed_stage or "", self.failed_stage or "?")
        if self.rolled_back:
            status = "конфигурация восстановлена из бэкапа"
        else:
            status = "действующая конфигурация не изменялась"
        return f"Ошибка на этапе «{stage}»: {self.error}; {status}."


Validator = Callable[[str, str, Optional[str]], ValidationResult]


@dataclass
class UpdateWorkflow:
    settings: ToolSettings
    backups: Optional[BackupManager] = None
    installer: Installer = field(default_factory=Installer)
    validator: Validator = validate
    merger: Callable[..., Optional[Dict]] = merge
    service: Optional[ServiceController] = None
    logger: logging.Logger = LOGGER

    def __post_init__(self) -> None:
        if self.backups is None:
            self.backups = BackupManager(self.settings.backup_dir)

    def update(self, bot_token: str, chat_id: str, *, restart: bool = False) -> UpdateResult:
        """Write new webhook credentials into the tblocker config.

        Returns an :class:`UpdateResult`; component errors are captured in it
        rather than raised. Empty credentials fail before any file is read.
        """

        result = UpdateResult()
        try:
            snippet = build_snippet(bot_token, chat_id)
        except InputError as exc:
            return self._fail(result, Outcome.INPUT_ERROR, "input", exc)
        token, chat = clean_credentials(bot_token, chat_id)
        config_path = Path(self.settings.config_path)

        try:
            if config_path.exists():
                result.backup_path = self.backups.create_backup(config_path)
            else:
                self.logger.warning("Файл конфигурации '%s' не найден, бэкап не создаётся.", config_path)
        except StorageError as exc:
            return self._fail(result, Outcome.IO_FAILURE, "backup", exc)
        result.state = WorkflowState.BACKED_UP

        try:
            base = read_document(config_path)
            merged = self.merger(base, snippet)
            merged_text = dump_document(merged)
        except StorageError as exc:
            return self._fail(result, Outcome.IO_FAILURE, "merge", exc)
        except ValidationError as exc:
            result.state = WorkflowState.INVALID
            return self._rollback(result, config_path, "merge", exc)
        result.merged = merged
        result.state = WorkflowState.MERGED

        verdict = self.validator(merged_text, chat, token)
        if not verdict.ok:
            result.state = WorkflowState.INVALID
            self.logger.error("Проверка итогового файла не пройдена: %s", mask_sensitive(verdict.reason, [token]))
            return self._rollback(result, config_path, "validate", ValidationError(verdict.reason))
        result.state = WorkflowState.VALIDATED

        try:
            result.warnings = self.installer.install(merged_text, config_path, result.backup_path)
        except StorageError as exc:
            self._rollback(result, config_path, "install", exc)
            result.outcome = Outcome.IO_FAILURE
            return result
        result.state = WorkflowState.INSTALLED
        result.outcome = Outcome.SUCCESS

        if restart and self.service is not None:
            try:
                self.service.restart()
                result.service_restarted = True
            except ServiceError as exc:
                result.service_restarted = False
                result.service_error = str(exc)
                self.logger.error("Перезапуск службы не удался: %s", exc)
        return result

    # ------------------------------------------------------------------
    def _rollback(self, result: UpdateResult, config_path: Path, stage: str, exc: TblockError) -> UpdateResult:
        try:
            result.rolled_back = self.installer.rollback(config_path, result.backup_path)
        except StorageError as rollback_exc:
            self.logger.error("Откат не выполнен: %s", rollback_exc)
            return self._fail(result, Outcome.IO_FAILURE, "rollback", rollback_exc)
        result.state = WorkflowState.ROLLED_BACK
        return self._fail(result, Outcome.VALIDATION_FAILED, stage, exc)

    def _fail(self, result: UpdateResult, outcome: Outcome, stage: str, exc: TblockError) -> UpdateResult:
        result.outcome = outcome
        result.failed_stage = stage
        result.error = exc
        self.logger.debug("Обновление прервано на этапе '%s' (%s).", stage, outcome.value)
        return result


__all__ = ["Outcome", "UpdateResult", "UpdateWorkflow", "WorkflowState"]
