"""Interactive menu for operators working with the tblocker config."""
from __future__ import annotations

import sys
from dataclasses import dataclass
from getpass import getpass
from typing import Optional, Tuple

from .backup import BackupManager
from .config import ToolSettings
from .document import read_document
from .errors import ServiceError, TblockError
from .service import ServiceController
from .webhook import WebhookTester
from .workflow import UpdateWorkflow

MENU_ITEMS = (
    ("1", "Обновить конфигурацию (BypassIPS + webhook)"),
    ("2", "Перезапустить службу вручную"),
    ("3", "Открыть конфигурацию в редакторе"),
    ("4", "Следить за журналом доступа (tail -f)"),
    ("5", "Следить за журналом службы (journalctl -f)"),
    ("6", "Показать бэкапы"),
    ("7", "Восстановить конфигурацию из последнего бэкапа"),
    ("8", "Отправить тестовое сообщение через webhook"),
    ("9", "Выход"),
)


@dataclass
class InteractiveMenu:
    settings: ToolSettings
    workflow: UpdateWorkflow
    service: ServiceController
    backups: BackupManager
    webhook: WebhookTester

    def run(self) -> None:
        while True:
            self._print_menu()
            choice = input(f"Выберите пункт [1-{len(MENU_ITEMS)}]: ").strip()
            if choice == "9":
                print("До свидания.")
                return
            try:
                self.dispatch(choice)
            except KeyboardInterrupt:
                print("\nОперация отменена пользователем.")
            except TblockError as exc:
                print(f"Ошибка: {exc}", file=sys.stderr)

    def dispatch(self, choice: str) -> None:
        if choice == "1":
            self.update_config()
        elif choice == "2":
            self.manual_restart()
        elif choice == "3":
            self.service.edit_config()
            print("Редактирование завершено.")
        elif choice == "4":
            print(f"Журнал доступа {self.settings.access_log} (Ctrl-C для выхода)")
            self.service.tail_access_log()
        elif choice == "5":
            print(f"Журнал службы {self.settings.service_name} (Ctrl-C для выхода)")
            self.service.follow_journal()
        elif choice == "6":
            self.show_backups()
        elif choice == "7":
            self.restore_latest()
        elif choice == "8":
            self.webhook.send_test_message(read_document(self.settings.config_path))
            print("Тестовое сообщение отправлено.")
        else:
            print(f"Некорректный выбор. Введите число от 1 до {len(MENU_ITEMS)}.")

    # ------------------------------------------------------------------
    def update_config(self) -> None:
        bot_token, chat_id = self.prompt_credentials()
        result = self.workflow.update(bot_token, chat_id)
        if not result.ok:
            print(result.describe(), file=sys.stderr)
            return
        if result.backup_path:
            print(f"Создан бэкап: {result.backup_path}")
        for warning in result.warnings:
            print(f"Предупреждение: {warning}", file=sys.stderr)
        print(f"Конфигурация записана в {self.settings.config_path}")
        if self._prompt_bool(
            f"Перезапустить службу {self.settings.service_name} сейчас? [Y/n]: ", default=True
        ):
            self._restart()
        else:
            print(
                "Перезапуск пропущен. Выполните его позже через меню или командой: "
                f"sudo systemctl restart {self.settings.service_name}"
            )

    def manual_restart(self) -> None:
        if self._prompt_bool(
            f"Выполнить 'sudo systemctl restart {self.settings.service_name}' сейчас? [Y/n]: ",
            default=True,
        ):
            self._restart()
        else:
            print("Перезапуск отменён.")

    def show_backups(self) -> None:
        backups = self.backups.list_backups(self.settings.config_path)
        if not backups:
            print("Бэкапы отсутствуют.")
            return
        print("Бэкапы конфигурации:")
        for path in backups:
            print(f"  - {path}")

    def restore_latest(self) -> None:
        latest = self.backups.latest_backup(self.settings.config_path)
        if latest is None:
            print("Бэкапы отсутствуют.")
            return
        if not self._prompt_bool(f"Восстановить конфигурацию из '{latest}'? [y/N]: ", default=False):
            print("Восстановление отменено.")
            return
        self.backups.restore(latest, self.settings.config_path)
        print(f"Конфигурация восстановлена из {latest}")

    def prompt_credentials(self) -> Tuple[str, str]:
        bot_token = getpass("Введите токен Telegram-бота (формат 123456:ABC-...): ").strip()
        chat_id = self._prompt_non_empty("Введите chat id (число или @channel): ")
        return bot_token, chat_id

    # ------------------------------------------------------------------
    def _restart(self) -> None:
        try:
            action = self.service.restart()
        except ServiceError as exc:
            print(f"Перезапуск службы не удался: {exc}. Проверьте журналы.", file=sys.stderr)
        else:
            print(f"systemctl {action} {self.settings.service_name}: OK")

    def _print_menu(self) -> None:
        print()
        print("================ меню tblock ================")
        for key, title in MENU_ITEMS:
            print(f"{key}) {title}")
        print("=============================================")

    # ------------------------------------------------------------------
    def _prompt_bool(self, question: str, *, default: bool) -> bool:
        true_values = {"y", "yes", "д", "да"}
        false_values = {"n", "no", "н", "нет"}
        while True:
            answer = input(question).strip().lower()
            if not answer:
                return default
            if answer in true_values:
                return True
            if answer in false_values:
                return False
            print("Ответ не распознан. Введите 'y' или 'n'.")

    def _prompt_non_empty(self, question: str, default: Optional[str] = None) -> str:
        while True:
            answer = input(question).strip()
            if not answer:
                if default is not None:
                    return default
                print("Значение не может быть пустым.")
                continue
            return answer


__all__ = ["InteractiveMenu"]
