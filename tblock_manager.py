"""Command line interface for the tblocker configuration helper."""
from __future__ import annotations

import argparse
import logging
import sys
from getpass import getpass
from pathlib import Path
from typing import Iterable, Optional

from tblock_tool.backup import BackupManager
from tblock_tool.config import SETTINGS_FILENAME, ConfigError, ToolSettings, load_settings, save_settings
from tblock_tool.configurator import InteractiveMenu
from tblock_tool.document import read_document
from tblock_tool.errors import ServiceError, StorageError, ValidationError, WebhookError
from tblock_tool.service import ServiceController
from tblock_tool.webhook import WebhookTester
from tblock_tool.workflow import UpdateWorkflow


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tblock",
        description="Интерактивный помощник для конфигурации tblocker (/opt/tblocker/config.yaml).",
    )
    parser.add_argument(
        "--settings",
        default=None,
        help=f"Путь к файлу настроек утилиты (например, {SETTINGS_FILENAME}).",
    )
    parser.add_argument("--config", default=None, help="Путь к config.yaml службы tblocker.")
    parser.add_argument("--backup-dir", default=None, help="Каталог для бэкапов конфигурации.")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Увеличить уровень логирования.")

    subparsers = parser.add_subparsers(dest="command")

    parser_update = subparsers.add_parser(
        "update", help="Обновить BypassIPS, StorageDir и webhook в конфигурации."
    )
    parser_update.add_argument("--token", help="Токен Telegram-бота (если не указан, запрашивается).")
    parser_update.add_argument("--chat-id", help="Chat id Telegram (если не указан, запрашивается).")
    parser_update.add_argument(
        "--restart",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Перезапустить службу после успешного обновления.",
    )

    subparsers.add_parser("restart", help="Перезапустить службу tblocker.")
    subparsers.add_parser("edit", help="Открыть конфигурацию в редакторе.")
    subparsers.add_parser("tail-log", help="Следить за журналом доступа (tail -f).")
    subparsers.add_parser("journal", help="Следить за журналом службы (journalctl -f).")
    subparsers.add_parser("backups", help="Показать список бэкапов конфигурации.")

    parser_restore = subparsers.add_parser("restore", help="Восстановить конфигурацию из бэкапа.")
    parser_restore.add_argument("backup", nargs="?", help="Путь к бэкапу (по умолчанию последний).")

    subparsers.add_parser("test-webhook", help="Отправить тестовое сообщение через webhook.")

    parser_init = subparsers.add_parser("init-settings", help="Создать файл настроек со значениями по умолчанию.")
    parser_init.add_argument("path", nargs="?", default=SETTINGS_FILENAME, help="Куда сохранить файл.")

    subparsers.add_parser("menu", help="Запустить интерактивное меню (по умолчанию).")

    return parser


def configure_logging(level: int) -> None:
    if level >= 2:
        log_level = logging.DEBUG
    elif level == 1:
        log_level = logging.INFO
    else:
        log_level = logging.WARNING
    logging.basicConfig(level=log_level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")


def load_tool_settings(args: argparse.Namespace) -> ToolSettings:
    try:
        settings = load_settings(Path(args.settings) if args.settings else None)
    except ConfigError as exc:
        print(f"Ошибка чтения настроек: {exc}", file=sys.stderr)
        sys.exit(1)
    if args.config:
        settings.config_path = Path(args.config).expanduser()
    if args.backup_dir:
        settings.backup_dir = Path(args.backup_dir).expanduser()
    return settings


def handle_update(args: argparse.Namespace, settings: ToolSettings) -> None:
    bot_token = args.token
    if bot_token is None:
        bot_token = getpass("Введите токен Telegram-бота (формат 123456:ABC-...): ")
    chat_id = args.chat_id
    if chat_id is None:
        chat_id = input("Введите chat id (число или @channel): ")

    workflow = UpdateWorkflow(settings, service=ServiceController(settings))
    result = workflow.update(bot_token, chat_id, restart=args.restart)
    if not result.ok:
        print(result.describe(), file=sys.stderr)
        sys.exit(1)

    if result.backup_path:
        print(f"Создан бэкап: {result.backup_path}")
    for warning in result.warnings:
        print(f"Предупреждение: {warning}", file=sys.stderr)
    print(f"Конфигурация записана в {settings.config_path}")
    if result.service_restarted:
        print(f"Служба {settings.service_name} перезапущена.")
    elif result.service_restarted is False:
        print(f"Перезапуск службы не удался: {result.service_error}", file=sys.stderr)
        sys.exit(1)
    else:
        print(f"Перезапуск пропущен. Выполните: sudo systemctl restart {settings.service_name}")


def handle_restart(settings: ToolSettings) -> None:
    try:
        action = ServiceController(settings).restart()
    except ServiceError as exc:
        print(f"Ошибка: {exc}", file=sys.stderr)
        sys.exit(1)
    else:
        print(f"systemctl {action} {settings.service_name}: OK")


def handle_foreground(settings: ToolSettings, command: str) -> None:
    controller = ServiceController(settings)
    try:
        if command == "edit":
            controller.edit_config()
        elif command == "tail-log":
            controller.tail_access_log()
        else:
            controller.follow_journal()
    except ServiceError as exc:
        print(f"Ошибка: {exc}", file=sys.stderr)
        sys.exit(1)


def handle_backups(settings: ToolSettings) -> None:
    backups = BackupManager(settings.backup_dir).list_backups(settings.config_path)
    if not backups:
        print("Бэкапы отсутствуют.")
        return
    print("Бэкапы конфигурации:")
    for path in backups:
        print(f"  - {path}")


def handle_restore(settings: ToolSettings, backup: Optional[str]) -> None:
    manager = BackupManager(settings.backup_dir)
    backup_path = Path(backup) if backup else manager.latest_backup(settings.config_path)
    if backup_path is None:
        print("Бэкапы отсутствуют.", file=sys.stderr)
        sys.exit(1)
    try:
        manager.restore(backup_path, settings.config_path)
    except StorageError as exc:
        print(f"Ошибка: {exc}", file=sys.stderr)
        sys.exit(1)
    else:
        print(f"Конфигурация {settings.config_path} восстановлена из {backup_path}")


def handle_test_webhook(settings: ToolSettings) -> None:
    tester = WebhookTester(timeout=settings.webhook_timeout)
    try:
        tester.send_test_message(read_document(settings.config_path))
    except (StorageError, ValidationError, WebhookError) as exc:
        print(f"Ошибка: {exc}", file=sys.stderr)
        sys.exit(1)
    else:
        print("Тестовое сообщение отправлено.")


def handle_init_settings(settings: ToolSettings, path: str) -> None:
    target = Path(path)
    if target.exists():
        print(f"Файл '{target}' уже существует.", file=sys.stderr)
        sys.exit(1)
    save_settings(settings, target)
    print(f"Настройки сохранены в {target}")


def handle_menu(settings: ToolSettings) -> None:
    service = ServiceController(settings)
    backups = BackupManager(settings.backup_dir)
    menu = InteractiveMenu(
        settings=settings,
        workflow=UpdateWorkflow(settings, backups=backups, service=service),
        service=service,
        backups=backups,
        webhook=WebhookTester(timeout=settings.webhook_timeout),
    )
    try:
        menu.run()
    except (KeyboardInterrupt, EOFError):
        print("\nВыход.")


def main(argv: Optional[Iterable[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    settings = load_tool_settings(args)
    command = args.command or "menu"

    if command == "update":
        handle_update(args, settings)
    elif command == "restart":
        handle_restart(settings)
    elif command in {"edit", "tail-log", "journal"}:
        handle_foreground(settings, command)
    elif command == "backups":
        handle_backups(settings)
    elif command == "restore":
        handle_restore(settings, args.backup)
    elif command == "test-webhook":
        handle_test_webhook(settings)
    elif command == "init-settings":
        handle_init_settings(settings, args.path)
    elif command == "menu":
        handle_menu(settings)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
