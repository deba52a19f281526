import os
import shutil
from pathlib import Path

import pytest

from tblock_tool.errors import StorageError
from tblock_tool.installer import Installer


def test_install_replaces_content_and_leaves_no_temp_files(live_config: Path, tmp_path: Path) -> None:
    backup = tmp_path / "backup.yaml"
    shutil.copy2(live_config, backup)

    warnings = Installer().install("Foo: 1\n", live_config, backup)

    assert live_config.read_text(encoding="utf-8") == "Foo: 1\n"
    assert warnings == []
    assert [p.name for p in live_config.parent.iterdir() if p.name.endswith(".tmp")] == []


@pytest.mark.skipif(os.name != "posix", reason="permission bits are POSIX specific")
def test_install_copies_mode_from_backup(live_config: Path, tmp_path: Path) -> None:
    backup = tmp_path / "backup.yaml"
    shutil.copy2(live_config, backup)
    backup.chmod(0o600)

    Installer().install("Foo: 1\n", live_config, backup)

    assert live_config.stat().st_mode & 0o777 == 0o600


def test_metadata_failures_become_warnings(live_config: Path, tmp_path: Path, monkeypatch) -> None:
    backup = tmp_path / "backup.yaml"
    shutil.copy2(live_config, backup)

    def failing_copymode(src, dst):
        raise PermissionError("operation not permitted")

    monkeypatch.setattr("tblock_tool.installer.shutil.copymode", failing_copymode)

    warnings = Installer().install("Foo: 1\n", live_config, backup)

    assert live_config.read_text(encoding="utf-8") == "Foo: 1\n"
    assert len(warnings) >= 1
    assert "operation not permitted" in warnings[0]


def test_install_without_backup_skips_metadata(settings) -> None:
    warnings = Installer().install("Foo: 1\n", settings.config_path, None)

    assert settings.config_path.read_text(encoding="utf-8") == "Foo: 1\n"
    assert warnings == []


def test_install_into_missing_directory_raises(tmp_path: Path) -> None:
    with pytest.raises(StorageError):
        Installer().install("Foo: 1\n", tmp_path / "missing" / "config.yaml", None)


def test_rollback_restores_backup_bytes(live_config: Path, tmp_path: Path) -> None:
    backup = tmp_path / "backup.yaml"
    shutil.copy2(live_config, backup)
    live_config.write_text("partial", encoding="utf-8")

    assert Installer().rollback(live_config, backup) is True
    assert live_config.read_bytes() == backup.read_bytes()


def test_rollback_without_backup_is_noop(settings) -> None:
    assert Installer().rollback(settings.config_path, None) is False
    assert not settings.config_path.exists()
