from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from tblock_tool.config import ToolSettings


def _write_yaml(path: Path, content: str) -> None:
    path.write_text(textwrap.dedent(content).strip() + "\n", encoding="utf-8")


@pytest.fixture
def settings(tmp_path: Path) -> ToolSettings:
    """Settings pointing every path into a temporary directory."""

    config_dir = tmp_path / "tblocker"
    config_dir.mkdir()
    return ToolSettings(
        config_path=config_dir / "config.yaml",
        backup_dir=config_dir / "backups",
        access_log=tmp_path / "access.log",
        restart_timeout=5,
    )


@pytest.fixture
def live_config(settings: ToolSettings) -> Path:
    """A tblocker config with custom keys and an outdated managed section."""

    _write_yaml(
        settings.config_path,
        """
        LogFile: "/usr/local/x-ui/access.log"
        BlockDuration: 10
        TorrentTag: "TORRENT"
        BlockMode: "iptables"
        BypassIPS:
          - "10.0.0.1"
        StorageDir: "/var/lib/old"
        SendWebhook: false
        Limits:
          perUser: 3
          window: 60
        """,
    )
    return settings.config_path
