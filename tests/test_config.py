"""Tests for monoledger.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from monoledger.config import LedgerConfig, load_config, open_ledger
from monoledger.errors import WorkspaceError
from monoledger.models import DEFAULT_MESSAGE


class TestLoadConfig:
    def test_defaults_without_pyproject(self, tmp_path: Path) -> None:
        config = load_config(tmp_path)
        assert config == LedgerConfig()
        assert config.ledger_file == ".changes.json"
        assert config.sync_deps is True
        assert config.message == DEFAULT_MESSAGE

    def test_defaults_without_table(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "root"\n')
        assert load_config(tmp_path) == LedgerConfig()

    def test_reads_kebab_case_keys(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            "[tool.monoledger]\n"
            'ledger-file = "release/changes.json"\n'
            "sync-deps = false\n"
            "lock-timeout = 2.5\n"
            'default-branch = "develop"\n'
            'git-user-name = "release-bot"\n'
        )
        config = load_config(tmp_path)
        assert config.ledger_file == "release/changes.json"
        assert config.sync_deps is False
        assert config.lock_timeout == 2.5
        assert config.default_branch == "develop"
        assert config.git_user_name == "release-bot"

    def test_unknown_key_rejected(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text("[tool.monoledger]\nsink-deps = 1\n")
        with pytest.raises(WorkspaceError, match="Invalid \\[tool.monoledger\\]"):
            load_config(tmp_path)

    def test_invalid_value_rejected(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            "[tool.monoledger]\nlock-timeout = -1\n"
        )
        with pytest.raises(WorkspaceError):
            load_config(tmp_path)


class TestOpenLedger:
    def test_uses_config(self, tmp_path: Path) -> None:
        config = LedgerConfig(
            ledger_file="changes.json", lock_timeout=1.0, message="ship it"
        )
        store = open_ledger(tmp_path, config)

        assert store.path == tmp_path / "changes.json"
        assert store.lock_timeout == 1.0
        assert store.initialize().message == "ship it"

    def test_loads_config_when_omitted(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[tool.monoledger]\nledger-file = "ledger.json"\n'
        )
        assert open_ledger(tmp_path).path == tmp_path / "ledger.json"
