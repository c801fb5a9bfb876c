"""Tests for deal_logic.toml loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from deal_logic.core.config import CONFIG_FILENAME, Settings, load_settings
from deal_logic.core.errors import ConfigError


def write_config(tmp_path: Path, content: str) -> Path:
    path = tmp_path / CONFIG_FILENAME
    path.write_text(content)
    return path


class TestLoadSettings:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        settings = load_settings(tmp_path / CONFIG_FILENAME)
        assert settings == Settings()
        assert settings.expressions.require_valid is False
        assert settings.expressions.max_mention_results == 50
        assert settings.rules.cross_rule_conflicts is False

    def test_full_file(self, tmp_path: Path) -> None:
        path = write_config(
            tmp_path,
            """
[expressions]
require_valid = true
max_mention_results = 10

[rules]
cross_rule_conflicts = true
""",
        )
        settings = load_settings(path)
        assert settings.expressions.require_valid is True
        assert settings.expressions.max_mention_results == 10
        assert settings.rules.cross_rule_conflicts is True

    def test_partial_file(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, "[rules]\ncross_rule_conflicts = true\n")
        settings = load_settings(path)
        assert settings.rules.cross_rule_conflicts is True
        assert settings.expressions.max_mention_results == 50

    def test_defaults_to_working_directory(self, tmp_path: Path, monkeypatch) -> None:
        write_config(tmp_path, "[expressions]\nrequire_valid = true\n")
        monkeypatch.chdir(tmp_path)
        assert load_settings().expressions.require_valid is True


class TestConfigErrors:
    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, "[expressions\n")
        with pytest.raises(ConfigError) as exc_info:
            load_settings(path)
        assert "Invalid TOML" in exc_info.value.message
        assert exc_info.value.context.file == path
        assert str(path) in str(exc_info.value)

    def test_wrong_type(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, '[expressions]\nrequire_valid = "yes"\n')
        with pytest.raises(ConfigError, match="'require_valid' must be bool, got str"):
            load_settings(path)

    def test_bool_is_not_int(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, "[expressions]\nmax_mention_results = true\n")
        with pytest.raises(ConfigError, match="must be int"):
            load_settings(path)

    def test_section_must_be_table(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, "rules = 1\n")
        with pytest.raises(ConfigError, match=r"\[rules\] must be a table"):
            load_settings(path)
