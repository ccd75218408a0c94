"""
Tests for configuration loading — devsetup.yml parsing and validation.
"""

import textwrap
from pathlib import Path

import pytest

from devsetup.core.config.loader import ConfigError, find_config_file, load_settings
from devsetup.core.models.settings import RunMode


@pytest.fixture
def valid_config(tmp_path: Path) -> Path:
    content = textwrap.dedent("""\
        mode: fail-fast
        packages:
          - git
          - jq
        backup_startup_file: false
        editor:
          app_path: /Applications/Cursor.app
        assistant:
          bin_dir: ~/bin
        git:
          placeholder_email: ""
    """)
    path = tmp_path / "devsetup.yml"
    path.write_text(content)
    return path


class TestLoadSettings:
    def test_valid_file(self, valid_config: Path):
        s = load_settings(valid_config)
        assert s.mode == RunMode.FAIL_FAST
        assert s.packages == ["git", "jq"]
        assert s.backup_startup_file is False
        assert s.editor.app_path == "/Applications/Cursor.app"
        assert s.editor.cask == "visual-studio-code"
        assert s.assistant.bin_dir == "~/bin"
        assert s.git.placeholder_email == ""

    def test_no_file_means_defaults(self, clean_config_env):
        s = load_settings()
        assert s.mode == RunMode.BEST_EFFORT
        assert "node" in s.packages

    def test_empty_file_means_defaults(self, tmp_path: Path):
        path = tmp_path / "devsetup.yml"
        path.write_text("")
        assert load_settings(path).packages == ["wget", "curl", "git", "node", "python@3.12"]

    def test_explicit_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_settings(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "devsetup.yml"
        path.write_text("packages: [git\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_settings(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "devsetup.yml"
        path.write_text("- git\n- node\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_settings(path)

    def test_schema_error(self, tmp_path: Path):
        path = tmp_path / "devsetup.yml"
        path.write_text("mode: sometimes\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_settings(path)

    def test_env_var_pointing_nowhere(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("DEVSETUP_CONFIG", str(tmp_path / "gone.yml"))
        with pytest.raises(ConfigError, match="DEVSETUP_CONFIG"):
            load_settings()


class TestFindConfigFile:
    def test_walks_up(self, valid_config: Path, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("DEVSETUP_CONFIG", raising=False)
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(start_dir=nested) == valid_config

    def test_env_var_wins(self, valid_config: Path, tmp_path: Path, monkeypatch):
        other = tmp_path / "other.yml"
        other.write_text("mode: best-effort\n")
        monkeypatch.setenv("DEVSETUP_CONFIG", str(other))
        assert find_config_file(start_dir=tmp_path) == other

    def test_user_config(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("DEVSETUP_CONFIG", raising=False)
        home = tmp_path / "home"
        user_cfg = home / ".config/devsetup/config.yml"
        user_cfg.parent.mkdir(parents=True)
        user_cfg.write_text("packages: [git]\n")
        project = tmp_path / "work"
        project.mkdir()
        assert find_config_file(start_dir=project, home=home) == user_cfg

    def test_none_found(self, clean_config_env, home: Path):
        assert find_config_file(home=home) is None
