"""Unit tests for TOML configuration loader."""

import tomllib
from pathlib import Path

import pytest

from cloudbot.config.loader import (
    deep_merge,
    get_config_dir,
    get_environment,
    load_config,
    load_toml,
)


class TestDeepMerge:
    """Tests for deep_merge function."""

    def test_merge_nested_dicts(self) -> None:
        """Nested tables are merged key by key."""
        base = {"pricing": {"max_in_flight": 5, "cache_ttl_seconds": 3600}, "debug": False}
        override = {"pricing": {"max_in_flight": 2}}
        result = deep_merge(base, override)
        assert result == {
            "pricing": {"max_in_flight": 2, "cache_ttl_seconds": 3600},
            "debug": False,
        }

    def test_override_replaces_non_dict(self) -> None:
        """Non-table values in override replace base values."""
        result = deep_merge({"regions": {"aliyun": ["cn-beijing"]}}, {"regions": "none"})
        assert result == {"regions": "none"}

    def test_lists_are_replaced_not_concatenated(self) -> None:
        base = {"regions": ["cn-beijing", "cn-shanghai"]}
        result = deep_merge(base, {"regions": ["cn-hangzhou"]})
        assert result == {"regions": ["cn-hangzhou"]}

    def test_base_unmodified(self) -> None:
        """Original base dictionary is not modified."""
        base = {"a": {"x": 1}}
        deep_merge(base, {"a": {"y": 2}})
        assert base == {"a": {"x": 1}}


class TestLoadToml:
    """Tests for load_toml function."""

    def test_load_valid_toml(self, tmp_path: Path) -> None:
        toml_file = tmp_path / "test.toml"
        toml_file.write_text('[engine]\nexec_path = "tofu"\ncommand_timeout_seconds = 60')

        assert load_toml(toml_file) == {
            "engine": {"exec_path": "tofu", "command_timeout_seconds": 60}
        }

    def test_load_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_toml(tmp_path / "nonexistent.toml")

    def test_load_invalid_toml_raises(self, tmp_path: Path) -> None:
        invalid_file = tmp_path / "invalid.toml"
        invalid_file.write_text("invalid = [unclosed")

        with pytest.raises(tomllib.TOMLDecodeError):
            load_toml(invalid_file)


class TestGetEnvironment:
    """Tests for get_environment function."""

    def test_returns_env_var_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLOUDBOT_ENV", "production")
        assert get_environment() == "production"

    def test_defaults_to_development(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("CLOUDBOT_ENV", raising=False)
        assert get_environment() == "development"


class TestGetConfigDir:
    """Tests for get_config_dir function."""

    def test_uses_env_var_when_set(
        self, test_config_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CLOUDBOT_CONFIG_DIR", str(test_config_dir))
        assert get_config_dir() == test_config_dir

    def test_raises_for_missing_env_dir(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CLOUDBOT_CONFIG_DIR", str(tmp_path / "missing"))

        with pytest.raises(FileNotFoundError):
            get_config_dir()

    def test_searches_parent_directories(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A config/ directory above the working directory is found."""
        (tmp_path / "config").mkdir()
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.delenv("CLOUDBOT_CONFIG_DIR", raising=False)
        monkeypatch.chdir(nested)

        assert get_config_dir() == tmp_path / "config"


class TestLoadConfig:
    """Tests for load_config function."""

    def test_loads_default_config(
        self,
        test_config_dir: Path,
        mock_toml_files,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        mock_toml_files({"default.toml": "app_name = 'test'\ndebug = false"})
        monkeypatch.setenv("CLOUDBOT_CONFIG_DIR", str(test_config_dir))
        monkeypatch.setenv("CLOUDBOT_ENV", "nonexistent")

        assert load_config() == {"app_name": "test", "debug": False}

    def test_merges_environment_config(
        self,
        test_config_dir: Path,
        mock_toml_files,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Environment file overrides default values."""
        mock_toml_files(
            {
                "default.toml": "[pricing]\nmax_in_flight = 5\ncache_ttl_seconds = 3600",
                "staging.toml": "[pricing]\nmax_in_flight = 2",
            }
        )
        monkeypatch.setenv("CLOUDBOT_CONFIG_DIR", str(test_config_dir))
        monkeypatch.setenv("CLOUDBOT_ENV", "staging")

        assert load_config() == {"pricing": {"max_in_flight": 2, "cache_ttl_seconds": 3600}}

    def test_missing_default_raises(
        self, test_config_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CLOUDBOT_CONFIG_DIR", str(test_config_dir))

        with pytest.raises(FileNotFoundError, match="default.toml"):
            load_config()
