"""Tests for configuration loading."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest
import yaml

from commitcraft.config import AppConfigSchema, ConfigLoader, resolve_credential, save_user_config
from commitcraft.config.config_loader import (
	REPO_CONFIG_FILENAME,
	ConfigFileNotFoundError,
	ConfigParsingError,
)
from commitcraft.config.config_schema import DEFAULT_EXCLUDE_PATTERNS, LOCAL_CREDENTIAL_SENTINEL
from commitcraft.exceptions import ConfigError

if TYPE_CHECKING:
	from collections.abc import Iterator
	from pathlib import Path


@pytest.fixture
def user_config(tmp_path: Path) -> Iterator[Path]:
	"""Point the user configuration file into ``tmp_path``."""
	path = tmp_path / "home" / "config.yml"
	with patch("commitcraft.config.config_loader.user_config_path", return_value=path):
		yield path


def write_yaml(path: Path, data: dict) -> None:
	"""Write ``data`` as YAML, creating parent directories."""
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_text(yaml.safe_dump(data), encoding="utf-8")


@pytest.mark.unit
class TestAppConfigSchema:
	"""Test cases for the configuration schema."""

	def test_defaults(self) -> None:
		"""Test the built-in defaults."""
		config = AppConfigSchema()
		assert config.provider == "openai"
		assert config.max_diff_chars == 12000
		assert config.exclude == DEFAULT_EXCLUDE_PATTERNS
		assert config.mask_sensitive is True
		assert config.effective_model == "gpt-4o-mini"

	def test_exclude_from_string(self) -> None:
		"""Test that a comma separated exclude list is split."""
		assert AppConfigSchema(exclude="dist, *.lock ,").exclude == ["dist", "*.lock"]

	def test_invalid_provider(self) -> None:
		"""Test that unknown providers are rejected."""
		with pytest.raises(ValueError, match="provider"):
			AppConfigSchema(provider="anthropic")


@pytest.mark.unit
class TestConfigLoader:
	"""Test cases for ConfigLoader."""

	def test_no_files(self, user_config: Path, tmp_path: Path) -> None:
		"""Test that defaults apply when no file exists."""
		loader = ConfigLoader(repo_root=tmp_path, environ={})
		assert loader.get == AppConfigSchema()

	def test_repo_overrides_user(self, user_config: Path, tmp_path: Path) -> None:
		"""Test file precedence and nested merging."""
		write_yaml(user_config, {"provider": "groq", "language": "korean", "api_keys": {"groq": "user-key"}})
		write_yaml(tmp_path / REPO_CONFIG_FILENAME, {"provider": "gemini", "api_keys": {"gemini": "repo-key"}})

		config = ConfigLoader(repo_root=tmp_path, environ={}).get
		assert config.provider == "gemini"
		assert config.language == "korean"
		assert config.api_keys == {"groq": "user-key", "gemini": "repo-key"}

	def test_environment_overrides(self, user_config: Path, tmp_path: Path) -> None:
		"""Test that environment variables win over files."""
		write_yaml(user_config, {"max_diff_chars": 5000, "mask_sensitive": True})
		environ = {
			"COMMITCRAFT_MAX_DIFF_CHARS": "2000",
			"COMMITCRAFT_MASK_SENSITIVE": "false",
			"COMMITCRAFT_MODEL": "123",
			"COMMITCRAFT_API_KEYS": "ignored",
			"COMMITCRAFT_UNKNOWN": "x",
			"OLLAMA_URL": "http://gpu-box:11434",
		}
		config = ConfigLoader(repo_root=tmp_path, environ=environ).get
		assert config.max_diff_chars == 2000
		assert config.mask_sensitive is False
		assert config.model == "123"
		assert config.api_keys == {}
		assert config.ollama_url == "http://gpu-box:11434"

	def test_explicit_file(self, tmp_path: Path) -> None:
		"""Test loading an explicitly requested file."""
		path = tmp_path / "custom.yml"
		write_yaml(path, {"provider": "ollama"})
		assert ConfigLoader(config_file=path, environ={}).get.provider == "ollama"

	def test_explicit_file_missing(self, tmp_path: Path) -> None:
		"""Test that a missing explicit file is an error."""
		with pytest.raises(ConfigFileNotFoundError):
			ConfigLoader(config_file=tmp_path / "missing.yml", environ={})

	@pytest.mark.parametrize("content", ["provider: [unclosed", "- just\n- a list\n"])
	def test_unparsable(self, tmp_path: Path, content: str) -> None:
		"""Test that broken YAML and non-mappings are rejected."""
		path = tmp_path / "bad.yml"
		path.write_text(content, encoding="utf-8")
		with pytest.raises(ConfigParsingError):
			ConfigLoader(config_file=path, environ={})

	def test_invalid_values(self, tmp_path: Path) -> None:
		"""Test that schema violations are reported as parsing errors."""
		path = tmp_path / "bad.yml"
		write_yaml(path, {"max_diff_chars": -1})
		with pytest.raises(ConfigParsingError):
			ConfigLoader(config_file=path, environ={})

	def test_with_overrides(self, user_config: Path, tmp_path: Path) -> None:
		"""Test that None overrides are ignored and invalid ones rejected."""
		loader = ConfigLoader(repo_root=tmp_path, environ={})
		assert loader.with_overrides(provider=None) is loader.get
		assert loader.with_overrides(provider="groq", model=None).provider == "groq"
		with pytest.raises(ConfigError):
			loader.with_overrides(language="french")

	def test_singleton(self, user_config: Path) -> None:
		"""Test that get_instance reuses the loader until reloaded."""
		first = ConfigLoader.get_instance()
		assert ConfigLoader.get_instance() is first
		assert ConfigLoader.get_instance(reload=True) is not first


@pytest.mark.unit
class TestCredentials:
	"""Test cases for resolve_credential and save_user_config."""

	def test_environment_first(self) -> None:
		"""Test that the environment wins over the config file."""
		config = AppConfigSchema(api_keys={"openai": "file-key"})
		assert resolve_credential(config, {"OPENAI_API_KEY": "env-key"}) == "env-key"
		assert resolve_credential(config, {}) == "file-key"

	def test_missing(self) -> None:
		"""Test that a hosted provider without any key has no credential."""
		assert resolve_credential(AppConfigSchema(provider="groq"), {"GROQ_API_KEY": "  "}) is None

	def test_ollama_sentinel(self) -> None:
		"""Test that the local provider always gets the sentinel."""
		assert resolve_credential(AppConfigSchema(provider="ollama"), {}) == LOCAL_CREDENTIAL_SENTINEL

	def test_save_merges(self, tmp_path: Path) -> None:
		"""Test that saving merges with the existing file."""
		path = tmp_path / "config.yml"
		write_yaml(path, {"language": "korean", "api_keys": {"groq": "g"}})
		save_user_config({"provider": "openai", "api_keys": {"openai": "o"}}, path)

		saved = yaml.safe_load(path.read_text(encoding="utf-8"))
		assert saved == {"language": "korean", "api_keys": {"groq": "g", "openai": "o"}, "provider": "openai"}

	def test_save_rejects_invalid(self, tmp_path: Path) -> None:
		"""Test that invalid values are not written."""
		path = tmp_path / "config.yml"
		with pytest.raises(ConfigError):
			save_user_config({"provider": "nobody"}, path)
		assert not path.exists()
