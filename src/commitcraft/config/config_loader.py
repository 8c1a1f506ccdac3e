"""
Configuration loader for CommitCraft.

Settings are layered, later sources winning:

1. built-in defaults from :class:`AppConfigSchema`
2. the user file, ``$XDG_CONFIG_HOME/commitcraft/config.yml`` (or the legacy
   ``~/.commitcraft/config.yml``)
3. the repository file, ``<repo>/.commitcraft.yml``
4. ``COMMITCRAFT_<FIELD>`` environment variables and ``OLLAMA_URL``

"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from xdg.BaseDirectory import xdg_config_home

from commitcraft.exceptions import ConfigError

from .config_schema import CREDENTIAL_ENV_VARS, LOCAL_CREDENTIAL_SENTINEL, AppConfigSchema

logger = logging.getLogger(__name__)

REPO_CONFIG_FILENAME = ".commitcraft.yml"
ENV_PREFIX = "COMMITCRAFT_"


class ConfigFileNotFoundError(ConfigError):
	"""Exception raised when an explicitly requested configuration file is missing."""


class ConfigParsingError(ConfigError):
	"""Exception raised when configuration file cannot be parsed."""


def user_config_path() -> Path:
	"""Return the user configuration file, preferring an existing legacy file."""
	legacy = Path.home() / ".commitcraft" / "config.yml"
	if legacy.exists():
		return legacy
	return Path(xdg_config_home) / "commitcraft" / "config.yml"


def _coerce_env_value(value: str) -> Any:
	"""Convert an environment string into a bool, int or str."""
	lowered = value.strip().lower()
	if lowered in ("true", "yes", "on"):
		return True
	if lowered in ("false", "no", "off"):
		return False
	try:
		return int(value)
	except ValueError:
		return value


class ConfigLoader:
	"""
	Loads and manages configuration for CommitCraft using Pydantic schemas.

	This class handles loading configuration from files and the environment,
	applying defaults from :class:`AppConfigSchema`, with proper error
	handling and path resolution.

	"""

	_instance = None  # For singleton pattern

	@classmethod
	def get_instance(
		cls, config_file: Path | None = None, reload: bool = False, repo_root: Path | None = None
	) -> ConfigLoader:
		"""
		Get the singleton instance of ConfigLoader.

		Args:
			config_file: Path to configuration file (optional)
			reload: Whether to reload config even if already loaded
			repo_root: Repository root path (optional)

		Returns:
			ConfigLoader: Singleton instance

		"""
		if cls._instance is None or reload:
			cls._instance = cls(config_file, repo_root=repo_root)
		return cls._instance

	def __init__(
		self,
		config_file: Path | None = None,
		repo_root: Path | None = None,
		environ: dict[str, str] | None = None,
	) -> None:
		"""
		Initialize the configuration loader.

		Args:
			config_file: Explicit configuration file, replacing the user and repository files
			repo_root: Repository root path (optional)
			environ: Environment mapping, defaults to ``os.environ``

		"""
		self.repo_root = repo_root
		self.config_file = config_file
		self.environ = dict(os.environ) if environ is None else environ
		self._app_config = self._load_config()
		logger.debug("ConfigLoader initialized")

	def config_files(self) -> list[Path]:
		"""Return the configuration files to read, lowest precedence first."""
		if self.config_file is not None:
			path = self.config_file.expanduser()
			if not path.exists():
				msg = f"Configuration file not found: {path}"
				raise ConfigFileNotFoundError(msg)
			return [path]

		files = [user_config_path()]
		if self.repo_root is not None:
			files.append(self.repo_root / REPO_CONFIG_FILENAME)
		return [path for path in files if path.exists()]

	@staticmethod
	def _parse_yaml_file(file_path: Path) -> dict[str, Any]:
		"""
		Parse a YAML file into a dictionary.

		Raises:
			ConfigParsingError: If the file is unreadable or not a YAML mapping

		"""
		try:
			with file_path.open(encoding="utf-8") as f:
				content = yaml.safe_load(f)
		except (OSError, yaml.YAMLError) as e:
			msg = f"Error loading configuration from {file_path}: {e}"
			logger.exception(msg)
			raise ConfigParsingError(msg) from e

		if content is None:
			return {}
		if not isinstance(content, dict):
			msg = f"File {file_path} does not contain a valid YAML dictionary"
			raise ConfigParsingError(msg)
		return content

	def _env_overrides(self) -> dict[str, Any]:
		"""Collect ``COMMITCRAFT_<FIELD>`` overrides for known fields."""
		overrides: dict[str, Any] = {}
		fields = AppConfigSchema.model_fields
		for env_var, value in self.environ.items():
			if not env_var.startswith(ENV_PREFIX):
				continue
			key = env_var[len(ENV_PREFIX) :].lower()
			if key not in fields or key == "api_keys":
				continue
			overrides[key] = value if key in ("model", "issue_pattern", "issue_prefix") else _coerce_env_value(value)
			logger.debug("Applied environment override %s", env_var)

		if self.environ.get("OLLAMA_URL"):
			overrides["ollama_url"] = self.environ["OLLAMA_URL"]
		return overrides

	def _load_config(self) -> AppConfigSchema:
		"""
		Merge every configuration source into an :class:`AppConfigSchema`.

		Raises:
			ConfigError: If a file cannot be parsed or the values are invalid

		"""
		merged: dict[str, Any] = {}
		for path in self.config_files():
			self._merge_configs(merged, self._parse_yaml_file(path))
			logger.info("Loaded configuration from %s", path)
		merged.update(self._env_overrides())

		try:
			return AppConfigSchema(**merged)
		except ValidationError as e:
			error_msg = f"Error parsing configuration into schema: {e}"
			logger.debug(error_msg)
			raise ConfigParsingError(error_msg) from e

	def _merge_configs(self, base: dict[str, Any], override: dict[str, Any]) -> None:
		"""
		Recursively merge two configuration dictionaries.

		Args:
			base: Base configuration dictionary to merge into
			override: Override configuration to apply

		"""
		for key, value in override.items():
			if isinstance(value, dict) and key in base and isinstance(base[key], dict):
				self._merge_configs(base[key], value)
			else:
				base[key] = value

	@property
	def get(self) -> AppConfigSchema:
		"""The current application configuration."""
		return self._app_config

	def with_overrides(self, **overrides: Any) -> AppConfigSchema:
		"""
		Return the configuration with command-line overrides applied.

		``None`` values are ignored so unset CLI options keep the configured value.

		"""
		values = {key: value for key, value in overrides.items() if value is not None}
		if not values:
			return self._app_config
		try:
			return AppConfigSchema(**{**self._app_config.model_dump(), **values})
		except ValidationError as e:
			msg = f"Invalid option: {e}"
			raise ConfigError(msg) from e


def resolve_credential(config: AppConfigSchema, environ: dict[str, str] | None = None) -> str | None:
	"""
	Find the credential for the configured provider.

	The environment takes precedence over ``api_keys`` in the configuration
	file. The local provider always receives a sentinel value.

	Returns:
		The credential, or None when a hosted provider has none configured

	"""
	if config.provider == "ollama":
		return LOCAL_CREDENTIAL_SENTINEL

	env = os.environ if environ is None else environ
	env_var = CREDENTIAL_ENV_VARS[config.provider]
	credential = env.get(env_var, "").strip() or config.api_keys.get(config.provider, "").strip()
	return credential or None


def save_user_config(values: dict[str, Any], path: Path | None = None) -> Path:
	"""
	Merge ``values`` into the user configuration file and write it back.

	Returns:
		The path that was written

	Raises:
		ConfigError: If the existing file is invalid or cannot be written

	"""
	target = path or user_config_path()
	current: dict[str, Any] = {}
	if target.exists():
		current = ConfigLoader._parse_yaml_file(target)

	for key, value in values.items():
		if isinstance(value, dict) and isinstance(current.get(key), dict):
			current[key].update(value)
		else:
			current[key] = value

	try:
		AppConfigSchema(**current)
	except ValidationError as e:
		msg = f"Refusing to save invalid configuration: {e}"
		raise ConfigError(msg) from e

	try:
		target.parent.mkdir(parents=True, exist_ok=True)
		with target.open("w", encoding="utf-8") as f:
			yaml.safe_dump(current, f, sort_keys=False)
	except OSError as e:
		msg = f"Could not write configuration to {target}: {e}"
		raise ConfigError(msg) from e

	logger.info("Saved configuration to %s", target)
	return target
