"""Configuration for CommitCraft."""

from __future__ import annotations

from .config_loader import ConfigLoader, resolve_credential, save_user_config
from .config_schema import AppConfigSchema

__all__ = ["AppConfigSchema", "ConfigLoader", "resolve_credential", "save_user_config"]
