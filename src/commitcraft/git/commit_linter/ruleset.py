"""Loading of the project ruleset file."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from commitcraft.utils.lookup import AbsentReason, Lookup

from .constants import MAX_SUBJECT_LENGTH_CAP, RULESET_FILENAME, SUPPORTED_LANGUAGES, VALID_COMMIT_TYPES

if TYPE_CHECKING:
	from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Ruleset:
	"""Team conventions a commit candidate is checked against. Every field is optional."""

	allowed_types: tuple[str, ...] | None = None
	require_scope: bool | None = None
	allowed_scopes: tuple[str, ...] | None = None
	max_subject_length: int | None = None
	subject_prefix: str | None = None
	language: str | None = None
	custom_prompt: str | None = None


def _string_list(value: Any) -> list[str]:
	if not isinstance(value, list):
		return []
	return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def sanitize_ruleset(data: dict[str, Any]) -> Ruleset:
	"""
	Build a :class:`Ruleset` from decoded JSON, dropping malformed fields.

	Each field is checked on its own, so one bad value never discards the
	rest of the document. ``maxSubjectLength`` is clamped to
	``MAX_SUBJECT_LENGTH_CAP``.

	Args:
	    data: Decoded ruleset object

	Returns:
	    The sanitized ruleset

	"""
	fields: dict[str, Any] = {}

	allowed_types = [item for item in _string_list(data.get("allowedTypes")) if item in VALID_COMMIT_TYPES]
	if allowed_types:
		fields["allowed_types"] = tuple(allowed_types)

	if isinstance(data.get("requireScope"), bool):
		fields["require_scope"] = data["requireScope"]

	allowed_scopes = _string_list(data.get("allowedScopes"))
	if allowed_scopes:
		fields["allowed_scopes"] = tuple(allowed_scopes)

	max_length = data.get("maxSubjectLength")
	if isinstance(max_length, int | float) and not isinstance(max_length, bool) and max_length > 0:
		fields["max_subject_length"] = max(1, int(min(max_length, MAX_SUBJECT_LENGTH_CAP)))

	prefix = data.get("subjectPrefix")
	if isinstance(prefix, str) and prefix.strip():
		fields["subject_prefix"] = prefix.strip()

	language = data.get("language")
	if language in SUPPORTED_LANGUAGES:
		fields["language"] = language

	custom_prompt = data.get("customPrompt")
	if isinstance(custom_prompt, str) and custom_prompt.strip():
		fields["custom_prompt"] = custom_prompt.strip()

	dropped = set(data) - {
		"allowedTypes",
		"requireScope",
		"allowedScopes",
		"maxSubjectLength",
		"subjectPrefix",
		"language",
		"customPrompt",
	}
	if dropped:
		logger.debug("Ignoring unknown ruleset fields: %s", ", ".join(sorted(dropped)))

	return Ruleset(**fields)


def load_ruleset(repo_root: Path) -> Lookup[Ruleset]:
	"""
	Load ``.commitrc.json`` from the repository root.

	A missing file is not an error. An unreadable or malformed file is
	logged and treated as absent.

	Args:
	    repo_root: Repository root directory

	Returns:
	    The ruleset, or the reason there is none

	"""
	path = repo_root / RULESET_FILENAME
	if not path.is_file():
		return Lookup.absent(AbsentReason.NOT_FOUND)

	try:
		data = json.loads(path.read_text(encoding="utf-8"))
	except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
		logger.warning("Failed to parse %s, ignoring team ruleset: %s", path, e)
		return Lookup.absent(AbsentReason.PARSE_ERROR)

	if not isinstance(data, dict):
		logger.warning("%s must contain a JSON object, ignoring team ruleset", path)
		return Lookup.absent(AbsentReason.PARSE_ERROR)

	logger.debug("Loaded team ruleset from %s", path)
	return Lookup.of(sanitize_ruleset(data))
