"""Team ruleset loading and enforcement for commit candidates."""

from __future__ import annotations

from .constants import DEFAULT_MAX_SUBJECT_LENGTH, RULESET_FILENAME, VALID_COMMIT_TYPES
from .linter import build_ruleset_prompt_additions, validate_against_ruleset
from .ruleset import Ruleset, load_ruleset, sanitize_ruleset

__all__ = [
	"DEFAULT_MAX_SUBJECT_LENGTH",
	"RULESET_FILENAME",
	"VALID_COMMIT_TYPES",
	"Ruleset",
	"build_ruleset_prompt_additions",
	"load_ruleset",
	"sanitize_ruleset",
	"validate_against_ruleset",
]
