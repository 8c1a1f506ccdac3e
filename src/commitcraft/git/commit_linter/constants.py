"""Constants shared by the ruleset loader and enforcer."""

from __future__ import annotations

from typing import Final

RULESET_FILENAME: Final = ".commitrc.json"

VALID_COMMIT_TYPES: Final = (
	"feat",
	"fix",
	"docs",
	"style",
	"refactor",
	"perf",
	"test",
	"build",
	"ci",
	"chore",
)

SUPPORTED_LANGUAGES: Final = ("english", "korean")

DEFAULT_MAX_SUBJECT_LENGTH: Final = 72

# Upper bound for a ruleset's maxSubjectLength.
MAX_SUBJECT_LENGTH_CAP: Final = 200
