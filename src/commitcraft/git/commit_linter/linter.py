"""Checks of commit candidates against a team ruleset."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .constants import DEFAULT_MAX_SUBJECT_LENGTH

if TYPE_CHECKING:
	from commitcraft.llm.response_parser import CommitCandidate

	from .ruleset import Ruleset


def validate_against_ruleset(candidate: CommitCandidate, ruleset: Ruleset | None) -> list[str]:
	"""
	Collect every ruleset violation of a candidate.

	All applicable checks run; the candidate is never modified.

	Args:
	    candidate: Normalized commit candidate
	    ruleset: Team ruleset, or None when the project has none

	Returns:
	    Human-readable violations, empty when the candidate complies

	"""
	if ruleset is None:
		return []

	violations: list[str] = []
	commit_type = candidate.type.value

	if ruleset.allowed_types and commit_type not in ruleset.allowed_types:
		violations.append(
			f'Type "{commit_type}" is not allowed. Allowed types: {", ".join(ruleset.allowed_types)}'
		)

	if ruleset.require_scope and not candidate.scope:
		violations.append("Scope is required by team ruleset")

	if ruleset.allowed_scopes and candidate.scope and candidate.scope not in ruleset.allowed_scopes:
		violations.append(
			f'Scope "{candidate.scope}" is not allowed. Allowed scopes: {", ".join(ruleset.allowed_scopes)}'
		)

	max_length = ruleset.max_subject_length or DEFAULT_MAX_SUBJECT_LENGTH
	if len(candidate.subject) > max_length:
		violations.append(
			f"Subject exceeds maximum length of {max_length} characters (current: {len(candidate.subject)})"
		)

	if ruleset.subject_prefix and not candidate.subject.startswith(ruleset.subject_prefix):
		violations.append(f'Subject must start with "{ruleset.subject_prefix}"')

	return violations


def build_ruleset_prompt_additions(ruleset: Ruleset | None) -> str:
	"""
	Render ruleset constraints as extra system prompt instructions.

	Returns:
	    A "Team Rules" block, or an empty string when nothing applies

	"""
	if ruleset is None:
		return ""

	rules: list[str] = []
	if ruleset.allowed_types:
		rules.append(f"- ONLY use these commit types: {', '.join(ruleset.allowed_types)}")
	if ruleset.require_scope:
		rules.append("- Scope is REQUIRED for all commits")
	if ruleset.allowed_scopes:
		rules.append(f"- ONLY use these scopes: {', '.join(ruleset.allowed_scopes)}")
	if ruleset.max_subject_length:
		rules.append(f"- Subject must be {ruleset.max_subject_length} characters or less")
	if ruleset.subject_prefix:
		rules.append(f'- Subject MUST start with "{ruleset.subject_prefix}"')
	if ruleset.custom_prompt:
		rules.append(f"- {ruleset.custom_prompt}")

	if not rules:
		return ""
	return "\n\nTeam Rules:\n" + "\n".join(rules)
