"""
Parsing of model responses into commit candidates.

Model output is untrusted: it may be wrapped in markdown or prose, carry extra
fields, or use the wrong types. Everything that reaches the rest of the
pipeline goes through :func:`validate_candidate`.

"""

from __future__ import annotations

import json
import logging
import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from commitcraft.git.commit_linter.constants import DEFAULT_MAX_SUBJECT_LENGTH

from .errors import CandidateValidationError, ErrorKind, LLMError

logger = logging.getLogger(__name__)

MAX_CANDIDATES = 3
ELLIPSIS = "…"

FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
LAZY_OBJECT = re.compile(r"\{[\s\S]*?\}")
GREEDY_OBJECT = re.compile(r"\{[\s\S]*\}")
TRAILING_PERIODS = re.compile(r"[\s.]+$")


class CommitType(str, Enum):
	"""Conventional Commit types a candidate may use."""

	FEAT = "feat"
	FIX = "fix"
	DOCS = "docs"
	STYLE = "style"
	REFACTOR = "refactor"
	PERF = "perf"
	TEST = "test"
	BUILD = "build"
	CI = "ci"
	CHORE = "chore"


COMMIT_TYPE_VALUES = frozenset(member.value for member in CommitType)


class CommitCandidate(BaseModel):
	"""A normalized commit message proposal."""

	model_config = ConfigDict(frozen=True)

	type: CommitType
	scope: str | None = None
	subject: str

	def format(self) -> str:
		"""Render the candidate as a Conventional Commit subject line."""
		if self.scope:
			return f"{self.type.value}({self.scope}): {self.subject}"
		return f"{self.type.value}: {self.subject}"

	def __str__(self) -> str:
		return self.format()


def extract_json(text: str) -> Any:
	"""
	Decode the JSON value embedded in a model response.

	Candidates are tried in order: the first fenced code block, the first
	brace-delimited object (shortest, then longest), and finally the whole
	text. The first one that decodes wins.

	Raises:
	    LLMError: If no candidate decodes

	"""
	attempts: list[str] = []
	fenced = FENCED_BLOCK.search(text)
	if fenced:
		attempts.append(fenced.group(1))
	for pattern in (LAZY_OBJECT, GREEDY_OBJECT):
		match = pattern.search(text)
		if match:
			attempts.append(match.group(0))
	attempts.append(text)

	for attempt in attempts:
		try:
			return json.loads(attempt.strip())
		except json.JSONDecodeError:
			continue

	msg = "Response did not contain valid JSON"
	raise LLMError(msg, kind=ErrorKind.INVALID_RESPONSE, detail=text[:200])


def normalize_subject(subject: str, max_length: int = DEFAULT_MAX_SUBJECT_LENGTH) -> str:
	"""
	Normalize a subject line.

	Whitespace runs collapse to one space, trailing periods are removed, an
	ASCII first letter is lower-cased, and anything longer than
	``max_length`` is cut with an ellipsis.

	"""
	cleaned = re.sub(r"\s+", " ", subject).strip()
	cleaned = TRAILING_PERIODS.sub("", cleaned)
	if cleaned and cleaned[0].isascii() and cleaned[0].isalpha():
		cleaned = cleaned[0].lower() + cleaned[1:]
	if len(cleaned) > max_length:
		cleaned = cleaned[: max_length - len(ELLIPSIS)].rstrip() + ELLIPSIS
	return cleaned


def validate_candidate(value: Any, index: int | None = None) -> CommitCandidate:
	"""
	Validate and normalize a single decoded candidate.

	Args:
	    value: Decoded JSON value for one candidate
	    index: 1-based position in the batch, used in error messages

	Returns:
	    The normalized candidate

	Raises:
	    CandidateValidationError: If the type or subject is missing or invalid

	"""
	if not isinstance(value, dict):
		msg = "Candidate is not an object"
		raise CandidateValidationError(msg, index)

	raw_type = value.get("type")
	if not isinstance(raw_type, str) or raw_type not in COMMIT_TYPE_VALUES:
		msg = f"Invalid commit type: {raw_type!r}"
		raise CandidateValidationError(msg, index)

	raw_subject = value.get("subject")
	if not isinstance(raw_subject, str):
		msg = "Missing or invalid subject"
		raise CandidateValidationError(msg, index)
	subject = normalize_subject(raw_subject)
	if not subject:
		msg = "Missing or invalid subject"
		raise CandidateValidationError(msg, index)

	raw_scope = value.get("scope")
	scope = raw_scope.strip() if isinstance(raw_scope, str) and raw_scope.strip() else None

	return CommitCandidate(type=CommitType(raw_type), scope=scope, subject=subject)


def validate_candidate_list(
	value: Any, *, limit: int = MAX_CANDIDATES, partial: bool = False
) -> list[CommitCandidate]:
	"""
	Validate the ``candidates`` array of a decoded response.

	By default the first malformed candidate fails the whole batch. With
	``partial`` set, malformed candidates are skipped and the batch only
	fails when none survive.

	Args:
	    value: Decoded response object
	    limit: Maximum number of candidates to keep
	    partial: Keep the valid candidates of a partly malformed batch

	Returns:
	    Between one and ``limit`` candidates

	Raises:
	    CandidateValidationError: If the shape is wrong or validation fails

	"""
	candidates = value.get("candidates") if isinstance(value, dict) else None
	if not isinstance(candidates, list) or not candidates:
		msg = "Response must contain a non-empty 'candidates' array"
		raise CandidateValidationError(msg)

	valid: list[CommitCandidate] = []
	errors: list[CandidateValidationError] = []
	for index, item in enumerate(candidates[:limit], start=1):
		try:
			valid.append(validate_candidate(item, index))
		except CandidateValidationError as e:
			if not partial:
				raise
			logger.warning("Skipping malformed candidate: %s", e)
			errors.append(e)

	if not valid:
		raise errors[0]
	return valid


def parse_candidates(text: str, *, limit: int = MAX_CANDIDATES, partial: bool = False) -> list[CommitCandidate]:
	"""Extract and validate the candidates contained in a raw model response."""
	return validate_candidate_list(extract_json(text), limit=limit, partial=partial)
