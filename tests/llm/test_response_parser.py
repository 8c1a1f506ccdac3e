"""Tests for parsing model responses into commit candidates."""

from __future__ import annotations

from typing import Any

import pytest

from commitcraft.llm.errors import CandidateValidationError, ErrorKind, LLMError
from commitcraft.llm.response_parser import (
	ELLIPSIS,
	CommitType,
	extract_json,
	normalize_subject,
	parse_candidates,
	validate_candidate,
	validate_candidate_list,
)
from tests.conftest import candidates_json


@pytest.mark.unit
class TestExtractJson:
	"""Test cases for extract_json."""

	def test_fenced_block(self) -> None:
		"""Test JSON inside a markdown code fence."""
		text = 'Here you go:\n```json\n{"candidates": [{"type": "feat"}]}\n```\nEnjoy!'
		assert extract_json(text) == {"candidates": [{"type": "feat"}]}

	def test_object_in_prose(self) -> None:
		"""Test JSON surrounded by prose without a fence."""
		assert extract_json('Sure! {"a": 1} hope it helps') == {"a": 1}

	def test_nested_object_in_prose(self) -> None:
		"""Test that the greedy match recovers nested objects."""
		text = 'Result: {"candidates": [{"type": "fix", "subject": "x"}]} done'
		assert extract_json(text) == {"candidates": [{"type": "fix", "subject": "x"}]}

	def test_raw_array(self) -> None:
		"""Test that bare JSON is accepted."""
		assert extract_json("[1, 2]") == [1, 2]

	def test_garbage(self) -> None:
		"""Test that text without JSON raises an invalid-response error."""
		with pytest.raises(LLMError) as exc_info:
			extract_json("I cannot help with that.")
		assert exc_info.value.kind is ErrorKind.INVALID_RESPONSE


@pytest.mark.unit
class TestNormalizeSubject:
	"""Test cases for normalize_subject."""

	@pytest.mark.parametrize(
		("raw", "expected"),
		[
			("Add login.", "add login"),
			("add login...", "add login"),
			("  Add   user\nlogin  ", "add user login"),
			("API client", "aPI client"),
			("로그인 추가.", "로그인 추가"),
			("Élan support", "Élan support"),
			("...", ""),
		],
	)
	def test_normalization(self, raw: str, expected: str) -> None:
		"""Test trimming, trailing periods and first-letter casing."""
		assert normalize_subject(raw) == expected

	@pytest.mark.parametrize("length", [72, 73, 100, 500])
	def test_bounded(self, length: int) -> None:
		"""Test that subjects never exceed 72 characters or end with a period."""
		subject = normalize_subject("word " * (length // 5) + "x" * (length % 5) + ".")
		assert len(subject) <= 72
		assert not subject.endswith(".")

	def test_truncated_with_ellipsis(self) -> None:
		"""Test that long subjects are cut with an ellipsis."""
		subject = normalize_subject("a" * 100)
		assert subject == "a" * 71 + ELLIPSIS


@pytest.mark.unit
class TestValidateCandidate:
	"""Test cases for validate_candidate."""

	def test_valid(self) -> None:
		"""Test a valid candidate with normalization applied."""
		result = validate_candidate({"type": "feat", "scope": " auth ", "subject": "Add login.", "extra": 1})
		assert result.type is CommitType.FEAT
		assert result.scope == "auth"
		assert result.subject == "add login"
		assert result.format() == "feat(auth): add login"

	def test_blank_scope_dropped(self) -> None:
		"""Test that a blank scope becomes None."""
		result = validate_candidate({"type": "fix", "scope": "  ", "subject": "fix crash"})
		assert result.scope is None
		assert str(result) == "fix: fix crash"

	@pytest.mark.parametrize(
		"value",
		[
			{"type": "feature", "subject": "x"},
			{"type": "FEAT", "subject": "x"},
			{"type": 1, "subject": "x"},
			{"subject": "x"},
			{"type": "feat"},
			{"type": "feat", "subject": ""},
			{"type": "feat", "subject": " . "},
			{"type": "feat", "subject": ["x"]},
			"feat: x",
			None,
		],
	)
	def test_invalid(self, value: Any) -> None:
		"""Test that malformed candidates are rejected, never coerced."""
		with pytest.raises(CandidateValidationError):
			validate_candidate(value)

	def test_index_in_message(self) -> None:
		"""Test that the batch position is reported."""
		with pytest.raises(CandidateValidationError, match="Candidate 2: Invalid commit type"):
			validate_candidate({"type": "wip", "subject": "x"}, 2)


@pytest.mark.unit
class TestValidateCandidateList:
	"""Test cases for validate_candidate_list and parse_candidates."""

	def test_fenced_response(self) -> None:
		"""Test the typical fenced response."""
		text = '```json\n{"candidates":[{"type":"feat","scope":"auth","subject":"Add login."}]}\n```'
		[result] = parse_candidates(text)
		assert (result.type.value, result.scope, result.subject) == ("feat", "auth", "add login")

	def test_limit(self) -> None:
		"""Test that extra candidates are dropped."""
		items = [{"type": "feat", "subject": f"change {i}"} for i in range(5)]
		assert len(validate_candidate_list({"candidates": items})) == 3
		assert len(validate_candidate_list({"candidates": items}, limit=1)) == 1

	@pytest.mark.parametrize("value", [{}, {"candidates": []}, {"candidates": "x"}, [], None])
	def test_bad_shape(self, value: Any) -> None:
		"""Test responses without a usable candidates array."""
		with pytest.raises(CandidateValidationError):
			validate_candidate_list(value)

	def test_one_bad_candidate_fails_batch(self) -> None:
		"""Test that the default policy rejects a partly malformed batch."""
		value = {"candidates": [{"type": "feat", "subject": "ok"}, {"type": "wip", "subject": "bad"}]}
		with pytest.raises(CandidateValidationError, match="Candidate 2"):
			validate_candidate_list(value)

	def test_partial_acceptance(self) -> None:
		"""Test that partial mode keeps the valid candidates."""
		value = {"candidates": [{"type": "wip", "subject": "bad"}, {"type": "fix", "subject": "ok"}]}
		result = validate_candidate_list(value, partial=True)
		assert [item.format() for item in result] == ["fix: ok"]

	def test_partial_all_invalid(self) -> None:
		"""Test that partial mode still fails when nothing is valid."""
		with pytest.raises(CandidateValidationError):
			validate_candidate_list({"candidates": [{"type": "wip"}]}, partial=True)

	def test_parse_serialized(self) -> None:
		"""Test parsing an unfenced JSON body."""
		text = candidates_json({"type": "docs", "subject": "Update README"})
		assert [item.format() for item in parse_candidates(text)] == ["docs: update README"]
