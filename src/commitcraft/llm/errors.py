"""Errors raised by provider calls and response validation."""

from __future__ import annotations

from enum import Enum

from commitcraft.exceptions import CommitCraftError


class ErrorKind(str, Enum):
	"""Category of a provider failure, decided where the status code is known."""

	AUTHENTICATION = "authentication"
	RATE_LIMITED = "rate_limited"
	CONNECTION_REFUSED = "connection_refused"
	MODEL_NOT_FOUND = "model_not_found"
	EMPTY_RESPONSE = "empty_response"
	INVALID_RESPONSE = "invalid_response"
	MISSING_CREDENTIAL = "missing_credential"
	UNKNOWN = "unknown"


class LLMError(CommitCraftError):
	"""Custom exception for errors in LLM operations."""

	def __init__(self, message: str, kind: ErrorKind = ErrorKind.UNKNOWN, detail: str | None = None) -> None:
		super().__init__(message)
		self.kind = kind
		self.detail = detail or message


class CandidateValidationError(LLMError):
	"""A model response did not contain a valid commit candidate."""

	def __init__(self, message: str, index: int | None = None) -> None:
		if index is not None:
			message = f"Candidate {index}: {message}"
		super().__init__(message, kind=ErrorKind.INVALID_RESPONSE)
		self.index = index
