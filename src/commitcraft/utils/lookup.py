"""Result type for best-effort lookups that may legitimately come back empty."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class AbsentReason(str, Enum):
	"""Why a lookup produced no value."""

	DISABLED = "disabled"
	NOT_FOUND = "not_found"
	PARSE_ERROR = "parse_error"
	INVALID_PATTERN = "invalid_pattern"
	NO_MATCH = "no_match"
	BRANCH_UNAVAILABLE = "branch_unavailable"


@dataclass(frozen=True)
class Lookup(Generic[T]):
	"""Either a value or the reason there is none."""

	value: T | None = None
	reason: AbsentReason | None = None

	@property
	def found(self) -> bool:
		"""Whether the lookup produced a value."""
		return self.reason is None and self.value is not None

	@classmethod
	def of(cls, value: T) -> Lookup[T]:
		"""Wrap a found value."""
		return cls(value=value)

	@classmethod
	def absent(cls, reason: AbsentReason) -> Lookup[T]:
		"""Build an empty lookup carrying ``reason``."""
		return cls(reason=reason)
