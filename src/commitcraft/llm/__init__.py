"""LLM access for CommitCraft: prompts, transports and response parsing."""

from __future__ import annotations

from .errors import CandidateValidationError, ErrorKind, LLMError
from .gateway import ProviderGateway, generate_candidates, generate_pr_description, summarize
from .response_parser import CommitCandidate, CommitType

__all__ = [
	"CandidateValidationError",
	"CommitCandidate",
	"CommitType",
	"ErrorKind",
	"LLMError",
	"ProviderGateway",
	"generate_candidates",
	"generate_pr_description",
	"summarize",
]
