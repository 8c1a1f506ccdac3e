"""Commit message generation for CommitCraft."""

from __future__ import annotations

from .generator import CommitMessageGenerator, GenerationContext, GenerationResult, ReviewedCandidate
from .hook import run_prepare_commit_msg

__all__ = [
	"CommitMessageGenerator",
	"GenerationContext",
	"GenerationResult",
	"ReviewedCandidate",
	"run_prepare_commit_msg",
]
