"""
CommitCraft - convention-formatted commit messages generated by LLMs.

CommitCraft collects the pending change set of a Git repository, scrubs it
of credentials, and asks a hosted or local model for Conventional Commit
candidates that are validated against an optional team ruleset.

"""

from __future__ import annotations

__version__ = "0.3.0"
__author__ = "CommitCraft Contributors"
