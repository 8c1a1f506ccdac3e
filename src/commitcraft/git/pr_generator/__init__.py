"""PR description generation for CommitCraft."""

from __future__ import annotations

from .generator import PRDescriptionGenerator

__all__ = ["PRDescriptionGenerator"]
