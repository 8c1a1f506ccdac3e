"""Schemas for the CommitCraft configuration file."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Provider = Literal["openai", "groq", "gemini", "ollama"]
Language = Literal["english", "korean"]
IssueReferenceMode = Literal["prompt", "append", "both"]

DEFAULT_EXCLUDE_PATTERNS = [
	"node_modules",
	"*.lock",
	"package-lock.json",
	"pnpm-lock.yaml",
	"dist",
	"build",
	"*.min.*",
]
DEFAULT_OLLAMA_URL = "http://localhost:11434"

# Environment variables holding hosted provider credentials.
CREDENTIAL_ENV_VARS: dict[str, str] = {
	"openai": "OPENAI_API_KEY",
	"groq": "GROQ_API_KEY",
	"gemini": "GEMINI_API_KEY",
}

# Model used when none is configured.
DEFAULT_MODELS: dict[str, str] = {
	"openai": "gpt-4o-mini",
	"groq": "llama-3.1-8b-instant",
	"gemini": "gemini-1.5-flash",
	"ollama": "llama3.2",
}

# Credential handed to the local provider, which needs none.
LOCAL_CREDENTIAL_SENTINEL = "ollama-no-key-needed"


class AppConfigSchema(BaseModel):
	"""Validated configuration consumed by the generation pipeline."""

	provider: Provider = "openai"
	model: str = ""
	language: Language = "english"
	max_diff_chars: int = Field(default=12000, gt=0)
	exclude: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
	ollama_url: str = DEFAULT_OLLAMA_URL
	provider_endpoint: str | None = None
	mask_sensitive: bool = True
	summarize_large_diff: bool = True
	summarize_threshold: int = Field(default=8000, gt=0)
	summarize_input_chars: int = Field(default=48000, gt=0)
	issue_pattern: str = ""
	issue_prefix: str = ""
	issue_reference_mode: IssueReferenceMode = "prompt"
	accept_partial_candidates: bool = False
	max_regenerations: int = Field(default=2, ge=0)
	request_timeout: float = Field(default=60.0, gt=0)
	api_keys: dict[str, str] = Field(default_factory=dict)

	model_config = ConfigDict(extra="ignore")

	@field_validator("exclude", mode="before")
	@classmethod
	def split_exclude(cls, value: object) -> object:
		"""Accept a comma separated string as well as a list."""
		if isinstance(value, str):
			return [part.strip() for part in value.split(",") if part.strip()]
		return value

	@field_validator("ollama_url")
	@classmethod
	def strip_trailing_slash(cls, value: str) -> str:
		"""Normalize the local server URL so paths can be appended."""
		return value.rstrip("/")

	@field_validator("model", "issue_pattern", "issue_prefix")
	@classmethod
	def strip_text(cls, value: str) -> str:
		"""Trim surrounding whitespace from free text settings."""
		return value.strip()

	@property
	def effective_model(self) -> str:
		"""The configured model, or the provider default when none is set."""
		return self.model or DEFAULT_MODELS[self.provider]
