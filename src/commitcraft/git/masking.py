"""
Redaction of credential-shaped text before a diff leaves the machine.

Rules are applied in order. Vendor-specific shapes come before the generic
``key = value`` assignment rules so that, for example, an OpenAI key assigned
to ``api_key`` is reported as ``[OPENAI_API_KEY]`` rather than ``[API_KEY]``.
Every replacement is a bracketed upper-case token and no rule matches such a
token, which makes masking idempotent.

"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# An assignment value is left alone only when it is exactly a placeholder.
_NOT_PLACEHOLDER = r"(?!(?-i:\[[A-Z_]+\])(?![^\"'\s]))"


@dataclass(frozen=True)
class MaskRule:
	"""A named pattern and the placeholder that replaces its matches."""

	name: str
	pattern: re.Pattern[str]
	replacement: str

	def apply(self, text: str) -> str:
		"""Replace every match of this rule in ``text``."""
		return self.pattern.sub(self.replacement, text)


def _rule(name: str, pattern: str, replacement: str, flags: int = 0) -> MaskRule:
	return MaskRule(name=name, pattern=re.compile(pattern, flags), replacement=replacement)


def _assignment(name: str, keys: str, value: str, placeholder: str) -> MaskRule:
	"""Build a rule masking the value of ``<key> = value`` or ``<key>: value``."""
	return _rule(
		name,
		rf"((?:{keys})\s*[=:]\s*[\"']?){_NOT_PLACEHOLDER}{value}",
		rf"\1{placeholder}",
		re.IGNORECASE,
	)


_PEM_KIND = r"(?:RSA\s+|EC\s+|DSA\s+|OPENSSH\s+)?"

MASK_RULES: tuple[MaskRule, ...] = (
	_rule(
		"private_key",
		rf"-----BEGIN\s+{_PEM_KIND}PRIVATE\s+KEY-----[\s\S]*?-----END\s+{_PEM_KIND}PRIVATE\s+KEY-----",
		"[PRIVATE_KEY]",
		re.IGNORECASE,
	),
	_rule("openai_api_key", r"sk-(?:proj-)?[a-zA-Z0-9]{20,}", "[OPENAI_API_KEY]"),
	_rule("groq_api_key", r"gsk_[a-zA-Z0-9]{20,}", "[GROQ_API_KEY]"),
	_rule("aws_access_key", r"AKIA[0-9A-Z]{16}", "[AWS_ACCESS_KEY]"),
	_assignment("aws_secret_key", r"aws_secret_access_key", r"[A-Za-z0-9/+=]{40}", "[AWS_SECRET_KEY]"),
	_rule("google_api_key", r"AIza[0-9A-Za-z_\-]{35}", "[GOOGLE_API_KEY]"),
	_rule("github_token", r"gh[pousr]_[A-Za-z0-9_]{36,}", "[GITHUB_TOKEN]"),
	_assignment("api_key", r"api[_-]?key|apikey|api[_-]?secret", r"[a-zA-Z0-9_\-]{16,}", "[API_KEY]"),
	_rule("bearer_token", r"(Bearer\s+)[a-zA-Z0-9_\-.]{20,}", r"\1[BEARER_TOKEN]", re.IGNORECASE),
	_rule("jwt", r"eyJ[a-zA-Z0-9_\-]*\.eyJ[a-zA-Z0-9_\-]*\.[a-zA-Z0-9_\-]*", "[JWT_TOKEN]"),
	_assignment("token", r"access[_-]?token|auth[_-]?token|token", r"[a-zA-Z0-9_\-]{20,}", "[TOKEN]"),
	_assignment("password", r"password|passwd|pwd|pass", r"[^\"'\s]{4,}", "[PASSWORD]"),
	_assignment("secret", r"client[_-]?secret|secret[_-]?key|secret", r"[a-zA-Z0-9_\-]{8,}", "[SECRET]"),
	_rule("mongodb_uri", r"mongodb(?:\+srv)?://[^\s\"'<>]+", "[MONGODB_CONNECTION_STRING]", re.IGNORECASE),
	_rule("postgres_uri", r"postgres(?:ql)?://[^\s\"'<>]+", "[POSTGRES_CONNECTION_STRING]", re.IGNORECASE),
	_rule("mysql_uri", r"mysql://[^\s\"'<>]+", "[MYSQL_CONNECTION_STRING]", re.IGNORECASE),
	_rule("redis_uri", r"rediss?://[^\s\"'<>]+", "[REDIS_CONNECTION_STRING]", re.IGNORECASE),
	_rule("jdbc_uri", r"(?:jdbc|odbc):[^\s\"'<>]+", "[DATABASE_CONNECTION_STRING]", re.IGNORECASE),
	_rule(
		"ip_credentials",
		r"(?<=://)[^:/\s@]+:[^@\s/]+@(?=\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})",
		"[CREDENTIALS]@",
	),
	_rule(
		"slack_webhook",
		r"https://hooks\.slack\.com/services/[A-Za-z0-9_/]+",
		"[SLACK_WEBHOOK]",
	),
	_rule(
		"discord_webhook",
		r"https://(?:discord|discordapp)\.com/api/webhooks/[0-9]+/[A-Za-z0-9_\-]+",
		"[DISCORD_WEBHOOK]",
	),
	_rule("stripe_secret_key", r"sk_(?:live|test)_[0-9a-zA-Z]{24,}", "[STRIPE_SECRET_KEY]"),
	_rule("stripe_publishable_key", r"pk_(?:live|test)_[0-9a-zA-Z]{24,}", "[STRIPE_PUBLISHABLE_KEY]"),
	_rule("twilio_api_key", r"SK[0-9a-fA-F]{32}", "[TWILIO_API_KEY]"),
	_rule("sendgrid_api_key", r"SG\.[a-zA-Z0-9_\-]{22}\.[a-zA-Z0-9_\-]{43}", "[SENDGRID_API_KEY]"),
	_rule("mailgun_api_key", r"key-[0-9a-zA-Z]{32}", "[MAILGUN_API_KEY]"),
	_rule("npm_token", r"npm_[A-Za-z0-9]{36}", "[NPM_TOKEN]"),
	_assignment("heroku_api_key", r"HEROKU_API_KEY", r"[0-9a-fA-F\-]{36}", "[HEROKU_API_KEY]"),
	_rule(
		"key_content",
		r"(-----BEGIN[^-\n]+-----\n)[A-Za-z0-9+/=\n]+(?=\n-----END)",
		r"\1[KEY_CONTENT_REDACTED]",
	),
)


def mask_sensitive_info(text: str, rules: tuple[MaskRule, ...] = MASK_RULES) -> str:
	"""
	Replace credential-shaped substrings with placeholder tokens.

	Args:
	    text: Raw text, usually a unified diff
	    rules: Ordered rules to apply

	Returns:
	    The text with every match replaced

	"""
	if not text:
		return text

	masked = text
	for rule in rules:
		masked = rule.apply(masked)

	if masked != text:
		logger.debug("Masked sensitive content in %d characters of text", len(text))
	return masked


def contains_sensitive_info(text: str, rules: tuple[MaskRule, ...] = MASK_RULES) -> bool:
	"""
	Check whether any masking rule would fire on ``text``.

	Compiled patterns keep no match position between searches, so repeated
	calls give the same answer regardless of what was checked before.

	"""
	if not text:
		return False
	return any(rule.pattern.search(text) for rule in rules)
