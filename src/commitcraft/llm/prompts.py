"""Prompts for commit message, summary and PR description generation."""

from __future__ import annotations

COMMIT_SYSTEM_PROMPT_EN = """You are a commit message generator. Analyze the git diff and generate {count} different \
commit message {noun} following Conventional Commits format.

Output JSON only: {{ "candidates": [{{ "type": "...", "scope": "...", "subject": "..." }}, ...] }}

Rules:
- type: one of feat, fix, docs, style, refactor, perf, test, build, ci, chore
- scope: optional, short identifier for affected area (e.g., "auth", "api", "ui"). Omit if changes span multiple areas
- subject: imperative mood (e.g., "add", "fix", "update"), max 72 chars, no period at end, lowercase first letter
{variation_rule}
Example output:
{example}"""

COMMIT_SYSTEM_PROMPT_KO = """You are a commit message generator. Analyze the git diff and generate {count} different \
commit message {noun} following Conventional Commits format.

Output JSON only: {{ "candidates": [{{ "type": "...", "scope": "...", "subject": "..." }}, ...] }}

Rules:
- type: one of feat, fix, docs, style, refactor, perf, test, build, ci, chore (MUST be in English)
- scope: optional, short identifier for affected area (MUST be in English)
- subject: MUST be written in Korean, max 72 chars, no period at end
{variation_rule}
Example output:
{example}"""

EXAMPLES_EN = (
	'{ "type": "feat", "scope": "auth", "subject": "add OAuth2 login support" }',
	'{ "type": "feat", "scope": "auth", "subject": "implement OAuth2 authentication flow" }',
	'{ "type": "feat", "subject": "add social login via OAuth2" }',
)

EXAMPLES_KO = (
	'{ "type": "feat", "scope": "auth", "subject": "OAuth2 로그인 지원 추가" }',
	'{ "type": "feat", "scope": "auth", "subject": "OAuth2 인증 흐름 구현" }',
	'{ "type": "feat", "subject": "OAuth2를 통한 소셜 로그인 추가" }',
)

ISSUE_REFERENCE_DIRECTIVE = '\n\nIMPORTANT: Include "{issue_reference}" at the end of each subject.'

COMMIT_USER_PROMPT = """Generate {count} commit message {noun} for the following changes:

## Files Changed:
{file_summary}

## Diff:
{diff}"""

SUMMARIZE_SYSTEM_PROMPT = """You summarize large git diffs so that a commit message can be written from the summary.

Rules:
- List every changed file with one line describing what changed in it
- Mention added, removed or renamed functions, classes and configuration keys by name
- Call out behavior changes, bug fixes and new dependencies
- Never reproduce credentials, tokens or placeholder values such as [PASSWORD]
- Plain text only, no more than 60 lines"""

SUMMARIZE_USER_PROMPT = """Summarize the following diff:

{diff}"""

PR_SYSTEM_PROMPT_EN = """You are a PR description generator. Analyze the git diff and generate a well-structured \
PR description in markdown format.

Output format:
# <Title: short summary, max 50 chars>

## Summary
<What this PR does in 2-3 sentences>

## Changes
<Bullet list of main changes>

## Testing
<How to test these changes>

Rules:
- Title should be concise and descriptive (max 50 chars)
- Summary should explain the "why" and "what" of the changes
- Changes should be a bullet list of the main modifications
- Testing should include specific steps or scenarios to verify the changes
- Use clear, professional language"""

PR_SYSTEM_PROMPT_KO = """You are a PR description generator. Analyze the git diff and generate a well-structured \
PR description in markdown format.

Output format:
# <Title: 짧은 요약, 최대 50자>

## 요약
<이 PR이 무엇을 하는지 2-3문장으로 설명>

## 변경 사항
<주요 변경 사항 bullet list>

## 테스트
<변경 사항을 테스트하는 방법>

Rules:
- Title은 간결하고 설명적이어야 합니다 (최대 50자)
- 요약은 변경의 "왜"와 "무엇"을 설명해야 합니다
- 변경 사항은 주요 수정 사항의 bullet list여야 합니다
- 테스트는 변경 사항을 확인하는 구체적인 단계나 시나리오를 포함해야 합니다
- 명확하고 전문적인 언어를 사용하세요"""

PR_USER_PROMPT = """Generate a PR description for the following changes:

## Files Changed:
{file_summary}

## Diff:
{diff}"""


def _noun(count: int) -> str:
	return "suggestion" if count == 1 else "suggestions"


def build_system_prompt(
	language: str,
	count: int = 3,
	ruleset_additions: str = "",
	issue_reference: str | None = None,
) -> str:
	"""
	Assemble the system prompt for candidate generation.

	Args:
	    language: ``english`` or ``korean``; only the subject is translated
	    count: Number of candidates to request
	    ruleset_additions: Team rule directives appended verbatim
	    issue_reference: Token every subject must end with

	Returns:
	    The complete system prompt

	"""
	korean = language == "korean"
	template = COMMIT_SYSTEM_PROMPT_KO if korean else COMMIT_SYSTEM_PROMPT_EN
	examples = (EXAMPLES_KO if korean else EXAMPLES_EN)[:count]
	variation_rule = (
		f"- Provide {count} different variations with different wording or focus\n" if count > 1 else ""
	)
	example = '{ "candidates": [\n  ' + ",\n  ".join(examples) + "\n]}"

	prompt = template.format(count=count, noun=_noun(count), variation_rule=variation_rule, example=example)
	prompt += ruleset_additions
	if issue_reference:
		prompt += ISSUE_REFERENCE_DIRECTIVE.format(issue_reference=issue_reference)
	return prompt


def build_user_prompt(diff: str, file_summary: str, count: int = 3) -> str:
	"""Assemble the user prompt carrying the change set."""
	return COMMIT_USER_PROMPT.format(
		count=count,
		noun="candidate" if count == 1 else "candidates",
		file_summary=file_summary or "No files changed",
		diff=diff or "No diff available",
	)


def build_summarize_prompts(diff: str) -> tuple[str, str]:
	"""Return the (system, user) prompts for diff summarization."""
	return SUMMARIZE_SYSTEM_PROMPT, SUMMARIZE_USER_PROMPT.format(diff=diff)


def build_pr_system_prompt(language: str, custom_prompt: str = "") -> str:
	"""Return the PR description system prompt, with optional extra instructions."""
	prompt = PR_SYSTEM_PROMPT_KO if language == "korean" else PR_SYSTEM_PROMPT_EN
	if custom_prompt:
		prompt += f"\n\nAdditional instructions: {custom_prompt}"
	return prompt


def build_pr_user_prompt(diff: str, file_summary: str) -> str:
	"""Assemble the PR description user prompt."""
	return PR_USER_PROMPT.format(
		file_summary=file_summary or "No files changed",
		diff=diff or "No diff available",
	)
