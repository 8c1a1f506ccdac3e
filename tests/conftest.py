"""Global test fixtures and configuration."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pytest

from commitcraft.config import AppConfigSchema, ConfigLoader
from commitcraft.llm.errors import LLMError
from commitcraft.llm.providers import ChatTransport

if TYPE_CHECKING:
	from collections.abc import Iterator


SAMPLE_DIFF = """diff --git a/src/auth.py b/src/auth.py
index 1111111..2222222 100644
--- a/src/auth.py
+++ b/src/auth.py
@@ -1,3 +1,6 @@
+def login(user):
+    return user
+
 def logout(user):
     pass
diff --git a/package-lock.json b/package-lock.json
index 3333333..4444444 100644
--- a/package-lock.json
+++ b/package-lock.json
@@ -1 +1 @@
-{"lockfileVersion": 2}
+{"lockfileVersion": 3}
diff --git a/node_modules/left-pad/index.js b/node_modules/left-pad/index.js
index 5555555..6666666 100644
--- a/node_modules/left-pad/index.js
+++ b/node_modules/left-pad/index.js
@@ -1 +1 @@
-module.exports = 1
+module.exports = 2
"""

SAMPLE_SUMMARY = "M\tsrc/auth.py\nM\tpackage-lock.json\nM\tnode_modules/left-pad/index.js"


def candidates_json(*candidates: dict[str, Any]) -> str:
	"""Serialize candidate dicts the way a provider returns them."""
	return json.dumps({"candidates": list(candidates)})


class FakeTransport(ChatTransport):
	"""Transport returning queued replies and recording every request."""

	provider = "fake"

	def __init__(self, replies: list[str | Exception] | None = None) -> None:
		super().__init__("fake-model")
		self.replies = list(replies or [])
		self.calls: list[dict[str, Any]] = []

	def chat(self, messages: list[dict[str, str]], *, json_mode: bool, temperature: float, max_tokens: int) -> str:
		self.calls.append(
			{"messages": messages, "json_mode": json_mode, "temperature": temperature, "max_tokens": max_tokens}
		)
		if not self.replies:
			msg = "No reply queued"
			raise LLMError(msg)
		reply = self.replies.pop(0)
		if isinstance(reply, Exception):
			raise reply
		return self._require_content(reply)


@pytest.fixture
def sample_diff() -> str:
	"""A three-file diff containing a lock file and a node_modules file."""
	return SAMPLE_DIFF


@pytest.fixture
def sample_summary() -> str:
	"""Name-status summary matching ``sample_diff``."""
	return SAMPLE_SUMMARY


@pytest.fixture
def app_config() -> AppConfigSchema:
	"""Configuration with defaults and a fake OpenAI key."""
	return AppConfigSchema(api_keys={"openai": "sk-test"})


@pytest.fixture(autouse=True)
def reset_config_loader() -> Iterator[None]:
	"""Drop the ConfigLoader singleton between tests."""
	ConfigLoader._instance = None
	yield
	ConfigLoader._instance = None
