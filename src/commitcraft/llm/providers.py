"""
Chat transports for the supported LLM providers.

Hosted providers go through LiteLLM; the local Ollama server is called over
plain HTTP. Both translate their failures into :class:`LLMError` with an
:class:`ErrorKind`, since only the transport sees the real status code.

"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any

import litellm
import requests

from commitcraft.config.config_schema import DEFAULT_MODELS, DEFAULT_OLLAMA_URL, LOCAL_CREDENTIAL_SENTINEL

from .errors import ErrorKind, LLMError

logger = logging.getLogger(__name__)

Message = dict[str, str]


@dataclass(frozen=True)
class ProviderInfo:
	"""Static facts about a provider."""

	name: str
	default_model: str
	local: bool = False


PROVIDERS: dict[str, ProviderInfo] = {
	"openai": ProviderInfo("openai", DEFAULT_MODELS["openai"]),
	"groq": ProviderInfo("groq", DEFAULT_MODELS["groq"]),
	"gemini": ProviderInfo("gemini", DEFAULT_MODELS["gemini"]),
	"ollama": ProviderInfo("ollama", DEFAULT_MODELS["ollama"], local=True),
}


class ChatTransport(ABC):
	"""Sends a chat request to one provider and returns the reply text."""

	provider: str

	def __init__(self, model: str, timeout: float = 60.0) -> None:
		self.model = model
		self.timeout = timeout

	@abstractmethod
	def chat(self, messages: list[Message], *, json_mode: bool, temperature: float, max_tokens: int) -> str:
		"""
		Send ``messages`` and return the reply content.

		Raises:
		    LLMError: On any transport failure or an empty reply

		"""

	def _require_content(self, content: Any) -> str:
		if not isinstance(content, str) or not content.strip():
			msg = f"Empty response from {self.provider}"
			raise LLMError(msg, kind=ErrorKind.EMPTY_RESPONSE)
		return content


def extract_content_from_response(response: Any) -> Any:
	"""Pull ``choices[0].message.content`` out of a LiteLLM response object or dict."""
	try:
		if hasattr(response, "choices"):
			return response.choices[0].message.content
		if isinstance(response, dict):
			return response["choices"][0]["message"]["content"]
	except (AttributeError, IndexError, KeyError, TypeError) as e:
		logger.debug("Could not extract content from response: %s", e)
	return None


class HostedChatTransport(ChatTransport):
	"""Transport for hosted chat-completion APIs, routed through LiteLLM."""

	def __init__(
		self,
		provider: str,
		api_key: str,
		model: str,
		api_base: str | None = None,
		timeout: float = 60.0,
	) -> None:
		super().__init__(model, timeout)
		self.provider = provider
		self.api_key = api_key
		self.api_base = api_base

	@property
	def litellm_model(self) -> str:
		"""Model name with the provider prefix LiteLLM routes on."""
		if self.model.startswith(f"{self.provider}/"):
			return self.model
		return f"{self.provider}/{self.model}"

	def chat(self, messages: list[Message], *, json_mode: bool, temperature: float, max_tokens: int) -> str:
		"""Call ``litellm.completion`` and return the reply content."""
		request_params: dict[str, Any] = {
			"model": self.litellm_model,
			"messages": messages,
			"api_key": self.api_key,
			"temperature": temperature,
			"max_tokens": max_tokens,
			"timeout": self.timeout,
		}
		if self.api_base:
			request_params["api_base"] = self.api_base
		if json_mode:
			request_params["response_format"] = {"type": "json_object"}

		logger.debug("Calling LiteLLM: model=%s, api_base=%s", self.litellm_model, self.api_base or "default")
		try:
			response = litellm.completion(**request_params)
		except litellm.exceptions.AuthenticationError as e:
			msg = f"{self.provider} rejected the API key"
			raise LLMError(msg, kind=ErrorKind.AUTHENTICATION, detail=str(e)) from e
		except litellm.exceptions.RateLimitError as e:
			msg = f"{self.provider} rate limit exceeded"
			raise LLMError(msg, kind=ErrorKind.RATE_LIMITED, detail=str(e)) from e
		except litellm.exceptions.NotFoundError as e:
			msg = f'Model "{self.model}" is not available from {self.provider}'
			raise LLMError(msg, kind=ErrorKind.MODEL_NOT_FOUND, detail=str(e)) from e
		except litellm.exceptions.Timeout as e:
			msg = f"{self.provider} request timed out after {self.timeout}s"
			raise LLMError(msg, kind=ErrorKind.UNKNOWN, detail=str(e)) from e
		except litellm.exceptions.APIConnectionError as e:
			msg = f"Cannot connect to {self.provider}"
			raise LLMError(msg, kind=ErrorKind.CONNECTION_REFUSED, detail=str(e)) from e
		except Exception as e:
			msg = f"{self.provider} request failed: {e}"
			raise LLMError(msg, kind=ErrorKind.UNKNOWN, detail=str(e)) from e

		return self._require_content(extract_content_from_response(response))


class OllamaChatTransport(ChatTransport):
	"""Transport for a local Ollama server."""

	provider = "ollama"

	def __init__(self, model: str, base_url: str = DEFAULT_OLLAMA_URL, timeout: float = 60.0) -> None:
		super().__init__(model, timeout)
		self.base_url = base_url.rstrip("/")

	def chat(self, messages: list[Message], *, json_mode: bool, temperature: float, max_tokens: int) -> str:
		"""POST to ``/api/chat`` and return the reply content."""
		payload: dict[str, Any] = {
			"model": self.model,
			"messages": messages,
			"stream": False,
			"options": {"temperature": temperature, "num_predict": max_tokens},
		}
		if json_mode:
			payload["format"] = "json"

		url = f"{self.base_url}/api/chat"
		logger.debug("Calling Ollama: url=%s, model=%s", url, self.model)
		try:
			response = requests.post(url, json=payload, timeout=self.timeout)
		except requests.exceptions.ConnectionError as e:
			msg = f"Cannot connect to Ollama at {self.base_url}"
			raise LLMError(msg, kind=ErrorKind.CONNECTION_REFUSED, detail=str(e)) from e
		except requests.exceptions.RequestException as e:
			msg = f"Ollama request failed: {e}"
			raise LLMError(msg, kind=ErrorKind.UNKNOWN, detail=str(e)) from e

		self._raise_for_status(response)

		try:
			data = response.json()
		except ValueError as e:
			msg = "Ollama returned a non-JSON body"
			raise LLMError(msg, kind=ErrorKind.INVALID_RESPONSE, detail=response.text[:200]) from e

		message = data.get("message") if isinstance(data, dict) else None
		return self._require_content(message.get("content") if isinstance(message, dict) else None)

	def _raise_for_status(self, response: requests.Response) -> None:
		status = response.status_code
		if status < HTTPStatus.BAD_REQUEST:
			return
		if status == HTTPStatus.NOT_FOUND:
			msg = f'Model "{self.model}" not found. Run: ollama pull {self.model}'
			raise LLMError(msg, kind=ErrorKind.MODEL_NOT_FOUND)
		if status in (HTTPStatus.UNAUTHORIZED, HTTPStatus.FORBIDDEN):
			msg = f"Ollama rejected the request: {status}"
			raise LLMError(msg, kind=ErrorKind.AUTHENTICATION)
		if status == HTTPStatus.TOO_MANY_REQUESTS:
			msg = "Ollama rate limit exceeded"
			raise LLMError(msg, kind=ErrorKind.RATE_LIMITED)
		msg = f"Ollama request failed: {status} {response.reason}"
		raise LLMError(msg, kind=ErrorKind.UNKNOWN, detail=response.text[:200])


def create_transport(
	provider: str,
	credential: str | None,
	model: str = "",
	endpoint: str | None = None,
	timeout: float = 60.0,
) -> ChatTransport:
	"""
	Build the transport for ``provider``.

	Args:
	    provider: Provider name, one of :data:`PROVIDERS`
	    credential: API key, or the local sentinel for Ollama
	    model: Model name, empty for the provider default
	    endpoint: Base URL override (the Ollama server URL for the local provider)
	    timeout: Request timeout in seconds

	Returns:
	    A ready transport

	Raises:
	    LLMError: If the provider is unknown or a hosted provider has no credential

	"""
	info = PROVIDERS.get(provider)
	if info is None:
		msg = f"Unknown provider: {provider}"
		raise LLMError(msg)

	resolved_model = model or info.default_model
	if info.local:
		return OllamaChatTransport(resolved_model, base_url=endpoint or DEFAULT_OLLAMA_URL, timeout=timeout)

	if not credential or credential == LOCAL_CREDENTIAL_SENTINEL:
		msg = f"No API key found for {provider}"
		raise LLMError(msg, kind=ErrorKind.MISSING_CREDENTIAL)
	return HostedChatTransport(provider, credential, resolved_model, api_base=endpoint, timeout=timeout)
