"""
LLM client interface for answering event-list prompts.
Supports StubLLMClient (offline), OpenAILLMClient and ClaudeLLMClient (real providers).
"""

import re
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

import requests

from aicalendar.errors import QueryError
from aicalendar.logging_helper import Log

REQUEST_TIMEOUT_SECONDS = 60


class LLMClient(ABC):
    """Abstract base class for text-generation backends."""

    provider = "abstract"

    @abstractmethod
    def query(self, prompt: str) -> str:
        """
        Send a prompt and return the raw text reply.

        Args:
            prompt: Instruction built by prompt_builder

        Returns:
            The backend's reply text

        Raises:
            QueryError: if the backend cannot produce a reply
        """


class StubLLMClient(LLMClient):
    """
    Stub LLM client for offline runs and tests.
    Replies with a hardcoded event list in the requested line format.
    """

    provider = "stub"
    _SUBJECT_PATTERN = re.compile(r"events for (?P<subject>.+?) for the year (?P<year>\d{4})")

    def query(self, prompt: str) -> str:
        """Stub implementation - returns a canned reply for the prompt's subject and year."""
        Log.info("Using stub LLM client (offline mode)")
        match = self._SUBJECT_PATTERN.search(prompt)
        if match:
            subject = match.group("subject")
            year = int(match.group("year"))
        else:
            subject = "Sample"
            year = datetime.now().year

        reply = "\n".join([
            f"{subject} Opening Day: {year}-03-01",
            f"{subject} Festival Week: {year}-06-10 - {year}-06-16",
        ])
        Log.kv({"stage": "llm", "provider": self.provider, "result": "success", "subject": subject})
        return reply


class OpenAILLMClient(LLMClient):
    """
    OpenAI Chat Completions client.
    """

    provider = "openai"
    DEFAULT_MODEL = "gpt-4o-mini"

    def __init__(self, api_key: str, model: Optional[str] = None):
        self.api_key = api_key
        self.api_url = "https://api.openai.com/v1/chat/completions"
        self.model = model or self.DEFAULT_MODEL

    def query(self, prompt: str) -> str:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": "You are a helpful assistant."},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": 4000,
        }
        result = _post_json(self.provider, self.model, self.api_url, headers, payload)

        try:
            content = result["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise QueryError(f"Unexpected OpenAI response format: {str(result)[:200]}") from e
        if not isinstance(content, str) or not content.strip():
            raise QueryError("Empty response from OpenAI")

        Log.kv({"stage": "llm", "provider": self.provider, "result": "success", "chars": len(content)})
        return content


class ClaudeLLMClient(LLMClient):
    """
    Anthropic Messages API client.
    """

    provider = "claude"
    DEFAULT_MODEL = "claude-3-5-sonnet-latest"

    def __init__(self, api_key: str, model: Optional[str] = None):
        self.api_key = api_key
        self.api_url = "https://api.anthropic.com/v1/messages"
        self.model = model or self.DEFAULT_MODEL

    def query(self, prompt: str) -> str:
        headers = {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": "2023-06-01",
        }
        payload = {
            "model": self.model,
            "max_tokens": 1024,
            "messages": [{"role": "user", "content": prompt}],
        }
        result = _post_json(self.provider, self.model, self.api_url, headers, payload)

        content = result.get("content") if isinstance(result, dict) else None
        if not isinstance(content, list) or not content:
            raise QueryError(f"Unexpected response format: {str(result)[:200]}")
        first = content[0]
        if not isinstance(first, dict):
            raise QueryError(f"Unexpected content format: {first!r}")
        text = first.get("text")
        if not isinstance(text, str):
            raise QueryError(f"Unexpected text format: {text!r}")

        Log.kv({"stage": "llm", "provider": self.provider, "result": "success", "chars": len(text)})
        return text


def _post_json(provider: str, model: str, url: str, headers: dict, payload: dict):
    """POST a JSON payload and return the decoded body, raising QueryError on failure."""
    Log.info(f"Calling {provider} API ({model})...")
    Log.kv({"stage": "llm", "provider": provider, "model": model, "status": "requesting"})

    try:
        response = requests.post(url, headers=headers, json=payload, timeout=REQUEST_TIMEOUT_SECONDS)
    except requests.exceptions.RequestException as e:
        Log.kv({"stage": "llm", "provider": provider, "result": "failed", "reason": "api_error", "error": str(e)})
        raise QueryError(f"{provider} API request failed: {e}") from e

    Log.info(f"API response status: {response.status_code}")
    if response.status_code != 200:
        Log.kv({"stage": "llm", "provider": provider, "result": "failed", "status": response.status_code})
        raise QueryError(f"{provider} API error {response.status_code}: {response.text[:500]}")

    try:
        return response.json()
    except ValueError as e:
        raise QueryError(f"{provider} API returned non-JSON body: {response.text[:200]}") from e


def get_llm_client(provider: str, api_key: str = "", model: str = "", use_stub: bool = False) -> LLMClient:
    """
    Factory function to get the LLM client for a group's provider string.
    Returns StubLLMClient only when explicitly requested (use_stub or provider "stub").

    Raises:
        QueryError: if the provider name is not supported or its API key is missing
    """
    provider = (provider or "").strip().lower()

    if use_stub or provider == "stub":
        Log.info("Stub requested - using stub client")
        return StubLLMClient()

    if provider == "openai":
        client_cls = OpenAILLMClient
    elif provider == "claude":
        client_cls = ClaudeLLMClient
    else:
        raise QueryError(f"Unsupported AI provider: {provider}")

    if not api_key:
        raise QueryError(f"Missing API key for {provider}")

    Log.info(f"API key found - using {provider} client")
    return client_cls(api_key, model or None)
