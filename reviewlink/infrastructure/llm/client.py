"""
Language Model Client - OpenRouter Chat Completions
====================================================

ARCHITECTURAL DECISION:
- One thin client shared by the attribute provider and the review generator
- OpenAI-compatible chat completions endpoint (OpenRouter by default)
- Every failure becomes LanguageModelError; callers decide what it means

EXTENSIBILITY:
- To use a different model: set OPENROUTER_MODEL
- To use OpenAI directly: change api_url and key in settings
"""

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from ..config import LLMSettings, get_settings

logger = logging.getLogger(__name__)


class LanguageModelError(Exception):
    """Raised when the completion call fails or returns no content."""
    pass


@dataclass(frozen=True)
class PromptSpec:
    """One completion request: prompts plus sampling parameters."""
    system: str
    user: str
    temperature: float = 0.7
    max_tokens: int = 500


class LanguageModelClient:
    """
    Chat completion client.

    USAGE:
        client = LanguageModelClient()
        text = client.invoke(PromptSpec(system="...", user="..."))
    """

    def __init__(self, settings: Optional[LLMSettings] = None):
        settings = settings or get_settings().llm
        self._api_key = settings.api_key
        self._api_url = settings.api_url
        self._model = settings.model
        self._timeout = settings.timeout_seconds

        if not self._api_key:
            logger.warning("No OPENROUTER_API_KEY set. Language model calls will fail.")

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def invoke(self, prompt: PromptSpec) -> str:
        """
        Run one completion and return the stripped content.

        Raises:
            LanguageModelError: on missing key, network error, non-2xx,
                malformed payload or empty content.
        """
        if not self._api_key:
            raise LanguageModelError("OPENROUTER_API_KEY is not configured")

        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": "https://github.com/reviewlink",  # Required by OpenRouter
        }

        payload = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": prompt.system},
                {"role": "user", "content": prompt.user},
            ],
            "temperature": prompt.temperature,
            "max_tokens": prompt.max_tokens,
        }

        try:
            response = requests.post(
                self._api_url,
                headers=headers,
                json=payload,
                timeout=self._timeout,
            )
            response.raise_for_status()
            data = response.json()

        except requests.Timeout as e:
            logger.warning("LLM API timeout")
            raise LanguageModelError("Language model request timed out") from e

        except requests.RequestException as e:
            logger.warning(f"LLM API error: {e}")
            raise LanguageModelError(f"Language model request failed: {e}") from e

        except ValueError as e:
            logger.warning(f"LLM API returned invalid JSON: {e}")
            raise LanguageModelError("Language model returned malformed JSON") from e

        content = self._extract_response_content(data)
        if not content:
            raise LanguageModelError("Language model response did not contain any content")
        return content

    def _extract_response_content(self, data: dict) -> str:
        """Extract text content from API response."""
        try:
            choices = data.get("choices", [])
            if choices:
                message = choices[0].get("message", {}) or {}
                return (message.get("content") or "").strip()
        except (AttributeError, KeyError, IndexError, TypeError):
            pass
        return ""
