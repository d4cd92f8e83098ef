"""
Unit tests for the OpenRouter chat completion client.

requests.post is patched so no network traffic happens.
"""

import pytest
import requests
from unittest.mock import MagicMock, patch

from reviewlink.infrastructure.config import LLMSettings
from reviewlink.infrastructure.llm import LanguageModelClient, LanguageModelError, PromptSpec

PROMPT = PromptSpec(system="You are helpful.", user="Say hi.", temperature=0.2, max_tokens=50)


@pytest.fixture
def client():
    return LanguageModelClient(LLMSettings(api_key="test-key", model="openai/gpt-4o"))


def make_response(payload):
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


def test_invoke_returns_stripped_content(client):
    """Test that the first choice content is returned without whitespace."""
    payload = {"choices": [{"message": {"content": "  Hello there.  "}}]}
    with patch("reviewlink.infrastructure.llm.client.requests.post", return_value=make_response(payload)) as post:
        assert client.invoke(PROMPT) == "Hello there."

    kwargs = post.call_args.kwargs
    assert kwargs["headers"]["Authorization"] == "Bearer test-key"
    assert kwargs["json"]["model"] == "openai/gpt-4o"
    assert kwargs["json"]["temperature"] == 0.2
    assert kwargs["json"]["max_tokens"] == 50
    assert kwargs["json"]["messages"][0] == {"role": "system", "content": "You are helpful."}
    assert kwargs["json"]["messages"][1] == {"role": "user", "content": "Say hi."}


def test_missing_api_key_fails_without_request():
    client = LanguageModelClient(LLMSettings(api_key=""))
    assert not client.is_configured
    with patch("reviewlink.infrastructure.llm.client.requests.post") as post:
        with pytest.raises(LanguageModelError):
            client.invoke(PROMPT)
    post.assert_not_called()


@pytest.mark.parametrize("error", [
    requests.Timeout("slow"),
    requests.ConnectionError("down"),
    requests.HTTPError("500"),
])
def test_request_failures_become_language_model_error(client, error):
    with patch("reviewlink.infrastructure.llm.client.requests.post", side_effect=error):
        with pytest.raises(LanguageModelError):
            client.invoke(PROMPT)


def test_malformed_json_is_language_model_error(client):
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.json.side_effect = ValueError("not json")
    with patch("reviewlink.infrastructure.llm.client.requests.post", return_value=response):
        with pytest.raises(LanguageModelError):
            client.invoke(PROMPT)


@pytest.mark.parametrize("payload", [
    {},
    {"choices": []},
    {"choices": [{"message": {"content": "   "}}]},
    {"choices": [{"message": None}]},
])
def test_empty_content_is_language_model_error(client, payload):
    with patch("reviewlink.infrastructure.llm.client.requests.post", return_value=make_response(payload)):
        with pytest.raises(LanguageModelError):
            client.invoke(PROMPT)
