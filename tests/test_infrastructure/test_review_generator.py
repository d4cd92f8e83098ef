"""
Unit tests for the review text generator.

Note: the language model client is mocked; these tests check prompt
construction, output cleanup and identity validation.
"""

import asyncio

import pytest
from unittest.mock import Mock

from reviewlink.domain.errors import (
    ForeignEntityError,
    GenerationUnavailableError,
    IdentityMismatchError,
    InvalidInputError,
)
from reviewlink.infrastructure.config import LLMSettings
from reviewlink.infrastructure.llm import LanguageModelError, ReviewTextGenerator

GOOD_REVIEW = (
    "Acme Plumbing came out the same day to fix a burst pipe. "
    "The technician from Acme Plumbing was professional and timely."
)


@pytest.fixture
def client():
    mock = Mock()
    mock.invoke.return_value = GOOD_REVIEW
    return mock


@pytest.fixture
def generator(client):
    return ReviewTextGenerator(client=client, settings=LLMSettings(api_key="test-key"))


def test_generate_returns_validated_text(generator, client):
    text = generator.generate(["Professional", "Timely"], "Acme Plumbing", "residential plumbing repair")
    assert text == GOOD_REVIEW

    prompt = client.invoke.call_args.args[0]
    assert '"Acme Plumbing"' in prompt.user
    assert "residential plumbing repair" in prompt.user
    assert "Professional, Timely" in prompt.user
    assert prompt.temperature == 0.3
    assert prompt.max_tokens == 500


@pytest.mark.parametrize("qualities, name, description", [
    ([], "Acme Plumbing", "plumbing"),
    (["  "], "Acme Plumbing", "plumbing"),
    (["Kind"], "", "plumbing"),
    (["Kind"], "Acme Plumbing", "   "),
])
def test_invalid_input_makes_no_call(generator, client, qualities, name, description):
    with pytest.raises(InvalidInputError):
        generator.generate(qualities, name, description)
    client.invoke.assert_not_called()


def test_client_failure_is_generation_unavailable(generator, client):
    client.invoke.side_effect = LanguageModelError("timed out")
    with pytest.raises(GenerationUnavailableError):
        generator.generate(["Kind"], "Acme Plumbing", "plumbing repair")


def test_wrong_company_is_identity_mismatch(generator, client):
    """Test the classic failure: asked about Acme Plumbing, got ABC Company."""
    client.invoke.return_value = "ABC Company was wonderful. ABC Company fixed everything."
    with pytest.raises(IdentityMismatchError):
        generator.generate(["Kind"], "Acme Plumbing", "residential plumbing repair")


def test_placeholder_is_foreign_entity(generator, client):
    client.invoke.return_value = "Acme Plumbing is better than [Business Name]. Acme Plumbing rocks."
    with pytest.raises(ForeignEntityError) as exc_info:
        generator.generate(["Kind"], "Acme Plumbing", "residential plumbing repair")
    assert exc_info.value.term == "[business name]"


def test_description_terms_are_foreign_by_default(generator, client):
    """Test that only the company name exempts a deny-listed term."""
    client.invoke.return_value = "Acme Plumbing redid every hotel bathroom. Thanks Acme Plumbing!"
    with pytest.raises(ForeignEntityError) as exc_info:
        generator.generate(["Kind"], "Acme Plumbing", "hotel and commercial plumbing")
    assert exc_info.value.term == "hotel"


def test_description_exemption_is_opt_in(client):
    client.invoke.return_value = "Acme Plumbing redid every hotel bathroom. Thanks Acme Plumbing!"
    generator = ReviewTextGenerator(
        client=client,
        settings=LLMSettings(api_key="test-key"),
        exempt_description_terms=True,
    )
    text = generator.generate(["Kind"], "Acme Plumbing", "hotel and commercial plumbing")
    assert "hotel" in text


def test_output_is_unquoted_and_single_paragraph(generator, client):
    client.invoke.return_value = '"Acme Plumbing was quick.\n\nAcme Plumbing was kind."'
    text = generator.generate(["Kind"], "Acme Plumbing", "plumbing repair")
    assert text == "Acme Plumbing was quick. Acme Plumbing was kind."


def test_sync_result_carries_error_kind(generator, client):
    client.invoke.return_value = "A lovely restaurant experience."
    result = generator.generate_review_sync(["Kind"], "Acme Plumbing", "plumbing repair")
    assert not result.ok
    assert result.error_kind == "identity_mismatch"
    assert result.text is None


def test_async_generate_review(generator):
    result = asyncio.run(
        generator.generate_review(["Professional"], "Acme Plumbing", "residential plumbing repair")
    )
    assert result.ok
    assert result.text == GOOD_REVIEW
