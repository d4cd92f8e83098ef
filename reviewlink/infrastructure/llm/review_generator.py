"""
Review Generator - AI-Drafted Customer Reviews
===============================================

ARCHITECTURAL DECISION:
- Builds a tightly constrained prompt from company name, business
  description and the attributes the customer picked
- Low temperature to keep the model on the given company
- Every draft passes validate_review_text() before it is returned;
  drafts naming the wrong business are discarded, never shown
- No retries here: the wizard decides whether to retry or let the
  customer write manually

FAILURE KINDS:
- InvalidInputError:           bad arguments, no API call made
- GenerationUnavailableError:  API failure of any sort
- IdentityMismatchError:       company name missing from the draft
- ForeignEntityError:          placeholder or unrelated business named
"""

import asyncio
import logging
from typing import Iterable, Optional, Sequence

from ...domain.errors import (
    ForeignEntityError,
    GenerationUnavailableError,
    IdentityMismatchError,
    InvalidInputError,
    ReviewGenerationError,
)
from ...domain.models import GeneratedReviewResult
from ...domain.ports import ReviewDrafter
from ...domain.validation import DEFAULT_DENY_LIST, validate_review_text
from ..config import LLMSettings, get_settings
from .client import LanguageModelClient, LanguageModelError, PromptSpec

logger = logging.getLogger(__name__)


class ReviewTextGenerator(ReviewDrafter):
    """
    Review text generation service.

    USAGE:
        generator = ReviewTextGenerator()
        result = generator.generate_review_sync(
            ["Professional", "Timely"], "Acme Plumbing", "residential plumbing repair"
        )
        if result.ok:
            print(result.text)
    """

    SYSTEM_PROMPT = (
        "You write short, authentic customer reviews for local service businesses. "
        "You always refer to the business by the exact name you are given and never "
        "invent, abbreviate or replace it. You never use placeholders such as "
        "[Company Name] and never mention any other business or industry."
    )

    USER_PROMPT_TEMPLATE = (
        "Write a positive customer review for {company_name}.\n"
        "About the business: {business_description}\n"
        "Qualities to highlight: {qualities}\n\n"
        "Rules:\n"
        "- Use the exact name \"{company_name}\" at least twice.\n"
        "- Make it clear the service was {business_description}.\n"
        "- Mention every one of these qualities: {qualities}.\n"
        "- Write a single paragraph of 4 to 5 sentences in the first person.\n"
        "- Sound like a real customer, not an advertisement.\n"
        "- Return only the review text."
    )

    def __init__(
        self,
        client: Optional[LanguageModelClient] = None,
        settings: Optional[LLMSettings] = None,
        deny_list: Iterable[str] = DEFAULT_DENY_LIST,
        exempt_description_terms: bool = False,
    ):
        """
        exempt_description_terms: also allow deny-listed words that appear in
        the business description (e.g. "hotel" for a hotel plumber). Off by
        default, so only the company name exempts a term.
        """
        settings = settings or get_settings().llm
        self._client = client or LanguageModelClient(settings)
        self._temperature = settings.review_temperature
        self._max_tokens = settings.review_max_tokens
        self._deny_list = tuple(deny_list)
        self._exempt_description_terms = exempt_description_terms

    def build_prompt(
        self, qualities: Sequence[str], company_name: str, business_description: str
    ) -> PromptSpec:
        """Prompt for one review draft. Inputs must already be validated."""
        return PromptSpec(
            system=self.SYSTEM_PROMPT,
            user=self.USER_PROMPT_TEMPLATE.format(
                company_name=company_name,
                business_description=business_description,
                qualities=", ".join(qualities),
            ),
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )

    def generate(
        self, qualities: Sequence[str], company_name: str, business_description: str
    ) -> str:
        """
        Draft a review and return the validated text.

        Raises:
            ReviewGenerationError subclass describing the failure kind.
        """
        cleaned = [q.strip() for q in (qualities or []) if q and q.strip()]
        company_name = (company_name or "").strip()
        business_description = (business_description or "").strip()

        if not cleaned:
            raise InvalidInputError("At least one quality is required")
        if not company_name:
            raise InvalidInputError("Company name is required")
        if not business_description:
            raise InvalidInputError("Business description is required")

        prompt = self.build_prompt(cleaned, company_name, business_description)

        try:
            text = self._client.invoke(prompt)
        except LanguageModelError as e:
            raise GenerationUnavailableError(str(e)) from e

        text = self._clean_output(text)
        allowed_context = business_description if self._exempt_description_terms else ""
        verdict = validate_review_text(
            text, company_name, self._deny_list, allowed_context=allowed_context
        )
        if not verdict.ok:
            logger.warning(f"Discarding generated review for '{company_name}': {verdict.reason}")
            if verdict.error_kind == ForeignEntityError.kind:
                raise ForeignEntityError(verdict.reason, term=verdict.term)
            raise IdentityMismatchError(verdict.reason)

        logger.info(f"Generated review for '{company_name}' ({len(text)} chars)")
        return text

    def generate_review_sync(
        self, qualities: Sequence[str], company_name: str, business_description: str
    ) -> GeneratedReviewResult:
        """Like generate(), but failures come back as a result value."""
        try:
            return GeneratedReviewResult.success(
                self.generate(qualities, company_name, business_description)
            )
        except ReviewGenerationError as e:
            return GeneratedReviewResult.failure(e.kind, str(e))

    async def generate_review(
        self, qualities: Sequence[str], company_name: str, business_description: str
    ) -> GeneratedReviewResult:
        """Async entry point for the wizard. The HTTP call runs in a worker thread."""
        return await asyncio.to_thread(
            self.generate_review_sync, qualities, company_name, business_description
        )

    @staticmethod
    def _clean_output(text: str) -> str:
        """Strip wrapping quotes and collapse the draft into one paragraph."""
        text = (text or "").strip()
        if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
            text = text[1:-1].strip()
        return " ".join(text.split())
