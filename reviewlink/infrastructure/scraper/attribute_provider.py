"""
Attribute Provider - Website-Derived Review Attributes
=======================================================

Turns a company website into the two lists of five adjectives offered
on the attribute steps of the review wizard.

FALLBACK BEHAVIOR:
- No URL, no API key, nothing crawled, LLM failure: default attributes
- Fewer than ten adjectives returned: padded from a fixed pool
- Never raises; failures are logged only
"""

import logging
import re
from typing import List, Optional

from ...domain.models import (
    DEFAULT_PRIMARY_ATTRIBUTES,
    DEFAULT_SECONDARY_ATTRIBUTES,
    AttributeCandidateSet,
)
from ..config import LLMSettings, get_settings
from ..llm.client import LanguageModelClient, LanguageModelError, PromptSpec
from .website_crawler import WebsiteCrawler

logger = logging.getLogger(__name__)

ATTRIBUTES_PER_SET = 5

# Used in order to top up short model answers
FALLBACK_POOL = (
    "Professional",
    "Reliable",
    "Dedicated",
    "Quality-Focused",
    "Results-Driven",
    "Trustworthy",
) + DEFAULT_PRIMARY_ATTRIBUTES + DEFAULT_SECONDARY_ATTRIBUTES

_NUMBERING = re.compile(r"^\s*(?:\d+[.)]|[-*•])\s*")


def capitalize_words(value: str) -> str:
    """'quality-focused service' -> 'Quality-Focused Service'."""
    return " ".join(
        "-".join(part[:1].upper() + part[1:].lower() for part in word.split("-"))
        for word in value.split()
    )


def parse_adjectives(content: str) -> List[str]:
    """Split a comma/newline separated model answer into clean, unique adjectives."""
    adjectives = []
    seen = set()
    for raw in re.split(r"[,\n;]", content or ""):
        item = _NUMBERING.sub("", raw).strip().strip(".\"'").strip()
        if not item or len(item) > 40:
            continue
        item = capitalize_words(item)
        key = item.lower()
        if key in seen:
            continue
        seen.add(key)
        adjectives.append(item)
    return adjectives


def pad_adjectives(adjectives: List[str], size: int = ATTRIBUTES_PER_SET * 2) -> List[str]:
    """Truncate or pad to exactly `size` items, skipping pool entries already present."""
    result = list(adjectives[:size])
    seen = {a.lower() for a in result}
    for fallback in FALLBACK_POOL:
        if len(result) >= size:
            break
        if fallback.lower() not in seen:
            seen.add(fallback.lower())
            result.append(fallback)
    return result


class AttributeProvider:
    """
    Website → attribute candidates.

    USAGE:
        provider = AttributeProvider()
        candidates = provider.derive_attributes("https://acmeplumbing.example")
        print(candidates.primary, candidates.secondary)
    """

    SYSTEM_PROMPT = (
        "You are an assistant that extracts exactly ten adjectives describing a "
        "company's core values from the provided website content. Return the "
        "adjectives as a comma-separated list with no other text or formatting."
    )

    USER_PROMPT_TEMPLATE = (
        "Analyze the following company website content and provide ten adjectives "
        "describing the company's core values:\n\n{content}"
    )

    def __init__(
        self,
        crawler: Optional[WebsiteCrawler] = None,
        client: Optional[LanguageModelClient] = None,
        settings: Optional[LLMSettings] = None,
    ):
        settings = settings or get_settings().llm
        self._crawler = crawler or WebsiteCrawler()
        self._client = client or LanguageModelClient(settings)
        self._temperature = settings.attributes_temperature
        self._max_tokens = settings.attributes_max_tokens

    def derive_attributes(self, website_url: Optional[str]) -> AttributeCandidateSet:
        """Two ranked lists of five adjectives; defaults on any failure."""
        if not website_url or not website_url.strip():
            logger.debug("No website URL, using default attributes")
            return AttributeCandidateSet.defaults()

        if not self._client.is_configured:
            logger.info("No LLM configured, using default attributes")
            return AttributeCandidateSet.defaults()

        try:
            content = self._crawler.crawl(website_url)
            if not content.strip():
                logger.info(f"No content extracted from {website_url}, using default attributes")
                return AttributeCandidateSet.defaults()

            answer = self._client.invoke(
                PromptSpec(
                    system=self.SYSTEM_PROMPT,
                    user=self.USER_PROMPT_TEMPLATE.format(content=content),
                    temperature=self._temperature,
                    max_tokens=self._max_tokens,
                )
            )

        except LanguageModelError as e:
            logger.warning(f"Attribute extraction failed for {website_url}: {e}")
            return AttributeCandidateSet.defaults()

        except Exception as e:
            logger.exception(f"Unexpected error deriving attributes for {website_url}: {e}")
            return AttributeCandidateSet.defaults()

        adjectives = parse_adjectives(answer)
        if not adjectives:
            logger.warning(f"LLM returned no usable adjectives for {website_url}")
            return AttributeCandidateSet.defaults()

        if len(adjectives) < ATTRIBUTES_PER_SET * 2:
            logger.info(f"Only {len(adjectives)} adjectives returned, padding from fallback pool")

        ten = pad_adjectives(adjectives)
        logger.info(f"Derived attributes for {website_url}: {ten}")
        return AttributeCandidateSet(
            primary=tuple(ten[:ATTRIBUTES_PER_SET]),
            secondary=tuple(ten[ATTRIBUTES_PER_SET:]),
            source="website",
        )
