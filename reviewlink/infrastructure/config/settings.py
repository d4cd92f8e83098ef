"""
Settings Module - Centralized Configuration Management
=======================================================

ARCHITECTURAL DECISION:
- All configuration is loaded from environment variables (no hardcoded secrets)
- Settings are immutable dataclasses for safety and clarity
- Single source of truth for all configurable values

EXTENSIBILITY:
- To switch LLM provider: change api_url/model (any OpenAI-compatible endpoint)
- To tune the review page crawl: adjust CrawlerSettings
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

# Load .env file if present (development convenience)
load_dotenv()


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class LLMSettings:
    """OpenRouter LLM settings for attribute extraction and review drafting."""

    api_key: str = field(default_factory=lambda: os.getenv("OPENROUTER_API_KEY", ""))
    api_url: str = "https://openrouter.ai/api/v1/chat/completions"
    model: str = field(
        default_factory=lambda: os.getenv("OPENROUTER_MODEL", "openai/gpt-4o")
    )

    # Review drafting stays close to the prompt
    review_temperature: float = 0.3
    review_max_tokens: int = 500

    # Attribute extraction can be a little more creative
    attributes_temperature: float = 0.7
    attributes_max_tokens: int = 100

    timeout_seconds: int = 30


@dataclass(frozen=True)
class CrawlerSettings:
    """Website crawl settings for attribute extraction."""

    # One budget for homepage + about probes + about page
    deadline_seconds: float = field(
        default_factory=lambda: _env_float("CRAWL_DEADLINE_SECONDS", 15.0)
    )
    politeness_delay_seconds: float = 0.5
    max_content_chars: int = 12000
    # Bytes read from any one page before the rest is dropped
    max_page_bytes: int = 2_000_000
    user_agent: str = "Mozilla/5.0 (compatible; ReviewLinkCrawler/1.0)"

    # Probed in order, first 2xx wins
    about_paths: tuple = (
        "/about",
        "/about-us",
        "/about/",
        "/about-us/",
        "/company",
        "/company/",
        "/who-we-are",
        "/our-story",
        "/story",
    )


@dataclass(frozen=True)
class WizardSettings:
    """Customer review wizard settings."""

    # Upper bound on a review draft call, a hung call counts as unavailable
    generation_timeout_seconds: float = 45.0

    # Abandoned browser sessions are dropped after this long
    session_ttl_minutes: int = 60


@dataclass(frozen=True)
class ReviewSettings:
    """Review destination settings."""

    # Used when a company has no Google review URL of its own
    google_review_link: str = field(
        default_factory=lambda: os.getenv("GOOGLE_REVIEW_LINK", "")
    )


@dataclass(frozen=True)
class Settings:
    """
    Root settings container - Single source of truth for all configuration.

    Usage:
        from reviewlink.infrastructure.config import get_settings
        settings = get_settings()
        print(settings.llm.api_key)
    """

    llm: LLMSettings = field(default_factory=LLMSettings)
    crawler: CrawlerSettings = field(default_factory=CrawlerSettings)
    wizard: WizardSettings = field(default_factory=WizardSettings)
    review: ReviewSettings = field(default_factory=ReviewSettings)

    database_file: Path = field(
        default_factory=lambda: Path(os.getenv("DATABASE_FILE", "reviewlink.db"))
    )
    seed_demo_data: bool = field(default_factory=lambda: _env_flag("SEED_DEMO_DATA"))

    def validate(self) -> list[str]:
        """
        Validate settings and return list of warnings/errors.
        Returns empty list if all settings are valid.
        """
        issues = []

        if not self.llm.api_key:
            issues.append(
                "WARNING: OPENROUTER_API_KEY not set. "
                "Attributes will use defaults and reviews must be written manually."
            )

        if not self.review.google_review_link:
            issues.append(
                "WARNING: GOOGLE_REVIEW_LINK not set. "
                "Companies without their own review URL get no redirect."
            )

        if self.crawler.deadline_seconds <= 0:
            issues.append(
                "WARNING: CRAWL_DEADLINE_SECONDS must be positive. "
                "Website attributes will always fall back to defaults."
            )

        return issues


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get singleton Settings instance.
    Cached to ensure consistent settings throughout application lifecycle.
    """
    return Settings()
