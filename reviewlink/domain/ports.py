"""
Ports - Interfaces the Review Wizard Depends On
================================================

The wizard only talks to these abstractions. Infrastructure provides
the real implementations (OpenRouter, SQLite, browser clipboard),
tests provide fakes.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from .models import GeneratedReviewResult, Navigation, PersistResult, ReviewRecord


class ReviewDrafter(ABC):
    """Drafts review text from selected attributes."""

    @abstractmethod
    async def generate_review(
        self,
        qualities: Sequence[str],
        company_name: str,
        business_description: str,
    ) -> GeneratedReviewResult:
        """Return a success or failure result. Must not raise for generation failures."""
        ...


class ReviewRecordStore(ABC):
    """Durable storage for submitted reviews."""

    @abstractmethod
    async def persist(self, record: ReviewRecord) -> PersistResult:
        """Save a review. May return success=False or raise PersistenceError."""
        ...


class ClipboardRedirect(ABC):
    """Copies the final text and sends the customer to the review site."""

    @abstractmethod
    def copy_to_clipboard(self, text: str) -> bool:
        """True when the copy was confirmed. Never raises."""
        ...

    @abstractmethod
    def navigate_to(self, url: str) -> Navigation:
        """Open the destination and report how it was opened."""
        ...
