"""
Domain Models - Review Session Value Objects
=============================================

Plain dataclasses and enums shared by the wizard, the AI pipeline
and the persistence layer. No I/O happens here.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class ExperienceLevel(Enum):
    """
    Coarse sentiment picked on the first wizard step.

    DESIGN: The numeric rating is derived from this label and stored,
    but the customer only ever sees the label.
    """
    POOR = "poor"
    MODERATE = "moderate"
    EXCELLENT = "excellent"

    @property
    def derived_rating(self) -> int:
        return _RATINGS[self]

    @property
    def label(self) -> str:
        return self.value.capitalize()


_RATINGS = {
    ExperienceLevel.POOR: 2,
    ExperienceLevel.MODERATE: 4,
    ExperienceLevel.EXCELLENT: 5,
}


class GenerationState(Enum):
    """Lifecycle of the review text generator call for one session."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


DEFAULT_PRIMARY_ATTRIBUTES = ("Professional", "Timely", "Kind", "Precise", "Considerate")
DEFAULT_SECONDARY_ATTRIBUTES = (
    "Cleanliness",
    "Efficiency",
    "Value for Money",
    "Reliability",
    "Friendliness",
)

# Where a review can be shared after submission
PLATFORMS = ("google", "facebook", "instagram")


@dataclass(frozen=True)
class ReviewContext:
    """Who the review is for. Resolved from an employee link."""
    employee_id: int
    employee_name: str
    company_name: str
    business_description: str = ""
    website_url: Optional[str] = None
    google_review_destination: Optional[str] = None


@dataclass(frozen=True)
class AttributeCandidateSet:
    """The adjectives offered on the two attribute steps."""
    primary: Tuple[str, ...]
    secondary: Tuple[str, ...]
    source: str = "default"

    @property
    def is_default(self) -> bool:
        return self.source == "default"

    @classmethod
    def defaults(cls) -> "AttributeCandidateSet":
        return cls(DEFAULT_PRIMARY_ATTRIBUTES, DEFAULT_SECONDARY_ATTRIBUTES, source="default")


@dataclass(frozen=True)
class GeneratedReviewResult:
    """
    Outcome of one generation call.

    Either text is set (success) or error_kind/message are set (failure),
    never both.
    """
    text: Optional[str] = None
    error_kind: Optional[str] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.text is not None and self.error_kind is None

    @classmethod
    def success(cls, text: str) -> "GeneratedReviewResult":
        return cls(text=text)

    @classmethod
    def failure(cls, error_kind: str, message: str) -> "GeneratedReviewResult":
        return cls(error_kind=error_kind, message=message)


@dataclass(frozen=True)
class ReviewRecord:
    """What gets persisted once the customer submits."""
    employee_id: int
    review_text: str
    rating: int
    experience_level: str
    attributes: Tuple[str, ...] = ()
    platforms: Tuple[str, ...] = ()
    customer_name: Optional[str] = None


@dataclass(frozen=True)
class PersistResult:
    """Review record store answer."""
    success: bool
    error: str = ""
    review_id: Optional[int] = None


@dataclass(frozen=True)
class Notification:
    """User-facing message emitted by the wizard for the presentation layer."""
    level: str  # validation, error, warning, success, info
    title: str
    message: str = ""


@dataclass(frozen=True)
class Navigation:
    """How the browser was sent to a destination URL."""
    url: str
    mode: str  # same_tab or new_tab
    popup_blocked: bool = False
