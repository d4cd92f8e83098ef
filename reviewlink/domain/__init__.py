# Domain Layer
# ============
# Pure review-flow logic with no external dependencies:
# - models.py:     session value objects and enums
# - errors.py:     failure taxonomy
# - ports.py:      interfaces for drafter, store and clipboard
# - validation.py: post-generation identity checks
# - wizard.py:     the customer review wizard state machine

from .errors import (
    ClipboardUnavailableError,
    ForeignEntityError,
    GenerationUnavailableError,
    IdentityMismatchError,
    InvalidInputError,
    PersistenceError,
    ReviewGenerationError,
    ReviewLinkError,
)
from .models import (
    AttributeCandidateSet,
    ExperienceLevel,
    GeneratedReviewResult,
    GenerationState,
    Navigation,
    Notification,
    PersistResult,
    ReviewContext,
    ReviewRecord,
)
from .wizard import ReviewWizard
