"""
Error Taxonomy - Review Collection Failures
============================================

Every failure in the review flow is recoverable at the session level.
The wizard decides what to show; raw model output and exception text
never reach the customer for generation failures.
"""


class ReviewLinkError(Exception):
    """Base exception for review flow errors."""
    pass


class ReviewGenerationError(ReviewLinkError):
    """Base for everything the review text generator can fail with."""

    kind = "generation_error"


class InvalidInputError(ReviewGenerationError):
    """Precondition violated, no external call was made."""

    kind = "invalid_input"


class GenerationUnavailableError(ReviewGenerationError):
    """The language model call failed or timed out."""

    kind = "generation_unavailable"


class IdentityMismatchError(ReviewGenerationError):
    """Generated text does not mention the company it was written for."""

    kind = "identity_mismatch"


class ForeignEntityError(ReviewGenerationError):
    """Generated text names a placeholder or unrelated business."""

    kind = "foreign_entity"

    def __init__(self, message: str, term: str = ""):
        super().__init__(message)
        self.term = term


class ClipboardUnavailableError(ReviewLinkError):
    """No clipboard strategy could copy the text. Non-fatal."""
    pass


class PersistenceError(ReviewLinkError):
    """The review record store rejected or failed to save a review."""
    pass
