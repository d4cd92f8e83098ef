"""
Review Wizard - Customer-Facing Review Collection Flow
======================================================

Drives one customer visit through:

    RatingSelect(1) -> AttributeSelect(2) -> SecondaryAttributeSelect(3)
        -> ReviewEdit(4) -> Submitted

A poor experience jumps from RatingSelect straight to ReviewEdit with
no AI draft, and "back" from there returns to RatingSelect.

ARCHITECTURAL DECISION:
- Each step is its own frozen dataclass carrying only the data valid
  at that step, so review text cannot exist before ReviewEdit.
- Guard failures never raise. They block the transition and emit a
  Notification for whatever presentation layer is listening.
- Generation and submission each have a busy flag; repeated triggers
  while one is pending are dropped.
- A discarded wizard ignores late results from in-flight calls.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, replace
from typing import Callable, ClassVar, List, Optional, Tuple, Union

from .errors import ClipboardUnavailableError, GenerationUnavailableError, PersistenceError
from .models import (
    PLATFORMS,
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
from .ports import ClipboardRedirect, ReviewDrafter, ReviewRecordStore

logger = logging.getLogger(__name__)

SELECT_ATTRIBUTE_TITLE = "Please select at least one attribute"
SELECT_ATTRIBUTE_MESSAGE = "Choose what made your experience great."


# ── States ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class RatingSelect:
    step: ClassVar[int] = 1
    name: ClassVar[str] = "rating_select"

    # Picks kept from a previous pass when the customer went back
    primary: Tuple[str, ...] = ()
    secondary: Tuple[str, ...] = ()


@dataclass(frozen=True)
class AttributeSelect:
    step: ClassVar[int] = 2
    name: ClassVar[str] = "attribute_select"

    experience: ExperienceLevel
    primary: Tuple[str, ...] = ()
    secondary: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SecondaryAttributeSelect:
    step: ClassVar[int] = 3
    name: ClassVar[str] = "secondary_attribute_select"

    experience: ExperienceLevel
    primary: Tuple[str, ...]
    secondary: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ReviewEdit:
    step: ClassVar[int] = 4
    name: ClassVar[str] = "review_edit"

    experience: ExperienceLevel
    primary: Tuple[str, ...] = ()
    secondary: Tuple[str, ...] = ()
    review_text: str = ""
    generation_state: GenerationState = GenerationState.NOT_STARTED
    customer_name: Optional[str] = None
    platforms: Tuple[str, ...] = ("google",)

    @property
    def poor_branch(self) -> bool:
        return self.experience is ExperienceLevel.POOR

    @property
    def attributes(self) -> Tuple[str, ...]:
        return _merge(self.primary, self.secondary)


@dataclass(frozen=True)
class Submitted:
    step: ClassVar[int] = 4
    name: ClassVar[str] = "submitted"

    experience: ExperienceLevel
    review_text: str
    attributes: Tuple[str, ...]
    platforms: Tuple[str, ...]
    generation_state: GenerationState
    clipboard_copied: bool
    review_id: Optional[int] = None
    destination_url: Optional[str] = None


WizardState = Union[RatingSelect, AttributeSelect, SecondaryAttributeSelect, ReviewEdit, Submitted]

NotificationListener = Callable[[Notification], None]


def _merge(first: Tuple[str, ...], second: Tuple[str, ...]) -> Tuple[str, ...]:
    seen = set()
    merged = []
    for item in first + second:
        key = item.lower()
        if key not in seen:
            seen.add(key)
            merged.append(item)
    return tuple(merged)


def _toggle(selected: Tuple[str, ...], item: str) -> Tuple[str, ...]:
    if item in selected:
        return tuple(s for s in selected if s != item)
    return selected + (item,)


# ── Wizard ─────────────────────────────────────────────────────────

class ReviewWizard:
    """
    State machine for one review session.

    USAGE:
        wizard = ReviewWizard(context, candidates, drafter, store, clipboard)
        wizard.subscribe(print)
        wizard.select_experience(ExperienceLevel.EXCELLENT)
        wizard.toggle_attribute("Professional")
        await wizard.advance()
        wizard.toggle_attribute("Reliability")
        await wizard.advance()          # drafts the review
        await wizard.submit()
        wizard.open_destination()
    """

    def __init__(
        self,
        context: ReviewContext,
        candidates: AttributeCandidateSet,
        drafter: ReviewDrafter,
        store: ReviewRecordStore,
        clipboard: ClipboardRedirect,
        session_id: Optional[str] = None,
        generation_timeout: float = 45.0,
        on_notify: Optional[NotificationListener] = None,
    ):
        self.session_id = session_id or uuid.uuid4().hex
        self.context = context
        self.candidates = candidates

        self._drafter = drafter
        self._store = store
        self._clipboard = clipboard
        self._generation_timeout = generation_timeout

        self._state: WizardState = RatingSelect()
        self._generating = False
        self._submitting = False
        self._discarded = False

        self._listeners: List[NotificationListener] = []
        if on_notify:
            self._listeners.append(on_notify)

    # ── Read-only view ─────────────────────────────────────────

    @property
    def state(self) -> WizardState:
        return self._state

    @property
    def step(self) -> int:
        return self._state.step

    @property
    def generation_state(self) -> GenerationState:
        return getattr(self._state, "generation_state", GenerationState.NOT_STARTED)

    @property
    def is_generating(self) -> bool:
        return self._generating

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    @property
    def is_discarded(self) -> bool:
        return self._discarded

    @property
    def is_submitted(self) -> bool:
        return isinstance(self._state, Submitted)

    def subscribe(self, listener: NotificationListener) -> None:
        self._listeners.append(listener)

    def _notify(self, level: str, title: str, message: str = "") -> None:
        notification = Notification(level=level, title=title, message=message)
        logger.debug(f"[{self.session_id}] {level}: {title}")
        for listener in list(self._listeners):
            listener(notification)

    def _reject(self, action: str) -> bool:
        logger.info(f"[{self.session_id}] Ignoring '{action}' in state {self._state.name}")
        return False

    # ── Step 1 ─────────────────────────────────────────────────

    def select_experience(self, level: Union[ExperienceLevel, str]) -> bool:
        """Pick poor/moderate/excellent. Poor skips straight to the text step."""
        if not isinstance(self._state, RatingSelect):
            return self._reject("select_experience")

        try:
            experience = level if isinstance(level, ExperienceLevel) else ExperienceLevel(str(level).lower())
        except ValueError:
            self._notify("validation", "Please choose how your experience was")
            return False

        if experience is ExperienceLevel.POOR:
            self._state = ReviewEdit(experience=experience)
            logger.info(f"[{self.session_id}] Poor experience, skipping attribute steps")
        else:
            self._state = AttributeSelect(
                experience=experience,
                primary=self._state.primary,
                secondary=self._state.secondary,
            )
        return True

    # ── Steps 2 and 3 ──────────────────────────────────────────

    def toggle_attribute(self, attribute: str) -> bool:
        """Select or unselect one offered attribute on the current step."""
        state = self._state
        if isinstance(state, AttributeSelect):
            offered = self.candidates.primary
        elif isinstance(state, SecondaryAttributeSelect):
            offered = self.candidates.secondary
        else:
            return self._reject("toggle_attribute")

        if attribute not in offered:
            self._notify("validation", "Unknown attribute", f"'{attribute}' is not one of the options.")
            return False

        if isinstance(state, AttributeSelect):
            self._state = replace(state, primary=_toggle(state.primary, attribute))
        else:
            self._state = replace(state, secondary=_toggle(state.secondary, attribute))
        return True

    async def advance(self) -> bool:
        """
        Continue to the next step.

        Returns True if the step changed. Entering ReviewEdit waits for
        the review draft before returning.
        """
        state = self._state

        if isinstance(state, RatingSelect):
            self._notify("validation", "Please choose how your experience was")
            return False

        if isinstance(state, AttributeSelect):
            if not state.primary:
                self._notify("validation", SELECT_ATTRIBUTE_TITLE, SELECT_ATTRIBUTE_MESSAGE)
                return False
            self._state = SecondaryAttributeSelect(
                experience=state.experience,
                primary=state.primary,
                secondary=state.secondary,
            )
            return True

        if isinstance(state, SecondaryAttributeSelect):
            if not state.secondary:
                self._notify("validation", SELECT_ATTRIBUTE_TITLE, SELECT_ATTRIBUTE_MESSAGE)
                return False
            self._state = ReviewEdit(
                experience=state.experience,
                primary=state.primary,
                secondary=state.secondary,
            )
            await self._generate()
            return True

        return self._reject("advance")

    def back(self) -> bool:
        """Go back one step. From a poor-experience ReviewEdit, back is RatingSelect."""
        state = self._state

        if isinstance(state, AttributeSelect):
            self._state = RatingSelect(primary=state.primary, secondary=state.secondary)
            return True

        if isinstance(state, SecondaryAttributeSelect):
            self._state = AttributeSelect(
                experience=state.experience,
                primary=state.primary,
                secondary=state.secondary,
            )
            return True

        if isinstance(state, ReviewEdit):
            if self._generating or self._submitting:
                self._notify("info", "Please wait", "Your review is still being processed.")
                return False
            if state.poor_branch:
                self._state = RatingSelect()
            else:
                self._state = SecondaryAttributeSelect(
                    experience=state.experience,
                    primary=state.primary,
                    secondary=state.secondary,
                )
            return True

        return self._reject("back")

    # ── Step 4 ─────────────────────────────────────────────────

    def _editable(self, action: str) -> Optional[ReviewEdit]:
        if not isinstance(self._state, ReviewEdit):
            self._reject(action)
            return None
        if self._generating or self._submitting:
            self._notify("info", "Please wait", "Your review is still being processed.")
            return None
        return self._state

    def set_review_text(self, text: str) -> bool:
        state = self._editable("set_review_text")
        if state is None:
            return False
        self._state = replace(state, review_text=text or "")
        return True

    def set_customer_name(self, name: Optional[str]) -> bool:
        state = self._editable("set_customer_name")
        if state is None:
            return False
        self._state = replace(state, customer_name=(name or "").strip() or None)
        return True

    def toggle_platform(self, platform: str) -> bool:
        state = self._editable("toggle_platform")
        if state is None:
            return False
        platform = (platform or "").lower()
        if platform not in PLATFORMS:
            self._notify("validation", "Unknown platform", f"'{platform}' is not supported.")
            return False
        self._state = replace(state, platforms=_toggle(state.platforms, platform))
        return True

    async def regenerate(self) -> bool:
        """Ask for a fresh draft after a failure, or for a different wording."""
        state = self._editable("regenerate")
        if state is None:
            return False
        if state.poor_branch:
            return self._reject("regenerate")
        await self._generate()
        return True

    async def _generate(self) -> None:
        """Run the drafter once for the current ReviewEdit state."""
        if self._generating:
            logger.info(f"[{self.session_id}] Generation already in flight")
            return

        state = self._state
        self._state = replace(state, review_text="", generation_state=GenerationState.IN_PROGRESS)
        pending = self._state
        self._generating = True

        try:
            result = await asyncio.wait_for(
                self._drafter.generate_review(
                    list(state.attributes),
                    self.context.company_name,
                    self.context.business_description,
                ),
                timeout=self._generation_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"[{self.session_id}] Review generation timed out after {self._generation_timeout}s")
            result = GeneratedReviewResult.failure(
                GenerationUnavailableError.kind, "Review generation timed out"
            )
        except Exception as e:
            logger.exception(f"[{self.session_id}] Unexpected error from review drafter: {e}")
            result = GeneratedReviewResult.failure(GenerationUnavailableError.kind, str(e))
        finally:
            self._generating = False

        if self._discarded or self._state is not pending:
            logger.info(f"[{self.session_id}] Discarding stale generation result")
            return

        if result.ok:
            self._state = replace(pending, review_text=result.text, generation_state=GenerationState.SUCCEEDED)
            logger.info(f"[{self.session_id}] Review drafted ({len(result.text)} chars)")
        else:
            self._state = replace(pending, review_text="", generation_state=GenerationState.FAILED)
            logger.warning(f"[{self.session_id}] Review generation failed: {result.error_kind}: {result.message}")
            self._notify(
                "warning",
                "We couldn't draft your review",
                "Please write a few words about your experience yourself.",
            )

    # ── Submission ─────────────────────────────────────────────

    async def submit(self) -> bool:
        """
        Copy, persist, then move to Submitted.

        Returns True only when the review was stored. A failed store
        keeps the wizard in ReviewEdit so the customer can retry.
        """
        if self._submitting:
            logger.info(f"[{self.session_id}] Submit already in flight, ignoring")
            return False

        state = self._state
        if not isinstance(state, ReviewEdit):
            return self._reject("submit")

        if self._generating:
            self._notify("info", "Please wait", "Your review is still being drafted.")
            return False

        text = state.review_text.strip()
        if not text:
            self._notify("validation", "Please write a review before submitting.")
            return False

        self._submitting = True
        try:
            copied = self._clipboard.copy_to_clipboard(text)
            if not copied:
                error = ClipboardUnavailableError("No clipboard strategy succeeded")
                logger.warning(f"[{self.session_id}] {error}")
                self._notify(
                    "warning",
                    "Couldn't copy your review",
                    "Please copy the text manually before posting it.",
                )

            record = ReviewRecord(
                employee_id=self.context.employee_id,
                review_text=text,
                rating=state.experience.derived_rating,
                experience_level=state.experience.value,
                attributes=state.attributes,
                platforms=state.platforms,
                customer_name=state.customer_name,
            )

            try:
                result = await self._store.persist(record)
            except PersistenceError as e:
                result = PersistResult(success=False, error=str(e))

            if self._discarded:
                logger.info(f"[{self.session_id}] Session discarded during submit, ignoring result")
                return False

            if not result.success:
                logger.warning(f"[{self.session_id}] Review not saved: {result.error}")
                self._notify(
                    "error",
                    "Failed to submit review",
                    result.error or "Please try again.",
                )
                return False

            destination = self.context.google_review_destination or None
            self._state = Submitted(
                experience=state.experience,
                review_text=text,
                attributes=state.attributes,
                platforms=state.platforms,
                generation_state=state.generation_state,
                clipboard_copied=copied,
                review_id=result.review_id,
                destination_url=destination,
            )
            logger.info(f"[{self.session_id}] Review submitted for employee {self.context.employee_id}")
            self._notify("success", "Thank you!", "Your review has been submitted successfully.")

            if not destination:
                logger.warning(f"No Google review destination configured for '{self.context.company_name}'")
                self._notify("info", "All done", "This business has not set up an online review page yet.")
            return True
        finally:
            self._submitting = False

    def open_destination(self) -> Optional[Navigation]:
        """Send the customer to the review site after a confirmed submit."""
        state = self._state
        if not isinstance(state, Submitted):
            self._reject("open_destination")
            return None
        if not state.destination_url:
            self._notify("info", "No review page", "This business has not set up an online review page yet.")
            return None
        return self._clipboard.navigate_to(state.destination_url)

    def discard(self) -> None:
        """The customer left. Late results for this session are ignored."""
        self._discarded = True
        logger.info(f"[{self.session_id}] Session discarded")

    # ── Presentation ───────────────────────────────────────────

    def snapshot(self) -> dict:
        """Plain dict view of the session for a UI layer."""
        state = self._state
        experience = getattr(state, "experience", None)
        return {
            "session_id": self.session_id,
            "state": state.name,
            "step": state.step,
            "employee_name": self.context.employee_name,
            "company_name": self.context.company_name,
            "experience": experience.value if experience else None,
            "experience_label": experience.label if experience else None,
            "poor_branch": experience is ExperienceLevel.POOR,
            "candidates": {
                "primary": list(self.candidates.primary),
                "secondary": list(self.candidates.secondary),
            },
            "primary": list(getattr(state, "primary", ())),
            "secondary": list(getattr(state, "secondary", ())),
            "review_text": getattr(state, "review_text", ""),
            "generation_state": self.generation_state.value,
            "customer_name": getattr(state, "customer_name", None),
            "platforms": list(getattr(state, "platforms", ())),
            "generating": self._generating,
            "submitting": self._submitting,
            "submitted": isinstance(state, Submitted),
            "clipboard_copied": getattr(state, "clipboard_copied", False),
            "destination_url": getattr(state, "destination_url", None),
        }
