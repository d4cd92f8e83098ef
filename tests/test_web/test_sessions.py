"""
Tests for the in-memory session registry and per-request notifications.
"""

import asyncio

from unittest.mock import Mock

from reviewlink.domain.models import (
    AttributeCandidateSet,
    ExperienceLevel,
    GeneratedReviewResult,
    PersistResult,
    ReviewContext,
)
from reviewlink.domain.ports import ReviewDrafter
from reviewlink.web.sessions import SessionRegistry

CONTEXT = ReviewContext(
    employee_id=1,
    employee_name="Jordan",
    company_name="Acme Plumbing",
    business_description="residential plumbing repair",
)


class GatedFailingDrafter(ReviewDrafter):
    def __init__(self, gate):
        self.gate = gate

    async def generate_review(self, qualities, company_name, business_description):
        await self.gate.wait()
        return GeneratedReviewResult.failure("generation_unavailable", "model down")


def make_handle(drafter=None, ttl_seconds=3600):
    registry = SessionRegistry(ttl_seconds=ttl_seconds)
    store = Mock()
    store.persist.return_value = PersistResult(success=True)
    handle = registry.create(CONTEXT, AttributeCandidateSet.defaults(), drafter or Mock(), store)
    return registry, handle


def test_concurrent_requests_get_their_own_notifications():
    """Test that a parallel edit cannot take the draft-failure warning."""
    outcome = {}

    async def scenario():
        gate = asyncio.Event()
        _, handle = make_handle(GatedFailingDrafter(gate))
        wizard = handle.wizard
        wizard.select_experience(ExperienceLevel.EXCELLENT)
        wizard.toggle_attribute("Professional")
        await wizard.advance()
        wizard.toggle_attribute("Reliability")

        async def continue_request():
            with handle.collecting() as raised:
                await wizard.advance()
            return handle.drain_notifications(raised)

        async def text_request():
            with handle.collecting() as raised:
                wizard.set_review_text("typing while drafting")
            return handle.drain_notifications(raised)

        draft = asyncio.create_task(continue_request())
        await asyncio.sleep(0)
        outcome["text"] = await text_request()
        gate.set()
        outcome["continue"] = await draft
        outcome["queued"] = handle.drain_notifications()

    asyncio.run(scenario())
    assert [n["title"] for n in outcome["text"]] == ["Please wait"]
    assert [n["title"] for n in outcome["continue"]] == ["We couldn't draft your review"]
    assert outcome["queued"] == []


def test_notifications_outside_a_request_are_queued():
    _, handle = make_handle()
    handle.wizard.toggle_attribute("Professional")  # wrong step, no notification
    asyncio.run(handle.wizard.advance())

    assert [n["level"] for n in handle.drain_notifications()] == ["validation"]
    assert handle.drain_notifications() == []


def test_registry_get_and_discard():
    registry, handle = make_handle()
    sid = handle.wizard.session_id

    assert registry.get(sid) is handle
    assert len(registry) == 1
    assert registry.discard(sid)
    assert handle.wizard.is_discarded
    assert registry.get(sid) is None
    assert not registry.discard(sid)


def test_idle_sessions_expire():
    registry, handle = make_handle(ttl_seconds=0)
    handle.last_seen -= 1

    assert registry.get(handle.wizard.session_id) is None
    assert handle.wizard.is_discarded
