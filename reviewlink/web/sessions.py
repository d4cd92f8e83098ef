"""
Session Registry - In-Memory Review Wizard Sessions
===================================================

One ReviewWizard per customer page visit, keyed by a random session id.
Sessions are never shared between visits and are dropped when the page
closes (DELETE) or after sitting idle for the configured TTL.

Notifications go back to the request whose wizard call raised them.
Each request collects into its own bucket (a ContextVar, so concurrent
requests on one session never see each other's messages). Anything
raised outside a request waits in the handle queue for the next response.
"""

import logging
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from ..domain.models import AttributeCandidateSet, Notification, ReviewContext
from ..domain.ports import ReviewDrafter, ReviewRecordStore
from ..domain.wizard import ReviewWizard
from ..infrastructure.browser import ClipboardAdapter, ReportedBrowserPlatform

logger = logging.getLogger(__name__)

_request_bucket: ContextVar[Optional[List[Notification]]] = ContextVar("request_bucket", default=None)


def _serialize(notifications: List[Notification]) -> List[dict]:
    return [{"level": n.level, "title": n.title, "message": n.message} for n in notifications]


@dataclass
class ReviewSessionHandle:
    """A wizard plus the per-visit state the web layer needs around it."""
    wizard: ReviewWizard
    platform: ReportedBrowserPlatform
    notifications: List[Notification] = field(default_factory=list)
    last_seen: float = field(default_factory=time.monotonic)

    def deliver(self, notification: Notification) -> None:
        """Wizard listener: into the current request's bucket, else the queue."""
        bucket = _request_bucket.get()
        if bucket is None:
            self.notifications.append(notification)
        else:
            bucket.append(notification)

    @contextmanager
    def collecting(self) -> Iterator[List[Notification]]:
        """Collect the notifications raised by wizard calls made inside the block."""
        bucket: List[Notification] = []
        token = _request_bucket.set(bucket)
        try:
            yield bucket
        finally:
            _request_bucket.reset(token)

    def drain_notifications(self, raised: Optional[List[Notification]] = None) -> List[dict]:
        """Queued notifications plus the ones this request raised, each delivered once."""
        pending = list(self.notifications)
        self.notifications.clear()
        return _serialize(pending + list(raised or []))


class SessionRegistry:
    """
    Usage:
        registry = SessionRegistry(ttl_seconds=3600)
        handle = registry.create(context, candidates, drafter, store)
        handle = registry.get(handle.wizard.session_id)
        registry.discard(handle.wizard.session_id)
    """

    def __init__(self, ttl_seconds: float = 3600):
        self._ttl = ttl_seconds
        self._sessions: Dict[str, ReviewSessionHandle] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(
        self,
        context: ReviewContext,
        candidates: AttributeCandidateSet,
        drafter: ReviewDrafter,
        store: ReviewRecordStore,
        generation_timeout: float = 45.0,
    ) -> ReviewSessionHandle:
        self.prune()

        platform = ReportedBrowserPlatform()
        wizard = ReviewWizard(
            context=context,
            candidates=candidates,
            drafter=drafter,
            store=store,
            clipboard=ClipboardAdapter(platform),
            session_id=uuid.uuid4().hex,
            generation_timeout=generation_timeout,
        )
        handle = ReviewSessionHandle(wizard=wizard, platform=platform)
        wizard.subscribe(handle.deliver)

        self._sessions[wizard.session_id] = handle
        logger.info(f"Created review session {wizard.session_id} for employee {context.employee_id}")
        return handle

    def get(self, session_id: str) -> Optional[ReviewSessionHandle]:
        handle = self._sessions.get(session_id)
        if handle is None:
            return None
        if time.monotonic() - handle.last_seen > self._ttl:
            self.discard(session_id)
            return None
        handle.last_seen = time.monotonic()
        return handle

    def discard(self, session_id: str) -> bool:
        handle = self._sessions.pop(session_id, None)
        if handle is None:
            return False
        handle.wizard.discard()
        return True

    def prune(self) -> int:
        """Drop idle sessions. Returns how many were removed."""
        now = time.monotonic()
        expired = [sid for sid, h in self._sessions.items() if now - h.last_seen > self._ttl]
        for sid in expired:
            self.discard(sid)
        if expired:
            logger.info(f"Pruned {len(expired)} idle review sessions")
        return len(expired)
