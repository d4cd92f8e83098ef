"""
Review Record Store - SQLite Adapter for the Wizard
====================================================

Implements the wizard's ReviewRecordStore port on top of Database.
Database errors come back as a failed PersistResult with a message
that is safe to show to a customer.
"""

import asyncio
import logging
import sqlite3

from ...domain.models import PersistResult, ReviewRecord
from ...domain.ports import ReviewRecordStore
from .database import Database

logger = logging.getLogger(__name__)


class SQLiteReviewStore(ReviewRecordStore):
    """Persist submitted reviews through a Database instance."""

    def __init__(self, db: Database):
        self._db = db

    def persist_sync(self, record: ReviewRecord) -> PersistResult:
        try:
            review_id = self._db.save_review(record)
        except sqlite3.IntegrityError as e:
            logger.warning(f"Review rejected for employee {record.employee_id}: {e}")
            return PersistResult(success=False, error="This review link is no longer valid.")
        except sqlite3.Error as e:
            logger.exception(f"Database error saving review for employee {record.employee_id}: {e}")
            return PersistResult(success=False, error="We could not save your review. Please try again.")
        return PersistResult(success=True, review_id=review_id)

    async def persist(self, record: ReviewRecord) -> PersistResult:
        return await asyncio.to_thread(self.persist_sync, record)
