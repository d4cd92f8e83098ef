"""
SQLite Database Repository - Review Link Persistence
=====================================================

Stores companies, their employees (each with a unique review link id)
and the reviews customers submit through those links.
"""

import json
import logging
import sqlite3
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from typing import List, Optional

from ...domain.models import ReviewContext, ReviewRecord

logger = logging.getLogger(__name__)

DATABASE_FILE = "reviewlink.db"


@dataclass
class Company:
    """Business profile record."""
    id: int
    company_name: str
    business_description: str = ""
    website: str = ""
    google_reviews_url: str = ""
    created_at: str = ""


@dataclass
class Employee:
    """Employee record with its shareable review link id."""
    id: int
    company_id: int
    name: str
    position: str = ""
    unique_link_id: str = ""
    created_at: str = ""


@dataclass
class Review:
    """Submitted customer review."""
    id: int
    employee_id: int
    review_text: str
    rating: int
    experience_level: str = ""
    customer_name: str = ""
    attributes: tuple = ()
    platforms: tuple = ()
    created_at: str = ""


class Database:
    """
    SQLite database for ReviewLink.

    Usage:
        db = Database()
        db.init()

        company_id = db.add_company("Acme Plumbing", "residential plumbing repair")
        employee = db.add_employee(company_id, "Jordan")

        context = db.get_review_context(employee.unique_link_id)
    """

    def __init__(self, db_path: str = DATABASE_FILE):
        self.db_path = str(db_path)

    @contextmanager
    def _get_connection(self):
        """Get database connection with context manager."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def init(self):
        """Initialize database tables."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS companies (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    company_name TEXT NOT NULL,
                    business_description TEXT DEFAULT '',
                    website TEXT DEFAULT '',
                    google_reviews_url TEXT DEFAULT '',
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS employees (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    company_id INTEGER NOT NULL REFERENCES companies(id) ON DELETE CASCADE,
                    name TEXT NOT NULL,
                    position TEXT DEFAULT '',
                    unique_link_id TEXT UNIQUE NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS reviews (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    employee_id INTEGER NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
                    customer_name TEXT DEFAULT '',
                    review_text TEXT NOT NULL,
                    rating INTEGER NOT NULL CHECK (rating BETWEEN 1 AND 5),
                    experience_level TEXT DEFAULT '',
                    attributes TEXT DEFAULT '[]',
                    platforms TEXT DEFAULT '[]',
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            logger.info(f"Database initialized: {self.db_path}")

    # ── Companies and employees ────────────────────────────────────

    def add_company(
        self,
        company_name: str,
        business_description: str = "",
        website: str = "",
        google_reviews_url: str = "",
    ) -> int:
        """Add a company profile and return its id."""
        with self._get_connection() as conn:
            cursor = conn.execute(
                """INSERT INTO companies (company_name, business_description, website, google_reviews_url)
                   VALUES (?, ?, ?, ?)""",
                (company_name, business_description, website, google_reviews_url)
            )
            return cursor.lastrowid

    def get_company(self, company_id: int) -> Optional[Company]:
        with self._get_connection() as conn:
            row = conn.execute("SELECT * FROM companies WHERE id = ?", (company_id,)).fetchone()
            return self._row_to_company(row) if row else None

    def add_employee(self, company_id: int, name: str, position: str = "") -> Employee:
        """Add an employee with a freshly generated review link id."""
        link_id = str(uuid.uuid4())
        with self._get_connection() as conn:
            cursor = conn.execute(
                "INSERT INTO employees (company_id, name, position, unique_link_id) VALUES (?, ?, ?, ?)",
                (company_id, name, position, link_id)
            )
            employee_id = cursor.lastrowid
        logger.info(f"Added employee {name} (link {link_id}) to company {company_id}")
        return Employee(id=employee_id, company_id=company_id, name=name, position=position, unique_link_id=link_id)

    def get_employee_by_link(self, link_id: str) -> Optional[Employee]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM employees WHERE unique_link_id = ?", (link_id,)
            ).fetchone()
            return self._row_to_employee(row) if row else None

    def get_review_context(self, link_id: str, default_destination: str = "") -> Optional[ReviewContext]:
        """
        Resolve an employee link into the identity a review session needs.
        Returns None when the link is unknown.
        """
        with self._get_connection() as conn:
            row = conn.execute(
                """SELECT e.id AS employee_id, e.name AS employee_name,
                          c.company_name, c.business_description, c.website, c.google_reviews_url
                   FROM employees e
                   JOIN companies c ON c.id = e.company_id
                   WHERE e.unique_link_id = ?""",
                (link_id,)
            ).fetchone()

        if not row:
            return None

        return ReviewContext(
            employee_id=row["employee_id"],
            employee_name=row["employee_name"] or "Technician",
            company_name=row["company_name"] or "Company",
            business_description=row["business_description"] or "",
            website_url=row["website"] or None,
            google_review_destination=row["google_reviews_url"] or default_destination or None,
        )

    # ── Reviews ────────────────────────────────────────────────────

    def save_review(self, record: ReviewRecord) -> int:
        """Insert a submitted review. Raises sqlite3.Error on failure."""
        with self._get_connection() as conn:
            cursor = conn.execute(
                """INSERT INTO reviews
                   (employee_id, customer_name, review_text, rating, experience_level, attributes, platforms)
                   VALUES (?, ?, ?, ?, ?, ?, ?)""",
                (
                    record.employee_id,
                    record.customer_name or "",
                    record.review_text,
                    record.rating,
                    record.experience_level,
                    json.dumps(list(record.attributes)),
                    json.dumps(list(record.platforms)),
                )
            )
            review_id = cursor.lastrowid
        logger.info(f"Saved review {review_id} for employee {record.employee_id} (rating {record.rating})")
        return review_id

    def get_reviews_for_employee(self, employee_id: int) -> List[Review]:
        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT * FROM reviews WHERE employee_id = ? ORDER BY id", (employee_id,)
            ).fetchall()
            return [self._row_to_review(row) for row in rows]

    def count_reviews(self, employee_id: int) -> int:
        with self._get_connection() as conn:
            return conn.execute(
                "SELECT COUNT(*) FROM reviews WHERE employee_id = ?", (employee_id,)
            ).fetchone()[0]

    # ── Row mapping ────────────────────────────────────────────────

    def _row_to_company(self, row: sqlite3.Row) -> Company:
        return Company(
            id=row["id"],
            company_name=row["company_name"],
            business_description=row["business_description"] or "",
            website=row["website"] or "",
            google_reviews_url=row["google_reviews_url"] or "",
            created_at=row["created_at"] or ""
        )

    def _row_to_employee(self, row: sqlite3.Row) -> Employee:
        return Employee(
            id=row["id"],
            company_id=row["company_id"],
            name=row["name"],
            position=row["position"] or "",
            unique_link_id=row["unique_link_id"],
            created_at=row["created_at"] or ""
        )

    def _row_to_review(self, row: sqlite3.Row) -> Review:
        """Convert database row to Review object."""
        return Review(
            id=row["id"],
            employee_id=row["employee_id"],
            review_text=row["review_text"],
            rating=row["rating"],
            experience_level=row["experience_level"] or "",
            customer_name=row["customer_name"] or "",
            attributes=tuple(json.loads(row["attributes"] or "[]")),
            platforms=tuple(json.loads(row["platforms"] or "[]")),
            created_at=row["created_at"] or ""
        )


def init_database(db_path: str = DATABASE_FILE, seed_demo: bool = False) -> Database:
    """Initialize database, optionally with one demo company and employee."""
    db = Database(db_path)
    db.init()

    if seed_demo:
        with db._get_connection() as conn:
            has_companies = conn.execute("SELECT COUNT(*) FROM companies").fetchone()[0] > 0
        if not has_companies:
            company_id = db.add_company(
                "Acme Plumbing",
                "residential plumbing repair",
                website="",
                google_reviews_url="",
            )
            employee = db.add_employee(company_id, "Jordan", "Technician")
            logger.info(f"Demo review link: /review/{employee.unique_link_id}")

    return db
