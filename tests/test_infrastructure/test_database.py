"""
Tests for the SQLite repository and the review record store.

Each test gets its own database file under pytest's tmp_path.
"""

import asyncio
import sqlite3

import pytest
from unittest.mock import Mock

from reviewlink.domain.models import ReviewRecord
from reviewlink.infrastructure.persistence import Database, SQLiteReviewStore, init_database


@pytest.fixture
def db(tmp_path):
    database = Database(tmp_path / "reviews.db")
    database.init()
    return database


@pytest.fixture
def employee(db):
    company_id = db.add_company(
        "Acme Plumbing",
        "residential plumbing repair",
        website="https://acmeplumbing.example",
        google_reviews_url="https://g.page/r/acme/review",
    )
    return db.add_employee(company_id, "Jordan", "Technician")


def make_record(employee_id, **overrides):
    values = dict(
        employee_id=employee_id,
        review_text="Acme Plumbing fixed our sink.",
        rating=5,
        experience_level="excellent",
        attributes=("Professional", "Reliability"),
        platforms=("google", "facebook"),
        customer_name="Sam",
    )
    values.update(overrides)
    return ReviewRecord(**values)


def test_review_context_from_link(db, employee):
    context = db.get_review_context(employee.unique_link_id)

    assert context.employee_id == employee.id
    assert context.employee_name == "Jordan"
    assert context.company_name == "Acme Plumbing"
    assert context.business_description == "residential plumbing repair"
    assert context.website_url == "https://acmeplumbing.example"
    assert context.google_review_destination == "https://g.page/r/acme/review"


def test_unknown_link_has_no_context(db):
    assert db.get_review_context("does-not-exist") is None
    assert db.get_employee_by_link("does-not-exist") is None


def test_destination_falls_back_to_default(db):
    company_id = db.add_company("Bob's Drains")
    employee = db.add_employee(company_id, "Alex")

    assert db.get_review_context(employee.unique_link_id).google_review_destination is None
    context = db.get_review_context(employee.unique_link_id, default_destination="https://g.page/r/default")
    assert context.google_review_destination == "https://g.page/r/default"
    assert context.website_url is None


def test_link_ids_are_unique(db):
    company_id = db.add_company("Acme Plumbing")
    first = db.add_employee(company_id, "Jordan")
    second = db.add_employee(company_id, "Jordan")
    assert first.unique_link_id != second.unique_link_id
    assert db.get_employee_by_link(second.unique_link_id).id == second.id


def test_save_and_read_review(db, employee):
    review_id = db.save_review(make_record(employee.id))

    reviews = db.get_reviews_for_employee(employee.id)
    assert len(reviews) == 1
    review = reviews[0]
    assert review.id == review_id
    assert review.rating == 5
    assert review.experience_level == "excellent"
    assert review.attributes == ("Professional", "Reliability")
    assert review.platforms == ("google", "facebook")
    assert review.customer_name == "Sam"
    assert db.count_reviews(employee.id) == 1


def test_rating_out_of_range_is_rejected(db, employee):
    with pytest.raises(sqlite3.IntegrityError):
        db.save_review(make_record(employee.id, rating=9))


def test_store_reports_success(db, employee):
    store = SQLiteReviewStore(db)
    result = asyncio.run(store.persist(make_record(employee.id, customer_name=None)))

    assert result.success
    assert result.review_id is not None
    assert db.get_reviews_for_employee(employee.id)[0].customer_name == ""


def test_store_reports_unknown_employee(db):
    result = SQLiteReviewStore(db).persist_sync(make_record(employee_id=999))

    assert not result.success
    assert result.error == "This review link is no longer valid."


def test_store_reports_database_error():
    broken = Mock()
    broken.save_review.side_effect = sqlite3.OperationalError("database is locked")

    result = SQLiteReviewStore(broken).persist_sync(make_record(employee_id=1))

    assert not result.success
    assert "try again" in result.error


def test_init_database_seeds_demo_once(tmp_path):
    path = tmp_path / "demo.db"
    db = init_database(path, seed_demo=True)
    init_database(path, seed_demo=True)

    company = db.get_company(1)
    assert company.company_name == "Acme Plumbing"
    assert db.get_company(2) is None
