from .database import Company, Database, Employee, Review, init_database
from .review_store import SQLiteReviewStore

__all__ = ["Company", "Database", "Employee", "Review", "SQLiteReviewStore", "init_database"]
