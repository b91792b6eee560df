"""SQLAlchemy ORM models - import all to register with Base.metadata."""

from coinforge.db.models.account import AccountRow, GeneratedFileRow, ProcessedTransactionRow

__all__ = [
    "AccountRow",
    "ProcessedTransactionRow",
    "GeneratedFileRow",
]
