"""
Pytest configuration and shared fixtures.
"""
import pytest
import os
import sys
from datetime import date
from pathlib import Path

# Add the project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


@pytest.fixture
def temp_db_path(tmp_path) -> Path:
    """Path to a throwaway SQLite database."""
    return tmp_path / "test_payments.db"


# Reference payments: one on the last business day, one on a fixed day of month
SAMPLE_PAYMENTS = [
    {
        "id": 1,
        "name": "Government Loan",
        "amount": 200,
        "type": "expense",
        "category_id": 4,
        "frequency": "monthly",
        "start_date": "2026-01-01",
        "end_date": None,
        "is_active": True,
        "business_days_only": False,
        "last_business_day_of_month": True,
    },
    {
        "id": 2,
        "name": "Regular Payment",
        "amount": 100,
        "type": "expense",
        "category_id": 5,
        "frequency": "monthly",
        "start_date": "2026-01-15",
        "end_date": None,
        "is_active": True,
        "business_days_only": False,
        "last_business_day_of_month": False,
    },
]


@pytest.fixture
def sample_payments():
    """Government Loan (last business day) and Regular Payment (15th) as Payment models."""
    from budget_recurrence.db.models import Payment

    return [Payment.model_validate(p) for p in SAMPLE_PAYMENTS]


@pytest.fixture
def make_payment():
    """Factory for Payment models with sensible defaults."""
    from budget_recurrence.db.models import Payment

    def _make(**overrides):
        fields = {
            "name": "Bill",
            "amount": 50.0,
            "type": "expense",
            "frequency": "monthly",
            "start_date": date(2026, 1, 1),
        }
        fields.update(overrides)
        return Payment(**fields)

    return _make


@pytest.fixture
def last_business_day_monthly():
    """Monthly descriptor on the last business day, anchored at January 2026."""
    from budget_recurrence.schedule.recurrence import RecurrenceDescriptor

    return RecurrenceDescriptor.from_fields(
        "2026-01-01", "monthly", last_business_day_of_month=True
    )
