"""Tests for the SQLite payment store."""
import sqlite3
import pytest
from datetime import date
from pathlib import Path


class TestPaymentStore:
    """Test cases for PaymentStore class."""

    def test_init_creates_tables(self, temp_db_path: Path):
        """Store should create all required tables on initialization."""
        from budget_recurrence.db.payment_store import PaymentStore

        store = PaymentStore(temp_db_path)

        tables = store.get_tables()
        assert "recurring_payments" in tables
        assert "categories" in tables
        store.close()

    def test_init_seeds_default_categories(self, temp_db_path: Path):
        """Store should seed default categories on first init."""
        from budget_recurrence.db.payment_store import PaymentStore

        with PaymentStore(temp_db_path) as store:
            categories = store.get_all_categories()
            assert len(categories) >= 10
            assert store.get_category_by_name("Loans") is not None

    def test_add_and_get_payment(self, temp_db_path: Path):
        """Should round-trip the scheduling fields through SQLite."""
        from budget_recurrence.db.payment_store import PaymentStore

        with PaymentStore(temp_db_path) as store:
            loans = store.get_category_by_name("Loans")
            payment_id = store.add_payment(
                name="Government Loan",
                amount=200,
                frequency="Monthly",
                start_date="2026-01-01",
                category_id=loans["id"],
                last_business_day_of_month=True
            )

            payment = store.get_payment(payment_id)
            assert payment.name == "Government Loan"
            assert payment.frequency == "monthly"
            assert payment.start_date == date(2026, 1, 1)
            assert payment.end_date is None
            assert payment.last_business_day_of_month is True
            assert payment.business_days_only is False
            assert payment.is_active is True
            assert payment.category_name == "Loans"

    def test_add_invalid_frequency(self, temp_db_path: Path):
        """Unknown frequencies should be rejected before anything is written."""
        from budget_recurrence.db.payment_store import PaymentStore
        from budget_recurrence.schedule.recurrence import ConfigurationError

        with PaymentStore(temp_db_path) as store:
            with pytest.raises(ConfigurationError):
                store.add_payment("Gym", 30, "daily", "2026-01-01")
            assert store.get_payments(include_inactive=True) == []

    def test_add_end_before_start(self, temp_db_path: Path):
        from budget_recurrence.db.payment_store import PaymentStore
        from budget_recurrence.schedule.recurrence import ConfigurationError

        with PaymentStore(temp_db_path) as store:
            with pytest.raises(ConfigurationError):
                store.add_payment("Gym", 30, "monthly", "2026-05-01", end_date="2026-01-01")

    def test_get_payments_excludes_inactive(self, temp_db_path: Path):
        from budget_recurrence.db.payment_store import PaymentStore

        with PaymentStore(temp_db_path) as store:
            first = store.add_payment("Rent", 1500, "monthly", "2026-01-01")
            second = store.add_payment("Gym", 30, "monthly", "2026-01-05")
            assert store.set_active(second, False)

            assert [p.id for p in store.get_payments()] == [first]
            assert [p.id for p in store.get_payments(include_inactive=True)] == [first, second]

    def test_update_payment(self, temp_db_path: Path):
        from budget_recurrence.db.payment_store import PaymentStore

        with PaymentStore(temp_db_path) as store:
            payment_id = store.add_payment("Insurance", 300, "monthly", "2026-01-10")
            assert store.update_payment(payment_id, frequency="Quarterly", amount=900)

            payment = store.get_payment(payment_id)
            assert payment.frequency == "quarterly"
            assert payment.amount == 900

    def test_update_invalid_frequency(self, temp_db_path: Path):
        from budget_recurrence.db.payment_store import PaymentStore
        from budget_recurrence.schedule.recurrence import ConfigurationError

        with PaymentStore(temp_db_path) as store:
            payment_id = store.add_payment("Insurance", 300, "monthly", "2026-01-10")
            with pytest.raises(ConfigurationError):
                store.update_payment(payment_id, frequency="hourly")
            assert store.get_payment(payment_id).frequency == "monthly"

    def test_update_ignores_unknown_fields(self, temp_db_path: Path):
        from budget_recurrence.db.payment_store import PaymentStore

        with PaymentStore(temp_db_path) as store:
            payment_id = store.add_payment("Insurance", 300, "monthly", "2026-01-10")
            assert store.update_payment(payment_id, colour="red") is False

    def test_delete_payment(self, temp_db_path: Path):
        from budget_recurrence.db.payment_store import PaymentStore

        with PaymentStore(temp_db_path) as store:
            payment_id = store.add_payment("Rent", 1500, "monthly", "2026-01-01")
            assert store.delete_payment(payment_id)
            assert store.get_payment(payment_id) is None
            assert not store.delete_payment(payment_id)

    def test_recurrence_derived_from_row(self, temp_db_path: Path):
        from budget_recurrence.db.payment_store import PaymentStore
        from budget_recurrence.schedule.recurrence import Frequency

        with PaymentStore(temp_db_path) as store:
            payment_id = store.add_payment(
                "Water", 45, "quarterly", "2026-01-31", end_date="2026-12-31", business_days_only=True
            )
            recurrence = store.get_payment(payment_id).recurrence()
            assert recurrence.frequency is Frequency.QUARTERLY
            assert recurrence.end_date == date(2026, 12, 31)
            assert recurrence.business_days_only is True

    def test_malformed_stored_date(self, temp_db_path: Path):
        """Bad rows should fail validation at the store boundary."""
        from pydantic import ValidationError
        from budget_recurrence.db.payment_store import PaymentStore

        with PaymentStore(temp_db_path) as store:
            store.conn.execute(
                "INSERT INTO recurring_payments (name, amount, frequency, start_date) VALUES (?, ?, ?, ?)",
                ("Broken", 10, "monthly", "01/15/2026")
            )
            store.conn.commit()
            with pytest.raises(ValidationError):
                store.get_payments()

    def test_migrates_old_schema(self, temp_db_path: Path):
        """Databases created before the business-day columns should be upgraded."""
        from budget_recurrence.db.payment_store import PaymentStore

        conn = sqlite3.connect(str(temp_db_path))
        conn.execute("""
            CREATE TABLE recurring_payments (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                amount REAL NOT NULL,
                type TEXT NOT NULL DEFAULT 'expense',
                category_id INTEGER,
                frequency TEXT NOT NULL,
                start_date TEXT NOT NULL,
                end_date TEXT,
                is_active INTEGER DEFAULT 1,
                notes TEXT,
                created_at TEXT DEFAULT CURRENT_TIMESTAMP
            )
        """)
        conn.execute(
            "INSERT INTO recurring_payments (name, amount, frequency, start_date) VALUES ('Rent', 1500, 'monthly', '2026-01-01')"
        )
        conn.commit()
        conn.close()

        with PaymentStore(temp_db_path) as store:
            payment = store.get_payments()[0]
            assert payment.business_days_only is False
            assert payment.last_business_day_of_month is False


class TestPaymentModel:
    """Test cases for the Payment model."""

    def test_negative_amount_rejected(self, make_payment):
        from pydantic import ValidationError

        with pytest.raises(ValidationError):
            make_payment(amount=-5)

    def test_recurrence_is_rebuilt_each_call(self, make_payment):
        payment = make_payment()
        assert payment.recurrence() == payment.recurrence()
        assert payment.recurrence() is not payment.recurrence()

    def test_unknown_type_rejected(self, make_payment):
        from pydantic import ValidationError

        with pytest.raises(ValidationError):
            make_payment(type="transfer")
