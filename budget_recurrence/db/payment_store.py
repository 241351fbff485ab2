"""SQLite store for recurring payments and categories."""
import sqlite3
from pathlib import Path
from typing import List, Dict, Any, Optional
import logging

from .models import Payment
from .schema import SCHEMA_SQL, DEFAULT_CATEGORIES_SQL, PAYMENT_COLUMN_MIGRATIONS
from budget_recurrence.schedule.recurrence import RecurrenceDescriptor


logger = logging.getLogger(__name__)

PAYMENT_SELECT = """
    SELECT p.*, c.name as category_name
    FROM recurring_payments p
    LEFT JOIN categories c ON p.category_id = c.id
"""


class PaymentStore:
    """SQLite storage for recurring payments.

    Rows are validated into ``Payment`` models on read, so malformed stored
    dates surface as pydantic validation errors here rather than inside the
    scheduler.
    """

    def __init__(self, db_path: Path):
        """Initialize the store with database path."""
        self.db_path = db_path
        self.conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        # Enable WAL mode for better concurrency
        self.conn.execute("PRAGMA journal_mode=WAL")
        self._init_schema()

    def _init_schema(self) -> None:
        """Initialize database schema and seed defaults."""
        cursor = self.conn.cursor()
        self._run_migrations()
        cursor.executescript(SCHEMA_SQL)
        cursor.executescript(DEFAULT_CATEGORIES_SQL)
        self.conn.commit()

    def _run_migrations(self) -> None:
        """Add scheduling columns missing from databases created by older releases."""
        cursor = self.conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='recurring_payments'"
        )
        if cursor.fetchone() is None:
            return

        cursor = self.conn.execute("PRAGMA table_info(recurring_payments)")
        columns = [row[1] for row in cursor.fetchall()]
        for column, statement in PAYMENT_COLUMN_MIGRATIONS.items():
            if column not in columns:
                logger.info(f"Migrating recurring_payments: adding {column}")
                self.conn.execute(statement)
        self.conn.commit()

    def close(self) -> None:
        """Close the database connection."""
        if self.conn:
            self.conn.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

    def get_tables(self) -> List[str]:
        """Get list of tables in the database."""
        cursor = self.conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table'"
        )
        return [row[0] for row in cursor.fetchall()]

    # === Category Methods ===

    def get_all_categories(self) -> List[Dict[str, Any]]:
        """Get all categories."""
        cursor = self.conn.execute("SELECT * FROM categories ORDER BY name")
        return [dict(row) for row in cursor.fetchall()]

    def get_category_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        """Get a category by name."""
        cursor = self.conn.execute(
            "SELECT * FROM categories WHERE name = ?", (name,)
        )
        row = cursor.fetchone()
        return dict(row) if row else None

    def add_category(self, name: str, budget_amount: float = 0) -> int:
        """Add a new category. Returns the new category ID."""
        cursor = self.conn.execute(
            "INSERT INTO categories (name, budget_amount) VALUES (?, ?)",
            (name, budget_amount)
        )
        self.conn.commit()
        return cursor.lastrowid

    # === Recurring Payment Methods ===

    def add_payment(
        self,
        name: str,
        amount: float,
        frequency: str,
        start_date: str,
        type_: str = "expense",
        end_date: Optional[str] = None,
        category_id: Optional[int] = None,
        business_days_only: bool = False,
        last_business_day_of_month: bool = False,
        notes: Optional[str] = None
    ) -> int:
        """Create a recurring payment. Returns the new ID.

        The recurrence fields are validated before insert, so an unknown
        frequency raises ConfigurationError and nothing is written.
        """
        recurrence = RecurrenceDescriptor.from_fields(
            start_date, frequency, end_date, business_days_only, last_business_day_of_month
        )
        cursor = self.conn.execute("""
            INSERT INTO recurring_payments
            (name, amount, type, category_id, frequency, start_date, end_date,
             business_days_only, last_business_day_of_month, notes)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            name, amount, type_, category_id, recurrence.frequency.key,
            recurrence.start_date.isoformat(),
            recurrence.end_date.isoformat() if recurrence.end_date else None,
            int(business_days_only), int(last_business_day_of_month), notes
        ))
        self.conn.commit()
        logger.debug(f"Added recurring payment {cursor.lastrowid}: {name}")
        return cursor.lastrowid

    def get_payment(self, payment_id: int) -> Optional[Payment]:
        """Get a single recurring payment by ID."""
        cursor = self.conn.execute(PAYMENT_SELECT + " WHERE p.id = ?", (payment_id,))
        row = cursor.fetchone()
        return Payment.model_validate(dict(row)) if row else None

    def get_payments(self, include_inactive: bool = False) -> List[Payment]:
        """Get recurring payments in creation order."""
        query = PAYMENT_SELECT
        if not include_inactive:
            query += " WHERE p.is_active = 1"
        query += " ORDER BY p.id"
        cursor = self.conn.execute(query)
        return [Payment.model_validate(dict(row)) for row in cursor.fetchall()]

    def update_payment(self, payment_id: int, **kwargs) -> bool:
        """Update a recurring payment. Returns True if updated."""
        allowed_fields = {'name', 'amount', 'type', 'category_id', 'frequency', 'start_date',
                          'end_date', 'business_days_only', 'last_business_day_of_month',
                          'is_active', 'notes'}
        updates = {k: v for k, v in kwargs.items() if k in allowed_fields}
        if not updates:
            return False

        schedule_fields = {'frequency', 'start_date', 'end_date',
                           'business_days_only', 'last_business_day_of_month'}
        if schedule_fields & updates.keys():
            current = self.get_payment(payment_id)
            if current is None:
                return False
            merged = {**current.model_dump(include=schedule_fields), **{
                k: v for k, v in updates.items() if k in schedule_fields
            }}
            recurrence = RecurrenceDescriptor.from_fields(**merged)
            if 'frequency' in updates:
                updates['frequency'] = recurrence.frequency.key

        set_clause = ", ".join(f"{k} = ?" for k in updates.keys())
        cursor = self.conn.execute(
            f"UPDATE recurring_payments SET {set_clause} WHERE id = ?",
            list(updates.values()) + [payment_id]
        )
        self.conn.commit()
        return cursor.rowcount > 0

    def set_active(self, payment_id: int, is_active: bool) -> bool:
        """Pause or resume a recurring payment."""
        return self.update_payment(payment_id, is_active=1 if is_active else 0)

    def delete_payment(self, payment_id: int) -> bool:
        """Delete a recurring payment. Returns True if deleted."""
        cursor = self.conn.execute(
            "DELETE FROM recurring_payments WHERE id = ?", (payment_id,)
        )
        self.conn.commit()
        return cursor.rowcount > 0
