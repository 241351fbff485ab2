"""SQLite schema definitions for the recurring payment store."""

SCHEMA_SQL = """
-- Categories table
CREATE TABLE IF NOT EXISTS categories (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    budget_amount REAL DEFAULT 0,  -- Monthly budget for this category
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

-- Recurring payments (bills, salary, subscriptions)
CREATE TABLE IF NOT EXISTS recurring_payments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    amount REAL NOT NULL,  -- Always positive; type carries the sign
    type TEXT NOT NULL DEFAULT 'expense' CHECK (type IN ('income', 'expense')),
    category_id INTEGER,
    frequency TEXT NOT NULL CHECK (frequency IN ('weekly', 'biweekly', 'monthly', 'quarterly', 'yearly')),
    start_date TEXT NOT NULL,  -- ISO date YYYY-MM-DD
    end_date TEXT,  -- NULL = recurs indefinitely
    business_days_only INTEGER DEFAULT 0,  -- Shift weekend dates to a business day
    last_business_day_of_month INTEGER DEFAULT 0,  -- Ignore start day, use last Mon-Fri of month
    is_active INTEGER DEFAULT 1,
    notes TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (category_id) REFERENCES categories(id) ON DELETE SET NULL
);

-- Indexes for common queries
CREATE INDEX IF NOT EXISTS idx_recurring_payments_active ON recurring_payments(is_active);
CREATE INDEX IF NOT EXISTS idx_recurring_payments_category ON recurring_payments(category_id);
"""

# Columns added after the first release of recurring_payments
PAYMENT_COLUMN_MIGRATIONS = {
    "business_days_only": "ALTER TABLE recurring_payments ADD COLUMN business_days_only INTEGER DEFAULT 0",
    "last_business_day_of_month": "ALTER TABLE recurring_payments ADD COLUMN last_business_day_of_month INTEGER DEFAULT 0",
}

# Default category insert
DEFAULT_CATEGORIES_SQL = """
INSERT OR IGNORE INTO categories (name) VALUES
    ('Housing'),
    ('Utilities'),
    ('Insurance'),
    ('Loans'),
    ('Subscriptions'),
    ('Transportation'),
    ('Healthcare'),
    ('Savings'),
    ('Income'),
    ('Other');
"""
