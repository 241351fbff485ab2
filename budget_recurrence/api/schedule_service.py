"""Schedule service - recurring payment queries and orchestration.

The module-level query functions are pure: they take payments and an
explicit reference date and never read the clock. ``ScheduleService`` is
the outer boundary that loads payments from the store and fills in today's
date when the caller does not supply one.
"""
from collections import defaultdict
from datetime import date, timedelta
from functools import reduce
from pathlib import Path
from typing import List, Dict, Any, Optional, Iterable, Tuple
import logging

from budget_recurrence.config import (
    DB_PATH,
    DEFAULT_UPCOMING_DAYS,
    DUE_SOON_DAYS,
    MONTH_FORMAT,
    ensure_data_dir
)
from budget_recurrence.db.models import Payment
from budget_recurrence.db.payment_store import PaymentStore
from budget_recurrence.schedule.calendar import days_in_month, month_bounds
from budget_recurrence.schedule.occurrences import (
    enumerate_occurrences,
    find_first_occurrence_on_or_after,
)
from budget_recurrence.schedule.recurrence import RecurrenceDescriptor


logger = logging.getLogger(__name__)


def get_next_payment_date(
    descriptor: RecurrenceDescriptor,
    from_date: date
) -> Optional[date]:
    """Next occurrence on or after from_date, or None when the schedule is exhausted."""
    return find_first_occurrence_on_or_after(descriptor, from_date)


def get_payment_dates_in_range(
    descriptor: RecurrenceDescriptor,
    range_start: date,
    range_end: date
) -> List[date]:
    """All occurrences within [range_start, range_end], ascending; empty when none."""
    return enumerate_occurrences(descriptor, range_start, range_end)


def _occurrences(
    payments: Iterable[Payment],
    range_start: date,
    range_end: date
) -> List[Tuple[Payment, date]]:
    """(payment, date) pairs for active payments, in payment order then date order."""
    return [
        (payment, occurrence)
        for payment in payments
        if payment.is_active
        for occurrence in enumerate_occurrences(payment.recurrence(), range_start, range_end)
    ]


def _due_status(days_until: int) -> str:
    if days_until == 0:
        return "due_today"
    if days_until <= DUE_SOON_DAYS:
        return "due_soon"
    return "upcoming"


def get_upcoming_payments(
    payments: Iterable[Payment],
    days_ahead: int,
    as_of: date
) -> List[Dict[str, Any]]:
    """One row per occurrence due within [as_of, as_of + days_ahead].

    A payment due twice inside the window yields two rows. Inactive payments
    are skipped before any schedule is generated. Rows are sorted by date,
    ties keep input order.

    Args:
        payments: Payments to evaluate
        days_ahead: Window length in days (0 = today only)
        as_of: Reference "today"

    Returns:
        List of payment fields plus next_date, days_until and status
    """
    if days_ahead < 0:
        return []

    window_end = as_of + timedelta(days=days_ahead)
    rows = [
        {
            **payment.model_dump(),
            "next_date": occurrence,
            "days_until": (occurrence - as_of).days,
            "status": _due_status((occurrence - as_of).days)
        }
        for payment, occurrence in _occurrences(payments, as_of, window_end)
    ]
    return sorted(rows, key=lambda row: row["next_date"])


def _add_to_totals(totals: Dict[str, float], item: Tuple[Payment, date]) -> Dict[str, float]:
    payment, _ = item
    key = "income" if payment.type == "income" else "expenses"
    return {**totals, key: totals[key] + payment.amount}


def get_monthly_projection(
    payments: Iterable[Payment],
    year_month: str
) -> Dict[str, Any]:
    """Project income and expenses for a YYYY-MM month.

    Each occurrence in the month contributes one entry to ``payments`` and
    its amount to ``income`` or ``expenses``. Both totals are non-negative.
    """
    first_day, last_day = month_bounds(year_month)
    occurrences = _occurrences(payments, first_day, last_day)

    totals = reduce(_add_to_totals, occurrences, {"income": 0.0, "expenses": 0.0})

    return {
        "income": totals["income"],
        "expenses": totals["expenses"],
        "net": totals["income"] - totals["expenses"],
        "payments": [
            {
                "payment_id": payment.id,
                "name": payment.name,
                "amount": payment.amount,
                "date": occurrence,
                "type": payment.type,
                "category_id": payment.category_id
            }
            for payment, occurrence in occurrences
        ]
    }


def get_payments_by_day(
    payments: Iterable[Payment],
    year: int,
    month: int
) -> Dict[int, List[Payment]]:
    """Map day-of-month to the payments due that day, for a calendar view."""
    first_day = date(year, month, 1)
    last_day = date(year, month, days_in_month(year, month))

    by_day = defaultdict(list)
    for payment, occurrence in _occurrences(payments, first_day, last_day):
        by_day[occurrence.day].append(payment)
    return dict(by_day)


def get_category_forecast(
    payments: Iterable[Payment],
    range_start: date,
    range_end: date
) -> Dict[int, Dict[str, Any]]:
    """Upcoming recurring expenses per category for budget forecasting.

    Returns:
        Dict of category_id -> {amount, payments: [{name, amount, occurrences, total}]}
    """
    forecast = {}
    for payment in payments:
        if not payment.is_active or payment.type != "expense" or payment.category_id is None:
            continue

        dates = enumerate_occurrences(payment.recurrence(), range_start, range_end)
        total = len(dates) * payment.amount
        if total <= 0:
            continue

        entry = forecast.setdefault(payment.category_id, {"amount": 0.0, "payments": []})
        entry["amount"] += total
        entry["payments"].append({
            "name": payment.name,
            "amount": payment.amount,
            "occurrences": len(dates),
            "total": total
        })

    return forecast


def get_monthly_total(
    payments: Iterable[Payment],
    year_month: str,
    category_id: Optional[int] = None
) -> float:
    """Sum of amount x occurrences in a month, optionally for one category."""
    first_day, last_day = month_bounds(year_month)
    selected = [p for p in payments if category_id is None or p.category_id == category_id]
    return sum(payment.amount for payment, _ in _occurrences(selected, first_day, last_day))


class ScheduleService:
    """Recurring payment schedules backed by the payment store.

    This is where a missing reference date defaults to today.
    """

    def __init__(self, db_path: Optional[Path] = None):
        """Initialize the schedule service.

        Args:
            db_path: Path to SQLite database (default: ~/.budget_recurrence/payments.db)
        """
        if db_path is None:
            ensure_data_dir()
        self.db_path = db_path or DB_PATH
        self.store = PaymentStore(self.db_path)

    def close(self):
        """Close the payment store."""
        self.store.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def upcoming(
        self,
        days_ahead: int = DEFAULT_UPCOMING_DAYS,
        as_of: Optional[date] = None
    ) -> List[Dict[str, Any]]:
        """Occurrences due in the next days_ahead days."""
        as_of = as_of or date.today()
        logger.info(f"Computing upcoming payments for {days_ahead} days from {as_of}")
        return get_upcoming_payments(self.store.get_payments(), days_ahead, as_of)

    def projection(self, year_month: Optional[str] = None) -> Dict[str, Any]:
        """Monthly projection (default: current month)."""
        year_month = year_month or date.today().strftime(MONTH_FORMAT)
        logger.info(f"Projecting recurring payments for {year_month}")
        return get_monthly_projection(self.store.get_payments(), year_month)

    def next_date(self, payment_id: int, from_date: Optional[date] = None) -> Optional[date]:
        """Next due date of one payment, None if unknown or exhausted."""
        payment = self.store.get_payment(payment_id)
        if payment is None:
            return None
        return get_next_payment_date(payment.recurrence(), from_date or date.today())

    def dates_in_range(self, payment_id: int, range_start: date, range_end: date) -> List[date]:
        """Due dates of one payment inside a range."""
        payment = self.store.get_payment(payment_id)
        if payment is None:
            return []
        return get_payment_dates_in_range(payment.recurrence(), range_start, range_end)

    def calendar(self, year: int, month: int) -> Dict[int, List[Payment]]:
        """Day-of-month indicators for a visible calendar month."""
        return get_payments_by_day(self.store.get_payments(), year, month)

    def category_forecast(self, range_start: date, range_end: date) -> Dict[int, Dict[str, Any]]:
        """Recurring expense forecast per category."""
        return get_category_forecast(self.store.get_payments(), range_start, range_end)
