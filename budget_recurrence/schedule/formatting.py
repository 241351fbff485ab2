"""Display helpers for recurring payment schedules."""
from datetime import date
from typing import Optional, Union

from budget_recurrence.schedule.recurrence import Frequency


FREQUENCY_LABELS = {
    Frequency.WEEKLY: "Weekly",
    Frequency.BIWEEKLY: "Every 2 weeks",
    Frequency.MONTHLY: "Monthly",
    Frequency.QUARTERLY: "Quarterly",
    Frequency.YEARLY: "Yearly",
}


def format_frequency(frequency: Union[Frequency, str]) -> str:
    """Human-readable label; unknown strings are returned unchanged."""
    if isinstance(frequency, Frequency):
        return FREQUENCY_LABELS[frequency]
    for member, label in FREQUENCY_LABELS.items():
        if member.key == str(frequency).strip().lower():
            return label
    return frequency


def format_date(d: date, today: Optional[date] = None) -> str:
    """Short display date, e.g. 'Jan 30'; the year is shown outside the current year."""
    today = today or date.today()
    if d.year != today.year:
        return f"{d:%b} {d.day}, {d.year}"
    return f"{d:%b} {d.day}"


def format_days_until(days: int) -> str:
    if days <= 0:
        return "Due today"
    if days == 1:
        return "Tomorrow"
    return f"In {days} days"
