"""Recurrence rules: frequencies and the immutable descriptor built from a payment."""
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

from budget_recurrence.config import DATE_FORMAT


class ConfigurationError(ValueError):
    """A recurrence rule that cannot be scheduled (unknown frequency, inverted dates)."""


class Frequency(Enum):
    """Supported repetition rules.

    Fixed-interval rules step by ``cycle_days``; calendar rules step by
    ``month_step`` anchor months.
    """

    WEEKLY = ("weekly", 7, None)
    BIWEEKLY = ("biweekly", 14, None)
    MONTHLY = ("monthly", None, 1)
    QUARTERLY = ("quarterly", None, 3)
    YEARLY = ("yearly", None, 12)

    def __init__(self, key: str, cycle_days: Optional[int], month_step: Optional[int]):
        self.key = key
        self.cycle_days = cycle_days
        self.month_step = month_step

    @property
    def is_month_based(self) -> bool:
        return self.month_step is not None

    @classmethod
    def parse(cls, value: Union["Frequency", str]) -> "Frequency":
        """Resolve a stored frequency string (case-insensitive) to a member."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if member.key == key:
                    return member
        valid = [member.key for member in cls]
        raise ConfigurationError(f"Invalid frequency {value!r}. Must be one of: {valid}")


def parse_iso_date(value: Union[date, str]) -> date:
    """Parse a YYYY-MM-DD string; dates (not datetimes) pass through."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value.split("T")[0], DATE_FORMAT).date()


@dataclass(frozen=True)
class RecurrenceDescriptor:
    """Schedule rule for one payment.

    When both flags are set, ``last_business_day_of_month`` wins for
    month-based frequencies.
    """

    start_date: date
    frequency: Frequency
    end_date: Optional[date] = None
    business_days_only: bool = False
    last_business_day_of_month: bool = False

    def __post_init__(self):
        # Accept the stored string form, reject anything outside the enum.
        object.__setattr__(self, "frequency", Frequency.parse(self.frequency))
        if self.end_date is not None and self.end_date < self.start_date:
            raise ConfigurationError(
                f"End date {self.end_date} is before start date {self.start_date}"
            )

    @classmethod
    def from_fields(
        cls,
        start_date: Union[date, str],
        frequency: Union[Frequency, str],
        end_date: Optional[Union[date, str]] = None,
        business_days_only: bool = False,
        last_business_day_of_month: bool = False
    ) -> "RecurrenceDescriptor":
        """Build a descriptor from persisted scalar fields (ISO dates, literal frequency)."""
        return cls(
            start_date=parse_iso_date(start_date),
            frequency=Frequency.parse(frequency),
            end_date=parse_iso_date(end_date) if end_date else None,
            business_days_only=bool(business_days_only),
            last_business_day_of_month=bool(last_business_day_of_month)
        )
