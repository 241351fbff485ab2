"""Pydantic models for stored recurring payments."""
from datetime import date
from typing import Optional, Literal

from pydantic import BaseModel, ConfigDict, Field

from budget_recurrence.schedule.recurrence import RecurrenceDescriptor


class Payment(BaseModel):
    """A recurring payment as read from the payment store.

    The scheduler only reads these; ``recurrence()`` derives a fresh
    descriptor on every call.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    name: str
    amount: float = Field(ge=0)
    type: Literal["expense", "income"] = "expense"
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    frequency: str
    start_date: date
    end_date: Optional[date] = None
    business_days_only: bool = False
    last_business_day_of_month: bool = False
    is_active: bool = True
    notes: Optional[str] = None

    def recurrence(self) -> RecurrenceDescriptor:
        """Build the schedule rule; raises ConfigurationError for an unknown frequency."""
        return RecurrenceDescriptor.from_fields(
            start_date=self.start_date,
            frequency=self.frequency,
            end_date=self.end_date,
            business_days_only=self.business_days_only,
            last_business_day_of_month=self.last_business_day_of_month
        )
