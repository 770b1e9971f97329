"""Holiday, leave and date range records."""
import datetime as dt
from enum import Enum as PyEnum

from pydantic import BaseModel, model_validator


class HolidayType(str, PyEnum):
    NATIONAL = "national"
    COLLECTIVE = "collective"


class LeaveType(str, PyEnum):
    FULL = "full"
    HALF = "half"


class Holiday(BaseModel):
    date: dt.date
    end_date: dt.date | None = None
    name: str | None = None
    type: HolidayType = HolidayType.NATIONAL


class LeaveRecord(BaseModel):
    """Personal leave for one member. Ranges are inclusive."""

    id: str | None = None
    member_name: str
    date: dt.date | None = None
    start_date: dt.date | None = None
    end_date: dt.date | None = None
    type: LeaveType = LeaveType.FULL

    @model_validator(mode="after")
    def require_a_date(self) -> "LeaveRecord":
        if self.date is None and self.start_date is None:
            raise ValueError("leave record needs date or start_date")
        return self

    @property
    def first_day(self) -> dt.date:
        return self.start_date or self.date

    @property
    def last_day(self) -> dt.date:
        return self.end_date or self.first_day


class DateRange(BaseModel):
    start_date: dt.date
    end_date: dt.date

    def overlaps(self, start: dt.date, end: dt.date) -> bool:
        return start <= self.end_date and end >= self.start_date
