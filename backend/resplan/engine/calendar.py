"""Business-day calendar arithmetic. Weekends are Saturday and Sunday.

All functions are pure: the same dates, exclusions and factors always give
the same answer. Unparseable dates raise; they are never coerced.
"""
import logging
import math
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_CEILING, ROUND_FLOOR
from typing import Iterable, Mapping

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

from resplan.config import get_settings
from resplan.models.calendar import Holiday, HolidayType, LeaveRecord, LeaveType
from resplan.models.complexity import Category, ComplexityLevel, get_complexity_config, is_project_category

logger = logging.getLogger(__name__)

DateLike = date | datetime | str


def to_date(value: DateLike) -> date:
    """Coerce a date, datetime or ISO string to a calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return isoparse(value.strip()).date()
    raise TypeError(f"Unsupported date value: {value!r}")


def _as_decimal(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def expand_dates(start: DateLike, end: DateLike | None = None) -> list[date]:
    """Every calendar day in the inclusive range [start, end]."""
    first = to_date(start)
    last = to_date(end) if end is not None else first
    days = []
    current = first
    while current <= last:
        days.append(current)
        current += timedelta(days=1)
    return days


def add_business_days(start: DateLike, n: int, excluded_dates: Iterable[DateLike] = ()) -> date:
    """WORKDAY: advance n working days from start, skipping weekends and exclusions.

    The start day itself is never counted; n <= 0 returns start unchanged.
    """
    current = to_date(start)
    excluded = {to_date(d) for d in excluded_dates}
    added = 0
    while added < n:
        current += timedelta(days=1)
        if not is_weekend(current) and current not in excluded:
            added += 1
    return current


def count_business_days(start: DateLike, end: DateLike, holidays: Iterable[DateLike] = ()) -> int:
    """NETWORKDAYS: working days in the inclusive range [start, end]."""
    excluded = {to_date(d) for d in holidays}
    return sum(
        1
        for day in expand_dates(start, end)
        if not is_weekend(day) and day not in excluded
    )


def effective_workdays(
    start: DateLike,
    end: DateLike,
    holidays: Iterable[DateLike] = (),
    capacity_factor: Decimal | float | None = None,
) -> int:
    """Productive days in the range: floor(business days x capacity factor)."""
    factor = _as_decimal(capacity_factor if capacity_factor is not None else get_settings().capacity_factor)
    days = Decimal(count_business_days(start, end, holidays))
    return int((days * factor).to_integral_value(rounding=ROUND_FLOOR))


def realistic_duration(effort_days, capacity_factor: Decimal | float | None = None) -> int:
    """Calendar working days needed for effort_days of ideal work: ceil(days / factor)."""
    factor = _as_decimal(capacity_factor if capacity_factor is not None else get_settings().capacity_factor)
    if factor <= 0:
        raise ValueError("capacity_factor must be greater than 0")
    return int((_as_decimal(effort_days) / factor).to_integral_value(rounding=ROUND_CEILING))


def months_between(start: DateLike, end: DateLike) -> int:
    """Whole calendar months from start to end (negative when end precedes start)."""
    delta = relativedelta(to_date(end), to_date(start))
    return delta.years * 12 + delta.months


def _leaves_for(resource_name: str, leaves: Iterable[LeaveRecord]) -> list[LeaveRecord]:
    name = (resource_name or "").lower()
    return [l for l in leaves if (l.member_name or "").lower() == name]


def build_exclusions(
    resource_name: str,
    holidays: Iterable[Holiday],
    leaves: Iterable[LeaveRecord],
    include_collective_holidays: bool = True,
) -> set[date]:
    """National (and optionally collective) holidays plus the member's full-day leave."""
    excluded: set[date] = set()
    for holiday in holidays:
        if holiday.type == HolidayType.COLLECTIVE and not include_collective_holidays:
            continue
        excluded.update(expand_dates(holiday.date, holiday.end_date))
    for leave in _leaves_for(resource_name, leaves):
        if leave.type == LeaveType.FULL:
            excluded.update(expand_dates(leave.first_day, leave.last_day))
    return excluded


def half_day_leave_count(
    resource_name: str,
    leaves: Iterable[LeaveRecord],
    start: DateLike,
    end: DateLike,
) -> int:
    """Half-day leave days for the member falling inside [start, end]."""
    first, last = to_date(start), to_date(end)
    count = 0
    for leave in _leaves_for(resource_name, leaves):
        if leave.type != LeaveType.HALF:
            continue
        count += sum(1 for day in expand_dates(leave.first_day, leave.last_day) if first <= day <= last)
    return count


def planned_effort_days(
    complexity: str | None,
    complexity_settings: Mapping[str, ComplexityLevel],
    category: str | Category = Category.PROJECT,
) -> Decimal:
    """Ideal effort days: the complexity's days for Project work, one day otherwise."""
    if not is_project_category(category):
        return Decimal(1)
    config = get_complexity_config(complexity, complexity_settings)
    if config is None:
        logger.warning("No complexity config for %r, planning zero days", complexity)
        return Decimal(0)
    return config.days


def plan_end_date(
    start: DateLike,
    complexity: str,
    resource_name: str,
    holidays: Iterable[Holiday],
    leaves: Iterable[LeaveRecord],
    complexity_settings: Mapping[str, ComplexityLevel],
    category: str | Category = Category.PROJECT,
    capacity_factor: Decimal | float | None = None,
    include_collective_holidays: bool = True,
    half_day_weight: Decimal | float | None = None,
) -> date:
    """Planned end date for an allocation starting on start.

    Project work takes the complexity's nominal days; anything else takes one
    day. The effort is stretched by the capacity factor, laid over working days
    that skip holidays and the member's full-day leave, then padded for any
    half-day leave that lands inside the window.
    """
    begin = to_date(start)
    holidays = list(holidays)
    leaves = list(leaves)

    effort_days = planned_effort_days(complexity, complexity_settings, category)
    calendar_days = realistic_duration(effort_days, capacity_factor)
    excluded = build_exclusions(resource_name, holidays, leaves, include_collective_holidays)
    end = add_business_days(begin, calendar_days, excluded)

    half_days = half_day_leave_count(resource_name, leaves, begin, end)
    if half_days:
        weight = _as_decimal(half_day_weight if half_day_weight is not None else get_settings().half_day_weight)
        padding = math.ceil(Decimal(half_days) * weight)
        logger.debug("Padding end date by %d day(s) for %d half-day leave(s)", padding, half_days)
        end = add_business_days(end, padding, excluded)
    return end
