"""
Pure helpers behind the admin dashboard: month buckets, period-over-period
change, category shares and the date windows the queries are scoped to.
"""

import calendar
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from storefront.shared.utils import round_half_up


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def bucket_by_month(
    length: int,
    reference: datetime,
    records: Iterable[Any],
    prop: Optional[str] = None,
    timestamp_field: str = "created_at",
) -> List[float]:
    """Count (or sum prop over) records per month, oldest month first.

    Only month-of-year is compared, so a record from the reference month of
    any year lands in the last slot. Callers must restrict records to the
    absolute window before calling.
    """
    if isinstance(length, bool) or not isinstance(length, int) or length <= 0:
        raise ValueError(f"Bucket length must be a positive integer, got {length!r}")

    buckets: List[float] = [0] * length
    for record in records:
        created_at = _field(record, timestamp_field)
        month_diff = (reference.month - created_at.month + 12) % 12
        if month_diff >= length:
            continue
        if prop is None:
            amount = 1
        else:
            amount = _field(record, prop) or 0
        buckets[length - month_diff - 1] += amount
    return buckets


def percent_change(current: float, previous: float) -> float:
    """Relative change of current over previous, in percent, one decimal.

    A zero base reports current * 100 instead of dividing by zero.
    """
    if previous == 0:
        return current * 100 if current != 0 else 0
    return round_half_up(((current - previous) / previous) * 100, 1)


def category_breakdown(
    category_counts: Iterable[Tuple[str, int]], total: int
) -> List[Dict[str, int]]:
    """Share of the catalog per category, as whole percentages"""
    breakdown = []
    for category, count in category_counts:
        share = int(round_half_up(count / total * 100)) if total else 0
        breakdown.append({category: share})
    return breakdown


def months_ago(moment: datetime, months: int) -> datetime:
    """Same wall-clock time `months` calendar months earlier, day clamped"""
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def month_windows(today: datetime) -> Dict[str, Tuple[datetime, datetime]]:
    """This month [1st, today] and last month [1st, start of this month)"""
    this_month_start = today.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    last_month_start = months_ago(this_month_start, 1)
    return {
        "this_month": (this_month_start, today),
        "last_month": (last_month_start, this_month_start),
    }


def age_on(dob: datetime, today: datetime) -> int:
    age = today.year - dob.year
    if (today.month, today.day) < (dob.month, dob.day):
        age -= 1
    return age
