# Overview: Month bucket generation for profit/loss reports.

"""
Report period buckets (authoritative)

A bucket is one calendar month, represented by a date inside that month.
Only the bucket's year and month are used for aggregation; the day is
whatever the stepping produced (today's day, or Dec 31 clamped down).

Buckets are always ordered most recent first.

Since-signup mode:
- Cursor starts at today and moves back one month per bucket.
- A cursor is emitted while its month is not before the signup month, so
  the signup month itself is always the last bucket.
- Signup and today in the same month yields exactly one bucket.

Year mode:
- start = signup day minus one month.
- start in the target year (and target year is this year): end = today.
- start in the target year (any other year): end = Dec 31.
- otherwise start = Jan 1 of the target year and end = today for this
  year, Dec 31 for past years.
- Buckets step back from end while start < end.
- Future years and years before signup have no buckets.
"""

from __future__ import annotations

from datetime import date, datetime

from app.time_utils import shift_months


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def bucket_keys_since_signup(registered_at: date | datetime, today: date) -> list[date]:
    signup_day = _as_date(registered_at)

    keys: list[date] = []
    cursor = today
    while (cursor.year, cursor.month) >= (signup_day.year, signup_day.month):
        keys.append(cursor)
        cursor = shift_months(cursor, -1)
    return keys


def bucket_keys_for_year(registered_at: date | datetime, year: int, today: date) -> list[date]:
    signup_day = _as_date(registered_at)
    if year > today.year or year < signup_day.year:
        return []

    start = shift_months(signup_day, -1)
    if start.year == year and year == today.year:
        end = today
    elif start.year == year:
        end = date(year, 12, 31)
    else:
        end = today if year == today.year else date(year, 12, 31)
        start = date(year, 1, 1)

    keys: list[date] = []
    while start < end:
        keys.append(end)
        end = shift_months(end, -1)
    return keys


def year_options(registered_at: date | datetime, today: date) -> list[str]:
    """Selectable report years, signup year through the current year."""
    return [str(y) for y in range(_as_date(registered_at).year, today.year + 1)]
