"""
Calendar-day helpers.

Timestamps are stored in UTC; "today", streak days and the one-record-per-day
rule for productivity data are decided in the configured timezone.
"""

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional, Tuple

from dateutil import tz as dateutil_tz
from dateutil.relativedelta import relativedelta

TIMEFRAMES = ("day", "week", "month")


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """Look up a tz database name; None or empty means UTC."""
    if not name:
        return timezone.utc
    zone = dateutil_tz.gettz(name)
    if zone is None:
        raise ValueError(f"Unknown timezone: {name}")
    return zone


def local_date(moment: datetime, zone: tzinfo) -> date:
    """Calendar date of a timestamp as seen in ``zone``"""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(zone).date()


def start_of_local_day(day: date, zone: tzinfo) -> datetime:
    """Midnight of ``day`` in ``zone``, expressed in UTC"""
    return datetime.combine(day, time.min).replace(tzinfo=zone).astimezone(timezone.utc)


def day_bounds(moment: datetime, zone: tzinfo) -> Tuple[datetime, datetime]:
    """[start, end) of the local calendar day containing ``moment``, in UTC"""
    day = local_date(moment, zone)
    return start_of_local_day(day, zone), start_of_local_day(day + timedelta(days=1), zone)


def timeframe_start(timeframe: str, now: datetime, zone: tzinfo) -> datetime:
    """
    Lower bound for a chart timeframe.

    day   -> start of today
    week  -> seven days ago
    month -> one calendar month ago
    """
    if timeframe == "week":
        return now - timedelta(days=7)
    if timeframe == "month":
        return now - relativedelta(months=1)
    if timeframe == "day":
        return day_bounds(now, zone)[0]
    raise ValueError(f"Unknown timeframe: {timeframe}")
