#file: backend/utils.py

import calendar
import logging
from datetime import datetime, timedelta
import pytz
from typing import Optional, Tuple

PERIODS = ("daily", "weekly", "monthly")


def get_current_time() -> str:
    """Get current UTC time as a formatted string."""
    return datetime.now(pytz.utc).isoformat()


def months_back(moment: datetime, months: int = 1) -> datetime:
    """Same day `months` calendar months earlier, clamped to the month's last day."""
    month_index = moment.month - 1 - months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def period_range(period: str, now: Optional[datetime] = None) -> Tuple[str, str]:
    """Map a history period to (start_date, end_date) as YYYY-MM-DD strings."""
    now = now or datetime.now(pytz.utc)
    if period == "weekly":
        start = now - timedelta(days=7)
    elif period == "monthly":
        start = months_back(now)
    else:
        if period != "daily":
            logging.warning(f"Unknown period '{period}', defaulting to daily")
        start = now - timedelta(hours=24)
    return start.strftime("%Y-%m-%d"), now.strftime("%Y-%m-%d")


def format_short_date(moment: datetime) -> str:
    """e.g. 'Jun 8'"""
    return f"{moment.strftime('%b')} {moment.day}"


def format_time(moment: datetime) -> str:
    """e.g. '6:04 AM'"""
    return moment.strftime("%I:%M %p").lstrip("0")


def format_date_time(moment: datetime) -> str:
    """e.g. 'June 8, 2024, 3:05 PM'"""
    return f"{moment.strftime('%B')} {moment.day}, {moment.year}, {format_time(moment)}"


def format_point_label(moment: datetime) -> str:
    """Chart label for an hourly point, e.g. 'Jun 08, 03:00 PM'."""
    return moment.strftime("%b %d, %I:%M %p")


def day_name(day: datetime, today: Optional[datetime] = None) -> str:
    today = (today or datetime.now()).date()
    if day.date() == today:
        return "Today"
    if day.date() == today + timedelta(days=1):
        return "Tomorrow"
    return day.strftime("%A")
