"""Shared time-formatting utilities."""

from datetime import date, datetime, timedelta

from dateutil import parser as dateutil_parser

MONTH_NAMES = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)


def format_clock(moment: datetime | None = None) -> str:
    """Format a datetime as a wall-clock label such as '3:45:07 PM'."""
    moment = moment or datetime.now()
    display_h = moment.hour % 12 or 12
    period = "AM" if moment.hour < 12 else "PM"
    return f"{display_h}:{moment.minute:02d}:{moment.second:02d} {period}"


def clock_label_from(raw: str | None) -> str:
    """Turn a feed/sitemap timestamp into a clock label.

    Unparseable or missing values fall back to the current time.
    """
    if raw:
        try:
            return format_clock(dateutil_parser.parse(raw))
        except (ValueError, OverflowError):
            pass
    return format_clock()


def ranking_date_path(today: date | None = None) -> str:
    """Build the ``YYYY/month/D`` path of the most recent Monday ranking.

    Rankings are published on Mondays. When the Monday falls in the previous
    month the first of the current month is used instead.
    """
    today = today or date.today()
    monday = today - timedelta(days=today.weekday())
    day = monday.day if monday.month == today.month else 1
    return f"{today.year}/{MONTH_NAMES[today.month - 1]}/{day}"
