"""Date manipulation utilities"""

from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

# Formats seen in the sales and purchase-order sheets
_DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%Y/%m/%d", "%d-%m-%Y")


def generate_date_range(start: date, end: date) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days + 1
    return [start + timedelta(days=i) for i in range(days)]


def trailing_window(end: date, days: int) -> Tuple[date, date]:
    """Return (start, end) for the `days` calendar days ending on `end` (inclusive)"""
    return end - timedelta(days=days - 1), end


def one_year_before(day: date) -> date:
    """Same calendar day one year earlier; Feb 29 becomes Feb 28"""
    try:
        return day.replace(year=day.year - 1)
    except ValueError:
        return day.replace(year=day.year - 1, day=28)


def parse_date(value: object) -> Optional[date]:
    """Parse ISO timestamps and the sheet date formats; None when unparseable"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None
