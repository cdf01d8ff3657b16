"""Date parsing utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_statement_date(date_str: str) -> date:
    """Parse a bank statement date.

    Indian bank exports write dates day first ("04/11/2025", "04-Nov-25"); ISO
    dates ("2025-11-04") are recognised as year first.

    Args:
        date_str: Date string from a statement row

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    if not date_str or not date_str.strip():
        raise ValueError("Empty date string")

    date_str = date_str.strip()
    year_first = len(date_str) >= 4 and date_str[:4].isdigit()
    try:
        return date_parser.parse(date_str, dayfirst=not year_first, yearfirst=year_first).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_date(date_str: str) -> date:
    """Parse a filter date, including the relative forms used on the command line.

    Supports "today", "yesterday", "this month", "last month", "this year",
    "last year" and absolute dates.

    Raises:
        ValueError: If date string cannot be parsed
    """
    value = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "this month": today.replace(day=1),
        "last month": (today - relativedelta(months=1)).replace(day=1),
        "this year": today.replace(month=1, day=1),
        "last year": today.replace(month=1, day=1) - relativedelta(years=1),
    }
    if value in relative_dates:
        return relative_dates[value]

    return parse_statement_date(date_str)


def get_date_range(period: str) -> tuple[date, date]:
    """Get start and end dates for a named period.

    Args:
        period: One of this-month, this-year, last-month, last-year

    Returns:
        Tuple of (start_date, end_date)

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = date.today()
    first_of_month = today.replace(day=1)
    first_of_year = today.replace(month=1, day=1)

    if period == "this-month":
        return (first_of_month, today)
    if period == "this-year":
        return (first_of_year, today)
    if period == "last-month":
        return ((today - relativedelta(months=1)).replace(day=1), first_of_month - timedelta(days=1))
    if period == "last-year":
        return (first_of_year - relativedelta(years=1), first_of_year - timedelta(days=1))

    raise ValueError(
        f"Unknown period '{period}'. Supported: this-month, this-year, last-month, last-year"
    )
