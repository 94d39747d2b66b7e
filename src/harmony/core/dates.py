"""Pure calendar arithmetic - no I/O dependencies."""

from datetime import date, datetime, timedelta

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta


class InvalidDateError(ValueError):
    """Raised when a stored timestamp cannot be read as a date."""

    pass


def parse_timestamp(value: object) -> datetime:
    """
    Normalize a stored timestamp to a naive local datetime.

    Accepts datetime, date, or an ISO-8601 string. Aware values are
    converted to local time and stripped of tzinfo.
    """
    if isinstance(value, datetime):
        result = value
    elif isinstance(value, date):
        result = datetime.combine(value, datetime.min.time())
    elif isinstance(value, str) and value.strip():
        try:
            result = isoparse(value.strip())
        except (ValueError, OverflowError) as e:
            raise InvalidDateError(f"Unparseable timestamp {value!r}: {e}") from e
    else:
        raise InvalidDateError(f"Unparseable timestamp {value!r}")

    if result.tzinfo is not None:
        result = result.astimezone().replace(tzinfo=None)
    return result


def days_in_month(year: int, month: int) -> int:
    """Number of days in a month (1-12), leap years included."""
    first_of_next = date(year, month, 1) + relativedelta(months=1)
    return (first_of_next - timedelta(days=1)).day


def sunday_weekday(value: date) -> int:
    """Weekday index with Sunday=0 .. Saturday=6."""
    return (value.weekday() + 1) % 7


def first_weekday_of_month(year: int, month: int) -> int:
    """Weekday of the 1st of the month, Sunday=0 .. Saturday=6."""
    return sunday_weekday(date(year, month, 1))


def add_days(value, days: int):
    """Return a new date/datetime offset by N days (N may be negative)."""
    return value + timedelta(days=days)


def start_of_week(value):
    """Monday on or before the given date."""
    day = sunday_weekday(value)
    offset = -6 if day == 0 else 1 - day
    return add_days(value, offset)


def dates_equal(a: object, b: object) -> bool:
    """Same calendar day, ignoring time of day. False if either is unparseable."""
    try:
        first = parse_timestamp(a)
        second = parse_timestamp(b)
    except InvalidDateError:
        return False
    return first.date() == second.date()


def week_days(value: date) -> list[date]:
    """The seven dates of the Monday-start week containing `value`."""
    monday = start_of_week(value)
    return [add_days(monday, i) for i in range(7)]


def month_grid(year: int, month: int) -> list[list[date | None]]:
    """
    Sunday-first calendar rows for a month view.

    Leading and trailing cells outside the month are None.
    """
    cells: list[date | None] = [None] * first_weekday_of_month(year, month)
    cells.extend(date(year, month, day) for day in range(1, days_in_month(year, month) + 1))
    while len(cells) % 7:
        cells.append(None)
    return [cells[i : i + 7] for i in range(0, len(cells), 7)]
