# Pulse Shared Helpers
# Utility functions used across all Pulse services

import math
from datetime import date, datetime


def parse_date(value):
    """Parse a date from the formats Airtable hands us.

    Accepts 'DD/MM/YYYY', ISO 8601 dates or datetimes (trailing 'Z' allowed)
    and 'DD-MM-YYYY'. Date and datetime objects pass through.

    Returns:
        A date object, or None if the value can't be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not isinstance(value, str):
        return None

    value = value.strip()

    # DD/MM/YYYY
    if '/' in value:
        parts = value.split('/')
        if len(parts) == 3:
            try:
                day, month, year = (int(p) for p in parts)
                return date(year, month, day)
            except ValueError:
                pass

    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00')).date()
    except ValueError:
        pass

    try:
        return datetime.strptime(value, '%d-%m-%Y').date()
    except ValueError:
        return None


def first_value(value):
    """Unwrap Airtable lookup/link fields, which come back as lists"""
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def to_number(value, default=0):
    """Coerce an Airtable cell to a float, falling back to default.

    Missing, empty and non-numeric values all become the default.
    """
    value = first_value(value)
    if value is None or value == '' or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number):
        return default
    return number


def to_int(value, default=0):
    """Coerce an Airtable cell to an int (truncating, like parseInt)"""
    number = to_number(value, None)
    if number is None or math.isinf(number):
        return default
    return int(number)


def round_half_up(value, digits=0):
    """Round the way dashboards expect (0.5 always goes up)"""
    factor = 10 ** digits
    rounded = math.floor(value * factor + 0.5) / factor
    return int(rounded) if digits == 0 else rounded


def mean(values):
    """Arithmetic mean, 0 for an empty sequence"""
    values = list(values)
    if not values:
        return 0
    return sum(values) / len(values)


def today_iso():
    """Today's date as YYYY-MM-DD"""
    return date.today().isoformat()


def escape_formula_value(value):
    """Escape a value for use inside a double-quoted Airtable formula string"""
    return str(value).replace('\\', '\\\\').replace('"', '\\"')
