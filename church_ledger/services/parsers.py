"""Amount and date parsing for web and relayed form submissions.

Amounts arrive as numbers, numeric strings ("1,250.00", "₱500"), or blanks.
Category amounts are parsed permissively: anything that is not a valid
non-negative number counts as nothing contributed.

Example:
    >>> normalize_amount("1,250.50")
    Decimal('1250.50')

    >>> normalize_amount("abc")
    Decimal('0')

    >>> parse_date("01/08/2023")
    datetime.date(2023, 1, 8)
"""

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

CENT = Decimal("0.01")
ZERO = Decimal("0")

CURRENCY_MARKERS = ("PHP", "₱", "$")


def _clean_numeric_string(value: str) -> str:
    value = value.strip()
    for marker in CURRENCY_MARKERS:
        value = value.replace(marker, "")
    return value.replace(",", "").replace(" ", "").replace("\xa0", "")


def normalize_amount(value: Any) -> Decimal:
    """
    Coerce any submitted amount to a non-negative Decimal.

    Args:
        value: int, float, Decimal, numeric string, or None/empty

    Returns:
        Parsed amount, or Decimal("0") when the value is absent, unparseable,
        NaN/infinite, or negative. Never raises.

    Examples:
        >>> normalize_amount("12.50")
        Decimal('12.50')
        >>> normalize_amount(-5)
        Decimal('0')
        >>> normalize_amount(None)
        Decimal('0')
    """
    if value is None or isinstance(value, bool):
        return ZERO

    try:
        if isinstance(value, Decimal):
            amount = value
        elif isinstance(value, (int, float)):
            amount = Decimal(str(value))
        elif isinstance(value, str):
            cleaned = _clean_numeric_string(value)
            if not cleaned:
                return ZERO
            amount = Decimal(cleaned)
        else:
            return ZERO
    except (ValueError, InvalidOperation):
        return ZERO

    if not amount.is_finite() or amount < 0:
        return ZERO
    return amount


def round_currency(amount: Decimal) -> Decimal:
    """Round half-up to cents."""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def parse_optional_decimal(value: Any) -> Optional[Decimal]:
    """
    Parse an explicit decimal field such as a budget percentage.

    Unlike normalize_amount, garbage is an error here: the caller asked for a
    specific number.

    Args:
        value: Number, numeric string, or None/empty

    Returns:
        Decimal or None if input is empty/None

    Raises:
        ValueError: If value cannot be parsed as a finite decimal
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = _clean_numeric_string(value)
        if not value:
            return None

    try:
        parsed = Decimal(str(value))
    except (ValueError, InvalidOperation) as e:
        raise ValueError(f"Cannot parse decimal '{value}': {e}") from e
    if not parsed.is_finite():
        raise ValueError(f"Cannot parse decimal '{value}': not a finite number")
    return parsed


DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%Y/%m/%d")


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a submission date.

    Accepts ISO "YYYY-MM-DD" (web UI), "MM/DD/YYYY" (Google Forms), and
    date/datetime objects. A trailing time portion on ISO strings is ignored.

    Args:
        value: Date string or object, or None/empty

    Returns:
        date object or None if input is empty

    Raises:
        ValueError: If value is not a recognised date
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Cannot parse date '{value}'")

    value = value.strip()
    if not value:
        return None

    candidate = value.split("T")[0].split(" ")[0]
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(candidate, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Cannot parse date '{value}'. Expected YYYY-MM-DD or MM/DD/YYYY")


def parse_boolean(value: Any) -> bool:
    """
    Parse a stored boolean flag ("true"/"1"/1/True).

    Examples:
        >>> parse_boolean("true")
        True
        >>> parse_boolean("0")
        False
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return False


def clean_text(value: Any) -> Optional[str]:
    """Strip a free-text value; blank becomes None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None
