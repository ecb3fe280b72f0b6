"""Shared coercion helpers used by the normalizer, validators and blueprints.

to_iso_string:  any date-like value → ISO-8601 UTC string or None (never raises)
parse_date:     date-like value → datetime (UTC) or None
to_float:       best-effort numeric coercion ("0.5" → 0.5, junk → None)
is_blank:       None / empty / whitespace-only
split_csv:      "A, B,,C" → ["A", "B", "C"]
"""
import logging
import math
from datetime import date, datetime, time, timezone

logger = logging.getLogger(__name__)


def parse_date(value):
    """Parse a date-like value to a timezone-aware UTC datetime.

    Returns None for empty/invalid input. Supports:
    - datetime / date objects (naive values are taken as UTC)
    - store timestamp objects exposing ``to_datetime()`` or ``toDate()``
    - ISO strings: YYYY-MM-DD, YYYY-MM-DDTHH:MM:SS[.fff][Z|±HH:MM]
    - DD.MM.YYYY (European entry format)
    """
    if value is None or value == "":
        return None

    for accessor in ("to_datetime", "toDate"):
        hook = getattr(value, accessor, None)
        if callable(hook):
            try:
                value = hook()
            except (TypeError, ValueError, AttributeError, OverflowError):
                logger.debug("Timestamp accessor %s failed on %r", accessor, value)
                return None
            break

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            try:
                dt = datetime.strptime(text, "%d.%m.%Y")
            except ValueError:
                return None
    else:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso_string(value) -> str | None:
    """Render a date-like value as ``YYYY-MM-DDTHH:MM:SS.mmmZ``; None if unparsable.

    The output parses back to the same instant, so applying this twice is a
    no-op.
    """
    dt = parse_date(value)
    if dt is None:
        return None
    millis = dt.microsecond // 1000
    return dt.strftime("%Y-%m-%dT%H:%M:%S") + f".{millis:03d}Z"


def to_float(value) -> float | None:
    """Best-effort numeric coercion. Booleans, NaN and junk become None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str):
        text = value.strip().replace(",", "").lstrip("$")
        if not text:
            return None
        try:
            result = float(text)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]
