# core/utils.py

import re
from datetime import date, datetime, timezone
from typing import Optional, Union


# PostgREST trims trailing zeros from fractional seconds
FRACTION_PATTERN = re.compile(r"\.(\d+)")


def sanitize(data: dict) -> dict:
    """
    Sanitize dictionary data before it is written:
    - Empty strings → None
    - Strip string whitespace
    - datetimes/dates → ISO strings (PostgREST JSON body)
    - Preserve booleans, numbers, lists, None
    """
    clean = {}

    for k, v in data.items():
        if v is None or isinstance(v, bool):
            clean[k] = v
            continue

        if isinstance(v, str):
            stripped = v.strip()
            clean[k] = stripped if stripped else None
            continue

        if isinstance(v, (datetime, date)):
            clean[k] = v.isoformat()
            continue

        # Enums serialize to their value
        if hasattr(v, "value") and isinstance(v.value, str):
            clean[k] = v.value
            continue

        clean[k] = v

    return clean


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Union[str, datetime, date, None]) -> Optional[datetime]:
    """
    Parse a PostgREST timestamp/date into an aware UTC datetime.
    Date-only values ("2024-05-01") are midnight UTC; naive values are UTC.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip().replace("Z", "+00:00")
        text = FRACTION_PATTERN.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
        parsed = datetime.fromisoformat(text)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
