"""
Timestamp Extractor
Finds the moment an event actually happened inside a free-text comment
"""
import re
from datetime import datetime, timezone
from typing import Optional

_DATETIME = r"\d{4}-\d{2}-\d{2}[ T]\d{2}:\d{2}(?::\d{2})?(?:Z|[+-]\d{2}:?\d{2})?"

LABELED_TIMESTAMP = re.compile(rf"timestamp\s*:\s*({_DATETIME})", re.IGNORECASE)
BARE_TIMESTAMP = re.compile(rf"({_DATETIME})")


def _to_instant(raw: str) -> Optional[datetime]:
    ts = raw.strip().replace(" ", "T", 1)

    offset = ""
    if ts.endswith("Z"):
        ts, offset = ts[:-1], "+00:00"
    else:
        tz = re.search(r"([+-])(\d{2}):?(\d{2})$", ts)
        if tz:
            ts = ts[:tz.start()]
            offset = f"{tz.group(1)}{tz.group(2)}:{tz.group(3)}"

    if len(ts) == 16:
        ts += ":00"

    try:
        parsed = datetime.fromisoformat(ts + offset)
    except ValueError:
        return None

    # Comments without an offset are written in UTC
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def extract_timestamp(text, fallback):
    """
    Return the timestamp embedded in a comment, or `fallback`.

    A labeled "timestamp: 2025-07-07 10:30" wins; only when there is none is a
    bare "2025-07-07 10:30" looked for. Invalid dates fall back too.
    """
    if not isinstance(text, str):
        return fallback

    match = LABELED_TIMESTAMP.search(text) or BARE_TIMESTAMP.search(text)
    if match:
        parsed = _to_instant(match.group(1))
        if parsed is not None:
            return parsed
    return fallback


def parse_instant(value, keep_offset: bool = False) -> Optional[datetime]:
    """
    Parse a Trello ISO date ("2025-07-07T10:30:00.000Z") to an aware datetime.

    Converted to UTC unless `keep_offset` is set, in which case the offset
    written in the value is kept. Naive values are read as UTC either way.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed if keep_offset else parsed.astimezone(timezone.utc)


def strip_timestamps(text: str) -> str:
    """Remove labeled and bare timestamp fragments from a comment"""
    text = LABELED_TIMESTAMP.sub("", text)
    text = BARE_TIMESTAMP.sub("", text)
    return re.sub(r"\s+", " ", text).strip()
