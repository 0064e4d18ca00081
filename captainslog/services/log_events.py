"""
Log Event Classifier
Turns board comments ("Arrived timestamp: ...", "Diesel 45L") into typed voyage events
"""
import logging
import re
from typing import Dict, List, Optional, Tuple

from captainslog.models.voyage import LogEvent, LogEventType
from captainslog.services.custom_fields import (
    LATITUDE_FIELD,
    LONGITUDE_FIELD,
    NAVILY_FIELD,
    get_number,
    get_rating,
    get_text_or_dropdown,
)
from captainslog.services.labels import card_labels
from captainslog.services.timestamps import extract_timestamp, parse_instant, strip_timestamps

logger = logging.getLogger(__name__)

COMMENT_ACTION = "commentCard"

# Order matters: the first matching prefix wins
EVENT_PREFIXES: Tuple[Tuple[LogEventType, str], ...] = (
    (LogEventType.ARRIVED, "arrived"),
    (LogEventType.DEPARTED, "departed"),
    (LogEventType.VISITED, "visited"),
    (LogEventType.WATER, "water"),
    (LogEventType.DIESEL, "diesel"),
    (LogEventType.BBQ_GAS_CHANGE, "bbq gas change"),
    (LogEventType.GAS_TANK_CHANGE, "gas tank change"),
    (LogEventType.BROKEN, "broken"),
    (LogEventType.FIXED, "fixed"),
    (LogEventType.SEA_TEMPERATURE, "sea temperature"),
    (LogEventType.SEA_TEMPERATURE, "sea temp"),
    (LogEventType.BINS, "bins"),
    (LogEventType.POWER, "power"),
    (LogEventType.BOOM, "boom"),
)

_PREFIX_PATTERNS = [
    (event_type, re.compile(rf"{re.escape(prefix)}(?!\w)", re.IGNORECASE))
    for event_type, prefix in EVENT_PREFIXES
]

_NUMBER = re.compile(r"\d+(?:[.,]\d+)?")


def classify_comment(text) -> Optional[Tuple[LogEventType, str]]:
    """Event type and the text after its prefix, or None for chatter"""
    if not isinstance(text, str):
        return None
    body = text.strip()
    for event_type, pattern in _PREFIX_PATTERNS:
        match = pattern.match(body)
        if match:
            return event_type, body[match.end():]
    return None


def _first_number(text: str) -> Optional[float]:
    match = _NUMBER.search(strip_timestamps(text))
    if not match:
        return None
    return float(match.group(0).replace(",", "."))


def clean_item(text: str) -> Optional[str]:
    """Item description from a Broken/Fixed comment"""
    item = strip_timestamps(text).strip(" \t:-–")
    return item or None


def build_log_event(
    action: Dict,
    cards_by_id: Dict[str, Dict],
    field_defs: List[Dict],
    list_names: Dict[str, str],
) -> Optional[LogEvent]:
    """Classify one comment action and enrich it from its card"""
    if action.get("type") != COMMENT_ACTION:
        return None
    data = action.get("data") or {}
    text = data.get("text")
    classified = classify_comment(text)
    if classified is None:
        return None
    event_type, remainder = classified

    timestamp = extract_timestamp(text, parse_instant(action.get("date")))
    if timestamp is None:
        logger.warning(f"Skipping {event_type.value} comment {action.get('id')} without any date")
        return None

    card_ref = data.get("card") or {}
    card_id = card_ref.get("id")
    card = cards_by_id.get(card_id)

    fields = {
        "type": event_type,
        "timestamp": timestamp,
        "card_id": card_id,
        "comment": text,
    }

    if card is not None:
        fields.update(
            card_name=card.get("name") or "Unknown",
            area=list_names.get(card.get("idList")) or "Unknown",
            lat=get_number(card, field_defs, LATITUDE_FIELD),
            lng=get_number(card, field_defs, LONGITUDE_FIELD),
            rating=get_rating(card, field_defs),
            labels=card_labels(card),
            trello_url=card.get("shortUrl"),
            navily_url=get_text_or_dropdown(card, field_defs, NAVILY_FIELD),
        )
    else:
        # Archived or deleted card: keep the event, without enrichment
        logger.debug(f"Card {card_id} for comment {action.get('id')} is no longer on the board")
        fields["card_name"] = card_ref.get("name") or "Unknown"

    if event_type == LogEventType.DIESEL:
        fields["diesel_litres"] = _first_number(remainder)
    elif event_type == LogEventType.SEA_TEMPERATURE:
        fields["sea_temp"] = _first_number(remainder)
    elif event_type in (LogEventType.BROKEN, LogEventType.FIXED):
        fields["item"] = clean_item(remainder)

    return LogEvent(**fields)


def build_log_events(actions: List[Dict], board: Dict) -> List[LogEvent]:
    """
    Classify every comment in `actions` against the board snapshot.

    Unrecognised comments are dropped. The result is sorted by timestamp,
    whatever order the feed delivered it in.
    """
    cards_by_id = {card["id"]: card for card in board.get("cards") or []}
    list_names = {lst["id"]: lst.get("name") for lst in board.get("lists") or []}
    field_defs = board.get("customFields") or []

    events = []
    for action in actions:
        event = build_log_event(action, cards_by_id, field_defs, list_names)
        if event is not None:
            events.append(event)

    events.sort(key=lambda e: e.timestamp)
    return events
