"""
Custom Field Accessor
Reads typed values from a card's custom field items by field name
"""
import logging
import math
import re
from collections.abc import Iterable, Mapping
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

LATITUDE_FIELD = "Latitude"
LONGITUDE_FIELD = "Longitude"
RATING_FIELD = "⭐️"
NAVILY_FIELD = "Navily"


def _find_definition(field_defs: List[Dict], name: str) -> Optional[Dict]:
    if isinstance(field_defs, (str, bytes, Mapping)) or not isinstance(field_defs, Iterable):
        raise TypeError(f"Custom field definitions must be a list, got {type(field_defs).__name__}")
    for definition in field_defs:
        if isinstance(definition, Mapping) and definition.get("name") == name:
            return definition
    return None


def _find_item(card: Dict, field_defs: List[Dict], name: str) -> tuple:
    definition = _find_definition(field_defs, name)
    if definition is None:
        return None, None

    for item in card.get("customFieldItems") or []:
        if item.get("idCustomField") == definition.get("id"):
            return definition, item
    return definition, None


def get_number(card: Dict, field_defs: List[Dict], name: str) -> Optional[float]:
    """Numeric custom field value, or None when the field or value is missing"""
    _, item = _find_item(card, field_defs, name)
    if item is None:
        return None

    raw = (item.get("value") or {}).get("number")
    if raw is None or raw == "":
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        logger.warning(f"Unparseable number {raw!r} in field '{name}' on card {card.get('id')}")
        return None
    return value if math.isfinite(value) else None


def get_text_or_dropdown(card: Dict, field_defs: List[Dict], name: str) -> Optional[str]:
    """Text value, or the display text of the selected dropdown option"""
    definition, item = _find_item(card, field_defs, name)
    if item is None:
        return None

    text = (item.get("value") or {}).get("text")
    if text is not None:
        return text

    option_id = item.get("idValue")
    options = definition.get("options")
    if option_id and isinstance(options, list):
        for option in options:
            if option.get("id") == option_id:
                return (option.get("value") or {}).get("text")
    return None


def get_rating(card: Dict, field_defs: List[Dict]) -> Optional[int]:
    """Star rating 1-5 from the rating dropdown"""
    text = get_text_or_dropdown(card, field_defs, RATING_FIELD)
    if text is None:
        return None
    match = re.match(r"\s*(\d+)", text)
    if not match:
        # Ratings may also be entered as a row of stars
        stars = text.count("⭐")
        return stars if 1 <= stars <= 5 else None
    rating = int(match.group(1))
    return rating if 1 <= rating <= 5 else None
