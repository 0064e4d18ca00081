"""
Trello label palette
"""
from typing import Dict, List

from captainslog.models.voyage import Label

DEFAULT_LABEL_COLOR = "#888"

LABEL_COLORS = {
    "green": "#61bd4f",
    "yellow": "#f2d600",
    "orange": "#ff9f1a",
    "red": "#eb5a46",
    "purple": "#c377e0",
    "blue": "#0079bf",
    "sky": "#00c2e0",
    "lime": "#51e898",
    "pink": "#ff78cb",
    "black": "#344563",
}


def card_labels(card: Dict) -> List[Label]:
    """Card labels with Trello colour names mapped to hex"""
    return [
        Label(
            name=label.get("name") or "",
            color=LABEL_COLORS.get(label.get("color"), DEFAULT_LABEL_COLOR),
        )
        for label in card.get("labels") or []
    ]
