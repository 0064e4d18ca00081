"""
Shared fixtures: a small trip board and its comment feed, shaped like Trello's JSON
"""
from datetime import datetime, timezone

import pytest

CUSTOM_FIELDS = [
    {"id": "cf-lat", "name": "Latitude", "type": "number"},
    {"id": "cf-lng", "name": "Longitude", "type": "number"},
    {
        "id": "cf-rating",
        "name": "⭐️",
        "type": "list",
        "options": [
            {"id": "opt-3", "value": {"text": "3"}},
            {"id": "opt-4", "value": {"text": "4"}},
            {"id": "opt-5", "value": {"text": "5"}},
        ],
    },
    {"id": "cf-navily", "name": "Navily", "type": "text"},
]

LISTS = [
    {"id": "l-trips", "name": "Trips"},
    {"id": "l-south", "name": "South Coast"},
    {"id": "l-north", "name": "North Coast"},
]

MEMBERS = [
    {"id": "m-skipper", "memberType": "admin"},
    {"id": "m-crew", "memberType": "normal"},
    {"id": "m-watch", "memberType": "observer"},
]


def make_card(card_id, name, list_id="l-south", due=None, due_complete=False,
              lat=None, lng=None, rating=None, navily=None, labels=None, start=None):
    items = []
    if lat is not None:
        items.append({"idCustomField": "cf-lat", "value": {"number": str(lat)}})
    if lng is not None:
        items.append({"idCustomField": "cf-lng", "value": {"number": str(lng)}})
    if rating is not None:
        items.append({"idCustomField": "cf-rating", "idValue": f"opt-{rating}"})
    if navily is not None:
        items.append({"idCustomField": "cf-navily", "value": {"text": navily}})
    return {
        "id": card_id,
        "name": name,
        "idList": list_id,
        "due": due,
        "dueComplete": due_complete,
        "start": start,
        "labels": labels or [],
        "customFieldItems": items,
        "shortUrl": f"https://trello.com/c/{card_id}",
    }


def make_comment(action_id, card_id, text, date, card_name=None):
    return {
        "id": action_id,
        "type": "commentCard",
        "date": date,
        "data": {"text": text, "card": {"id": card_id, "name": card_name or card_id}},
    }


@pytest.fixture
def board():
    cards = [
        make_card("c-marina", "Home Marina", due="2025-07-01T09:00:00.000Z", due_complete=True,
                  lat=50.0, lng=-5.0, rating=4),
        make_card("c-bay", "Sandy Bay", due="2025-07-02T10:00:00.000Z", lat=50.1, lng=-5.0, rating=5),
        make_card("c-cove", "Hidden Cove", due="2025-07-02T16:00:00.000Z", lat=50.1, lng=-4.9),
        make_card("c-harbour", "Fishing Harbour", list_id="l-north", due="2025-07-04T09:00:00.000Z",
                  lat=50.2, lng=-4.9, navily="https://navily.com/port/fishing-harbour",
                  labels=[{"name": "Fuel", "color": "green"}, {"name": "Odd", "color": "teal"}]),
        make_card("c-island", "Bird Island", list_id="l-north", lat=50.3, lng=-4.8, rating=3),
        make_card("c-uncharted", "Mystery Spot", list_id="l-north"),
        make_card("t-2024", "Summer 2024", list_id="l-trips",
                  start="2024-07-01T00:00:00.000Z", due="2024-07-20T00:00:00.000Z"),
        make_card("t-2025", "Summer 2025", list_id="l-trips", start="2025-06-28T00:00:00.000Z"),
        make_card("t-someday", "Someday", list_id="l-trips"),
    ]
    return {
        "id": "board-1",
        "cards": cards,
        "lists": LISTS,
        "customFields": CUSTOM_FIELDS,
        "members": MEMBERS,
    }


@pytest.fixture
def comments():
    """Comment feed as Trello delivers it: newest first"""
    return [
        make_comment("a8", "c-bay", "great swim here", "2025-07-02T12:00:00.000Z"),
        make_comment("a7", "c-bay", "Broken: anchor windlass", "2025-07-02T11:00:00.000Z"),
        make_comment("a6", "c-bay", "Arrived timestamp: 2025-07-02 10:00", "2025-07-02T10:20:00.000Z"),
        make_comment("a5", "c-marina", "Departed timestamp: 2025-07-02 07:00", "2025-07-02T07:05:00.000Z"),
        make_comment("a4", "c-marina", "Diesel 100L", "2025-07-01T09:00:00.000Z"),
        make_comment("a3", "c-marina", "Arrived timestamp: 2025-07-01 08:00", "2025-07-01T08:10:00.000Z"),
        make_comment("a2", "c-gone", "Departed 2024-07-06 09:00", "2024-07-06T09:30:00.000Z",
                     card_name="Old Anchorage"),
        make_comment("a1", "c-gone", "Arrived 2024-07-05 12:00", "2024-07-05T12:30:00.000Z",
                     card_name="Old Anchorage"),
    ]


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)
