"""
Trip Range Resolver
Voyages recorded as cards in the Trips list, used to scope the log
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from captainslog.models.voyage import LogEvent, Trip, TripRange, TripYear
from captainslog.services.itinerary import list_id
from captainslog.services.timestamps import parse_instant

logger = logging.getLogger(__name__)

# How a log selection was scoped
SCOPE_ALL = "all"
SCOPE_RANGE = "range"
SCOPE_TRIP = "trip"
SCOPE_UNSCOPED = "unscoped"


def trip_cards(board: Dict, trips_list_name: str = "Trips") -> List[Dict]:
    trips_list_id = list_id(board, trips_list_name)
    if trips_list_id is None:
        logger.warning(f"Board has no '{trips_list_name}' list")
        return []
    return [card for card in board.get("cards") or [] if card.get("idList") == trips_list_id]


def build_trips(board: Dict, trips_list_name: str = "Trips") -> List[Trip]:
    return [
        Trip(
            name=card.get("name") or "",
            start=parse_instant(card.get("start")),
            due=parse_instant(card.get("due")),
        )
        for card in trip_cards(board, trips_list_name)
    ]


def most_recent_trip_range(trips: List[Trip]) -> Optional[TripRange]:
    """Range of the trip with the latest start, None if no trip has started"""
    started = sorted((t for t in trips if t.start is not None), key=lambda t: t.start, reverse=True)
    if not started:
        return None
    latest = started[0]
    return TripRange(start=latest.start, end=latest.due)


def filter_logs(logs: List[LogEvent], start: datetime, end: Optional[datetime] = None) -> List[LogEvent]:
    """Logs between `start` and `end` inclusive; open ended without `end`"""
    return [
        log for log in logs
        if log.timestamp >= start and (end is None or log.timestamp <= end)
    ]


def select_logs(
    logs: List[LogEvent],
    trip_range: Optional[TripRange],
    trip: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> Tuple[List[LogEvent], str]:
    """
    Pick the logs a view asked for.

    trip="all" returns everything, an explicit start (and end) wins over the
    default of the most recent trip. Without any trip range nothing is trip
    scoped, so the logs come back untouched and flagged "unscoped".
    """
    if trip == SCOPE_ALL:
        return list(logs), SCOPE_ALL
    if start is not None:
        return filter_logs(logs, start, end), SCOPE_RANGE
    if trip_range is not None:
        return filter_logs(logs, trip_range.start, trip_range.end), SCOPE_TRIP
    return list(logs), SCOPE_UNSCOPED


def group_trips_by_year(trips: List[Trip]) -> List[TripYear]:
    """Trips bucketed by the year they started (or ended), newest year first"""
    by_year: Dict[str, List[Trip]] = {}
    for trip in trips:
        when = trip.start or trip.due
        year = str(when.year) if when else "No Date"
        by_year.setdefault(year, []).append(trip)

    return [
        TripYear(year=year, trips=by_year[year])
        for year in sorted(by_year, reverse=True)
    ]
