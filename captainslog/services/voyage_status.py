"""
Voyage Status
In port, underway or unknown, from the latest Arrived/Departed comment
"""
import logging
from typing import List, Optional

from captainslog.models.voyage import (
    Location,
    LogEvent,
    LogEventType,
    Place,
    Stop,
    VoyageState,
    VoyageStatus,
)

logger = logging.getLogger(__name__)

MOVEMENT_TYPES = (LogEventType.ARRIVED, LogEventType.DEPARTED)


def _resolve(event: LogEvent, stops: List[Stop], places: List[Place]) -> Location:
    """Live card for the event, or the snapshot taken when it was logged"""
    for location in list(stops) + list(places):
        if location.id == event.card_id:
            return location
    return event.to_location()


def next_destination(departed_from: Location, departed_at, stops: List[Stop]) -> Optional[Stop]:
    """The stop the boat is heading for after leaving `departed_from`"""
    ordered = sorted(stops, key=lambda s: s.due)

    ids = [s.id for s in ordered]
    if departed_from.id in ids:
        for stop in ordered[ids.index(departed_from.id) + 1:]:
            if stop.id != departed_from.id:
                return stop
        return None

    upcoming = [s for s in ordered if not s.due_complete and s.id != departed_from.id]
    for stop in upcoming:
        if stop.due >= departed_at:
            return stop
    return upcoming[0] if upcoming else None


def derive_status(
    events: List[LogEvent],
    stops: Optional[List[Stop]] = None,
    places: Optional[List[Place]] = None,
) -> VoyageStatus:
    """
    Current status from the whole event history.

    Only the latest Arrived or Departed event (by timestamp) counts; nothing
    is remembered between calls.
    """
    stops = stops or []
    places = places or []

    movements = sorted(
        (e for e in events if e.type in MOVEMENT_TYPES),
        key=lambda e: e.timestamp,
    )
    if not movements:
        return VoyageStatus(status=VoyageState.UNKNOWN)

    latest = movements[-1]
    location = _resolve(latest, stops, places)

    if latest.type == LogEventType.ARRIVED:
        return VoyageStatus(status=VoyageState.ARRIVED, current=location)

    destination = next_destination(location, latest.timestamp, stops)
    if destination is None:
        logger.info(f"Underway from {location.name} with no planned destination")
    return VoyageStatus(
        status=VoyageState.UNDERWAY,
        departed_from=location,
        destination=destination,
        departed_at=latest.timestamp,
    )
