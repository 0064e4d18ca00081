"""
Itinerary Builder
Planned stops and candidate places from the board, and the day-by-day schedule
"""
import logging
import math
from collections import OrderedDict
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional

from captainslog.models.voyage import Location, Place, Schedule, ScheduleDay, ScheduledStop, Stop
from captainslog.services.custom_fields import (
    LATITUDE_FIELD,
    LONGITUDE_FIELD,
    NAVILY_FIELD,
    get_number,
    get_rating,
    get_text_or_dropdown,
)
from captainslog.services.geo import distance_nm, format_duration
from captainslog.services.labels import card_labels
from captainslog.services.timestamps import parse_instant

logger = logging.getLogger(__name__)


def list_names(board: Dict) -> Dict[str, str]:
    return {lst["id"]: lst.get("name") for lst in board.get("lists") or []}


def list_id(board: Dict, name: str) -> Optional[str]:
    """Id of the list called `name`, None when the board has no such list"""
    for lst in board.get("lists") or []:
        if lst.get("name") == name:
            return lst["id"]
    return None


def _location_fields(card: Dict, field_defs: List[Dict], names: Dict[str, str]) -> Dict:
    return {
        "id": card["id"],
        "name": card.get("name") or "",
        "list_name": names.get(card.get("idList")),
        "lat": get_number(card, field_defs, LATITUDE_FIELD),
        "lng": get_number(card, field_defs, LONGITUDE_FIELD),
        "rating": get_rating(card, field_defs),
        "labels": card_labels(card),
        "trello_url": card.get("shortUrl"),
        "navily_url": get_text_or_dropdown(card, field_defs, NAVILY_FIELD),
    }


def build_stops(board: Dict, trips_list_name: str = "Trips") -> List[Stop]:
    """Cards with a due date outside the Trips list, earliest first"""
    trips_list_id = list_id(board, trips_list_name)
    names = list_names(board)
    field_defs = board.get("customFields") or []

    stops = []
    for card in board.get("cards") or []:
        if not card.get("due") or card.get("idList") == trips_list_id:
            continue
        due = parse_instant(card["due"], keep_offset=True)
        if due is None:
            logger.warning(f"Ignoring card '{card.get('name')}' with unparseable due {card['due']!r}")
            continue
        stops.append(Stop(
            **_location_fields(card, field_defs, names),
            due=due,
            due_complete=bool(card.get("dueComplete")),
        ))

    stops.sort(key=lambda s: s.due)
    return stops


def build_places(board: Dict, trips_list_name: str = "Trips") -> List[Place]:
    """Charted cards without a due date outside the Trips list"""
    trips_list_id = list_id(board, trips_list_name)
    names = list_names(board)
    field_defs = board.get("customFields") or []

    places = []
    for card in board.get("cards") or []:
        if card.get("due") or card.get("idList") == trips_list_id:
            continue
        place = Place(**_location_fields(card, field_defs, names))
        if place.has_position:
            places.append(place)
    return places


def current_stop(stops: List[Stop]) -> Optional[Stop]:
    """
    The stop marked complete, i.e. where the boat is.

    Only one is expected; if several are marked the most recently due wins.
    """
    completed = [s for s in stops if s.due_complete]
    if not completed:
        return None
    if len(completed) > 1:
        logger.warning(f"{len(completed)} stops marked as current, using the latest")
    return max(completed, key=lambda s: s.due)


def future_stops(stops: List[Stop]) -> List[Stop]:
    return sorted((s for s in stops if not s.due_complete), key=lambda s: s.due)


def day_key(stop: Stop) -> str:
    # Calendar date as written on the card, in the offset it was given with
    return stop.due.date().isoformat()


def group_by_day(stops: List[Stop]) -> "OrderedDict[str, List[Stop]]":
    """Bucket stops by calendar day, days and stops in chronological order"""
    grouped: Dict[str, List[Stop]] = {}
    for stop in sorted(stops, key=lambda s: s.due):
        grouped.setdefault(day_key(stop), []).append(stop)
    return OrderedDict(sorted(grouped.items()))


def _scheduled(stop: Stop, **updates) -> ScheduledStop:
    if isinstance(stop, ScheduledStop):
        return stop.model_copy(update=updates)
    return ScheduledStop(**stop.model_dump(), **updates)


def annotate_gaps(stops: List[Stop]) -> List[ScheduledStop]:
    """Hours until the next stop, and whether the boat stays overnight"""
    ordered = sorted(stops, key=lambda s: s.due)
    annotated = []
    for idx, stop in enumerate(ordered):
        nxt = ordered[idx + 1] if idx + 1 < len(ordered) else None
        if nxt is None:
            annotated.append(_scheduled(stop, hours_to_next=None, overnight=False))
            continue
        annotated.append(_scheduled(
            stop,
            hours_to_next=(nxt.due - stop.due).total_seconds() / 3600,
            overnight=day_key(nxt) != day_key(stop),
        ))
    return annotated


def _valid_speed(speed_knots) -> bool:
    return speed_knots is not None and math.isfinite(speed_knots) and speed_knots > 0


def chain_legs(origin: Optional[Location], stops: List[Stop], speed_knots: float) -> List[ScheduledStop]:
    """
    Distance and ETA of each leg, starting from `origin`.

    The cursor moves to every charted stop; uncharted stops get no leg and
    leave it where it was.
    """
    cursor = origin if origin is not None and origin.has_position else None
    chained = []
    for stop in stops:
        nm = distance_nm(cursor, stop)
        eta_hours = nm / speed_knots if nm is not None and _valid_speed(speed_knots) else None
        chained.append(_scheduled(
            stop,
            distance_nm=nm,
            eta_hours=eta_hours,
            eta=format_duration(eta_hours),
        ))
        if stop.has_position:
            cursor = stop
    return chained


def _day_range(first: date, last: date) -> List[str]:
    days = []
    day = first
    while day <= last:
        days.append(day.isoformat())
        day += timedelta(days=1)
    return days


def build_schedule(
    stops: List[Stop],
    speed_knots: float,
    can_plan: bool = False,
    origin: Optional[Location] = None,
    today: Optional[date] = None,
) -> Schedule:
    """
    Day-by-day itinerary of the future stops.

    Legs chain from `origin` (the departure point when underway) or the
    current stop across day boundaries; day totals only count legs arriving
    that day. Planners also get the empty days so gaps are visible.
    """
    current = current_stop(stops)
    origin = origin or current
    scheduled = chain_legs(origin, annotate_gaps(future_stops(stops)), speed_knots)
    grouped = group_by_day(scheduled)

    if can_plan:
        today = today or datetime.now(timezone.utc).date()
        if grouped:
            keys = list(grouped)
            first = min(today, date.fromisoformat(keys[0]))
            day_keys = _day_range(first, date.fromisoformat(keys[-1]))
        else:
            day_keys = [today.isoformat()]
    else:
        day_keys = list(grouped)

    timed = _valid_speed(speed_knots)
    days = []
    for key in day_keys:
        day_stops = grouped.get(key, [])
        days.append(ScheduleDay(
            date=key,
            stops=day_stops,
            total_nm=sum(s.distance_nm or 0.0 for s in day_stops),
            total_hours=sum(s.eta_hours or 0.0 for s in day_stops) if timed else None,
        ))

    return Schedule(
        current=current,
        origin=origin,
        speed_knots=speed_knots,
        days=days,
        total_nm=sum(d.total_nm for d in days),
        total_hours=sum(d.total_hours for d in days) if timed else None,
        can_plan=can_plan,
    )
