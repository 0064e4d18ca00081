"""
Summary Aggregator
Distance, time underway, fuel and maintenance rollups over a log
"""
import logging
import re
from typing import Dict, List, Optional

from captainslog.models.voyage import LogEvent, LogEventType, LongestStay, Summary
from captainslog.services.geo import distance_meters, meters_to_nautical_miles

logger = logging.getLogger(__name__)

POSITION_TYPES = (LogEventType.DEPARTED, LogEventType.ARRIVED, LogEventType.VISITED)

SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400


def _item_key(item: str) -> str:
    return re.sub(r"\s+", " ", item).strip().rstrip(".,;:!").strip().lower()


class FuelGauge:
    """
    Running diesel estimate.

    The tank is assumed full after every Diesel entry, so the litres added at
    a refill are what was burned since the previous one. Efficiency is only
    known once the second refill is logged.
    """

    def __init__(self, tank_capacity: float):
        self.tank_capacity = tank_capacity
        self.remaining: Optional[float] = None
        self.efficiency: Optional[float] = None  # NM per litre
        self.distance_since_fill = 0.0
        self.total_litres = 0.0
        self._filled_before = False

    def sail(self, nm: float):
        self.distance_since_fill += nm
        if self.remaining is not None and self.efficiency:
            self.remaining = max(self.remaining - nm / self.efficiency, 0.0)

    def refill(self, litres: Optional[float]):
        if litres:
            self.total_litres += litres
            if self._filled_before and self.distance_since_fill > 0:
                self.efficiency = self.distance_since_fill / litres
        elif litres is None:
            logger.warning("Diesel entry without a quantity, efficiency sample skipped")
        self._filled_before = True
        self.remaining = self.tank_capacity
        self.distance_since_fill = 0.0

    @property
    def remaining_range(self) -> Optional[float]:
        if self.remaining is None or self.efficiency is None:
            return None
        return self.remaining * self.efficiency


def summarize(events: List[LogEvent], tank_capacity: float) -> Summary:
    """Roll up a log; events are re-sorted by timestamp first"""
    events = sorted(events, key=lambda e: e.timestamp)

    gauge = FuelGauge(tank_capacity)
    total_nm = 0.0
    total_seconds = 0.0
    legs = 0
    last_point: Optional[LogEvent] = None
    departed: Optional[LogEvent] = None
    arrived: Optional[LogEvent] = None
    longest: Optional[LongestStay] = None
    visited = set()
    items: Dict[str, str] = {}
    item_names: Dict[str, str] = {}
    last_sea_temp = None

    for event in events:
        if event.type in POSITION_TYPES and event.has_position:
            if last_point is not None:
                nm = meters_to_nautical_miles(
                    distance_meters(last_point.lat, last_point.lng, event.lat, event.lng)
                )
                if nm > 0:
                    total_nm += nm
                    legs += 1
                    gauge.sail(nm)
            last_point = event

        if event.type == LogEventType.DEPARTED:
            if arrived is not None:
                days = (event.timestamp - arrived.timestamp).total_seconds() / SECONDS_PER_DAY
                if longest is None or days > longest.days:
                    longest = LongestStay(
                        name=arrived.card_name,
                        days=days,
                        arrived_at=arrived.timestamp,
                        departed_at=event.timestamp,
                    )
            arrived = None
            departed = event

        elif event.type == LogEventType.ARRIVED:
            if departed is not None:
                total_seconds += (event.timestamp - departed.timestamp).total_seconds()
            departed = None
            arrived = event
            visited.add(event.card_id or event.card_name)

        elif event.type == LogEventType.DIESEL:
            gauge.refill(event.diesel_litres)

        elif event.type in (LogEventType.BROKEN, LogEventType.FIXED) and event.item:
            key = _item_key(event.item)
            item_names.setdefault(key, re.sub(r"\s+", " ", event.item).strip().rstrip(".,;:!"))
            items[key] = event.type.value

        elif event.type == LogEventType.SEA_TEMPERATURE and event.sea_temp is not None:
            last_sea_temp = event.sea_temp

    return Summary(
        total_nm=total_nm,
        total_hours=total_seconds / SECONDS_PER_HOUR,
        total_diesel=gauge.total_litres,
        efficiency=gauge.efficiency,
        remaining_fuel=gauge.remaining,
        remaining_range=gauge.remaining_range,
        longest_stay=longest,
        broken_items={item_names[key]: status for key, status in items.items()},
        legs=legs,
        stops_visited=len(visited),
        last_sea_temp=last_sea_temp,
    )
