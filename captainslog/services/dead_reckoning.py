"""
Dead Reckoning
Estimated position of the boat while underway between two known points
"""
import math
from datetime import datetime, timezone
from typing import Optional

from captainslog.models.voyage import ExpectedPosition, VoyageState, VoyageStatus
from captainslog.services.geo import distance_meters, meters_to_nautical_miles


def expected_position(
    origin,
    destination,
    departed_at: datetime,
    speed_knots: float,
    now: Optional[datetime] = None,
) -> Optional[ExpectedPosition]:
    """
    Where the boat should be after sailing from `origin` towards
    `destination` at `speed_knots` since `departed_at`.

    The position is a straight lat/lng interpolation, not a great circle.
    Good enough for coastal legs, increasingly off on long passages.
    Returns None when either end has no coordinates.
    """
    if origin is None or destination is None:
        return None
    if None in (origin.lat, origin.lng, destination.lat, destination.lng):
        return None

    now = now or datetime.now(timezone.utc)
    total_nm = meters_to_nautical_miles(
        distance_meters(origin.lat, origin.lng, destination.lat, destination.lng)
    )

    elapsed_hours = max((now - departed_at).total_seconds() / 3600, 0.0)
    speed_ok = speed_knots is not None and math.isfinite(speed_knots) and speed_knots > 0
    traveled_nm = elapsed_hours * speed_knots if speed_ok else 0.0

    fraction = min(traveled_nm / total_nm, 1.0) if total_nm > 0 else 0.0
    remaining_nm = total_nm * (1 - fraction)

    return ExpectedPosition(
        lat=origin.lat + (destination.lat - origin.lat) * fraction,
        lng=origin.lng + (destination.lng - origin.lng) * fraction,
        fraction=fraction,
        total_nm=total_nm,
        traveled_nm=min(traveled_nm, total_nm),
        remaining_nm=remaining_nm,
        eta_hours=remaining_nm / speed_knots if speed_ok else None,
    )


def position_for_status(
    status: VoyageStatus,
    speed_knots: float,
    now: Optional[datetime] = None,
) -> Optional[ExpectedPosition]:
    """Dead-reckoned position for an underway status, None otherwise"""
    if status.status != VoyageState.UNDERWAY or status.departed_at is None:
        return None
    return expected_position(
        status.departed_from, status.destination, status.departed_at, speed_knots, now=now
    )
