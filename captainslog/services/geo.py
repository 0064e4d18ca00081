"""
Geo Math
Great-circle distances and duration formatting for legs between stops
"""
import math
from typing import Optional

EARTH_RADIUS_M = 6_371_000
METERS_PER_NM = 1852


def distance_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Haversine great-circle distance in meters between two points given in
    decimal degrees.
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlam = math.radians(lon2 - lon1)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlam / 2) ** 2
    # Floating point can push a just outside [0, 1] for antipodal points
    a = min(max(a, 0.0), 1.0)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def meters_to_nautical_miles(meters: float) -> float:
    return meters / METERS_PER_NM


def distance_nm(a, b) -> Optional[float]:
    """Nautical miles between two objects with lat/lng, None if either is uncharted"""
    if a is None or b is None:
        return None
    if a.lat is None or a.lng is None or b.lat is None or b.lng is None:
        return None
    return meters_to_nautical_miles(distance_meters(a.lat, a.lng, b.lat, b.lng))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_duration(hours: Optional[float]) -> str:
    """
    Render hours as "Hh Mm".

    Rounded to the nearest 15 minutes, or to the nearest 5 minutes (at least
    5) for hops under 15 minutes. Returns "" for None, NaN or infinity.
    """
    if hours is None or not math.isfinite(hours):
        return ""

    minutes = abs(hours) * 60
    if minutes == 0:
        total = 0
    elif minutes < 15:
        total = max(5, _round_half_up(minutes / 5) * 5)
    else:
        total = _round_half_up(minutes / 15) * 15

    hh, mm = divmod(total, 60)
    return f"{hh}h {mm}m"
