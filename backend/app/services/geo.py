"""Great-circle distance helpers for routing."""

import math
from collections.abc import Sequence

EARTH_RADIUS_METERS = 6_371_000


def _coerce_point(point: Sequence[float] | None) -> tuple[float, float] | None:
    """Return (lng, lat) as floats, or None if the point is unusable."""
    if point is None:
        return None
    try:
        if len(point) != 2:
            return None
        lng, lat = float(point[0]), float(point[1])
    except (TypeError, ValueError):
        return None

    if not (math.isfinite(lng) and math.isfinite(lat)):
        return None
    if not (-180 <= lng <= 180 and -90 <= lat <= 90):
        return None
    return lng, lat


def distance_meters(a: Sequence[float] | None, b: Sequence[float] | None) -> float:
    """
    Haversine distance in meters between two [lng, lat] points.

    Returns +inf when either point is missing or malformed, so an
    unlocatable candidate never wins a nearest comparison.
    """
    pa = _coerce_point(a)
    pb = _coerce_point(b)
    if pa is None or pb is None:
        return math.inf

    lng1, lat1 = map(math.radians, pa)
    lng2, lat2 = map(math.radians, pb)
    dlat = lat2 - lat1
    dlng = lng2 - lng1

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.asin(min(1.0, math.sqrt(h)))


def within_radius(
    point: Sequence[float] | None, center: Sequence[float] | None, radius_meters: float
) -> bool:
    """Check if a point lies inside (or on) a circle."""
    return distance_meters(point, center) <= radius_meters


def is_valid_point(point: Sequence[float] | None) -> bool:
    return _coerce_point(point) is not None
