"""Great-circle distance helpers for radius queries.

Radius searches run in two steps: a latitude/longitude bounding box narrows
the rows in SQL, then the haversine distance filters the remainder exactly.
"""

import math
from typing import Iterable, Optional, TypeVar

from services.marketplace_service.models import DistanceUnit
from sqlalchemy import or_

EARTH_RADIUS = {
    DistanceUnit.KM: 6378.1,
    DistanceUnit.MI: 3963.2,
}

T = TypeVar("T")


def earth_radius(unit: DistanceUnit = DistanceUnit.KM) -> float:
    return EARTH_RADIUS[DistanceUnit(unit)]


def haversine_distance(
    lat1: float,
    lng1: float,
    lat2: float,
    lng2: float,
    unit: DistanceUnit = DistanceUnit.KM,
) -> float:
    """Distance between two points along the Earth's surface."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    return 2 * earth_radius(unit) * math.asin(min(1.0, math.sqrt(a)))


def bounding_box(
    lat: float,
    lng: float,
    distance: float,
    unit: DistanceUnit = DistanceUnit.KM,
) -> tuple[float, float, float, float]:
    """Return ``(min_lat, max_lat, min_lng, max_lng)`` enclosing the radius.

    Near the antimeridian the longitude bounds run past +/-180; use
    ``longitude_ranges`` to fold them back into valid ranges.
    """
    angular = math.degrees(distance / earth_radius(unit))
    min_lat = max(-90.0, lat - angular)
    max_lat = min(90.0, lat + angular)

    cos_lat = math.cos(math.radians(lat))
    if abs(cos_lat) < 1e-12 or max_lat >= 90.0 or min_lat <= -90.0:
        return min_lat, max_lat, -180.0, 180.0
    lng_delta = min(180.0, angular / cos_lat)
    return min_lat, max_lat, lng - lng_delta, lng + lng_delta


def longitude_ranges(min_lng: float, max_lng: float) -> list[tuple[float, float]]:
    """Split a longitude span into ranges inside [-180, 180]."""
    if max_lng - min_lng >= 360.0:
        return [(-180.0, 180.0)]
    if min_lng < -180.0:
        return [(-180.0, max_lng), (min_lng + 360.0, 180.0)]
    if max_lng > 180.0:
        return [(min_lng, 180.0), (-180.0, max_lng - 360.0)]
    return [(min_lng, max_lng)]


def within_radius(
    items: Iterable[T],
    lat: float,
    lng: float,
    distance: float,
    unit: DistanceUnit = DistanceUnit.KM,
) -> list[tuple[T, float]]:
    """Keep ``items`` (anything with latitude/longitude) inside the radius.

    Returns ``(item, distance)`` pairs in input order.
    """
    matches = []
    for item in items:
        item_lat: Optional[float] = getattr(item, "latitude", None)
        item_lng: Optional[float] = getattr(item, "longitude", None)
        if item_lat is None or item_lng is None:
            continue
        d = haversine_distance(lat, lng, item_lat, item_lng, unit)
        if d <= distance:
            matches.append((item, d))
    return matches


def bounding_box_clause(model, lat: float, lng: float, distance: float, unit):
    """SQL prefilter for ``model`` rows near the point."""
    min_lat, max_lat, min_lng, max_lng = bounding_box(lat, lng, distance, unit)
    return (
        model.latitude.is_not(None),
        model.longitude.is_not(None),
        model.latitude.between(min_lat, max_lat),
        or_(
            *(
                model.longitude.between(low, high)
                for low, high in longitude_ranges(min_lng, max_lng)
            )
        ),
    )
