import math

from geospat.domain.entities.geography import Point
from geospat.domain.errors import InvalidParameter

EARTH_RADIUS_KM = 6371.0


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance in kilometers between two lat/lon pairs (degrees),
    on a sphere of mean Earth radius.
    """
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    # rounding can push a a hair past 1 for antipodes
    a = min(1.0, max(0.0, a))
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def euclidean_distance(a, b) -> float:
    (ax, ay), (bx, by) = a, b
    return math.hypot(bx - ax, by - ay)


def point_haversine_km(a: Point, b: Point) -> float:
    return haversine_distance(a.lat, a.lon, b.lat, b.lon)


def point_euclidean(a: Point, b: Point) -> float:
    return math.hypot(b.x - a.x, b.y - a.y)


METRICS = {
    "euclidean": point_euclidean,
    "haversine": point_haversine_km,
}


def metric_fn(name: str):
    try:
        return METRICS[name]
    except KeyError:
        raise InvalidParameter(f"Unknown metric {name!r}") from None
