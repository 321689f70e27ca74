import math

from loguru import logger

from maternal.directory.service import FacilityDirectory
from maternal.domain.exceptions import InvalidCoordinateError
from maternal.domain.models import Coordinates, RankedFacility

EARTH_RADIUS_KM = 6371.0

DEFAULT_NEAREST_LIMIT = 10
MAX_NEAREST_LIMIT = 20

EMERGENCY_SERVICE = "Emergency"


def haversine_km(a_lat: float, a_lng: float, b_lat: float, b_lng: float) -> float:
    """Great-circle distance in kilometers between two points given in decimal degrees."""
    d_lat = math.radians(b_lat - a_lat)
    d_lng = math.radians(b_lng - a_lng)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a_lat)) * math.cos(math.radians(b_lat)) * math.sin(d_lng / 2) ** 2
    )
    # Rounding can push h just past 1 for antipodal points.
    h = min(1.0, h)
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def validate_coordinates(lat: float, lng: float) -> None:
    if not (-90.0 <= lat <= 90.0) or not (-180.0 <= lng <= 180.0):
        raise InvalidCoordinateError(lat, lng)


def _clamp_limit(limit: int) -> int:
    return max(1, min(limit, MAX_NEAREST_LIMIT))


def nearest(
    directory: FacilityDirectory,
    lat: float,
    lng: float,
    limit: int = DEFAULT_NEAREST_LIMIT,
) -> list[RankedFacility]:
    """Rank every facility by distance from ``(lat, lng)``, nearest first.

    Sorting uses the unrounded distance; ``sorted`` is stable so facilities at
    identical coordinates keep their catalog order.
    """
    validate_coordinates(lat, lng)
    ranked = [
        RankedFacility(
            facility=f,
            distance_km=haversine_km(lat, lng, f.coordinates.lat, f.coordinates.lng),
        )
        for f in directory.get_all()
    ]
    ranked.sort(key=lambda r: r.distance_km)
    return ranked[: _clamp_limit(limit)]


def nearest_emergency(
    directory: FacilityDirectory,
    location: Coordinates | None,
    count: int,
) -> list[RankedFacility]:
    """Emergency-capable facilities nearest to ``location``.

    Without a location, falls back to the first ``count`` emergency-capable
    facilities in catalog order, with no distance.
    """
    candidates = [f for f in directory.get_all() if f.offers(EMERGENCY_SERVICE)]
    count = _clamp_limit(count)

    if location is None:
        logger.warning("No location supplied; dispatching to first {} emergency facilities", count)
        return [RankedFacility(facility=f) for f in candidates[:count]]

    validate_coordinates(location.lat, location.lng)
    ranked = [
        RankedFacility(
            facility=f,
            distance_km=haversine_km(location.lat, location.lng, f.coordinates.lat, f.coordinates.lng),
        )
        for f in candidates
    ]
    ranked.sort(key=lambda r: r.distance_km)
    return ranked[:count]
