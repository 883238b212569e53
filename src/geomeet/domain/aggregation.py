"""Meeting point aggregation over participant locations.

The centroid is a plain arithmetic mean of latitudes and longitudes. It is a
city/metro scale approximation and does not minimise true travel distance on
the sphere. Distances are reported with the haversine formula.
"""

import math
from collections.abc import Sequence

from geomeet.domain.errors import validation_error
from geomeet.domain.geo import Location

EARTH_RADIUS_KM = 6371.0


def geometric_center(locations: Sequence[Location] | None) -> Location:
    """Return the unweighted mean of the given locations."""
    if not locations:
        raise validation_error("Locations list cannot be empty")
    if len(locations) == 1:
        return locations[0]
    count = len(locations)
    latitude = sum(location.latitude for location in locations) / count
    longitude = sum(location.longitude for location in locations) / count
    return Location(latitude=latitude, longitude=longitude)


def haversine_distance_km(a: Location, b: Location) -> float:
    """Great-circle distance between two points in kilometers."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lat = lat2 - lat1
    d_lon = math.radians(b.longitude - a.longitude)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c


def total_travel_distance_km(
    locations: Sequence[Location] | None, meeting_point: Location
) -> float:
    """Sum of distances from each location to the meeting point."""
    if not locations:
        return 0.0
    return sum(haversine_distance_km(location, meeting_point) for location in locations)
