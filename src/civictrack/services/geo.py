"""Great-circle distance helpers for area-scoped issue listings."""
from __future__ import annotations

import math

# Mean Earth radius (IUGG), kilometres.
EARTH_RADIUS_KM = 6371.0088


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return the great-circle distance between two points in kilometres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = phi2 - phi1
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


def within_radius(
    latitude: float,
    longitude: float,
    *,
    center_latitude: float,
    center_longitude: float,
    radius_km: float,
) -> bool:
    """Return True when the point lies within ``radius_km`` of the centre (inclusive)."""
    return haversine_km(center_latitude, center_longitude, latitude, longitude) <= radius_km
