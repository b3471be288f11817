from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from ..core.constants import EARTH_RADIUS_M
from ..core.exceptions import LocationError
from ..policy.model import OfficeSite
from .model import GeoLocation


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters between two lat/long points given in degrees."""

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(min(1.0, a)))


@dataclass(frozen=True)
class SiteDistance:
    site: str
    distance_m: int

    def __str__(self) -> str:
        return f"{self.site}: {self.distance_m}m"


@dataclass(frozen=True)
class SiteMatch:
    site: OfficeSite
    distance_m: float


def detect_site(location: GeoLocation, sites: Sequence[OfficeSite]) -> Optional[SiteMatch]:
    """Nearest site whose radius contains the location, if any."""

    best: Optional[SiteMatch] = None
    for site in sites:
        d = haversine_distance(location.latitude, location.longitude, site.latitude, site.longitude)
        if d <= site.radius_m and (best is None or d < best.distance_m):
            best = SiteMatch(site=site, distance_m=d)
    return best


class GeofenceChecker:
    def check_location(self, location: Optional[GeoLocation], sites: Sequence[OfficeSite]) -> SiteMatch:
        if location is None or not location.has_coordinates:
            raise LocationError("Location is required for office attendance")

        match = detect_site(location, sites)
        if match:
            return match

        distances = [
            SiteDistance(
                site=site.name,
                distance_m=round(
                    haversine_distance(location.latitude, location.longitude, site.latitude, site.longitude)
                ),
            )
            for site in sites
        ]
        listed = ", ".join(str(d) for d in distances) or "no office sites configured"
        raise LocationError(f"Location not within office premises. Distances: {listed}", distances)
