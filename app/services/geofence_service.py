"""
Geofence Service - Great-circle distance and circular geofence checks
"""
import math
from typing import List, Optional, Tuple

from app.models.site import Site

EARTH_RADIUS_M = 6371000  # Spherical earth radius in meters


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate distance between two coordinates using Haversine formula

    Returns:
        float: Distance in meters
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (math.sin(delta_lat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) *
         math.sin(delta_lon / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


class GeofenceService:
    def distance_to_site(self, site: Site, latitude: float, longitude: float) -> float:
        """Distance in meters from the position to the site centre"""
        return haversine_distance(latitude, longitude, site.si_latitude, site.si_longitude)

    def nearest_site(
        self,
        sites: List[Site],
        latitude: float,
        longitude: float
    ) -> Optional[Tuple[Site, float]]:
        """
        Find the site closest to a position

        Returns:
            (site, distance_m) or None when there are no sites
        """
        closest = None
        for site in sites:
            distance = self.distance_to_site(site, latitude, longitude)
            if closest is None or distance < closest[1]:
                closest = (site, distance)
        return closest
