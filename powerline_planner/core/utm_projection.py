"""UTM projection helpers.

Provides conversions between WGS84 geographic coordinates and UTM meters:
- Inverse (UTM -> lat/lon): closed-form footpoint-latitude series, no I/O
- Forward (lat/lon -> UTM): pyproj transformer, cached per zone
- Zone lookup from longitude

Southern hemisphere convention for the inverse: a northing >= 10,000,000
marks a southern point. The offset is removed, the latitude is computed as
if northern and then negated.
"""

from functools import lru_cache
from math import cos, degrees, floor, radians, sin, sqrt, tan

import pyproj

from powerline_planner.constants import UTMConfig


@lru_cache(maxsize=16)
def _get_transformer(zone: int) -> pyproj.Transformer:
    """Cached WGS84 -> UTM (north) transformer for a zone."""
    wgs84 = pyproj.CRS(UTMConfig.EPSG_WGS84)
    utm = pyproj.CRS(UTMConfig.EPSG_NORTH_TEMPLATE.format(zone=zone))
    return pyproj.Transformer.from_crs(wgs84, utm, always_xy=True)


class UTMProjection:
    """Static methods for UTM <-> geographic conversion on the WGS84 ellipsoid.

    Coordinates are in decimal degrees and meters. Zone numbers are not
    validated; passing a nonsensical zone yields a nonsensical longitude.
    """

    @staticmethod
    def zone_for_lon(lon: float) -> int:
        """UTM zone number (1-60) containing a longitude."""
        zone = floor((lon + 180) / UTMConfig.ZONE_WIDTH_DEG) + 1
        return max(UTMConfig.MIN_ZONE, min(UTMConfig.MAX_ZONE, zone))

    @staticmethod
    def central_meridian_deg(zone: int) -> float:
        """Central meridian of a UTM zone in degrees."""
        return (zone - 1) * UTMConfig.ZONE_WIDTH_DEG - 180 + UTMConfig.ZONE_WIDTH_DEG / 2

    @staticmethod
    def utm_to_lat_lon(utm_x: float, utm_y: float, zone: int) -> tuple[float, float]:
        """Convert UTM easting/northing to latitude/longitude.

        Args:
            utm_x: Easting in meters (including the 500 km false easting)
            utm_y: Northing in meters; >= 10,000,000 marks the southern hemisphere
            zone: UTM zone number

        Returns:
            Tuple (lat, lon) in decimal degrees, lon normalized to [-180, 180].
        """
        a = UTMConfig.SEMI_MAJOR_AXIS_M
        e = UTMConfig.ECCENTRICITY
        k0 = UTMConfig.SCALE_FACTOR_K0
        e2 = e * e
        ep2 = e2 / (1 - e2)  # Second eccentricity squared

        x = utm_x - UTMConfig.FALSE_EASTING_M
        is_southern = utm_y >= UTMConfig.SOUTHERN_FALSE_NORTHING_M
        y = utm_y - UTMConfig.SOUTHERN_FALSE_NORTHING_M if is_southern else utm_y

        lon_origin = radians(UTMProjection.central_meridian_deg(zone=zone))

        # Footpoint latitude from the meridional arc
        m = y / k0
        mu = m / (a * (1 - e2 / 4 - 3 * e2**2 / 64 - 5 * e2**3 / 256))
        e1 = (1 - sqrt(1 - e2)) / (1 + sqrt(1 - e2))
        phi1 = (
            mu
            + (3 * e1 / 2 - 27 * e1**3 / 32) * sin(2 * mu)
            + (21 * e1**2 / 16 - 55 * e1**4 / 32) * sin(4 * mu)
            + (151 * e1**3 / 96) * sin(6 * mu)
        )

        sin_phi1 = sin(phi1)
        n1 = a / sqrt(1 - e2 * sin_phi1**2)
        t1 = tan(phi1) ** 2
        c1 = ep2 * cos(phi1) ** 2
        r1 = a * (1 - e2) / (1 - e2 * sin_phi1**2) ** 1.5
        d = x / (n1 * k0)

        lat = phi1 - (n1 * tan(phi1) / r1) * (
            d**2 / 2
            - (5 + 3 * t1 + 10 * c1 - 4 * c1**2 - 9 * ep2) * d**4 / 24
            + (61 + 90 * t1 + 298 * c1 + 45 * t1**2 - 252 * ep2 - 3 * c1**2) * d**6 / 720
        )
        lon = lon_origin + (
            d
            - (1 + 2 * t1 + c1) * d**3 / 6
            + (5 - 2 * c1 + 28 * t1 - 3 * c1**2 + 8 * ep2 + 24 * t1**2) * d**5 / 120
        ) / cos(phi1)

        lat_deg = degrees(lat)
        lon_deg = degrees(lon)

        if is_southern:
            lat_deg = -abs(lat_deg)

        while lon_deg > 180:
            lon_deg -= 360
        while lon_deg < -180:
            lon_deg += 360

        return lat_deg, lon_deg

    @staticmethod
    def lat_lon_to_utm(lat: float, lon: float, zone: int | None = None) -> tuple[float, float, int]:
        """Convert latitude/longitude to UTM easting/northing.

        Uses the northern-hemisphere zone CRS (EPSG:326zz), so southern
        latitudes produce negative northings.

        Args:
            lat: Latitude in decimal degrees
            lon: Longitude in decimal degrees
            zone: UTM zone to project into; derived from lon when None

        Returns:
            Tuple (utm_x, utm_y, zone).
        """
        if zone is None:
            zone = UTMProjection.zone_for_lon(lon=lon)
        utm_x, utm_y = _get_transformer(zone=zone).transform(lon, lat)
        return float(utm_x), float(utm_y), zone
