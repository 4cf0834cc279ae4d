"""TrackProjector - Fit parsed GPS data into the canvas.

All points are projected into one UTM zone (the zone most points fall in),
so a track crossing a zone border stays continuous. The projected bounds
are then scaled uniformly into the canvas minus a padding margin and
centered:

    scale = min(draw_width / utm_width, draw_height / utm_height)
    x = canvas_cx + (utm_x - center_x) * scale
    y = canvas_cy - (utm_y - center_y) * scale

A collapsed extent (single point, or all points on one north-south or
east-west line) falls back to the other axis, or to 1 px/m when both
collapse.
"""

import copy
import logging
from collections import Counter
from typing import Any

import numpy as np

from powerline_planner.constants import CoordinateConfig, LineConfig, TrackImportConfig
from powerline_planner.core.geometry import GeometryKernel
from powerline_planner.core.utm_projection import UTMProjection
from powerline_planner.model.track import ImportedTrack, TrackMetadata, TrackPath, TrackPoint, Waypoint

logger = logging.getLogger(__name__)


class TrackProjector:
    """Static helpers turning parsed GPS data into an ImportedTrack.

    Example:
        imported = TrackProjector.fit(waypoints=wpts, tracks=trks, canvas_width=1200, canvas_height=800)
        poles, lines = imported.to_elements()
    """

    # =========================================================================
    # Classification
    # =========================================================================

    @staticmethod
    def classify_pole_type(name: str, description: str = "") -> str:
        """Pole category guessed from waypoint name and description keywords."""
        text = f"{name} {description}".lower()
        planned = any(k in text for k in TrackImportConfig.PLANNED_KEYWORDS)
        if any(k in text for k in TrackImportConfig.SUBSTATION_KEYWORDS):
            return "substation-portal"
        if any(k in text for k in TrackImportConfig.CONCRETE_KEYWORDS):
            return "concrete-planned" if planned else "concrete-existing"
        if any(k in text for k in TrackImportConfig.STEEL_KEYWORDS):
            return "steel-planned" if planned else "steel-existing"
        return TrackImportConfig.DEFAULT_WAYPOINT_POLE_TYPE

    @staticmethod
    def classify_line_type(name: str, description: str = "") -> str:
        """Line category guessed from track name and description keywords."""
        text = f"{name} {description}".lower()
        status = "planned" if any(k in text for k in TrackImportConfig.PLANNED_KEYWORDS) else "existing"
        if any(k in text for k in TrackImportConfig.MV_KEYWORDS):
            return f"mv-{status}"
        if any(k in text for k in TrackImportConfig.LV_KEYWORDS):
            return f"lv-{status}"
        return TrackImportConfig.DEFAULT_TRACK_LINE_TYPE

    # =========================================================================
    # Parsing
    # =========================================================================

    @staticmethod
    def from_parsed(
        data: dict[str, Any],
        canvas_width: float = CoordinateConfig.DEFAULT_CANVAS_WIDTH,
        canvas_height: float = CoordinateConfig.DEFAULT_CANVAS_HEIGHT,
    ) -> ImportedTrack:
        """Build and fit an import from the GPX reader's plain output.

        Args:
            data: {"waypoints": [...], "tracks": [...], "routes": [...]} where
                each waypoint has lat/lon and optional elevation/name/description
                and each track/route has a name and a list of points

        Missing ids and names are generated ("wpt_0", "Point 1", "Track 1",
        "Route 1"); missing categories are classified from the names.
        """
        waypoints = []
        for i, wpt_data in enumerate(data.get("waypoints", [])):
            wpt = Waypoint.from_dict(data=wpt_data)
            wpt.id = wpt.id or f"wpt_{i}"
            wpt.name = wpt.name or f"Point {i + 1}"
            if "type" not in wpt_data:
                wpt.type = TrackProjector.classify_pole_type(name=wpt.name, description=wpt.description)
            waypoints.append(wpt)

        def read_paths(items: list[dict[str, Any]], prefix: str, label: str) -> list[TrackPath]:
            paths = []
            for i, path_data in enumerate(items):
                path = TrackPath.from_dict(data=path_data)
                path.id = path.id or f"{prefix}_{i}"
                path.name = path.name or f"{label} {i + 1}"
                if "type" not in path_data:
                    path.type = TrackProjector.classify_line_type(name=path.name, description=path.description)
                paths.append(path)
            return paths

        return TrackProjector.fit(
            waypoints=waypoints,
            tracks=read_paths(items=data.get("tracks", []), prefix="trk", label="Track"),
            routes=read_paths(items=data.get("routes", []), prefix="rte", label="Route"),
            canvas_width=canvas_width,
            canvas_height=canvas_height,
        )

    # =========================================================================
    # Fitting
    # =========================================================================

    @staticmethod
    def dominant_zone(points: list[TrackPoint]) -> int:
        """UTM zone containing most points (default zone when there are none)."""
        zones = Counter(UTMProjection.zone_for_lon(lon=p.lon) for p in points)
        if not zones:
            return CoordinateConfig.DEFAULT_UTM_ZONE
        return zones.most_common(1)[0][0]

    @staticmethod
    def _fit_scale(extent: float, available: float) -> float | None:
        if extent <= 0:
            return None
        return available / extent

    @staticmethod
    def fit(
        waypoints: list[Waypoint] | None = None,
        tracks: list[TrackPath] | None = None,
        routes: list[TrackPath] | None = None,
        canvas_width: float = CoordinateConfig.DEFAULT_CANVAS_WIDTH,
        canvas_height: float = CoordinateConfig.DEFAULT_CANVAS_HEIGHT,
        padding: float = TrackImportConfig.PADDING_PX,
    ) -> ImportedTrack:
        """Project and fit parsed points into the canvas.

        Inputs are not modified; the returned ImportedTrack holds copies
        with utm_x/utm_y and x/y filled in.

        Returns:
            ImportedTrack with metadata (meters per pixel, center, zone, total distance).
        """
        imported = ImportedTrack(
            waypoints=copy.deepcopy(waypoints or []),
            tracks=copy.deepcopy(tracks or []),
            routes=copy.deepcopy(routes or []),
        )
        all_points: list[TrackPoint] = [
            *imported.waypoints,
            *(p for path in imported.tracks for p in path.points),
            *(p for path in imported.routes for p in path.points),
        ]
        zone = TrackProjector.dominant_zone(points=all_points)
        if not all_points:
            logger.warning("Track import without any points")
            imported.metadata = TrackMetadata(utm_zone=zone)
            return imported

        for point in all_points:
            point.utm_x, point.utm_y, _ = UTMProjection.lat_lon_to_utm(lat=point.lat, lon=point.lon, zone=zone)

        coords = np.array([(p.utm_x, p.utm_y) for p in all_points])
        min_x, min_y = coords.min(axis=0)
        max_x, max_y = coords.max(axis=0)

        scale_x = TrackProjector._fit_scale(extent=max_x - min_x, available=canvas_width - 2 * padding)
        scale_y = TrackProjector._fit_scale(extent=max_y - min_y, available=canvas_height - 2 * padding)
        candidates = [s for s in (scale_x, scale_y) if s is not None]
        scale = min(candidates) if candidates else CoordinateConfig.DEFAULT_SCALE

        center_x = float((min_x + max_x) / 2)
        center_y = float((min_y + max_y) / 2)
        canvas_cx = canvas_width / 2
        canvas_cy = canvas_height / 2
        for point in all_points:
            point.x = canvas_cx + (point.utm_x - center_x) * scale
            point.y = canvas_cy - (point.utm_y - center_y) * scale

        total = sum(
            GeometryKernel.distance(a=(a.utm_x, a.utm_y), b=(b.utm_x, b.utm_y))
            for path in [*imported.tracks, *imported.routes]
            for a, b in zip(path.points, path.points[1:])
        )
        imported.metadata = TrackMetadata(
            meters_per_pixel=1 / scale,
            coordinate_system="UTM",
            total_distance=round(total, LineConfig.LENGTH_DECIMALS),
            center_utm_x=center_x,
            center_utm_y=center_y,
            utm_zone=zone,
        )

        logger.info(
            f"Fitted {len(all_points)} points into {canvas_width}x{canvas_height} canvas: "
            f"zone={zone} scale={scale:.6f} px/m center=({center_x:.1f}, {center_y:.1f})"
        )
        return imported
