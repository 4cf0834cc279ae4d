"""Planar geometry primitives for the drawing plane.

Provides pure helper functions used by snapping, hit testing and dimensioning:
- Segment/segment and infinite line intersection
- Point-to-segment distance and on-segment test
- Perpendicular foot (clamped to the segment)
- Parallel test with angular tolerance
- Vector angles (signed-agnostic and unsigned line angles)

Degenerate input (zero-length segments, parallel lines, zero vectors) never
raises: functions return None or 0.0 instead.
"""

from math import acos, cos, degrees, hypot, radians, sin, sqrt

from powerline_planner.constants import GeometryConfig

# Drawing-plane point (x, y); canvas y grows downward
XY = tuple[float, float]


class GeometryKernel:
    """Static methods for geometry on the drawing plane.

    Points are (x, y) tuples in untransformed drawing-plane units.
    Angles are returned in degrees.
    """

    PARALLEL_EPSILON = GeometryConfig.PARALLEL_EPSILON

    @staticmethod
    def distance(a: XY, b: XY) -> float:
        """Euclidean distance between two points."""
        return hypot(b[0] - a[0], b[1] - a[1])

    @staticmethod
    def distance_3d(dx: float, dy: float, dz: float = 0.0) -> float:
        """Length of a 3D vector given its components."""
        return sqrt(dx * dx + dy * dy + dz * dz)

    @staticmethod
    def midpoint(a: XY, b: XY) -> XY:
        """Midpoint of segment a-b."""
        return ((a[0] + b[0]) / 2, (a[1] + b[1]) / 2)

    @staticmethod
    def _intersection_params(a1: XY, a2: XY, b1: XY, b2: XY) -> tuple[float, float] | None:
        """Parametric intersection (t, u) of lines a1-a2 and b1-b2, None if parallel."""
        denom = (a1[0] - a2[0]) * (b1[1] - b2[1]) - (a1[1] - a2[1]) * (b1[0] - b2[0])
        if abs(denom) < GeometryConfig.PARALLEL_EPSILON:
            return None
        t = ((a1[0] - b1[0]) * (b1[1] - b2[1]) - (a1[1] - b1[1]) * (b1[0] - b2[0])) / denom
        u = -((a1[0] - a2[0]) * (a1[1] - b1[1]) - (a1[1] - a2[1]) * (a1[0] - b1[0])) / denom
        return t, u

    @staticmethod
    def segment_intersection(a1: XY, a2: XY, b1: XY, b2: XY) -> XY | None:
        """Intersection point of two finite segments.

        Args:
            a1, a2: Endpoints of the first segment
            b1, b2: Endpoints of the second segment

        Returns:
            Intersection point, or None if the segments are parallel or the
            crossing lies outside either segment.
        """
        params = GeometryKernel._intersection_params(a1=a1, a2=a2, b1=b1, b2=b2)
        if params is None:
            return None
        t, u = params
        if not (0 <= t <= 1 and 0 <= u <= 1):
            return None
        return (a1[0] + t * (a2[0] - a1[0]), a1[1] + t * (a2[1] - a1[1]))

    @staticmethod
    def line_intersection(a1: XY, a2: XY, b1: XY, b2: XY) -> XY | None:
        """Intersection point of two infinite lines through the given points.

        Returns:
            Intersection point, or None if the lines are parallel.
        """
        params = GeometryKernel._intersection_params(a1=a1, a2=a2, b1=b1, b2=b2)
        if params is None:
            return None
        t, _ = params
        return (a1[0] + t * (a2[0] - a1[0]), a1[1] + t * (a2[1] - a1[1]))

    @staticmethod
    def perpendicular_foot(point: XY, seg_start: XY, seg_end: XY) -> XY | None:
        """Project a point onto a segment, clamped to the segment.

        Returns:
            Closest point on the segment, or None for a zero-length segment.
        """
        dx = seg_end[0] - seg_start[0]
        dy = seg_end[1] - seg_start[1]
        length_sq = dx * dx + dy * dy
        if length_sq == 0:
            return None
        t = ((point[0] - seg_start[0]) * dx + (point[1] - seg_start[1]) * dy) / length_sq
        t = max(0.0, min(1.0, t))
        return (seg_start[0] + t * dx, seg_start[1] + t * dy)

    @staticmethod
    def point_segment_distance(point: XY, seg_start: XY, seg_end: XY) -> float:
        """Shortest distance from a point to a segment.

        A zero-length segment degenerates to point distance.
        """
        foot = GeometryKernel.perpendicular_foot(point=point, seg_start=seg_start, seg_end=seg_end)
        if foot is None:
            return GeometryKernel.distance(a=point, b=seg_start)
        return GeometryKernel.distance(a=point, b=foot)

    @staticmethod
    def is_point_on_segment(
        point: XY,
        seg_start: XY,
        seg_end: XY,
        tolerance: float = GeometryConfig.LINE_HIT_TOLERANCE,
    ) -> bool:
        """Check whether a point lies on a segment.

        The test is |AP| + |PB| - |AB| < tolerance, which describes an
        ellipse around the segment rather than a constant-width band.
        """
        ap = GeometryKernel.distance(a=seg_start, b=point)
        pb = GeometryKernel.distance(a=point, b=seg_end)
        ab = GeometryKernel.distance(a=seg_start, b=seg_end)
        return abs(ap + pb - ab) < tolerance

    @staticmethod
    def angle_between(v1: XY, v2: XY) -> float:
        """Angle between two vectors in degrees, in [0, 180].

        Returns 0.0 when either vector has zero magnitude.
        """
        mag1 = hypot(v1[0], v1[1])
        mag2 = hypot(v2[0], v2[1])
        if mag1 * mag2 == 0:
            return 0.0
        cos_angle = (v1[0] * v2[0] + v1[1] * v2[1]) / (mag1 * mag2)
        return degrees(acos(max(-1.0, min(1.0, cos_angle))))

    @staticmethod
    def angle_at_vertex(p1: XY, vertex: XY, p3: XY) -> float:
        """Angle p1-vertex-p3 in degrees, in [0, 180]."""
        v1 = (p1[0] - vertex[0], p1[1] - vertex[1])
        v2 = (p3[0] - vertex[0], p3[1] - vertex[1])
        return GeometryKernel.angle_between(v1=v1, v2=v2)

    @staticmethod
    def unsigned_line_angle(a1: XY, a2: XY, b1: XY, b2: XY) -> float:
        """Angle between the directions of two lines, ignoring orientation.

        Uses the absolute dot product, so the result lies in [0, 90].
        Returns 0.0 when either line has zero length.
        """
        v1 = (a2[0] - a1[0], a2[1] - a1[1])
        v2 = (b2[0] - b1[0], b2[1] - b1[1])
        mag1 = hypot(v1[0], v1[1])
        mag2 = hypot(v2[0], v2[1])
        if mag1 * mag2 == 0:
            return 0.0
        cos_angle = abs(v1[0] * v2[0] + v1[1] * v2[1]) / (mag1 * mag2)
        return degrees(acos(min(1.0, cos_angle)))

    @staticmethod
    def is_parallel(v1: XY, v2: XY, tolerance_deg: float) -> bool:
        """Check whether two directions are parallel or anti-parallel within tolerance.

        Zero vectors are never parallel to anything.
        """
        if hypot(v1[0], v1[1]) == 0 or hypot(v2[0], v2[1]) == 0:
            return False
        angle = GeometryKernel.angle_between(v1=v1, v2=v2)
        return angle < tolerance_deg or angle > 180.0 - tolerance_deg

    @staticmethod
    def nearest_grid_point(point: XY, grid_size: float) -> XY:
        """Nearest grid intersection for a square grid anchored at the origin."""
        return (round(point[0] / grid_size) * grid_size, round(point[1] / grid_size) * grid_size)

    @staticmethod
    def polar_offset(origin: XY, angle_deg: float, length: float) -> XY:
        """Point at distance `length` from origin at a drawing-plane angle.

        Angle 0 points along +x; positive angles turn toward +y (down on screen).
        """
        angle = radians(angle_deg)
        return (origin[0] + length * cos(angle), origin[1] + length * sin(angle))
