"""Configuration constants for Powerline Planner.

All configurable parameters are centralized here for easy tuning.

Classes:
    EntityPrefixes: ID prefixes for drawing entities
    CoordinateConfig: Canvas/real-world coordinate defaults
    UTMConfig: WGS84 ellipsoid and UTM projection parameters
    GeometryConfig: Numerical tolerances and hit-test radii
    SnapConfig: Snap strategies, radius limits, cache and throttle
    ElementTypes: Pole and line categories
    LineConfig: Sag defaults and length rounding
    DimensionConfig: Dimension styles and presets
    UndoConfig: Command history size
    ViewConfig: Pan/zoom limits
    ToolNames: Editor tool identifiers
    TrackImportConfig: Bounds fit for imported tracks
"""


class EntityPrefixes:
    """ID prefixes for drawing entities."""

    POLE = "pole"
    LINE = "line"
    ANGLE = "angle"
    ALIGNED = "aligned"


class CoordinateConfig:
    """Defaults for the canvas <-> projected coordinate mapping.

    Scale is expressed in pixels per meter, so meters per pixel = 1 / scale.
    """

    # Fallback reference when no entity carries projected coordinates
    DEFAULT_UTM_ZONE = 33
    DEFAULT_CENTER_UTM_X = 500_000.0  # Central meridian (false easting)
    DEFAULT_CENTER_UTM_Y = 0.0
    DEFAULT_SCALE = 1.0  # 1 pixel = 1 meter

    # Zero or negative scale is clamped to this before any division
    MIN_SCALE = 1e-9

    # Canvas size used to place the canvas-space center in real mode
    DEFAULT_CANVAS_WIDTH = 1200
    DEFAULT_CANVAS_HEIGHT = 800

    # Expected round-trip accuracy canvas -> projected -> canvas
    ROUNDTRIP_TOLERANCE = 1e-6


class UTMConfig:
    """WGS84 ellipsoid and Universal Transverse Mercator parameters."""

    SEMI_MAJOR_AXIS_M = 6_378_137.0
    ECCENTRICITY = 0.0818191908426
    SCALE_FACTOR_K0 = 0.9996
    FALSE_EASTING_M = 500_000.0
    # Southern hemisphere northings are offset by this value
    SOUTHERN_FALSE_NORTHING_M = 10_000_000.0
    ZONE_WIDTH_DEG = 6
    MIN_ZONE = 1
    MAX_ZONE = 60

    # EPSG codes: WGS84 geographic and WGS84 / UTM north zones
    EPSG_NORTH_TEMPLATE = "EPSG:326{zone:02d}"
    EPSG_WGS84 = "EPSG:4326"


class GeometryConfig:
    """Numerical tolerances and hit-test radii (drawing-plane units)."""

    # Determinant below this means lines are parallel
    PARALLEL_EPSILON = 1e-10

    # Point-on-line test: |AP| + |PB| - |AB| must stay below this
    LINE_HIT_TOLERANCE = 5.0

    # Click within this radius of a pole center hits the pole
    POLE_HIT_RADIUS = 15.0


class SnapConfig:
    """Snap engine configuration."""

    DEFAULT_DISTANCE = 15.0
    MIN_DISTANCE = 5.0
    MAX_DISTANCE = 50.0

    ENDPOINTS = "endpoints"
    INTERSECTIONS = "intersections"
    MIDPOINTS = "midpoints"
    PERPENDICULAR = "perpendicular"
    GRID = "grid"
    CENTER = "center"
    PARALLEL = "parallel"

    # Fixed evaluation order, strongest tier first
    PRIORITY = (ENDPOINTS, INTERSECTIONS, MIDPOINTS, PERPENDICULAR, GRID, CENTER, PARALLEL)

    # A hit in one of these tiers ends the search
    SHORT_CIRCUIT_TIERS = (ENDPOINTS, INTERSECTIONS)

    # Cached results are reused for this long (one frame at 60 Hz)
    THROTTLE_S = 0.016
    CACHE_SIZE = 100

    PARALLEL_TOLERANCE_DEG = 5.0

    DEFAULT_GRID_SIZE = 20.0


assert SnapConfig.MIN_DISTANCE <= SnapConfig.DEFAULT_DISTANCE <= SnapConfig.MAX_DISTANCE, "Snap distance out of range"
assert set(SnapConfig.SHORT_CIRCUIT_TIERS) <= set(SnapConfig.PRIORITY), "Short-circuit tiers must be snap types"


class ElementTypes:
    """Pole and line categories."""

    POLE_TYPES = (
        "steel-existing",
        "steel-planned",
        "concrete-existing",
        "concrete-planned",
        "substation-portal",
    )
    LINE_TYPES = (
        "mv-existing",
        "mv-planned",
        "lv-existing",
        "lv-planned",
    )

    DEFAULT_POLE_TYPE = "steel-planned"
    DEFAULT_LINE_TYPE = "mv-planned"

    POLE = "pole"
    LINE = "line"
    DIMENSION = "dimension"


assert ElementTypes.DEFAULT_POLE_TYPE in ElementTypes.POLE_TYPES, "Invalid default pole type"
assert ElementTypes.DEFAULT_LINE_TYPE in ElementTypes.LINE_TYPES, "Invalid default line type"


class LineConfig:
    """Line sag and length settings."""

    # Sag depth as a fraction of the chord length (0.01 = 1%)
    DEFAULT_SAG_VALUE = 0.01
    SAG_PERCENTAGE = "percentage"
    SAG_ABSOLUTE = "absolute"
    SAG_KINDS = (SAG_PERCENTAGE, SAG_ABSOLUTE)

    PROFILE_SAMPLES = 20

    # Lengths stored rounded to centimetres
    LENGTH_DECIMALS = 2


class DimensionConfig:
    """Dimension annotation styles.

    Style records are opaque to the geometry; only unit and precision
    influence the formatted text.
    """

    ANGLE = "angle"
    ALIGNED = "aligned"
    KINDS = (ANGLE, ALIGNED)

    DEFAULT_STYLE = {
        "text_size": 14,
        "text_color": "#000000",
        "line_color": "#0066cc",
        "line_width": 1,
        "line_style": "solid",
        "line_opacity": 100,
        "arc_size": 30,
        "font_family": "Arial",
        "text_style": "normal",
        "unit": "°",
        "precision": 1,
        "prefix": "",
        "suffix": "",
        "show_background": True,
        "show_arrows": False,
        "background_color": "#ffffff",
        "background_opacity": 80,
        "text_opacity": 100,
        "text_offset": 5,
    }

    ALIGNED_STYLE = {**DEFAULT_STYLE, "unit": "m"}

    ANGLE_UNITS = ("°", "rad", "grad")

    # Geometry payload layouts
    METHOD_THREE_POINT = "three_point"  # points = (p1, vertex, p3)
    METHOD_TWO_LINE = "two_line"  # points = (a1, a2, b1, b2), vertex = intersection
    METHOD_TWO_POINT = "two_point"  # points = (start, end)
    METHOD_LINE = "line"  # points = (line start, line end)

    PRESETS = {
        "minimal": {
            "text_size": 12,
            "text_color": "#333333",
            "line_color": "#666666",
            "line_width": 1,
            "line_style": "solid",
            "arc_size": 30,
            "font_family": "Arial",
            "text_style": "normal",
            "precision": 1,
            "prefix": "",
            "suffix": "",
            "show_background": False,
            "show_arrows": False,
            "background_color": "#ffffff",
            "background_opacity": 80,
            "text_opacity": 100,
            "text_offset": 5,
        },
        "standard": {
            "text_size": 14,
            "text_color": "#000000",
            "line_color": "#0066cc",
            "line_width": 2,
            "line_style": "solid",
            "arc_size": 40,
            "font_family": "Arial",
            "text_style": "normal",
            "precision": 1,
            "prefix": "",
            "suffix": "",
            "show_background": True,
            "show_arrows": True,
            "background_color": "#ffffff",
            "background_opacity": 90,
            "text_opacity": 100,
            "text_offset": 10,
        },
        "technical": {
            "text_size": 12,
            "text_color": "#000000",
            "line_color": "#ff0000",
            "line_width": 1,
            "line_style": "solid",
            "arc_size": 35,
            "font_family": "Courier New",
            "text_style": "normal",
            "precision": 2,
            "prefix": "∠",
            "suffix": "",
            "show_background": True,
            "show_arrows": True,
            "background_color": "#ffffcc",
            "background_opacity": 85,
            "text_opacity": 100,
            "text_offset": 8,
        },
        "bold": {
            "text_size": 16,
            "text_color": "#ffffff",
            "line_color": "#ff6600",
            "line_width": 3,
            "line_style": "solid",
            "arc_size": 50,
            "font_family": "Arial",
            "text_style": "bold",
            "precision": 0,
            "prefix": "",
            "suffix": "",
            "show_background": True,
            "show_arrows": True,
            "background_color": "#333333",
            "background_opacity": 95,
            "text_opacity": 100,
            "text_offset": 12,
        },
    }


assert DimensionConfig.DEFAULT_STYLE["unit"] in DimensionConfig.ANGLE_UNITS, "Angle default unit must be an angle unit"
assert all(
    set(preset) <= set(DimensionConfig.DEFAULT_STYLE) for preset in DimensionConfig.PRESETS.values()
), "Presets may only use known style keys"


class UndoConfig:
    """Undo system configuration."""

    # Maximum number of commands kept in history
    # Older commands are discarded when limit is reached
    MAX_UNDO_STACK_SIZE = 50


class ViewConfig:
    """Pan/zoom limits for pointer de-transformation."""

    MIN_ZOOM = 0.1
    MAX_ZOOM = 5.0
    DEFAULT_ZOOM = 1.0

    WHEEL_ZOOM_IN = 1.1
    WHEEL_ZOOM_OUT = 0.9
    BUTTON_ZOOM_STEP = 1.2

    # Precise line entry rounding (length to cm, angle to whole degrees)
    PRECISE_LENGTH_DECIMALS = 2
    PRECISE_ANGLE_DECIMALS = 0


assert ViewConfig.MIN_ZOOM <= ViewConfig.DEFAULT_ZOOM <= ViewConfig.MAX_ZOOM, "Default zoom out of range"


class ToolNames:
    """Editor tools selectable in a drawing session."""

    SELECT = "select"
    POLE = "pole"
    LINE = "line"
    ANGLE_DIMENSION = "angle_dimension"
    ALIGNED_DIMENSION = "aligned_dimension"

    ALL = (SELECT, POLE, LINE, ANGLE_DIMENSION, ALIGNED_DIMENSION)


class TrackImportConfig:
    """Fitting imported GPS tracks into the canvas."""

    PADDING_PX = 50

    # Keywords (lowercase) in track/waypoint names that select element categories
    SUBSTATION_KEYWORDS = ("substation", "portal")
    CONCRETE_KEYWORDS = ("concrete",)
    STEEL_KEYWORDS = ("steel",)
    PLANNED_KEYWORDS = ("plan",)
    MV_KEYWORDS = ("mv", "medium", "20kv")
    LV_KEYWORDS = ("lv", "low", "400v")

    DEFAULT_WAYPOINT_POLE_TYPE = "steel-existing"
    DEFAULT_TRACK_LINE_TYPE = "mv-existing"


assert TrackImportConfig.DEFAULT_WAYPOINT_POLE_TYPE in ElementTypes.POLE_TYPES, "Invalid waypoint pole type"
assert TrackImportConfig.DEFAULT_TRACK_LINE_TYPE in ElementTypes.LINE_TYPES, "Invalid track line type"
