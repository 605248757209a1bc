"""bezcanvas: De Casteljau Bezier visualizer and pixel pattern sketches."""

from bezcanvas.core.bezier import evaluate_bezier, render_hierarchy
from bezcanvas.core.control_points import ControlPointSet
from bezcanvas.core.geometry import Point
from bezcanvas.core.raster import PixelCanvas

__version__ = "0.1.0"

__all__ = [
    "ControlPointSet",
    "PixelCanvas",
    "Point",
    "evaluate_bezier",
    "render_hierarchy",
]
