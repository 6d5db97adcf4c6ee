"""
Geometry primitives shared by the layouts, the connector router and the
quality analyzer.

Angles are in radians, measured clockwise from +x because the y axis of
the drawing grows downwards.
"""

from __future__ import annotations

import math
from typing import Optional

from diagram_layout.models import Handle, Point, Rect, ShapeBounds, ShapeKind


EPSILON = 1e-9

# Dominance ratio for picking a horizontal / vertical handle pair.
ANCHOR_BIAS = 1.5

_HANDLE_NORMALS: dict[Handle, tuple[float, float]] = {
    Handle.TOP: (0.0, -1.0),
    Handle.BOTTOM: (0.0, 1.0),
    Handle.LEFT: (-1.0, 0.0),
    Handle.RIGHT: (1.0, 0.0),
    Handle.CENTER: (0.0, 0.0),
}

_OPPOSITE: dict[Handle, Handle] = {
    Handle.TOP: Handle.BOTTOM,
    Handle.BOTTOM: Handle.TOP,
    Handle.LEFT: Handle.RIGHT,
    Handle.RIGHT: Handle.LEFT,
    Handle.CENTER: Handle.CENTER,
}


# ---------------------------------------------------------------------------
# Basic helpers
# ---------------------------------------------------------------------------

def center(rect: Rect) -> Point:
    return Point(rect.cx, rect.cy)


def distance(a: Point, b: Point) -> float:
    return math.hypot(b.x - a.x, b.y - a.y)


def angle_between(a: Point, b: Point) -> float:
    """Direction of the vector a → b."""
    return math.atan2(b.y - a.y, b.x - a.x)


def normalize_angle(angle: float) -> float:
    """Fold *angle* into [0, 2π)."""
    folded = math.fmod(angle, 2 * math.pi)
    if folded < 0:
        folded += 2 * math.pi
    # fmod of a tiny negative value can round up to exactly 2π
    return 0.0 if folded >= 2 * math.pi else folded


def normalize(dx: float, dy: float) -> tuple[float, float]:
    """Unit vector in the direction (dx, dy); (0, 0) for a null vector."""
    length = math.hypot(dx, dy)
    if length < EPSILON:
        return 0.0, 0.0
    return dx / length, dy / length


def lerp(a: Point, b: Point, t: float) -> Point:
    return Point(a.x + (b.x - a.x) * t, a.y + (b.y - a.y) * t)


def midpoint(a: Point, b: Point) -> Point:
    return lerp(a, b, 0.5)


def handle_direction(handle: Handle) -> tuple[float, float]:
    """Outward unit normal of a side handle ((0, 0) for center)."""
    return _HANDLE_NORMALS[handle]


def opposite_handle(handle: Handle) -> Handle:
    return _OPPOSITE[handle]


# ---------------------------------------------------------------------------
# Anchors
# ---------------------------------------------------------------------------

def anchor_point(shape: Rect, handle: Handle) -> Point:
    """Midpoint of the requested side of *shape* (centroid for CENTER)."""
    if handle == Handle.TOP:
        return Point(shape.cx, shape.y)
    if handle == Handle.BOTTOM:
        return Point(shape.cx, shape.bottom)
    if handle == Handle.LEFT:
        return Point(shape.x, shape.cy)
    if handle == Handle.RIGHT:
        return Point(shape.right, shape.cy)
    return Point(shape.cx, shape.cy)


def edge_intersection(shape: ShapeBounds, angle: float) -> Point:
    """Point where a ray from the centroid at *angle* leaves the outline.

    Rectangles compare |tan θ| with the half-extent ratio to pick the
    side pair that is hit; diamonds solve |dx|/hw + |dy|/hh = 1; ellipses
    use the parametric form.
    """
    cx, cy = shape.cx, shape.cy
    hw = max(abs(shape.width) / 2, EPSILON)
    hh = max(abs(shape.height) / 2, EPSILON)
    theta = normalize_angle(angle)
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)

    if shape.kind == ShapeKind.ELLIPSE:
        return Point(cx + hw * cos_t, cy + hh * sin_t)

    if shape.kind == ShapeKind.DIAMOND:
        t = 1.0 / (abs(cos_t) / hw + abs(sin_t) / hh)
        return Point(cx + t * cos_t, cy + t * sin_t)

    # Rectangle: the left/right pair is hit while |tan θ| <= hh / hw.
    if abs(sin_t) * hw <= abs(cos_t) * hh:
        x = cx + math.copysign(hw, cos_t)
        y = cy + math.copysign(hw, cos_t) * sin_t / cos_t
        return Point(x, y)
    y = cy + math.copysign(hh, sin_t)
    x = cx + math.copysign(hh, sin_t) * cos_t / sin_t
    return Point(x, y)


def auto_anchor(source: Rect, target: Rect) -> Optional[tuple[Handle, Handle]]:
    """Pick a dominant-axis handle pair, or None when the shapes sit diagonally.

    A pair is only returned when one axis outweighs the other by
    ``ANCHOR_BIAS``; callers fall back to ``edge_intersection`` (or
    ``auto_handles``) for the diagonal case.
    """
    dx = target.cx - source.cx
    dy = target.cy - source.cy

    if abs(dx) > abs(dy) * ANCHOR_BIAS:
        return (Handle.RIGHT, Handle.LEFT) if dx >= 0 else (Handle.LEFT, Handle.RIGHT)
    if abs(dy) > abs(dx) * ANCHOR_BIAS:
        return (Handle.BOTTOM, Handle.TOP) if dy >= 0 else (Handle.TOP, Handle.BOTTOM)
    return None


def auto_handles(source: Rect, target: Rect) -> tuple[Handle, Handle]:
    """Always pick a side pair: vertical if |Δy| > |Δx|, else horizontal."""
    dx = target.cx - source.cx
    dy = target.cy - source.cy

    if abs(dy) > abs(dx):
        return (Handle.BOTTOM, Handle.TOP) if dy > 0 else (Handle.TOP, Handle.BOTTOM)
    return (Handle.RIGHT, Handle.LEFT) if dx >= 0 else (Handle.LEFT, Handle.RIGHT)
