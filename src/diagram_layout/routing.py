"""
Connector path router.

Turns a ``Connection`` between two positioned shapes into SVG path data,
the polyline / control polygon behind it, a label position, end angles
and arrowhead geometry.  Three path kinds are supported:

- straight: one segment between the anchors
- bezier: cubic curve whose control points leave along the handle normals
- orthogonal ("smoothstep"): Manhattan route with rounded corners
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional

from diagram_layout.geometry import (
    EPSILON,
    anchor_point,
    angle_between,
    auto_anchor,
    auto_handles,
    edge_intersection,
    handle_direction,
    midpoint,
)
from diagram_layout.models import (
    ArrowHead,
    Connection,
    Handle,
    PathKind,
    Point,
    Rect,
    ShapeBounds,
    StrokeStyle,
)

logger = logging.getLogger("diagram-layout")

BEZIER_MAX_OFFSET = 100

_CANONICAL_VERTICAL = {(Handle.BOTTOM, Handle.TOP), (Handle.TOP, Handle.BOTTOM)}
_CANONICAL_HORIZONTAL = {(Handle.RIGHT, Handle.LEFT), (Handle.LEFT, Handle.RIGHT)}


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class ArrowGeometry:
    """Shape of one arrowhead.

    ``arrow``: ``points`` is the triangle (tip first).  ``dot``: a circle
    at ``center`` with ``radius``.  ``bar``: ``points`` are the two ends of
    a segment perpendicular to the path, drawn ``stroke_width`` wide.
    """
    kind: ArrowHead
    points: list[Point] = field(default_factory=list)
    center: Optional[Point] = None
    radius: float = 0
    stroke_width: float = 0


@dataclass
class ConnectorPath:
    d: str
    points: list[Point]
    start: Point
    end: Point
    label: Point
    source_handle: Optional[Handle]
    target_handle: Optional[Handle]
    start_angle: float
    end_angle: float
    corner_radii: list[float] = field(default_factory=list)
    arrow_start: Optional[ArrowGeometry] = None
    arrow_end: Optional[ArrowGeometry] = None
    label_box: Optional[Rect] = None
    dash: Optional[str] = None


# ---------------------------------------------------------------------------
# Path data helpers
# ---------------------------------------------------------------------------

def _fmt(value: float) -> str:
    # Shortest repr that round-trips, so the path hits the anchors exactly
    value = float(value)
    if value == 0:
        return "0"
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _xy(p: Point) -> str:
    return f"{_fmt(p.x)} {_fmt(p.y)}"


def simplify_points(points: list[Point]) -> list[Point]:
    """Drop repeated points and interior points that lie on a straight run."""
    deduped: list[Point] = []
    for p in points:
        if deduped and abs(p.x - deduped[-1].x) < EPSILON and abs(p.y - deduped[-1].y) < EPSILON:
            continue
        deduped.append(p)
    if len(deduped) <= 2:
        return deduped

    result = [deduped[0]]
    for i in range(1, len(deduped) - 1):
        prev, curr, nxt = result[-1], deduped[i], deduped[i + 1]
        cross = (curr.x - prev.x) * (nxt.y - curr.y) - (curr.y - prev.y) * (nxt.x - curr.x)
        if abs(cross) > EPSILON:
            result.append(curr)
    result.append(deduped[-1])
    return result


def build_rounded_path(points: list[Point], radius: float) -> tuple[str, list[float]]:
    """SVG path through *points* with each interior corner rounded.

    Each corner gets a quadratic arc of radius
    ``min(radius, shorter adjacent segment / 2)`` so neighbouring arcs can
    never overlap.  Returns the path data and the radius used per corner.
    """
    if len(points) < 2:
        return "", []
    if len(points) == 2:
        return f"M {_xy(points[0])} L {_xy(points[1])}", []

    parts = [f"M {_xy(points[0])}"]
    radii: list[float] = []
    for i in range(1, len(points) - 1):
        prev, curr, nxt = points[i - 1], points[i], points[i + 1]
        v1 = (curr.x - prev.x, curr.y - prev.y)
        v2 = (nxt.x - curr.x, nxt.y - curr.y)
        len1 = math.hypot(*v1)
        len2 = math.hypot(*v2)
        if len1 < EPSILON or len2 < EPSILON:
            parts.append(f"L {_xy(curr)}")
            radii.append(0.0)
            continue
        r = min(radius, min(len1, len2) / 2)
        arc_start = Point(curr.x - v1[0] / len1 * r, curr.y - v1[1] / len1 * r)
        arc_end = Point(curr.x + v2[0] / len2 * r, curr.y + v2[1] / len2 * r)
        parts.append(f"L {_xy(arc_start)}")
        parts.append(f"Q {_xy(curr)} {_xy(arc_end)}")
        radii.append(r)
    parts.append(f"L {_xy(points[-1])}")
    return " ".join(parts), radii


# ---------------------------------------------------------------------------
# Path kinds
# ---------------------------------------------------------------------------

def straight_path(start: Point, end: Point) -> tuple[str, list[Point], Point]:
    return f"M {_xy(start)} L {_xy(end)}", [start, end], midpoint(start, end)


def bezier_path(
    start: Point,
    end: Point,
    source_handle: Handle,
    target_handle: Handle,
) -> tuple[str, list[Point], Point]:
    """Cubic curve; control points sit min(dist / 2, 100) out along each normal.

    The label goes on the curve at t = 0.5.
    """
    offset = min(start.distance_to(end) * 0.5, BEZIER_MAX_OFFSET)
    sdx, sdy = handle_direction(source_handle)
    tdx, tdy = handle_direction(target_handle)
    c1 = Point(start.x + sdx * offset, start.y + sdy * offset)
    c2 = Point(end.x + tdx * offset, end.y + tdy * offset)
    label = Point(
        (start.x + 3 * c1.x + 3 * c2.x + end.x) / 8,
        (start.y + 3 * c1.y + 3 * c2.y + end.y) / 8,
    )
    d = f"M {_xy(start)} C {_xy(c1)}, {_xy(c2)}, {_xy(end)}"
    return d, [start, c1, c2, end], label


def orthogonal_points(
    start: Point,
    end: Point,
    source_handle: Handle,
    target_handle: Handle,
) -> list[Point]:
    """Manhattan waypoints from *start* to *end* (before corner rounding)."""
    pair = (source_handle, target_handle)
    if pair in _CANONICAL_VERTICAL:
        mid_y = start.y + (end.y - start.y) / 2
        return simplify_points([start, Point(start.x, mid_y), Point(end.x, mid_y), end])
    if pair in _CANONICAL_HORIZONTAL:
        mid_x = start.x + (end.x - start.x) / 2
        return simplify_points([start, Point(mid_x, start.y), Point(mid_x, end.y), end])

    # Step out along each handle normal, then join the two stubs.
    offset = max(abs(end.x - start.x), abs(end.y - start.y)) * 0.3 + 20
    sdx, sdy = handle_direction(source_handle)
    tdx, tdy = handle_direction(target_handle)
    p1 = Point(start.x + sdx * offset, start.y + sdy * offset)
    p2 = Point(end.x + tdx * offset, end.y + tdy * offset)
    source_vertical = sdy != 0
    target_vertical = tdy != 0

    if source_vertical and target_vertical:
        # top/top or bottom/bottom: run along the outermost stub
        line_y = min(p1.y, p2.y) if sdy < 0 else max(p1.y, p2.y)
        points = [start, Point(start.x, line_y), Point(end.x, line_y), end]
    elif not source_vertical and not target_vertical:
        line_x = min(p1.x, p2.x) if sdx < 0 else max(p1.x, p2.x)
        points = [start, Point(line_x, start.y), Point(line_x, end.y), end]
    elif source_vertical:
        points = [start, p1, Point(p2.x, p1.y), p2, end]
    else:
        points = [start, p1, Point(p1.x, p2.y), p2, end]
    return simplify_points(points)


def orthogonal_path(
    start: Point,
    end: Point,
    source_handle: Handle,
    target_handle: Handle,
    corner_radius: float = 8,
) -> tuple[str, list[Point], Point, list[float]]:
    points = orthogonal_points(start, end, source_handle, target_handle)
    d, radii = build_rounded_path(points, corner_radius)
    if len(points) < 2:
        return d, points, start, radii
    mid = len(points) // 2
    return d, points, midpoint(points[mid - 1], points[mid]), radii


# ---------------------------------------------------------------------------
# Arrowheads
# ---------------------------------------------------------------------------

_DASH_PATTERNS = {
    StrokeStyle.DASHED: "8 4",
    StrokeStyle.DOTTED: "2 4",
}


def dash_array(style: StrokeStyle) -> Optional[str]:
    """SVG stroke-dasharray for *style*; None for a solid line."""
    return _DASH_PATTERNS.get(style)


def _rotate(p: Point, pivot: Point, angle: float) -> Point:
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    dx = p.x - pivot.x
    dy = p.y - pivot.y
    return Point(pivot.x + dx * cos_a - dy * sin_a, pivot.y + dx * sin_a + dy * cos_a)


def arrow_head_geometry(
    kind: ArrowHead,
    tip: Point,
    angle: float,
    stroke_width: float = 2,
) -> Optional[ArrowGeometry]:
    """Arrowhead at *tip* pointing along *angle*; size is 3 × stroke width."""
    size = stroke_width * 3
    if kind == ArrowHead.ARROW:
        corners = [tip, Point(tip.x - size * 2, tip.y - size), Point(tip.x - size * 2, tip.y + size)]
        return ArrowGeometry(kind, points=[_rotate(p, tip, angle) for p in corners])
    if kind == ArrowHead.DOT:
        return ArrowGeometry(kind, center=tip, radius=size)
    if kind == ArrowHead.BAR:
        half = size * 2
        px = math.cos(angle + math.pi / 2)
        py = math.sin(angle + math.pi / 2)
        return ArrowGeometry(
            kind,
            points=[Point(tip.x + px * half, tip.y + py * half), Point(tip.x - px * half, tip.y - py * half)],
            stroke_width=stroke_width * 1.5,
        )
    return None


def _arrival_angle(origin: Point, tip: Point, kind: PathKind, handle: Optional[Handle]) -> float:
    """Direction of travel when the path reaches *tip*."""
    if kind != PathKind.STRAIGHT and handle is not None:
        dx, dy = handle_direction(handle)
        if dx or dy:
            return math.atan2(-dy, -dx)
    return angle_between(origin, tip)


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------

def resolve_handles(
    source: Rect,
    target: Rect,
    connection: Connection,
) -> tuple[Optional[Handle], Optional[Handle]]:
    """Explicit handles win; missing ones come from the relative position.

    Returns ``(None, None)`` only for a straight path between diagonally
    placed shapes, where the anchors are exact boundary points instead.
    ``Handle.CENTER`` is treated as unset.
    """
    source_handle = connection.source_handle if connection.source_handle != Handle.CENTER else None
    target_handle = connection.target_handle if connection.target_handle != Handle.CENTER else None
    if source_handle is not None and target_handle is not None:
        return source_handle, target_handle

    pair = auto_anchor(source, target)
    if pair is None:
        if source_handle is None and target_handle is None and connection.path_kind == PathKind.STRAIGHT:
            return None, None
        pair = auto_handles(source, target)
    return source_handle or pair[0], target_handle or pair[1]


def route_connection(
    source: Optional[ShapeBounds],
    target: Optional[ShapeBounds],
    connection: Connection,
) -> Optional[ConnectorPath]:
    """Compute the renderable path for *connection*, or None if a shape is missing."""
    if source is None or target is None:
        return None

    source_handle, target_handle = resolve_handles(source, target, connection)
    if source_handle is None or target_handle is None:
        angle = angle_between(source.center, target.center)
        start = edge_intersection(source, angle)
        end = edge_intersection(target, angle + math.pi)
    else:
        start = anchor_point(source, source_handle)
        end = anchor_point(target, target_handle)

    radii: list[float] = []
    kind = connection.path_kind
    if kind == PathKind.STRAIGHT:
        d, points, label = straight_path(start, end)
    elif kind == PathKind.BEZIER:
        d, points, label = bezier_path(start, end, source_handle, target_handle)
    else:
        d, points, label, radii = orthogonal_path(
            start, end, source_handle, target_handle, connection.corner_radius,
        )

    end_angle = _arrival_angle(start, end, kind, target_handle)
    start_angle = _arrival_angle(end, start, kind, source_handle)

    label_box = None
    if connection.label:
        width = len(connection.label) * 7 + 8
        label_box = Rect(label.x - width / 2, label.y - 10, width, 20)

    return ConnectorPath(
        d=d,
        points=points,
        start=start,
        end=end,
        label=label,
        source_handle=source_handle,
        target_handle=target_handle,
        start_angle=start_angle,
        end_angle=end_angle,
        corner_radii=radii,
        arrow_start=arrow_head_geometry(
            connection.arrow_head_start, start, start_angle, connection.stroke_width),
        arrow_end=arrow_head_geometry(
            connection.arrow_head_end, end, end_angle, connection.stroke_width),
        label_box=label_box,
        dash=dash_array(connection.stroke_style),
    )


def route_connections(
    shapes: dict[str, ShapeBounds],
    connections: list[Connection],
) -> list[Optional[ConnectorPath]]:
    """Route every connection against a caller-owned id → shape table.

    The result lines up with *connections*; entries whose endpoints are
    missing from *shapes* are None.
    """
    paths: list[Optional[ConnectorPath]] = []
    for conn in connections:
        source = shapes.get(conn.source_id)
        target = shapes.get(conn.target_id)
        if source is None or target is None:
            missing = conn.source_id if source is None else conn.target_id
            logger.warning(
                "Cannot route '%s' -> '%s': unknown shape '%s'",
                conn.source_id, conn.target_id, missing,
            )
        paths.append(route_connection(source, target, conn))
    return paths
