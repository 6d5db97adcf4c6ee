"""
Core data model for the diagram layout engine.

Everything here is a plain value: layouts, routers and the analyzer take
these records in and hand fresh ones back.  Nothing holds state between
calls.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ShapeKind(Enum):
    """Outline used when a connector has to meet a shape's boundary."""
    RECTANGLE = "rectangle"
    ELLIPSE = "ellipse"
    DIAMOND = "diamond"


class Handle(Enum):
    """Named attachment site on a shape."""
    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"
    CENTER = "center"


class PathKind(Enum):
    STRAIGHT = "straight"
    BEZIER = "bezier"
    ORTHOGONAL = "orthogonal"  # a.k.a. smoothstep


class ArrowHead(Enum):
    ARROW = "arrow"
    DOT = "dot"
    BAR = "bar"
    NONE = "none"


class StrokeStyle(Enum):
    SOLID = "solid"
    DASHED = "dashed"
    DOTTED = "dotted"


class RankDirection(Enum):
    """Flow direction for level/rank based layouts."""
    TB = "TB"
    BT = "BT"
    LR = "LR"
    RL = "RL"

    @property
    def is_vertical(self) -> bool:
        return self in (RankDirection.TB, RankDirection.BT)

    @property
    def is_reversed(self) -> bool:
        return self in (RankDirection.BT, RankDirection.RL)


class ElementKind(Enum):
    """Kind of a positioned element handed to the quality analyzer."""
    RECTANGLE = "rectangle"
    ELLIPSE = "ellipse"
    DIAMOND = "diamond"
    ARROW = "arrow"
    LINE = "line"
    TEXT = "text"

    @property
    def is_shape(self) -> bool:
        return self in (ElementKind.RECTANGLE, ElementKind.ELLIPSE, ElementKind.DIAMOND)

    @property
    def is_connector(self) -> bool:
        return self in (ElementKind.ARROW, ElementKind.LINE)


class IssueKind(Enum):
    OVERLAP = "overlap"
    POOR_SPACING = "poor-spacing"
    MISALIGNMENT = "misalignment"
    ORPHANED = "orphaned"
    INVALID_CONNECTION = "invalid-connection"


class Severity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Quality(Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


# ---------------------------------------------------------------------------
# Geometry values
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Point:
    """A 2-D coordinate."""
    x: float
    y: float

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def scale(self, factor: float) -> Point:
        return Point(self.x * factor, self.y * factor)

    def distance_to(self, other: Point) -> float:
        return math.hypot(other.x - self.x, other.y - self.y)


@dataclass
class Rect:
    """Axis-aligned bounding box, top-left origin."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def cx(self) -> float:
        return self.x + self.width / 2

    @property
    def cy(self) -> float:
        return self.y + self.height / 2

    @property
    def center(self) -> Point:
        return Point(self.cx, self.cy)

    def intersects(self, other: Rect, margin: float = 0) -> bool:
        """Check if two boxes overlap (with optional margin).

        Boxes that merely share an edge do not intersect; pass a small
        positive *margin* to count touching as overlap.
        """
        return not (
            self.right + margin <= other.x
            or other.right + margin <= self.x
            or self.bottom + margin <= other.y
            or other.bottom + margin <= self.y
        )

    def contains_point(self, px: float, py: float, margin: float = 0) -> bool:
        """Check if a point is inside this box (with margin)."""
        return (
            self.x - margin <= px <= self.right + margin
            and self.y - margin <= py <= self.bottom + margin
        )

    def moved_to(self, x: float, y: float) -> Rect:
        return Rect(x, y, self.width, self.height)


@dataclass
class ShapeBounds(Rect):
    """A positioned shape as seen by the connector router."""
    kind: ShapeKind = ShapeKind.RECTANGLE


@dataclass
class Bounds:
    """Overall extent of a layout (width × height from the origin)."""
    width: float
    height: float


# ---------------------------------------------------------------------------
# Graph input / layout output
# ---------------------------------------------------------------------------

@dataclass
class Node:
    """An abstract graph node waiting to be positioned.

    A node is *pinned* when ``fixed`` is set and both ``x`` and ``y`` are
    given; pinned nodes keep that top-left corner under every algorithm.
    """
    id: str
    label: str = ""
    width: float = 150
    height: float = 80
    fixed: bool = False
    x: Optional[float] = None
    y: Optional[float] = None
    style: Optional[dict] = None

    @property
    def is_pinned(self) -> bool:
        return self.fixed and self.x is not None and self.y is not None


@dataclass
class Edge:
    """Directed relationship between two node ids."""
    source: str
    target: str
    label: str = ""
    kind: Optional[str] = None


@dataclass
class LayoutResult:
    """Positions keyed by node id plus the extent of the drawing."""
    positions: dict[str, Rect] = field(default_factory=dict)
    bounds: Bounds = field(default_factory=lambda: Bounds(0, 0))
    skipped_edges: list[Edge] = field(default_factory=list)


def compute_bounds(rects: list[Rect] | tuple[Rect, ...], margin: float = 100) -> Bounds:
    """Extent of a set of rects: furthest right/bottom edge plus *margin*."""
    if not rects:
        return Bounds(0, 0)
    return Bounds(
        max(r.right for r in rects) + margin,
        max(r.bottom for r in rects) + margin,
    )


# ---------------------------------------------------------------------------
# Connectors
# ---------------------------------------------------------------------------

@dataclass
class Connection:
    """A connector request between two positioned shapes."""
    source_id: str
    target_id: str
    source_handle: Optional[Handle] = None
    target_handle: Optional[Handle] = None
    label: str = ""
    stroke_style: StrokeStyle = StrokeStyle.SOLID
    stroke_width: float = 2
    path_kind: PathKind = PathKind.ORTHOGONAL
    arrow_head_start: ArrowHead = ArrowHead.NONE
    arrow_head_end: ArrowHead = ArrowHead.ARROW
    corner_radius: float = 8


# ---------------------------------------------------------------------------
# Quality analysis
# ---------------------------------------------------------------------------

@dataclass
class PositionedShape:
    """An element of a finished diagram.

    Connector elements (arrow / line) run from ``(x, y)`` to
    ``(x + width, y + height)``; their width and height may be negative.
    """
    id: str
    kind: ElementKind
    x: float
    y: float
    width: float
    height: float

    @property
    def cx(self) -> float:
        return self.x + self.width / 2

    @property
    def cy(self) -> float:
        return self.y + self.height / 2

    @property
    def end(self) -> Point:
        return Point(self.x + self.width, self.y + self.height)

    def to_rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)


@dataclass
class DiagramIssue:
    kind: IssueKind
    severity: Severity
    description: str
    element_ids: list[str] = field(default_factory=list)
    suggestion: str = ""


@dataclass
class DiagramAnalysis:
    issues: list[DiagramIssue] = field(default_factory=list)
    overall_quality: Quality = Quality.EXCELLENT
    suggestions: list[str] = field(default_factory=list)


@dataclass
class PositionUpdate:
    """A corrective move produced by beautify (None = axis unchanged)."""
    id: str
    x: Optional[float] = None
    y: Optional[float] = None
