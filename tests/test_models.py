"""Tests for the core data model."""

from diagram_layout.models import (
    Bounds,
    ElementKind,
    Node,
    Point,
    PositionedShape,
    RankDirection,
    Rect,
    ShapeBounds,
    ShapeKind,
    compute_bounds,
)


# ===================================================================
# Point / Rect
# ===================================================================

class TestPoint:
    def test_arithmetic(self) -> None:
        assert Point(1, 2) + Point(3, 4) == Point(4, 6)
        assert Point(5, 5) - Point(2, 1) == Point(3, 4)
        assert Point(2, -1).scale(3) == Point(6, -3)

    def test_distance(self) -> None:
        assert Point(0, 0).distance_to(Point(3, 4)) == 5


class TestRect:
    """Tests for the axis-aligned box."""

    def test_derived_properties(self) -> None:
        r = Rect(10, 20, 100, 50)
        assert r.right == 110
        assert r.bottom == 70
        assert r.center == Point(60, 45)

    def test_intersects(self) -> None:
        a = Rect(0, 0, 100, 100)
        assert a.intersects(Rect(50, 50, 100, 100))
        assert not a.intersects(Rect(200, 0, 50, 50))

    def test_touching_is_not_intersecting(self) -> None:
        """Boxes that share an edge do not overlap."""
        a = Rect(0, 0, 100, 100)
        b = Rect(100, 0, 100, 100)
        assert not a.intersects(b)
        assert a.intersects(b, margin=1)

    def test_contains_point(self) -> None:
        r = Rect(0, 0, 10, 10)
        assert r.contains_point(5, 5)
        assert r.contains_point(10, 10)
        assert not r.contains_point(11, 5)
        assert r.contains_point(11, 5, margin=2)

    def test_moved_to_keeps_size(self) -> None:
        assert Rect(0, 0, 30, 40).moved_to(5, 6) == Rect(5, 6, 30, 40)

    def test_shape_bounds_default_kind(self) -> None:
        assert ShapeBounds(0, 0, 10, 10).kind == ShapeKind.RECTANGLE


# ===================================================================
# Nodes / bounds
# ===================================================================

class TestNode:
    def test_defaults(self) -> None:
        n = Node("a")
        assert (n.width, n.height) == (150, 80)
        assert not n.is_pinned

    def test_pinned_requires_both_coordinates(self) -> None:
        assert Node("a", fixed=True, x=1, y=2).is_pinned
        assert not Node("a", fixed=True, x=1).is_pinned
        assert not Node("a", x=1, y=2).is_pinned


class TestComputeBounds:
    def test_empty(self) -> None:
        assert compute_bounds([]) == Bounds(0, 0)

    def test_margin_added_to_extent(self) -> None:
        bounds = compute_bounds([Rect(0, 0, 100, 50), Rect(300, 200, 50, 50)])
        assert bounds == Bounds(450, 350)


class TestEnums:
    def test_rank_direction_flags(self) -> None:
        assert RankDirection.TB.is_vertical and not RankDirection.TB.is_reversed
        assert RankDirection.RL.is_reversed and not RankDirection.RL.is_vertical

    def test_element_kind_groups(self) -> None:
        assert ElementKind.DIAMOND.is_shape
        assert ElementKind.LINE.is_connector
        assert not ElementKind.TEXT.is_shape and not ElementKind.TEXT.is_connector

    def test_connector_end_point(self) -> None:
        line = PositionedShape("l", ElementKind.LINE, 100, 100, -40, 30)
        assert line.end == Point(60, 130)
