"""Tests for input validation at the record boundary."""

import pytest

from diagram_layout.layout import LayoutAlgorithm
from diagram_layout.models import (
    ArrowHead,
    Edge,
    ElementKind,
    Handle,
    PathKind,
    RankDirection,
    ShapeKind,
)
from diagram_layout.validation import (
    ConfigurationError,
    ValidationError,
    parse_connection,
    parse_edges,
    parse_nodes,
    parse_positioned_shapes,
    parse_shape_bounds,
    parse_shape_table,
    validate_choice,
    validate_direction,
    validate_list,
    validate_non_empty_string,
    validate_number,
    validate_positive_number,
)


# ===================================================================
# Unit tests for primitive validators
# ===================================================================


class TestValidateNonEmptyString:
    def test_valid(self) -> None:
        assert validate_non_empty_string("  hello ", "f") == "hello"

    def test_blank(self) -> None:
        with pytest.raises(ValidationError, match="non-empty"):
            validate_non_empty_string("   ", "f")

    def test_not_a_string(self) -> None:
        with pytest.raises(ValidationError, match="non-empty"):
            validate_non_empty_string(5, "f")


class TestValidateNumber:
    def test_int_and_float(self) -> None:
        assert validate_number(3, "n") == 3.0
        assert validate_number(2.5, "n") == 2.5

    def test_bool_rejected(self) -> None:
        with pytest.raises(ValidationError, match="number"):
            validate_number(True, "n")

    def test_min(self) -> None:
        with pytest.raises(ValidationError, match=">="):
            validate_number(-1, "n", min_val=0)

    def test_positive(self) -> None:
        with pytest.raises(ValidationError, match="> 0"):
            validate_positive_number(0, "n")


class TestValidateList:
    def test_not_a_list(self) -> None:
        with pytest.raises(ValidationError, match="list"):
            validate_list({"a": 1}, "items")


class TestValidateChoice:
    def test_case_insensitive(self) -> None:
        assert validate_choice("Force-Directed", "algorithm", LayoutAlgorithm) == (
            LayoutAlgorithm.FORCE_DIRECTED
        )

    def test_member_passes_through(self) -> None:
        assert validate_choice(PathKind.BEZIER, "k", PathKind) == PathKind.BEZIER

    def test_error_lists_choices(self) -> None:
        with pytest.raises(ValidationError, match=r"must be one of \[straight, bezier, orthogonal\]"):
            validate_choice("zigzag", "path_kind", PathKind)

    def test_custom_error_type(self) -> None:
        with pytest.raises(ConfigurationError):
            validate_choice("spiral", "algorithm", LayoutAlgorithm, error=ConfigurationError)

    def test_configuration_error_is_validation_error(self) -> None:
        err = ConfigurationError("bad")
        assert isinstance(err, ValidationError)
        assert err.message == "bad"

    def test_direction(self) -> None:
        assert validate_direction("lr") == RankDirection.LR
        with pytest.raises(ValidationError, match="direction"):
            validate_direction("up")


# ===================================================================
# Graph records
# ===================================================================


class TestParseNodes:
    def test_defaults(self) -> None:
        nodes = parse_nodes([{"id": "a"}])
        assert nodes[0].width == 150 and nodes[0].height == 80
        assert not nodes[0].is_pinned

    def test_pinned(self) -> None:
        nodes = parse_nodes([{"id": "a", "fixed": True, "x": 10, "y": 20, "label": "A"}])
        assert nodes[0].is_pinned
        assert (nodes[0].x, nodes[0].y) == (10, 20)

    def test_missing_id(self) -> None:
        with pytest.raises(ValidationError, match="Node at index 1 missing required key 'id'"):
            parse_nodes([{"id": "a"}, {"label": "x"}])

    def test_bad_size(self) -> None:
        with pytest.raises(ValidationError, match="Node at index 0: 'width' must be > 0"):
            parse_nodes([{"id": "a", "width": -5}])

    def test_fixed_must_be_bool(self) -> None:
        with pytest.raises(ValidationError, match="boolean"):
            parse_nodes([{"id": "a", "fixed": "yes"}])


class TestParseEdges:
    def test_source_target_and_aliases(self) -> None:
        edges = parse_edges([
            {"source": "a", "target": "b", "label": "x"},
            {"from": "b", "to": "c", "type": "dashed"},
        ])
        assert edges == [Edge("a", "b", "x"), Edge("b", "c", "", "dashed")]

    def test_missing_target(self) -> None:
        with pytest.raises(ValidationError, match="Edge at index 0 missing required key 'to'"):
            parse_edges([{"source": "a"}])


# ===================================================================
# Router / analyzer records
# ===================================================================


class TestParseShapes:
    def test_shape_bounds(self) -> None:
        shape = parse_shape_bounds({"x": 1, "y": 2, "width": 30, "height": 40, "kind": "diamond"})
        assert (shape.x, shape.y, shape.width, shape.height) == (1, 2, 30, 40)
        assert shape.kind == ShapeKind.DIAMOND

    def test_shape_requires_position(self) -> None:
        with pytest.raises(ValidationError, match="missing required key 'y'"):
            parse_shape_bounds({"x": 1})

    def test_shape_table(self) -> None:
        table = parse_shape_table([{"id": "a", "x": 0, "y": 0}, {"id": "b", "x": 300, "y": 0}])
        assert set(table) == {"a", "b"}
        assert table["b"].kind == ShapeKind.RECTANGLE

    def test_positioned_shapes(self) -> None:
        shapes = parse_positioned_shapes([
            {"id": "r", "kind": "rectangle", "x": 0, "y": 0, "width": 10, "height": 10},
            {"id": "l", "kind": "line", "x": 0, "y": 0, "width": -10, "height": 5},
        ])
        assert shapes[1].kind == ElementKind.LINE
        assert shapes[1].width == -10

    def test_negative_shape_size_rejected(self) -> None:
        with pytest.raises(ValidationError, match="size must be >= 0"):
            parse_positioned_shapes([
                {"id": "r", "kind": "ellipse", "x": 0, "y": 0, "width": -10, "height": 10},
            ])

    def test_positioned_shape_needs_kind(self) -> None:
        with pytest.raises(ValidationError, match="missing required key 'kind'"):
            parse_positioned_shapes([{"id": "r", "x": 0, "y": 0, "width": 1, "height": 1}])


class TestParseConnection:
    def test_defaults(self) -> None:
        conn = parse_connection({"source_id": "a", "target_id": "b"})
        assert conn.path_kind == PathKind.ORTHOGONAL
        assert conn.arrow_head_end == ArrowHead.ARROW
        assert conn.arrow_head_start == ArrowHead.NONE
        assert conn.corner_radius == 8
        assert conn.source_handle is None

    def test_explicit_fields(self) -> None:
        conn = parse_connection({
            "source_id": "a", "target_id": "b", "source_handle": "top",
            "path_kind": "straight", "arrow_head_end": "bar", "corner_radius": 0,
        })
        assert conn.source_handle == Handle.TOP
        assert conn.path_kind == PathKind.STRAIGHT
        assert conn.arrow_head_end == ArrowHead.BAR
        assert conn.corner_radius == 0

    def test_center_handle_rejected(self) -> None:
        with pytest.raises(ValidationError, match="must be a side"):
            parse_connection({"source_id": "a", "target_id": "b", "target_handle": "center"})

    def test_negative_radius_rejected(self) -> None:
        with pytest.raises(ValidationError, match="corner_radius"):
            parse_connection({"source_id": "a", "target_id": "b", "corner_radius": -1})
