"""
Input validation for records handed to the layout engine.

Callers (a canvas, a chat tool handler, a test) usually hold plain dicts.
The ``parse_*`` helpers here check those once at the boundary and turn
them into the typed models; everything past this module can trust its
inputs.
"""

from __future__ import annotations

from typing import Any, Optional, TypeVar

from diagram_layout.models import (
    ArrowHead,
    Connection,
    Edge,
    ElementKind,
    Handle,
    Node,
    PathKind,
    PositionedShape,
    RankDirection,
    ShapeBounds,
    ShapeKind,
    StrokeStyle,
)

E = TypeVar("E")


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class ValidationError(Exception):
    """Raised when input validation fails."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(ValidationError):
    """Raised for an unusable configuration (unknown algorithm, missing anchor node)."""


# ---------------------------------------------------------------------------
# Primitive validators
# ---------------------------------------------------------------------------

def validate_non_empty_string(value: Any, field_name: str) -> str:
    """Ensure *value* is a non-empty string after stripping whitespace."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"'{field_name}' must be a non-empty string.")
    return value.strip()


def validate_number(
    value: Any,
    field_name: str,
    *,
    min_val: float | None = None,
) -> float:
    """Validate a numeric value and optional lower bound."""
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ValidationError(
            f"'{field_name}' must be a number, got {type(value).__name__}."
        )
    val = float(value)
    if min_val is not None and val < min_val:
        raise ValidationError(f"'{field_name}' must be >= {min_val}, got {val}.")
    return val


def validate_positive_number(value: Any, field_name: str) -> float:
    val = validate_number(value, field_name)
    if val <= 0:
        raise ValidationError(f"'{field_name}' must be > 0, got {val}.")
    return val


def validate_list(value: Any, field_name: str) -> list:
    if not isinstance(value, list):
        raise ValidationError(
            f"'{field_name}' must be a list, got {type(value).__name__}."
        )
    return value


def validate_choice(
    value: Any,
    field_name: str,
    enum_cls: type[E],
    *,
    error: type[ValidationError] = ValidationError,
) -> E:
    """Resolve *value* to a member of *enum_cls* by value (case-insensitive)."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        wanted = value.strip().lower()
        for member in enum_cls:  # type: ignore[attr-defined]
            if str(member.value).lower() == wanted:
                return member
    choices = ", ".join(str(m.value) for m in enum_cls)  # type: ignore[attr-defined]
    raise error(f"'{field_name}' must be one of [{choices}], got '{value}'.")


def validate_direction(value: Any) -> RankDirection:
    """Validate a layout direction (TB, BT, LR, RL)."""
    return validate_choice(value, "direction", RankDirection)


# ---------------------------------------------------------------------------
# Record helpers
# ---------------------------------------------------------------------------

def require_key(record: dict, key: str, what: str, index: int) -> Any:
    if key not in record:
        raise ValidationError(f"{what} at index {index} missing required key '{key}'.")
    return record[key]


def require_record(record: Any, what: str, index: int) -> dict:
    if not isinstance(record, dict):
        raise ValidationError(f"{what} at index {index} must be a dict/object.")
    return record


def optional_number(record: dict, key: str, what: str, index: int) -> Optional[float]:
    if record.get(key) is None:
        return None
    try:
        return validate_number(record[key], key)
    except ValidationError as exc:
        raise ValidationError(f"{what} at index {index}: {exc.message}") from None


def optional_size(record: dict, key: str, what: str, index: int, default: float) -> float:
    if record.get(key) is None:
        return default
    try:
        return validate_positive_number(record[key], key)
    except ValidationError as exc:
        raise ValidationError(f"{what} at index {index}: {exc.message}") from None


def record_id(record: dict, what: str, index: int, key: str = "id") -> str:
    value = require_key(record, key, what, index)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{what} at index {index}: '{key}' must be a non-empty string.")
    return value


def record_text(record: dict, key: str, what: str, index: int, default: str = "") -> str:
    value = record.get(key, default)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValidationError(f"{what} at index {index}: '{key}' must be a string.")
    return value


def record_choice(
    record: dict,
    key: str,
    what: str,
    index: int,
    enum_cls: type[E],
    default: Optional[E],
) -> Optional[E]:
    if record.get(key) is None:
        return default
    try:
        return validate_choice(record[key], key, enum_cls)
    except ValidationError as exc:
        raise ValidationError(f"{what} at index {index}: {exc.message}") from None


# ---------------------------------------------------------------------------
# Graph records
# ---------------------------------------------------------------------------

def parse_node(record: Any, index: int) -> Node:
    """Validate a single node dict from the nodes list."""
    record = require_record(record, "Node", index)
    fixed = record.get("fixed", False)
    if not isinstance(fixed, bool):
        raise ValidationError(f"Node at index {index}: 'fixed' must be a boolean.")
    style = record.get("style")
    if style is not None and not isinstance(style, dict):
        raise ValidationError(f"Node at index {index}: 'style' must be a dict/object.")
    return Node(
        id=record_id(record, "Node", index),
        label=record_text(record, "label", "Node", index),
        width=optional_size(record, "width", "Node", index, 150),
        height=optional_size(record, "height", "Node", index, 80),
        fixed=fixed,
        x=optional_number(record, "x", "Node", index),
        y=optional_number(record, "y", "Node", index),
        style=style,
    )


def parse_nodes(records: Any) -> list[Node]:
    return [parse_node(r, i) for i, r in enumerate(validate_list(records, "nodes"))]


def parse_edge(record: Any, index: int) -> Edge:
    """Validate a single edge dict; accepts ``source``/``target`` or ``from``/``to``."""
    record = require_record(record, "Edge", index)
    source_key = "source" if "source" in record else "from"
    target_key = "target" if "target" in record else "to"
    kind = record.get("kind", record.get("type"))
    if kind is not None and not isinstance(kind, str):
        raise ValidationError(f"Edge at index {index}: 'kind' must be a string.")
    return Edge(
        source=record_id(record, "Edge", index, source_key),
        target=record_id(record, "Edge", index, target_key),
        label=record_text(record, "label", "Edge", index),
        kind=kind,
    )


def parse_edges(records: Any) -> list[Edge]:
    return [parse_edge(r, i) for i, r in enumerate(validate_list(records, "edges"))]


# ---------------------------------------------------------------------------
# Router / analyzer records
# ---------------------------------------------------------------------------

def _required_number(record: dict, key: str, what: str, index: int) -> float:
    value = optional_number(record, key, what, index)
    if value is None:
        raise ValidationError(f"{what} at index {index} missing required key '{key}'.")
    return value


def parse_shape_bounds(record: Any, index: int = 0) -> ShapeBounds:
    """Validate a positioned shape for the connector router."""
    record = require_record(record, "Shape", index)
    kind = record_choice(record, "kind", "Shape", index, ShapeKind, ShapeKind.RECTANGLE)
    return ShapeBounds(
        x=_required_number(record, "x", "Shape", index),
        y=_required_number(record, "y", "Shape", index),
        width=optional_size(record, "width", "Shape", index, 150),
        height=optional_size(record, "height", "Shape", index, 80),
        kind=kind,
    )


def parse_shape_table(records: Any) -> dict[str, ShapeBounds]:
    """Build an id → ShapeBounds lookup table from a list of shape dicts."""
    table: dict[str, ShapeBounds] = {}
    for i, r in enumerate(validate_list(records, "shapes")):
        record = require_record(r, "Shape", i)
        table[record_id(record, "Shape", i)] = parse_shape_bounds(record, i)
    return table


def parse_connection(record: Any, index: int = 0) -> Connection:
    """Validate a connector request dict."""
    record = require_record(record, "Connection", index)
    stroke_width = optional_size(record, "stroke_width", "Connection", index, 2)
    corner_radius = optional_number(record, "corner_radius", "Connection", index)
    if corner_radius is not None and corner_radius < 0:
        raise ValidationError(f"Connection at index {index}: 'corner_radius' must be >= 0.")
    source_handle = record_choice(record, "source_handle", "Connection", index, Handle, None)
    target_handle = record_choice(record, "target_handle", "Connection", index, Handle, None)
    for handle in (source_handle, target_handle):
        if handle == Handle.CENTER:
            raise ValidationError(
                f"Connection at index {index}: connector handles must be a side "
                "(top, right, bottom, left)."
            )
    return Connection(
        source_id=record_id(record, "Connection", index, "source_id"),
        target_id=record_id(record, "Connection", index, "target_id"),
        source_handle=source_handle,
        target_handle=target_handle,
        label=record_text(record, "label", "Connection", index),
        stroke_style=record_choice(
            record, "stroke_style", "Connection", index, StrokeStyle, StrokeStyle.SOLID),
        stroke_width=stroke_width,
        path_kind=record_choice(
            record, "path_kind", "Connection", index, PathKind, PathKind.ORTHOGONAL),
        arrow_head_start=record_choice(
            record, "arrow_head_start", "Connection", index, ArrowHead, ArrowHead.NONE),
        arrow_head_end=record_choice(
            record, "arrow_head_end", "Connection", index, ArrowHead, ArrowHead.ARROW),
        corner_radius=8 if corner_radius is None else corner_radius,
    )


def parse_positioned_shapes(records: Any) -> list[PositionedShape]:
    """Validate the element list handed to the quality analyzer.

    Connector elements may carry negative width/height (their end point
    lies up or left of the start).
    """
    shapes: list[PositionedShape] = []
    for i, r in enumerate(validate_list(records, "shapes")):
        record = require_record(r, "Element", i)
        kind = record_choice(record, "kind", "Element", i, ElementKind, None)
        if kind is None:
            raise ValidationError(f"Element at index {i} missing required key 'kind'.")
        width = _required_number(record, "width", "Element", i)
        height = _required_number(record, "height", "Element", i)
        if not kind.is_connector and (width < 0 or height < 0):
            raise ValidationError(f"Element at index {i}: shape size must be >= 0.")
        shapes.append(PositionedShape(
            id=record_id(record, "Element", i),
            kind=kind,
            x=_required_number(record, "x", "Element", i),
            y=_required_number(record, "y", "Element", i),
            width=width,
            height=height,
        ))
    return shapes
