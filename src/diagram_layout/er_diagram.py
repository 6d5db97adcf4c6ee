"""
ER diagram layout: entities on a square-ish grid, relationships drawn
center to center with cardinality labels near each end.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from diagram_layout.geometry import lerp, midpoint
from diagram_layout.layout import filter_edges
from diagram_layout.models import Edge, Point, Rect
from diagram_layout.validation import (
    ValidationError,
    record_choice,
    record_id,
    record_text,
    require_record,
    validate_list,
)


class EntityKind(Enum):
    ENTITY = "entity"
    WEAK_ENTITY = "weak-entity"
    ASSOCIATIVE = "associative"


class RelationshipKind(Enum):
    ASSOCIATION = "association"
    INHERITANCE = "inheritance"
    COMPOSITION = "composition"
    AGGREGATION = "aggregation"


@dataclass
class EREntity:
    id: str
    name: str
    attributes: list[str] = field(default_factory=list)
    primary_key: Optional[str] = None
    kind: EntityKind = EntityKind.ENTITY


@dataclass
class ERRelationship:
    source: str
    target: str
    label: str = ""
    source_cardinality: str = "1"
    target_cardinality: str = "N"
    kind: RelationshipKind = RelationshipKind.ASSOCIATION


@dataclass
class EROptions:
    """Configuration for the ER diagram generator."""
    entity_width: float = 180
    base_height: float = 60
    attribute_height: float = 20
    col_spacing: float = 300
    row_spacing: float = 250
    start_x: float = 200
    start_y: float = 150
    columns: Optional[int] = None
    cardinality_offset: float = 0.15   # Fraction along the segment from each end


@dataclass
class AttributeRow:
    name: str
    rect: Rect
    is_primary_key: bool = False


@dataclass
class EREntityBox:
    id: str
    name: str
    kind: EntityKind
    rect: Rect
    header: Rect
    divider_y: float
    attributes: list[AttributeRow] = field(default_factory=list)


@dataclass
class ERRelationshipPath:
    source: str
    target: str
    kind: RelationshipKind
    start: Point
    end: Point
    label: str
    label_rect: Rect
    source_symbol: str
    target_symbol: str
    source_symbol_rect: Rect
    target_symbol_rect: Rect


@dataclass
class ERLayout:
    entities: dict[str, EREntityBox] = field(default_factory=dict)
    relationships: list[ERRelationshipPath] = field(default_factory=list)
    skipped: list[ERRelationship] = field(default_factory=list)


_CARDINALITY_SYMBOLS = {
    "1": "1",
    "N": "∗",
    "M": "∗",
    "0..1": "0..1",
    "1..1": "1",
    "0..N": "0..∗",
    "1..N": "1..∗",
}


def cardinality_symbol(cardinality: str) -> str:
    """Display symbol for a cardinality; unknown values pass through."""
    return _CARDINALITY_SYMBOLS.get(cardinality, cardinality)


def entity_height(entity: EREntity, options: Optional[EROptions] = None) -> float:
    cfg = options or EROptions()
    return cfg.base_height + len(entity.attributes) * cfg.attribute_height


def _entity_box(entity: EREntity, rect: Rect, cfg: EROptions) -> EREntityBox:
    rows: list[AttributeRow] = []
    row_y = rect.y + 50
    for name in entity.attributes:
        rows.append(AttributeRow(
            name,
            Rect(rect.x + 10, row_y, rect.width - 20, 18),
            is_primary_key=name == entity.primary_key,
        ))
        row_y += cfg.attribute_height
    return EREntityBox(
        id=entity.id,
        name=entity.name,
        kind=entity.kind,
        rect=rect,
        header=Rect(rect.x + 10, rect.y + 10, rect.width - 20, 24),
        divider_y=rect.y + 40,
        attributes=rows,
    )


def er_diagram_layout(
    entities: list[EREntity],
    relationships: list[ERRelationship],
    options: Optional[EROptions] = None,
) -> ERLayout:
    """Grid of ⌈√n⌉ columns; each box grows by one row per attribute."""
    cfg = options or EROptions()
    result = ERLayout()
    columns = cfg.columns or max(1, math.ceil(math.sqrt(len(entities))))

    for index, entity in enumerate(entities):
        row, col = divmod(index, columns)
        rect = Rect(
            cfg.start_x + col * cfg.col_spacing,
            cfg.start_y + row * cfg.row_spacing,
            cfg.entity_width,
            entity_height(entity, cfg),
        )
        result.entities[entity.id] = _entity_box(entity, rect, cfg)

    for rel in relationships:
        _, skipped = filter_edges(result.entities, [Edge(rel.source, rel.target, rel.label)])
        if skipped:
            result.skipped.append(rel)
            continue
        start = result.entities[rel.source].rect.center
        end = result.entities[rel.target].rect.center
        mid = midpoint(start, end)
        near_source = lerp(start, end, cfg.cardinality_offset)
        near_target = lerp(start, end, 1 - cfg.cardinality_offset)
        result.relationships.append(ERRelationshipPath(
            source=rel.source,
            target=rel.target,
            kind=rel.kind,
            start=start,
            end=end,
            label=rel.label,
            label_rect=Rect(mid.x - 40, mid.y - 25, 80, 18),
            source_symbol=cardinality_symbol(rel.source_cardinality),
            target_symbol=cardinality_symbol(rel.target_cardinality),
            source_symbol_rect=Rect(near_source.x - 15, near_source.y - 20, 30, 18),
            target_symbol_rect=Rect(near_target.x - 15, near_target.y - 20, 30, 18),
        ))
    return result


# ---------------------------------------------------------------------------
# Boundary conversion
# ---------------------------------------------------------------------------

def parse_er_entities(records: Any) -> list[EREntity]:
    """Attributes may be plain strings or ``{"name": ...}`` objects."""
    entities: list[EREntity] = []
    for i, r in enumerate(validate_list(records, "entities")):
        record = require_record(r, "Entity", i)
        attributes: list[str] = []
        for j, attr in enumerate(validate_list(record.get("attributes", []), "attributes")):
            if isinstance(attr, dict):
                attr = attr.get("name")
            if not isinstance(attr, str):
                raise ValidationError(f"Entity at index {i}: attribute {j} must be a string.")
            attributes.append(attr)
        if "kind" not in record and "type" in record:
            record = {**record, "kind": record["type"]}
        primary_key = record.get("primary_key", record.get("primaryKey"))
        if primary_key is not None and not isinstance(primary_key, str):
            raise ValidationError(f"Entity at index {i}: 'primary_key' must be a string.")
        entities.append(EREntity(
            id=record_id(record, "Entity", i),
            name=record_text(record, "name", "Entity", i),
            attributes=attributes,
            primary_key=primary_key,
            kind=record_choice(record, "kind", "Entity", i, EntityKind, EntityKind.ENTITY),
        ))
    return entities


def parse_er_relationships(records: Any) -> list[ERRelationship]:
    relationships: list[ERRelationship] = []
    for i, r in enumerate(validate_list(records, "relationships")):
        record = require_record(r, "Relationship", i)
        if "kind" not in record and "type" in record:
            record = {**record, "kind": record["type"]}
        source_key = "source" if "source" in record else "from"
        target_key = "target" if "target" in record else "to"
        relationships.append(ERRelationship(
            source=record_id(record, "Relationship", i, source_key),
            target=record_id(record, "Relationship", i, target_key),
            label=record_text(record, "label", "Relationship", i),
            source_cardinality=record_text(
                record, "source_cardinality", "Relationship", i,
                record.get("fromCardinality", "1"),
            ),
            target_cardinality=record_text(
                record, "target_cardinality", "Relationship", i,
                record.get("toCardinality", "N"),
            ),
            kind=record_choice(
                record, "kind", "Relationship", i, RelationshipKind, RelationshipKind.ASSOCIATION),
        ))
    return relationships
