"""Tests for the ER diagram generator."""

import pytest

from diagram_layout.er_diagram import (
    EREntity,
    EROptions,
    ERRelationship,
    EntityKind,
    RelationshipKind,
    cardinality_symbol,
    entity_height,
    er_diagram_layout,
    parse_er_entities,
    parse_er_relationships,
)
from diagram_layout.models import Rect
from diagram_layout.validation import ValidationError


def _shop() -> list[EREntity]:
    return [
        EREntity("user", "User", ["id", "email"], primary_key="id"),
        EREntity("order", "Order", ["id", "total", "placed_at"], primary_key="id"),
        EREntity("item", "Item"),
    ]


class TestSizing:
    def test_height_grows_per_attribute(self) -> None:
        assert entity_height(EREntity("a", "A")) == 60
        assert entity_height(EREntity("a", "A", ["x", "y"])) == 100

    def test_cardinality_symbols(self) -> None:
        assert cardinality_symbol("1") == "1"
        assert cardinality_symbol("N") == "∗"
        assert cardinality_symbol("1..N") == "1..∗"
        assert cardinality_symbol("3") == "3"


class TestERDiagramLayout:
    """Grid placement and relationship geometry."""

    def test_grid_positions(self) -> None:
        diagram = er_diagram_layout(_shop(), [])
        assert diagram.entities["user"].rect == Rect(200, 150, 180, 100)
        assert diagram.entities["order"].rect == Rect(500, 150, 180, 120)
        assert diagram.entities["item"].rect == Rect(200, 400, 180, 60)

    def test_explicit_columns(self) -> None:
        diagram = er_diagram_layout(_shop(), [], EROptions(columns=3))
        assert diagram.entities["item"].rect.x == 800

    def test_entity_box_details(self) -> None:
        box = er_diagram_layout(_shop(), []).entities["order"]
        assert box.header == Rect(510, 160, 160, 24)
        assert box.divider_y == 190
        assert [row.rect.y for row in box.attributes] == [200, 220, 240]
        assert box.attributes[0].is_primary_key
        assert not box.attributes[1].is_primary_key

    def test_relationship_geometry(self) -> None:
        rel = ERRelationship("user", "order", "places", "1", "N")
        diagram = er_diagram_layout(_shop(), [rel])
        path = diagram.relationships[0]
        assert path.start == diagram.entities["user"].rect.center
        assert path.end == diagram.entities["order"].rect.center
        mid_x = (path.start.x + path.end.x) / 2
        assert path.label_rect.x == pytest.approx(mid_x - 40)
        assert path.source_symbol == "1"
        assert path.target_symbol == "∗"
        near_source = path.start.x + (path.end.x - path.start.x) * 0.15
        assert path.source_symbol_rect.x == pytest.approx(near_source - 15)

    def test_dangling_relationship_skipped(self) -> None:
        rel = ERRelationship("user", "ghost")
        diagram = er_diagram_layout(_shop(), [rel])
        assert diagram.relationships == []
        assert diagram.skipped == [rel]


class TestParseER:
    def test_entities(self) -> None:
        entities = parse_er_entities([
            {"id": "u", "name": "User", "attributes": ["id", {"name": "email"}],
             "primaryKey": "id", "type": "weak-entity"},
        ])
        assert entities[0].attributes == ["id", "email"]
        assert entities[0].primary_key == "id"
        assert entities[0].kind == EntityKind.WEAK_ENTITY

    def test_bad_attribute(self) -> None:
        with pytest.raises(ValidationError, match="attribute 0"):
            parse_er_entities([{"id": "u", "attributes": [5]}])

    def test_relationships(self) -> None:
        rels = parse_er_relationships([
            {"from": "a", "to": "b", "fromCardinality": "0..1", "kind": "composition"},
        ])
        assert rels[0].source_cardinality == "0..1"
        assert rels[0].target_cardinality == "N"
        assert rels[0].kind == RelationshipKind.COMPOSITION
