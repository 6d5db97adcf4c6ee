"""
Org chart layout using the recursive subtree-width algorithm.

Every parent is centered over the combined width of its children's
subtrees, so sibling subtrees never overlap.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from diagram_layout.layout import filter_edges
from diagram_layout.models import Edge, Node, Point, Rect
from diagram_layout.validation import (
    record_id,
    record_text,
    require_record,
    validate_list,
)

logger = logging.getLogger("diagram-layout")


class Orientation(Enum):
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"


@dataclass
class OrgNode:
    id: str
    name: str
    title: str = ""
    children: list[OrgNode] = field(default_factory=list)


@dataclass
class OrgChartOptions:
    """Configuration for the org chart generator."""
    orientation: Orientation = Orientation.VERTICAL
    node_width: float = 180
    node_height: float = 100
    level_spacing: float = 150
    sibling_spacing: float = 40
    start_x: float = 400
    start_y: float = 100


@dataclass
class OrgChartNode:
    id: str
    name: str
    title: str
    level: int
    rect: Rect


@dataclass
class OrgChartConnection:
    source: str
    target: str
    points: list[Point] = field(default_factory=list)


@dataclass
class OrgChartLayout:
    nodes: dict[str, OrgChartNode] = field(default_factory=dict)
    connections: list[OrgChartConnection] = field(default_factory=list)


def subtree_width(node: OrgNode, options: Optional[OrgChartOptions] = None) -> float:
    """max(node_width, Σ child subtree widths + (k − 1)·sibling_spacing)."""
    cfg = options or OrgChartOptions()
    if not node.children:
        return cfg.node_width
    children = sum(subtree_width(c, cfg) for c in node.children)
    children += (len(node.children) - 1) * cfg.sibling_spacing
    return max(cfg.node_width, children)


def org_chart_layout(
    hierarchy: list[OrgNode],
    options: Optional[OrgChartOptions] = None,
) -> OrgChartLayout:
    """Lay out one or more org trees side by side.

    Roots start at ``start_x`` and are separated by twice the sibling
    spacing.  The horizontal orientation swaps the axes so levels grow to
    the right.
    """
    cfg = options or OrgChartOptions()
    result = OrgChartLayout()

    def place(node: OrgNode, x: float, y: float, level: int) -> None:
        # (x, y): top-center of the node along the level axis
        if cfg.orientation == Orientation.VERTICAL:
            rect = Rect(x - cfg.node_width / 2, y, cfg.node_width, cfg.node_height)
        else:
            rect = Rect(y, x - cfg.node_height / 2, cfg.node_width, cfg.node_height)
        result.nodes[node.id] = OrgChartNode(node.id, node.name, node.title, level, rect)

        if not node.children:
            return
        cursor = x - subtree_width(node, cfg) / 2
        for child in node.children:
            child_width = subtree_width(child, cfg)
            place(child, cursor + child_width / 2, y + cfg.level_spacing, level + 1)
            result.connections.append(OrgChartConnection(node.id, child.id))
            cursor += child_width + cfg.sibling_spacing

    cursor = cfg.start_x
    for root in hierarchy:
        place(root, cursor, cfg.start_y, 0)
        cursor += subtree_width(root, cfg) + cfg.sibling_spacing * 2

    for conn in result.connections:
        conn.points = connector_points(
            result.nodes[conn.source].rect, result.nodes[conn.target].rect, cfg.orientation,
        )
    return result


def connector_points(parent: Rect, child: Rect, orientation: Orientation) -> list[Point]:
    """Orthogonal elbow: parent side → mid line → child side."""
    if orientation == Orientation.VERTICAL:
        start = Point(parent.cx, parent.bottom)
        end = Point(child.cx, child.y)
        mid_y = (start.y + end.y) / 2
        return [start, Point(start.x, mid_y), Point(end.x, mid_y), end]
    start = Point(parent.right, parent.cy)
    end = Point(child.x, child.cy)
    mid_x = (start.x + end.x) / 2
    return [start, Point(mid_x, start.y), Point(mid_x, end.y), end]


# ---------------------------------------------------------------------------
# Building hierarchies
# ---------------------------------------------------------------------------

def org_tree_from_edges(nodes: list[Node], edges: list[Edge]) -> list[OrgNode]:
    """Build an OrgNode forest from flat nodes and manager → report edges.

    A node keeps the first parent it is given; later parents and edges
    that would close a cycle are dropped and logged.  Nodes left without a
    parent become roots, in input order.
    """
    usable, _ = filter_edges((n.id for n in nodes), edges)
    org = {n.id: OrgNode(n.id, n.label or n.id) for n in nodes}
    parent_of: dict[str, str] = {}

    for edge in usable:
        if edge.target in parent_of:
            logger.warning(
                "Org chart: '%s' already reports to '%s', ignoring '%s'",
                edge.target, parent_of[edge.target], edge.source,
            )
            continue
        ancestor: Optional[str] = edge.source
        while ancestor is not None and ancestor != edge.target:
            ancestor = parent_of.get(ancestor)
        if ancestor == edge.target:
            logger.warning("Org chart: edge '%s' -> '%s' would form a cycle", edge.source, edge.target)
            continue
        parent_of[edge.target] = edge.source
        org[edge.source].children.append(org[edge.target])

    return [org[n.id] for n in nodes if n.id not in parent_of]


def parse_org_hierarchy(records: Any) -> list[OrgNode]:
    """Turn nested dicts (``id``, ``name``, ``title``, ``children``) into OrgNodes."""

    def convert(record: Any, index: int) -> OrgNode:
        record = require_record(record, "Org node", index)
        children = validate_list(record.get("children", []), "children")
        return OrgNode(
            id=record_id(record, "Org node", index),
            name=record_text(record, "name", "Org node", index),
            title=record_text(record, "title", "Org node", index),
            children=[convert(c, i) for i, c in enumerate(children)],
        )

    return [convert(r, i) for i, r in enumerate(validate_list(records, "hierarchy"))]
