"""
Radial mind map layout.

The central topic sits at the canvas center; root branches fan out evenly
from 12 o'clock and each branch's children share a 45° wedge centered on
the parent's own angle, one ring further out per level.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Optional

from diagram_layout.geometry import auto_handles
from diagram_layout.models import (
    ArrowHead,
    Connection,
    PathKind,
    Rect,
    ShapeBounds,
    ShapeKind,
)
from diagram_layout.validation import (
    ValidationError,
    record_id,
    record_text,
    require_record,
    validate_list,
)

logger = logging.getLogger("diagram-layout")

CENTRAL_ID = "central"


@dataclass
class MindMapBranch:
    id: str
    label: str
    children: list[str] = field(default_factory=list)


@dataclass
class MindMapOptions:
    """Configuration for the mind map generator."""
    canvas_width: float = 1200
    canvas_height: float = 800
    first_radius: float = 200
    radius_step: float = 150
    child_spread: float = math.pi / 4


@dataclass
class MindMapNode:
    id: str
    label: str
    level: int
    rect: Rect
    parent_id: Optional[str] = None


@dataclass
class MindMapLayout:
    nodes: list[MindMapNode] = field(default_factory=list)
    connections: list[Connection] = field(default_factory=list)

    def shapes(self) -> dict[str, ShapeBounds]:
        """Router lookup table: the central topic is an ellipse, branches are boxes."""
        return {
            n.id: ShapeBounds(
                n.rect.x, n.rect.y, n.rect.width, n.rect.height,
                kind=ShapeKind.ELLIPSE if n.level == 0 else ShapeKind.RECTANGLE,
            )
            for n in self.nodes
        }


def central_size(topic: str) -> tuple[float, float]:
    return max(150, len(topic) * 10 + 40), 60


def branch_size(label: str) -> tuple[float, float]:
    return max(120, len(label) * 8 + 30), 40


def mind_map_layout(
    central_topic: str,
    branches: list[MindMapBranch],
    options: Optional[MindMapOptions] = None,
) -> MindMapLayout:
    """Place the topic and every reachable branch.

    Child ids that name no branch, and references that would revisit a
    branch already placed, are skipped and logged.
    """
    cfg = options or MindMapOptions()
    cx = cfg.canvas_width / 2
    cy = cfg.canvas_height / 2
    by_id = {b.id: b for b in branches}
    child_ids = {c for b in branches for c in b.children}
    roots = [b for b in branches if b.id not in child_ids]

    result = MindMapLayout()
    width, height = central_size(central_topic)
    result.nodes.append(MindMapNode(
        CENTRAL_ID, central_topic, 0, Rect(cx - width / 2, cy - height / 2, width, height),
    ))
    placed: set[str] = set()

    def place(branch: MindMapBranch, angle: float, radius: float, level: int, parent_id: str) -> None:
        placed.add(branch.id)
        w, h = branch_size(branch.label)
        rect = Rect(cx + radius * math.cos(angle) - w / 2, cy + radius * math.sin(angle) - h / 2, w, h)
        result.nodes.append(MindMapNode(branch.id, branch.label, level, rect, parent_id))
        result.connections.append(Connection(
            parent_id, branch.id,
            path_kind=PathKind.BEZIER,
            arrow_head_end=ArrowHead.NONE,
        ))

        children: list[MindMapBranch] = []
        for child_id in branch.children:
            child = by_id.get(child_id)
            if child is None:
                logger.warning("Mind map: branch '%s' lists unknown child '%s'", branch.id, child_id)
            elif child_id in placed or child in children:
                logger.warning("Mind map: branch '%s' already placed, skipping repeat under '%s'",
                               child_id, branch.id)
            else:
                children.append(child)

        if len(children) == 1:
            place(children[0], angle, radius + cfg.radius_step, level + 1, branch.id)
            return
        start = angle - cfg.child_spread / 2
        step = cfg.child_spread / max(len(children) - 1, 1)
        for index, child in enumerate(children):
            place(child, start + index * step, radius + cfg.radius_step, level + 1, branch.id)

    angle_step = 2 * math.pi / max(len(roots), 1)
    for index, branch in enumerate(roots):
        place(branch, index * angle_step - math.pi / 2, cfg.first_radius, 1, CENTRAL_ID)

    unplaced = [b.id for b in branches if b.id not in placed]
    if unplaced:
        logger.warning("Mind map: %d branch(es) unreachable from the topic: %s",
                       len(unplaced), ", ".join(unplaced))

    # Handles follow the larger delta between the two centers
    rects = {n.id: n.rect for n in result.nodes}
    for conn in result.connections:
        conn.source_handle, conn.target_handle = auto_handles(
            rects[conn.source_id], rects[conn.target_id],
        )
    return result


def parse_mind_map_branches(records: Any) -> list[MindMapBranch]:
    branches: list[MindMapBranch] = []
    for i, r in enumerate(validate_list(records, "branches")):
        record = require_record(r, "Branch", i)
        children = validate_list(record.get("children", []), "children")
        for j, child in enumerate(children):
            if not isinstance(child, str):
                raise ValidationError(f"Branch at index {i}: child {j} must be a string id.")
        branches.append(MindMapBranch(
            id=record_id(record, "Branch", i),
            label=record_text(record, "label", "Branch", i),
            children=list(children),
        ))
    return branches
