"""
Flowchart layout: longest-path layers with text-adaptive node widths and
optional swimlanes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from diagram_layout.layout import assign_levels, filter_edges
from diagram_layout.models import Edge, Point, Rect
from diagram_layout.validation import (
    ValidationError,
    record_choice,
    record_id,
    record_text,
    require_record,
    validate_list,
)


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------

class StepKind(Enum):
    START = "start"
    END = "end"
    PROCESS = "process"
    DECISION = "decision"
    DATA = "data"
    DOCUMENT = "document"


class FlowDirection(Enum):
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"


_BASE_SIZES: dict[StepKind, tuple[float, float]] = {
    StepKind.START: (140, 50),
    StepKind.END: (140, 50),
    StepKind.PROCESS: (180, 60),
    StepKind.DECISION: (160, 80),
    StepKind.DATA: (180, 60),
    StepKind.DOCUMENT: (180, 70),
}


@dataclass
class Decision:
    """A labelled branch out of a decision step."""
    label: str
    target: str


@dataclass
class FlowchartStep:
    id: str
    label: str
    kind: StepKind = StepKind.PROCESS
    swimlane: Optional[str] = None
    decisions: list[Decision] = field(default_factory=list)


@dataclass
class FlowchartConnection:
    source: str
    target: str
    label: str = ""


@dataclass
class FlowchartOptions:
    """Configuration for the flowchart generator."""
    direction: FlowDirection = FlowDirection.VERTICAL
    spacing: float = 100            # Gap between layers
    horizontal_gap: float = 80      # Gap between steps inside a layer
    canvas_width: float = 1200
    canvas_height: float = 800
    swimlanes: list[str] = field(default_factory=list)
    lane_pitch: float = 450         # Offset per swimlane index
    char_width: float = 8
    label_padding: float = 40
    min_width: float = 150
    max_width: float = 280


@dataclass
class FlowchartNode:
    id: str
    label: str
    kind: StepKind
    rect: Rect
    swimlane: Optional[str] = None


@dataclass
class FlowchartEdge:
    source: str
    target: str
    label: str = ""
    points: list[Point] = field(default_factory=list)


@dataclass
class Swimlane:
    name: str
    rect: Rect


@dataclass
class FlowchartLayout:
    nodes: list[FlowchartNode] = field(default_factory=list)
    edges: list[FlowchartEdge] = field(default_factory=list)
    swimlanes: list[Swimlane] = field(default_factory=list)
    skipped: list[Edge] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Sizing
# ---------------------------------------------------------------------------

def step_size(step: FlowchartStep, options: Optional[FlowchartOptions] = None) -> tuple[float, float]:
    """Width grows with the label (8 px per character + padding), clamped."""
    cfg = options or FlowchartOptions()
    base_width, height = _BASE_SIZES[step.kind]
    text_width = len(step.label) * cfg.char_width + cfg.label_padding
    width = max(cfg.min_width, base_width, min(text_width, cfg.max_width))
    return width, height


def _lane_rects(cfg: FlowchartOptions) -> list[Swimlane]:
    lanes: list[Swimlane] = []
    for index, name in enumerate(cfg.swimlanes):
        if cfg.direction == FlowDirection.VERTICAL:
            rect = Rect(index * cfg.lane_pitch, 0, 400, 800)
        else:
            rect = Rect(0, index * cfg.lane_pitch, 1200, 400)
        lanes.append(Swimlane(name, rect))
    return lanes


def _flow_edges(
    steps: list[FlowchartStep],
    connections: list[FlowchartConnection],
) -> list[Edge]:
    """Explicit connections plus one labelled edge per decision branch."""
    edges = [Edge(c.source, c.target, c.label) for c in connections]
    declared = {(e.source, e.target) for e in edges}
    for step in steps:
        for decision in step.decisions:
            if (step.id, decision.target) in declared:
                continue
            declared.add((step.id, decision.target))
            edges.append(Edge(step.id, decision.target, decision.label, kind="decision"))
    return edges


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------

def flowchart_layout(
    steps: list[FlowchartStep],
    connections: list[FlowchartConnection],
    options: Optional[FlowchartOptions] = None,
) -> FlowchartLayout:
    """Position flowchart steps layer by layer around the canvas center.

    Vertical flow stacks layers top to bottom, horizontal flow left to
    right.  A step assigned to a known swimlane is shifted by
    ``lane index × lane_pitch`` across the flow.
    """
    cfg = options or FlowchartOptions()
    vertical = cfg.direction == FlowDirection.VERTICAL
    ids = [s.id for s in steps]
    edges, skipped = filter_edges(ids, _flow_edges(steps, connections))
    levels = assign_levels(ids, edges)

    by_layer: dict[int, list[FlowchartStep]] = {}
    for step in steps:
        by_layer.setdefault(levels[step.id], []).append(step)
    max_layer = max(by_layer, default=0)
    widest = max((len(v) for v in by_layer.values()), default=1)

    # Nominal step size used to center the whole chart on the canvas
    avg_w, avg_h = 180, 60
    gap = cfg.horizontal_gap
    if vertical:
        total_w = widest * (avg_w + gap)
        total_h = (max_layer + 1) * (avg_h + cfg.spacing)
    else:
        total_w = (max_layer + 1) * (avg_w + cfg.spacing)
        total_h = widest * (avg_h + gap)
    start_x = cfg.canvas_width / 2 - total_w / 2
    start_y = cfg.canvas_height / 2 - total_h / 2

    lane_index = {name: i for i, name in enumerate(cfg.swimlanes)}
    placed: dict[str, FlowchartNode] = {}

    for layer in range(max_layer + 1):
        layer_steps = by_layer.get(layer, [])
        sizes = [step_size(s, cfg) for s in layer_steps]
        layer_w = sum(w for w, _ in sizes) + gap * (len(sizes) - 1)
        if vertical:
            cursor = start_x + (total_w - layer_w) / 2
            row_y = start_y + layer * (avg_h + cfg.spacing)
        else:
            column_x = start_x + layer * (avg_w + cfg.spacing)

        for index, (step, (width, height)) in enumerate(zip(layer_steps, sizes)):
            lane_offset = 0.0
            if step.swimlane is not None and step.swimlane in lane_index:
                lane_offset = lane_index[step.swimlane] * cfg.lane_pitch

            if vertical:
                rect = Rect(cursor + lane_offset, row_y, width, height)
                cursor += width + gap
            else:
                rect = Rect(column_x, start_y + lane_offset + index * (height + gap), width, height)
            placed[step.id] = FlowchartNode(step.id, step.label, step.kind, rect, step.swimlane)

    flow_edges: list[FlowchartEdge] = []
    for edge in edges:
        src = placed[edge.source].rect
        tgt = placed[edge.target].rect
        if vertical:
            points = [Point(src.cx, src.bottom), Point(tgt.cx, tgt.y)]
        else:
            points = [Point(src.right, src.cy), Point(tgt.x, tgt.cy)]
        flow_edges.append(FlowchartEdge(edge.source, edge.target, edge.label, points))

    return FlowchartLayout(
        nodes=[placed[s.id] for s in steps],
        edges=flow_edges,
        swimlanes=_lane_rects(cfg),
        skipped=skipped,
    )


# ---------------------------------------------------------------------------
# Boundary conversion
# ---------------------------------------------------------------------------

def parse_flowchart_steps(records: Any) -> list[FlowchartStep]:
    """Turn plain step dicts (``kind`` or ``type``) into ``FlowchartStep``."""
    steps: list[FlowchartStep] = []
    for i, r in enumerate(validate_list(records, "steps")):
        record = require_record(r, "Step", i)
        if "kind" not in record and "type" in record:
            record = {**record, "kind": record["type"]}
        decisions: list[Decision] = []
        for j, d in enumerate(validate_list(record.get("decisions", []), "decisions")):
            d = require_record(d, f"Decision of step {i}", j)
            target = d.get("target", d.get("targetId"))
            if not isinstance(target, str) or not target.strip():
                raise ValidationError(
                    f"Decision of step {i} at index {j}: 'target' must be a non-empty string."
                )
            decisions.append(Decision(record_text(d, "label", "Decision", j), target))
        swimlane = record.get("swimlane")
        if swimlane is not None and not isinstance(swimlane, str):
            raise ValidationError(f"Step at index {i}: 'swimlane' must be a string.")
        steps.append(FlowchartStep(
            id=record_id(record, "Step", i),
            label=record_text(record, "label", "Step", i),
            kind=record_choice(record, "kind", "Step", i, StepKind, StepKind.PROCESS),
            swimlane=swimlane,
            decisions=decisions,
        ))
    return steps


def parse_flowchart_connections(records: Any) -> list[FlowchartConnection]:
    connections: list[FlowchartConnection] = []
    for i, r in enumerate(validate_list(records, "connections")):
        record = require_record(r, "Connection", i)
        source_key = "source" if "source" in record else "from"
        target_key = "target" if "target" in record else "to"
        connections.append(FlowchartConnection(
            source=record_id(record, "Connection", i, source_key),
            target=record_id(record, "Connection", i, target_key),
            label=record_text(record, "label", "Connection", i),
        ))
    return connections
