"""Tests for the flowchart generator."""

import pytest

from diagram_layout.flowchart import (
    Decision,
    FlowchartConnection,
    FlowchartOptions,
    FlowchartStep,
    FlowDirection,
    StepKind,
    flowchart_layout,
    parse_flowchart_connections,
    parse_flowchart_steps,
    step_size,
)
from diagram_layout.models import Point
from diagram_layout.validation import ValidationError


def _linear_chart() -> tuple[list[FlowchartStep], list[FlowchartConnection]]:
    steps = [
        FlowchartStep("s", "Start", StepKind.START),
        FlowchartStep("p", "Do work"),
        FlowchartStep("e", "End", StepKind.END),
    ]
    return steps, [FlowchartConnection("s", "p"), FlowchartConnection("p", "e")]


# ===================================================================
# Sizing
# ===================================================================

class TestStepSize:
    def test_short_label_uses_minimum(self) -> None:
        assert step_size(FlowchartStep("a", "Go", StepKind.START)) == (150, 50)

    def test_kind_base_width(self) -> None:
        assert step_size(FlowchartStep("a", "?", StepKind.DECISION)) == (160, 80)
        assert step_size(FlowchartStep("a", "x", StepKind.PROCESS)) == (180, 60)

    def test_long_label_is_clamped(self) -> None:
        assert step_size(FlowchartStep("a", "x" * 50))[0] == 280

    def test_label_grows_width(self) -> None:
        assert step_size(FlowchartStep("a", "x" * 20))[0] == 200


# ===================================================================
# Layout
# ===================================================================

class TestFlowchartLayout:
    """Layered placement around the canvas center."""

    def test_vertical_layers(self) -> None:
        steps, conns = _linear_chart()
        chart = flowchart_layout(steps, conns)
        rects = {n.id: n.rect for n in chart.nodes}
        assert rects["s"].y == 160
        assert rects["p"].y == 320
        assert rects["e"].y == 480
        assert rects["s"].cx == pytest.approx(600)

    def test_edges_run_bottom_to_top(self) -> None:
        steps, conns = _linear_chart()
        chart = flowchart_layout(steps, conns)
        rects = {n.id: n.rect for n in chart.nodes}
        first = chart.edges[0]
        assert first.points == [
            Point(rects["s"].cx, rects["s"].bottom),
            Point(rects["p"].cx, rects["p"].y),
        ]

    def test_horizontal_flow(self) -> None:
        steps, conns = _linear_chart()
        chart = flowchart_layout(steps, conns, FlowchartOptions(direction=FlowDirection.HORIZONTAL))
        rects = {n.id: n.rect for n in chart.nodes}
        assert rects["s"].x < rects["p"].x < rects["e"].x
        assert chart.edges[0].points[0] == Point(rects["s"].right, rects["s"].cy)

    def test_decision_branches_become_edges(self) -> None:
        steps = [
            FlowchartStep("d", "Ok?", StepKind.DECISION,
                          decisions=[Decision("yes", "y"), Decision("no", "n")]),
            FlowchartStep("y", "Ship"),
            FlowchartStep("n", "Fix"),
        ]
        chart = flowchart_layout(steps, [])
        labels = sorted(e.label for e in chart.edges)
        assert labels == ["no", "yes"]
        rects = {n.id: n.rect for n in chart.nodes}
        assert rects["y"].y == rects["n"].y > rects["d"].y

    def test_duplicate_decision_and_connection_merge(self) -> None:
        steps = [
            FlowchartStep("d", "Ok?", StepKind.DECISION, decisions=[Decision("yes", "y")]),
            FlowchartStep("y", "Ship"),
        ]
        chart = flowchart_layout(steps, [FlowchartConnection("d", "y", "go")])
        assert len(chart.edges) == 1

    def test_dangling_connection_skipped(self) -> None:
        steps, conns = _linear_chart()
        chart = flowchart_layout(steps, conns + [FlowchartConnection("p", "ghost")])
        assert [(e.source, e.target) for e in chart.skipped] == [("p", "ghost")]
        assert len(chart.edges) == 2

    def test_swimlane_offset(self) -> None:
        steps, conns = _linear_chart()
        plain = flowchart_layout(steps, conns)
        steps[1].swimlane = "Ops"
        opts = FlowchartOptions(swimlanes=["Dev", "Ops"])
        laned = flowchart_layout(steps, conns, opts)
        before = {n.id: n.rect for n in plain.nodes}["p"]
        after = {n.id: n.rect for n in laned.nodes}["p"]
        assert after.x - before.x == 450
        assert [lane.name for lane in laned.swimlanes] == ["Dev", "Ops"]
        assert laned.swimlanes[1].rect.x == 450

    def test_unknown_swimlane_is_ignored(self) -> None:
        steps, conns = _linear_chart()
        steps[0].swimlane = "Nowhere"
        plain = flowchart_layout(_linear_chart()[0], conns)
        chart = flowchart_layout(steps, conns)
        assert chart.nodes[0].rect == plain.nodes[0].rect

    def test_empty(self) -> None:
        chart = flowchart_layout([], [])
        assert chart.nodes == [] and chart.edges == []


# ===================================================================
# Boundary conversion
# ===================================================================

class TestParseFlowchart:
    def test_steps_with_type_alias(self) -> None:
        steps = parse_flowchart_steps([
            {"id": "a", "label": "Begin", "type": "start"},
            {"id": "b", "label": "Check", "kind": "decision",
             "decisions": [{"label": "yes", "targetId": "a"}]},
        ])
        assert steps[0].kind == StepKind.START
        assert steps[1].decisions == [Decision("yes", "a")]

    def test_step_unknown_kind(self) -> None:
        with pytest.raises(ValidationError, match="Step at index 0"):
            parse_flowchart_steps([{"id": "a", "kind": "cloud"}])

    def test_decision_requires_target(self) -> None:
        with pytest.raises(ValidationError, match="target"):
            parse_flowchart_steps([{"id": "a", "decisions": [{"label": "x"}]}])

    def test_connections_from_to(self) -> None:
        conns = parse_flowchart_connections([{"from": "a", "to": "b", "label": "next"}])
        assert conns == [FlowchartConnection("a", "b", "next")]
