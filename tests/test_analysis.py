"""Tests for the diagram quality analyzer and beautifier."""

import logging
import random

import pytest

from diagram_layout.analysis import (
    AnalysisConfig,
    analyze,
    apply_updates,
    beautify,
    is_overlapping,
)
from diagram_layout.models import (
    ElementKind,
    IssueKind,
    PositionedShape,
    PositionUpdate,
    Quality,
    Severity,
)


def _rect(id: str, x: float, y: float, w: float = 100, h: float = 100) -> PositionedShape:
    return PositionedShape(id, ElementKind.RECTANGLE, x, y, w, h)


def _arrow(id: str, x: float, y: float, w: float, h: float) -> PositionedShape:
    return PositionedShape(id, ElementKind.ARROW, x, y, w, h)


def _kinds(analysis) -> list[IssueKind]:
    return [i.kind for i in analysis.issues]


# ===================================================================
# Checks
# ===================================================================

class TestOverlap:
    def test_overlapping_pair(self) -> None:
        analysis = analyze([_rect("a", 0, 0), _rect("b", 10, 0)])
        overlaps = [i for i in analysis.issues if i.kind == IssueKind.OVERLAP]
        assert len(overlaps) == 1
        assert overlaps[0].severity == Severity.HIGH
        assert overlaps[0].element_ids == ["a", "b"]
        assert analysis.overall_quality == Quality.POOR

    def test_touching_counts_as_overlap(self) -> None:
        assert is_overlapping(_rect("a", 0, 0), _rect("b", 100, 0))
        assert not is_overlapping(_rect("a", 0, 0), _rect("b", 101, 0))

    def test_connectors_are_not_shapes(self) -> None:
        analysis = analyze([_rect("a", 0, 0), _arrow("l", 10, 10, 50, 0)])
        assert IssueKind.OVERLAP not in _kinds(analysis)


class TestSpacing:
    def test_close_but_separate(self) -> None:
        analysis = analyze([_rect("a", 0, 0, 10, 10), _rect("b", 20, 0, 10, 10)])
        spacing = [i for i in analysis.issues if i.kind == IssueKind.POOR_SPACING]
        assert len(spacing) == 1
        assert spacing[0].severity == Severity.MEDIUM
        assert "20px apart" in spacing[0].description
        assert "80px" in spacing[0].suggestion


class TestAlignment:
    def test_slightly_off_column(self) -> None:
        elements = [_rect("a", 0, 0), _rect("b", 5, 300), _arrow("l", 50, 50, 5, 300)]
        analysis = analyze(elements)
        assert _kinds(analysis) == [IssueKind.MISALIGNMENT]
        assert analysis.issues[0].severity == Severity.LOW
        assert "horizontally" in analysis.issues[0].description
        assert analysis.overall_quality == Quality.GOOD

    def test_exact_alignment_is_fine(self) -> None:
        elements = [_rect("a", 0, 0), _rect("b", 0, 300), _arrow("l", 50, 50, 0, 300)]
        assert analyze(elements).issues == []

    def test_threshold_is_configurable(self) -> None:
        elements = [_rect("a", 0, 0), _rect("b", 12, 300), _arrow("l", 50, 50, 12, 300)]
        assert analyze(elements).issues == []
        loose = analyze(elements, AnalysisConfig(alignment_threshold=20))
        assert _kinds(loose) == [IssueKind.MISALIGNMENT]


class TestOrphans:
    def test_unconnected_shapes(self) -> None:
        analysis = analyze([_rect("a", 0, 0), _rect("b", 400, 300)])
        orphans = [i for i in analysis.issues if i.kind == IssueKind.ORPHANED]
        assert [i.element_ids for i in orphans] == [["a"], ["b"]]
        assert analysis.overall_quality == Quality.FAIR

    def test_single_shape_is_never_orphaned(self) -> None:
        analysis = analyze([_rect("a", 0, 0)])
        assert analysis.issues == []
        assert analysis.overall_quality == Quality.EXCELLENT
        assert analysis.suggestions == ["Diagram looks great! No major issues detected."]

    def test_connector_end_counts(self) -> None:
        elements = [_rect("a", 0, 0), _rect("b", 400, 300), _arrow("l", 50, 50, 400, 300)]
        analysis = analyze(elements)
        assert analysis.issues == []


class TestConnections:
    def test_short_and_long(self) -> None:
        elements = [
            _rect("a", 0, 0),
            _arrow("short", 40, 40, 5, 5),
            _arrow("long", 50, 50, 900, 0),
        ]
        analysis = analyze(elements)
        invalid = [i for i in analysis.issues if i.kind == IssueKind.INVALID_CONNECTION]
        assert [i.element_ids for i in invalid] == [["short"], ["long"]]
        assert "very short (7px)" in invalid[0].description
        assert all(i.severity == Severity.LOW for i in invalid)

    def test_negative_extent_connector(self) -> None:
        elements = [_rect("a", 0, 0), _rect("b", 400, 300), _arrow("l", 450, 350, -400, -300)]
        assert analyze(elements).issues == []


class TestSuggestions:
    def test_counts_per_category(self) -> None:
        analysis = analyze([_rect("a", 0, 0), _rect("b", 10, 0), _rect("c", 600, 600)])
        joined = " | ".join(analysis.suggestions)
        assert "Fix 1 high-severity issue(s)" in joined
        assert "Connect 3 orphaned element(s)" in joined
        assert "Address 3 spacing issue(s)" in joined


# ===================================================================
# Beautify
# ===================================================================

class TestBeautify:
    """Corrective moves for alignment and spacing."""

    def test_snaps_column_to_rounded_mean(self) -> None:
        updates = beautify([_rect("a", 0, 0), _rect("b", 8, 300)])
        assert updates == [PositionUpdate("a", 4, None), PositionUpdate("b", 4, None)]

    def test_pushes_cramped_shapes_apart(self) -> None:
        a = _rect("a", 0, 0, 10, 10)
        b = _rect("b", 30, 0, 10, 10)
        updates = beautify([a, b])
        assert updates == [PositionUpdate("b", 81, None)]

    def test_input_not_modified(self) -> None:
        shapes = [_rect("a", 0, 0), _rect("b", 8, 300)]
        beautify(shapes)
        assert (shapes[0].x, shapes[1].x) == (0, 8)

    def test_overlapping_pairs_left_alone(self) -> None:
        assert beautify([_rect("a", 0, 0), _rect("b", 50, 50)]) == []

    def test_connectors_ignored(self) -> None:
        assert beautify([_arrow("l", 0, 0, 5, 5), _arrow("m", 3, 0, 5, 5)]) == []

    def test_one_update_per_shape(self) -> None:
        shapes = [_rect("a", 0, 0, 10, 10), _rect("b", 5, 30, 10, 10), _rect("c", 300, 0)]
        ids = [u.id for u in beautify(shapes)]
        assert len(ids) == len(set(ids))

    def test_beautified_layout_is_fixed_point(self) -> None:
        shapes = [
            _rect("s0", 0, 0, 60, 40),
            _rect("s1", 7, 100, 60, 40),
            _rect("s2", 200, 0, 60, 40),
            _rect("s3", 230, 10, 60, 40),
            _rect("s4", 500, 500, 60, 40),
            _rect("s5", 700, 700, 10, 10),
            _rect("s6", 730, 700, 10, 10),
        ]
        updates = beautify(shapes)
        assert updates
        settled = apply_updates(shapes, updates)
        assert beautify(settled) == []


def _random_layout(seed: int) -> list[PositionedShape]:
    rng = random.Random(seed)
    return [
        _rect(f"s{i}", rng.randint(0, 400), rng.randint(0, 400), rng.randint(20, 120), rng.randint(20, 120))
        for i in range(rng.randint(2, 10))
    ]


class TestBeautifyFixedPoint:
    """A second beautify over the first one's output has nothing to do."""

    @pytest.mark.parametrize("seed", range(300))
    def test_random_layouts_settle(self, seed: int) -> None:
        shapes = _random_layout(seed)
        settled = apply_updates(shapes, beautify(shapes))
        assert beautify(settled) == []

    def test_pass_limit_falls_back_to_stacking(self, caplog) -> None:
        config = AnalysisConfig(beautify_max_passes=1)
        shapes = [
            _rect("a", 0, 0, 40, 40),
            _rect("b", 9, 50, 40, 40),
            _rect("c", 60, 20, 40, 40),
        ]
        with caplog.at_level(logging.INFO, logger="diagram-layout"):
            updates = beautify(shapes, config)
        assert "did not settle" in caplog.text
        settled = apply_updates(shapes, updates)
        assert beautify(settled, config) == []
        assert IssueKind.OVERLAP not in _kinds(analyze(settled))

    def test_stacking_keeps_columns(self) -> None:
        config = AnalysisConfig(beautify_max_passes=1)
        shapes = [_rect("a", 0, 0, 40, 40), _rect("b", 6, 45, 40, 40), _rect("c", 3, 90, 40, 40)]
        settled = apply_updates(shapes, beautify(shapes, config))
        assert len({s.x for s in settled}) == 1
        ys = sorted(s.y for s in settled)
        assert all(b - a >= 81 for a, b in zip(ys, ys[1:]))
