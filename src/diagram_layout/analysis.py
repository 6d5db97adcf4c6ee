"""
Diagram quality analyzer.

``analyze`` inspects a finished diagram (shapes and connectors as plain
positioned boxes) and reports overlaps, cramped spacing, near-misses in
alignment, orphaned shapes and suspicious connectors.  ``beautify``
computes the corrective moves for the alignment and spacing findings.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Optional

from diagram_layout.models import (
    DiagramAnalysis,
    DiagramIssue,
    IssueKind,
    PositionedShape,
    PositionUpdate,
    Quality,
    Severity,
)

logger = logging.getLogger("diagram-layout")


@dataclass
class AnalysisConfig:
    """Thresholds used by ``analyze`` and ``beautify`` (pixels)."""
    min_spacing: float = 30
    ideal_spacing: float = 80
    alignment_threshold: float = 10
    orphan_radius: float = 100
    short_connection: float = 20
    long_connection: float = 800
    beautify_alignment_threshold: float = 15
    beautify_min_spacing: float = 80
    beautify_max_passes: int = 10


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _shapes(elements: list[PositionedShape]) -> list[PositionedShape]:
    return [e for e in elements if e.kind.is_shape]


def _connectors(elements: list[PositionedShape]) -> list[PositionedShape]:
    return [e for e in elements if e.kind.is_connector]


def is_overlapping(a: PositionedShape, b: PositionedShape) -> bool:
    """Bounding boxes intersect; shared edges count."""
    return not (
        a.x + a.width < b.x
        or b.x + b.width < a.x
        or a.y + a.height < b.y
        or b.y + b.height < a.y
    )


def center_distance(a: PositionedShape, b: PositionedShape) -> float:
    return math.hypot(b.cx - a.cx, b.cy - a.cy)


def _greedy_groups(shapes: list[PositionedShape], threshold: float, use_y: bool) -> list[list[PositionedShape]]:
    """Bucket shapes against the first member of each bucket."""
    groups: list[list[PositionedShape]] = []
    for shape in shapes:
        for group in groups:
            first = group[0]
            if abs(shape.x - first.x) < threshold or (use_y and abs(shape.y - first.y) < threshold):
                group.append(shape)
                break
        else:
            groups.append([shape])
    return groups


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------

def check_overlaps(shapes: list[PositionedShape], cfg: AnalysisConfig) -> list[DiagramIssue]:
    issues: list[DiagramIssue] = []
    for i, a in enumerate(shapes):
        for b in shapes[i + 1:]:
            if is_overlapping(a, b):
                issues.append(DiagramIssue(
                    IssueKind.OVERLAP,
                    Severity.HIGH,
                    "Elements overlap significantly",
                    [a.id, b.id],
                    "Move elements apart or adjust their sizes to prevent overlap",
                ))
    return issues


def check_spacing(shapes: list[PositionedShape], cfg: AnalysisConfig) -> list[DiagramIssue]:
    issues: list[DiagramIssue] = []
    for i, a in enumerate(shapes):
        for b in shapes[i + 1:]:
            dist = center_distance(a, b)
            if dist < cfg.min_spacing and not is_overlapping(a, b):
                issues.append(DiagramIssue(
                    IssueKind.POOR_SPACING,
                    Severity.MEDIUM,
                    f"Elements are too close together ({round(dist)}px apart)",
                    [a.id, b.id],
                    f"Increase spacing to at least {cfg.ideal_spacing:g}px for better readability",
                ))
    return issues


def check_alignment(shapes: list[PositionedShape], cfg: AnalysisConfig) -> list[DiagramIssue]:
    issues: list[DiagramIssue] = []
    for group in _greedy_groups(shapes, cfg.alignment_threshold, use_y=True):
        if len(group) < 2:
            continue
        ids = [s.id for s in group]
        x_variance = max(s.x for s in group) - min(s.x for s in group)
        y_variance = max(s.y for s in group) - min(s.y for s in group)
        if 0 < x_variance < cfg.alignment_threshold:
            issues.append(DiagramIssue(
                IssueKind.MISALIGNMENT,
                Severity.LOW,
                f"Elements are slightly misaligned horizontally ({round(x_variance)}px variance)",
                ids,
                "Align elements to a common X coordinate for a cleaner look",
            ))
        if 0 < y_variance < cfg.alignment_threshold:
            issues.append(DiagramIssue(
                IssueKind.MISALIGNMENT,
                Severity.LOW,
                f"Elements are slightly misaligned vertically ({round(y_variance)}px variance)",
                ids,
                "Align elements to a common Y coordinate for a cleaner look",
            ))
    return issues


def check_orphans(
    shapes: list[PositionedShape],
    connectors: list[PositionedShape],
    cfg: AnalysisConfig,
) -> list[DiagramIssue]:
    """A shape is orphaned when no connector starts or ends near its center."""
    if len(shapes) <= 1:
        return []
    issues: list[DiagramIssue] = []
    for shape in shapes:
        connected = any(
            math.hypot(conn.x - shape.cx, conn.y - shape.cy) < cfg.orphan_radius
            or math.hypot(conn.end.x - shape.cx, conn.end.y - shape.cy) < cfg.orphan_radius
            for conn in connectors
        )
        if not connected:
            issues.append(DiagramIssue(
                IssueKind.ORPHANED,
                Severity.MEDIUM,
                "Element has no connections to other elements",
                [shape.id],
                "Add connections to integrate this element into the diagram or remove it if not needed",
            ))
    return issues


def check_connections(connectors: list[PositionedShape], cfg: AnalysisConfig) -> list[DiagramIssue]:
    issues: list[DiagramIssue] = []
    for conn in connectors:
        length = math.hypot(conn.width, conn.height)
        if length < cfg.short_connection:
            issues.append(DiagramIssue(
                IssueKind.INVALID_CONNECTION,
                Severity.LOW,
                f"Connection is very short ({round(length)}px)",
                [conn.id],
                "This might be a duplicate or unintended connection",
            ))
        elif length > cfg.long_connection:
            issues.append(DiagramIssue(
                IssueKind.INVALID_CONNECTION,
                Severity.LOW,
                f"Connection is very long ({round(length)}px)",
                [conn.id],
                "Consider adding intermediate nodes to break up long connections",
            ))
    return issues


def overall_quality(issues: list[DiagramIssue]) -> Quality:
    high = sum(1 for i in issues if i.severity == Severity.HIGH)
    medium = sum(1 for i in issues if i.severity == Severity.MEDIUM)
    if not issues:
        return Quality.EXCELLENT
    if high == 0 and medium <= 1:
        return Quality.GOOD
    if high == 0:
        return Quality.FAIR
    return Quality.POOR


def generate_suggestions(issues: list[DiagramIssue]) -> list[str]:
    suggestions: list[str] = []
    high = sum(1 for i in issues if i.severity == Severity.HIGH)
    medium = sum(1 for i in issues if i.severity == Severity.MEDIUM)
    orphaned = sum(1 for i in issues if i.kind == IssueKind.ORPHANED)
    misaligned = sum(1 for i in issues if i.kind == IssueKind.MISALIGNMENT)

    if high:
        suggestions.append(
            f"Fix {high} high-severity issue(s) first: overlapping elements need to be separated")
    if medium:
        suggestions.append(
            f"Address {medium} spacing issue(s): increase distances between close elements for better clarity")
    if orphaned:
        suggestions.append(
            f"Connect {orphaned} orphaned element(s) or remove if not part of the diagram")
    if misaligned:
        suggestions.append("Align elements to improve visual consistency and professionalism")
    if not suggestions:
        suggestions.append("Diagram looks great! No major issues detected.")
    return suggestions


def analyze(
    elements: list[PositionedShape],
    config: Optional[AnalysisConfig] = None,
) -> DiagramAnalysis:
    """Run every check and grade the diagram.

    Quality: no issues is excellent; no high-severity issue and at most one
    medium is good; no high-severity issue is fair; anything else is poor.
    """
    cfg = config or AnalysisConfig()
    shapes = _shapes(elements)
    connectors = _connectors(elements)

    issues: list[DiagramIssue] = []
    issues += check_overlaps(shapes, cfg)
    issues += check_spacing(shapes, cfg)
    issues += check_alignment(shapes, cfg)
    issues += check_orphans(shapes, connectors, cfg)
    issues += check_connections(connectors, cfg)

    return DiagramAnalysis(
        issues=issues,
        overall_quality=overall_quality(issues),
        suggestions=generate_suggestions(issues),
    )


# ---------------------------------------------------------------------------
# Beautify
# ---------------------------------------------------------------------------

def _align_pass(
    shapes: list[PositionedShape],
    cfg: AnalysisConfig,
    whole_bucket: bool = False,
) -> bool:
    changed = False
    threshold = cfg.beautify_alignment_threshold
    for group in _greedy_groups(shapes, threshold, use_y=False):
        if len(group) < 2:
            continue
        mean_x = sum(s.x for s in group) / len(group)
        snapped = round(mean_x)
        for shape in group:
            near = whole_bucket or abs(shape.x - mean_x) < threshold
            if near and shape.x != snapped:
                shape.x = snapped
                changed = True
    return changed


def _spacing_pass(shapes: list[PositionedShape], cfg: AnalysisConfig) -> bool:
    changed = False
    # One extra pixel absorbs the rounding of the new position.
    target = cfg.beautify_min_spacing + 1
    for i, a in enumerate(shapes):
        for b in shapes[i + 1:]:
            if center_distance(a, b) >= cfg.beautify_min_spacing or is_overlapping(a, b):
                continue
            angle = math.atan2(b.cy - a.cy, b.cx - a.cx)
            new_x = round(a.cx + math.cos(angle) * target - b.width / 2)
            new_y = round(a.cy + math.sin(angle) * target - b.height / 2)
            if (new_x, new_y) != (b.x, b.y):
                b.x, b.y = new_x, new_y
                changed = True
    return changed


def _clearance_y(
    placed: PositionedShape,
    shape: PositionedShape,
    cfg: AnalysisConfig,
    was_overlapping: bool,
) -> Optional[int]:
    """Smallest y below the current one at which *shape* clears *placed*.

    None when the pair is already fine: far enough apart, or overlapping
    the way it did in the input.
    """
    if is_overlapping(placed, shape):
        if was_overlapping:
            return None
    elif center_distance(placed, shape) >= cfg.beautify_min_spacing:
        return None

    target = cfg.beautify_min_spacing + 1
    dx = shape.cx - placed.cx
    need_cy = placed.cy + math.sqrt(max(target * target - dx * dx, 0.0))
    new_y = math.ceil(need_cy - shape.height / 2)
    if shape.x <= placed.x + placed.width and placed.x <= shape.x + shape.width:
        new_y = max(new_y, math.floor(placed.y + placed.height) + 1)
    return new_y


def _settle(
    shapes: list[PositionedShape],
    cfg: AnalysisConfig,
    overlapping: set[tuple[int, int]],
) -> None:
    """Force a state both passes leave alone.

    Pairs in *overlapping* overlapped in the input and are left alone.
    Buckets collapse onto one rounded x until the grouping is stable (each
    changing round merges buckets or rounds a value, so this ends within
    ``2n + 1`` rounds).  Spacing is then cleared by moving shapes straight
    down, top to bottom, which never touches x and so keeps the columns.
    """
    for _ in range(2 * len(shapes) + 1):
        if not _align_pass(shapes, cfg, whole_bucket=True):
            break

    placed: list[int] = []
    for i in sorted(range(len(shapes)), key=lambda k: shapes[k].y):
        shape = shapes[i]
        moved = True
        while moved:
            moved = False
            for j in placed:
                new_y = _clearance_y(shapes[j], shape, cfg, (i, j) in overlapping)
                if new_y is not None:
                    shape.y = new_y
                    moved = True
        placed.append(i)


def beautify(
    elements: list[PositionedShape],
    config: Optional[AnalysisConfig] = None,
) -> list[PositionUpdate]:
    """Moves that snap near-aligned columns and push cramped shapes apart.

    Works on a copy; the input is not modified.  Passes repeat until
    nothing moves, so running beautify on its own output yields no
    updates.  Layouts where snapping and pushing keep undoing each other
    are settled by stacking the cramped shapes vertically instead.  One
    update per moved shape, carrying only changed axes.
    """
    cfg = config or AnalysisConfig()
    originals = _shapes(elements)
    working = [replace(s) for s in originals]

    for _ in range(cfg.beautify_max_passes):
        aligned = _align_pass(working, cfg)
        spaced = _spacing_pass(working, cfg)
        if not (aligned or spaced):
            break
    else:
        logger.info(
            "Beautify did not settle after %d passes, stacking cramped shapes",
            cfg.beautify_max_passes,
        )
        overlapping = {
            (i, j)
            for i, a in enumerate(originals)
            for j, b in enumerate(originals)
            if i != j and is_overlapping(a, b)
        }
        _settle(working, cfg, overlapping)

    updates: list[PositionUpdate] = []
    for before, after in zip(originals, working):
        dx = after.x if after.x != before.x else None
        dy = after.y if after.y != before.y else None
        if dx is not None or dy is not None:
            updates.append(PositionUpdate(before.id, dx, dy))
    return updates


def apply_updates(
    elements: list[PositionedShape],
    updates: list[PositionUpdate],
) -> list[PositionedShape]:
    """Copy of *elements* with *updates* applied."""
    by_id = {u.id: u for u in updates}
    result: list[PositionedShape] = []
    for element in elements:
        update = by_id.get(element.id)
        moved = replace(element)
        if update is not None:
            if update.x is not None:
                moved.x = update.x
            if update.y is not None:
                moved.y = update.y
        result.append(moved)
    return result
