"""
Generic graph layout library.

Every algorithm takes the same inputs (nodes, edges, options) and returns a
``LayoutResult`` with a top-left rect per node id:

- Tree / level layout (longest-path levels, cycles broken by DFS back edges)
- Circular layout
- Grid layout
- Force-directed layout (basic and enhanced variants, seedable)
- Rank-based ("dagre-style") layout with barycenter crossing reduction
- Radial hub-and-spoke layout

``layout()`` is the single dispatch point over ``LayoutAlgorithm``.
"""

from __future__ import annotations

import logging
import math
import random
from collections import defaultdict, deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional

from diagram_layout.models import (
    Edge,
    LayoutResult,
    Node,
    RankDirection,
    Rect,
    compute_bounds,
)
from diagram_layout.validation import ConfigurationError, validate_choice

logger = logging.getLogger("diagram-layout")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class LayoutAlgorithm(Enum):
    TREE = "tree"
    CIRCULAR = "circular"
    GRID = "grid"
    FORCE_DIRECTED = "force-directed"
    RADIAL = "radial"
    RANK_BASED = "rank-based"


@dataclass
class LayoutOptions:
    """Tuning knobs shared by all layout algorithms.

    ``None`` means "use the algorithm's own default"; the defaults are
    listed next to each algorithm below.
    """
    # Level / rank layouts
    spacing: float = 60             # Gap between neighbours in a level/rank
    level_spacing: float = 150      # Tree: distance between levels
    rank_spacing: float = 200       # Rank-based: distance between ranks
    rank_direction: RankDirection = RankDirection.TB
    crossing_passes: int = 4        # Barycenter sweeps

    # Circular / radial
    radius: float = 250
    center_x: Optional[float] = None
    center_y: Optional[float] = None

    # Grid
    columns: Optional[int] = None
    row_spacing: float = 150
    col_spacing: float = 200
    start_x: float = 100
    start_y: float = 100

    # Force-directed
    iterations: Optional[int] = None
    repulsion: Optional[float] = None
    attraction: Optional[float] = None
    enhanced: bool = False
    ideal_edge_length: float = 150
    prevent_overlap: bool = True
    min_spacing: float = 20
    seed: Optional[int] = None


# Default centers per algorithm (x, y)
_TREE_CENTER = (400.0, 400.0)
_CIRCLE_CENTER = (500.0, 400.0)
_ENHANCED_FORCE_CENTER = (700.0, 400.0)
_RANK_CENTER = (600.0, 400.0)

_OVERLAP_SWEEPS = 5


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def filter_edges(
    node_ids: Iterable[str],
    edges: list[Edge],
) -> tuple[list[Edge], list[Edge]]:
    """Split *edges* into (usable, skipped) against the known node ids.

    Edges that reference an unknown node are skipped and logged rather
    than failing the whole layout.
    """
    known = set(node_ids)
    usable: list[Edge] = []
    skipped: list[Edge] = []
    for edge in edges:
        if edge.source in known and edge.target in known:
            usable.append(edge)
        else:
            missing = edge.source if edge.source not in known else edge.target
            logger.warning(
                "Skipping edge '%s' -> '%s': unknown node '%s'",
                edge.source, edge.target, missing,
            )
            skipped.append(edge)
    return usable, skipped


def _centered_rect(node: Node, cx: float, cy: float) -> Rect:
    """Rect for *node* centered on (cx, cy), unless the node is pinned."""
    if node.is_pinned:
        return Rect(node.x, node.y, node.width, node.height)
    return Rect(cx - node.width / 2, cy - node.height / 2, node.width, node.height)


def _finish(
    nodes: list[Node],
    rects: dict[str, Rect],
    skipped: list[Edge],
) -> LayoutResult:
    positions = {n.id: rects[n.id] for n in nodes}
    return LayoutResult(
        positions=positions,
        bounds=compute_bounds(list(positions.values())),
        skipped_edges=skipped,
    )


def _unique_nodes(nodes: list[Node]) -> list[Node]:
    seen: set[str] = set()
    unique: list[Node] = []
    for node in nodes:
        if node.id in seen:
            logger.warning("Duplicate node id '%s' ignored", node.id)
            continue
        seen.add(node.id)
        unique.append(node)
    return unique


def _adjacency(
    node_ids: list[str],
    edges: list[Edge],
) -> tuple[dict[str, list[str]], dict[str, list[str]]]:
    """Forward / reverse adjacency without self-loops or duplicates."""
    adj: dict[str, list[str]] = {n: [] for n in node_ids}
    rev_adj: dict[str, list[str]] = {n: [] for n in node_ids}
    for edge in edges:
        if edge.source == edge.target or edge.target in adj[edge.source]:
            continue
        adj[edge.source].append(edge.target)
        rev_adj[edge.target].append(edge.source)
    return adj, rev_adj


def _find_back_edges(
    node_ids: list[str],
    adj: dict[str, list[str]],
) -> set[tuple[str, str]]:
    """Find back-edges in a directed graph using iterative DFS.

    Nodes are visited in input order so the same graph always loses the
    same edges.
    """
    WHITE, GRAY, BLACK = 0, 1, 2
    color: dict[str, int] = {n: WHITE for n in node_ids}
    back_edges: set[tuple[str, str]] = set()

    for start in node_ids:
        if color[start] != WHITE:
            continue
        color[start] = GRAY
        stack: list[tuple[str, int]] = [(start, 0)]
        while stack:
            u, idx = stack[-1]
            neighbors = adj.get(u, [])
            if idx < len(neighbors):
                stack[-1] = (u, idx + 1)
                v = neighbors[idx]
                if color[v] == GRAY:
                    back_edges.add((u, v))
                elif color[v] == WHITE:
                    color[v] = GRAY
                    stack.append((v, 0))
            else:
                color[u] = BLACK
                stack.pop()

    return back_edges


def assign_levels(node_ids: list[str], edges: list[Edge]) -> dict[str, int]:
    """Longest-path levels: every child sits at least one level below each parent.

    Cycles are broken by ignoring DFS back edges; roots are the nodes with
    no remaining incoming edge.
    """
    adj, _ = _adjacency(node_ids, edges)
    back = _find_back_edges(node_ids, adj)
    dag: dict[str, list[str]] = {
        u: [v for v in targets if (u, v) not in back] for u, targets in adj.items()
    }
    has_parent = {v for targets in dag.values() for v in targets}
    roots = [n for n in node_ids if n not in has_parent]

    levels: dict[str, int] = {r: 0 for r in roots}
    queue = deque(roots)
    while queue:
        node = queue.popleft()
        for child in dag[node]:
            new_level = levels[node] + 1
            if child not in levels or levels[child] < new_level:
                levels[child] = new_level
                queue.append(child)

    for n in node_ids:
        levels.setdefault(n, 0)
    return levels


def _group_by_level(node_ids: list[str], levels: dict[str, int]) -> dict[int, list[str]]:
    by_level: dict[int, list[str]] = defaultdict(list)
    for n in node_ids:
        by_level[levels[n]].append(n)
    return dict(by_level)


def _barycenter_sort(
    level_nodes: list[str],
    neighbor_adj: dict[str, list[str]],
    order: dict[str, float],
) -> None:
    """Sort nodes in a level by the barycenter of their neighbours' order."""
    barycenters: dict[str, float] = {}
    for n in level_nodes:
        neighbor_orders = [order[m] for m in neighbor_adj.get(n, []) if m in order]
        if neighbor_orders:
            barycenters[n] = sum(neighbor_orders) / len(neighbor_orders)
        else:
            barycenters[n] = order[n]

    level_nodes.sort(key=lambda n: barycenters[n])
    for i, n in enumerate(level_nodes):
        order[n] = float(i)


def _reduce_crossings(
    by_level: dict[int, list[str]],
    adj: dict[str, list[str]],
    rev_adj: dict[str, list[str]],
    passes: int,
) -> None:
    """Alternate downward / upward barycenter sweeps (in place)."""
    order: dict[str, float] = {}
    for level_nodes in by_level.values():
        for i, n in enumerate(level_nodes):
            order[n] = float(i)

    ordered_levels = sorted(by_level)
    for sweep in range(passes):
        if sweep % 2 == 0:
            for lvl in ordered_levels[1:]:
                _barycenter_sort(by_level[lvl], rev_adj, order)
        else:
            for lvl in reversed(ordered_levels[:-1]):
                _barycenter_sort(by_level[lvl], adj, order)


def _place_levels(
    by_level: dict[int, list[str]],
    nodes: dict[str, Node],
    direction: RankDirection,
    cross_center: float,
    main_start: float,
    main_spacing: float,
    gap: float,
) -> dict[str, Rect]:
    """Lay out each level as a row (or column) centered on *cross_center*."""
    max_level = max(by_level) if by_level else 0
    rects: dict[str, Rect] = {}

    for lvl, level_nodes in sorted(by_level.items()):
        index = max_level - lvl if direction.is_reversed else lvl
        main_pos = main_start + index * main_spacing
        if direction.is_vertical:
            total = sum(nodes[n].width for n in level_nodes) + gap * (len(level_nodes) - 1)
        else:
            total = sum(nodes[n].height for n in level_nodes) + gap * (len(level_nodes) - 1)
        cursor = cross_center - total / 2

        for n in level_nodes:
            node = nodes[n]
            if direction.is_vertical:
                rect = Rect(cursor, main_pos, node.width, node.height)
                cursor += node.width + gap
            else:
                rect = Rect(main_pos, cursor, node.width, node.height)
                cursor += node.height + gap
            if node.is_pinned:
                rect = Rect(node.x, node.y, node.width, node.height)
            rects[n] = rect

    return rects


# ---------------------------------------------------------------------------
# Tree / level layout
# ---------------------------------------------------------------------------

def tree_layout(
    nodes: list[Node],
    edges: list[Edge],
    options: Optional[LayoutOptions] = None,
) -> LayoutResult:
    """Hierarchical layout by longest-path level.

    Each level is centered on ``center_x`` (default 400) and separated by
    ``level_spacing``; siblings keep a ``spacing`` gap.  Works for forests
    and graphs with cycles.
    """
    opts = options or LayoutOptions()
    nodes = _unique_nodes(nodes)
    node_map = {n.id: n for n in nodes}
    ids = list(node_map)
    usable, skipped = filter_edges(ids, edges)

    levels = assign_levels(ids, usable)
    by_level = _group_by_level(ids, levels)
    adj, rev_adj = _adjacency(ids, usable)
    _reduce_crossings(by_level, adj, rev_adj, opts.crossing_passes)

    direction = opts.rank_direction
    if direction.is_vertical:
        cross_center = opts.center_x if opts.center_x is not None else _TREE_CENTER[0]
        main_start = opts.start_y
    else:
        cross_center = opts.center_y if opts.center_y is not None else _TREE_CENTER[1]
        main_start = opts.start_x

    rects = _place_levels(
        by_level, node_map, direction, cross_center, main_start,
        opts.level_spacing, opts.spacing,
    )
    return _finish(nodes, rects, skipped)


# ---------------------------------------------------------------------------
# Circular / grid
# ---------------------------------------------------------------------------

def circular_layout(
    nodes: list[Node],
    edges: list[Edge],
    options: Optional[LayoutOptions] = None,
) -> LayoutResult:
    """Place nodes evenly on a circle, first node at the top (−90°)."""
    opts = options or LayoutOptions()
    nodes = _unique_nodes(nodes)
    _, skipped = filter_edges((n.id for n in nodes), edges)
    cx = opts.center_x if opts.center_x is not None else _CIRCLE_CENTER[0]
    cy = opts.center_y if opts.center_y is not None else _CIRCLE_CENTER[1]

    rects: dict[str, Rect] = {}
    count = len(nodes)
    for i, node in enumerate(nodes):
        angle = 2 * math.pi * i / count - math.pi / 2
        rects[node.id] = _centered_rect(
            node,
            cx + opts.radius * math.cos(angle),
            cy + opts.radius * math.sin(angle),
        )
    return _finish(nodes, rects, skipped)


def grid_layout(
    nodes: list[Node],
    edges: list[Edge],
    options: Optional[LayoutOptions] = None,
) -> LayoutResult:
    """Row-major grid with ``columns`` (default ⌈√n⌉) columns."""
    opts = options or LayoutOptions()
    nodes = _unique_nodes(nodes)
    _, skipped = filter_edges((n.id for n in nodes), edges)
    columns = opts.columns or max(1, math.ceil(math.sqrt(len(nodes))))

    rects: dict[str, Rect] = {}
    for i, node in enumerate(nodes):
        row, col = divmod(i, columns)
        if node.is_pinned:
            rects[node.id] = Rect(node.x, node.y, node.width, node.height)
        else:
            rects[node.id] = Rect(
                opts.start_x + col * opts.col_spacing,
                opts.start_y + row * opts.row_spacing,
                node.width,
                node.height,
            )
    return _finish(nodes, rects, skipped)


# ---------------------------------------------------------------------------
# Force-directed
# ---------------------------------------------------------------------------

@dataclass
class _Body:
    """Simulation state for one node (center coordinates)."""
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0
    fx: float = 0.0
    fy: float = 0.0
    pinned: bool = False


def _pinned_center(node: Node) -> tuple[float, float]:
    return node.x + node.width / 2, node.y + node.height / 2


def force_directed_layout(
    nodes: list[Node],
    edges: list[Edge],
    options: Optional[LayoutOptions] = None,
) -> LayoutResult:
    """Spring-electrical simulation.

    Basic variant: random start, repulsion k/d², Hookean attraction k·d,
    damping 0.8, 100 iterations.  Enhanced variant (``options.enhanced``):
    circular start, attraction towards an ideal edge length, a cooling
    schedule and a final overlap-resolution pass.  Randomness comes from
    ``random.Random(options.seed)``.
    """
    opts = options or LayoutOptions()
    nodes = _unique_nodes(nodes)
    ids = [n.id for n in nodes]
    usable, skipped = filter_edges(ids, edges)
    usable = [e for e in usable if e.source != e.target]
    rng = random.Random(opts.seed)

    if opts.enhanced:
        bodies = _simulate_enhanced(nodes, usable, opts, rng)
    else:
        bodies = _simulate_basic(nodes, usable, opts, rng)

    rects = {
        n.id: _centered_rect(n, bodies[n.id].x, bodies[n.id].y) for n in nodes
    }
    return _finish(nodes, rects, skipped)


def _apply_repulsion(
    nodes: list[Node],
    bodies: dict[str, _Body],
    strength: float,
    dist_sq_of: Callable[[float, float], float],
) -> None:
    for i in range(len(nodes)):
        a = bodies[nodes[i].id]
        for j in range(i + 1, len(nodes)):
            b = bodies[nodes[j].id]
            dx = b.x - a.x
            dy = b.y - a.y
            dist_sq = dist_sq_of(dx, dy)
            dist = math.sqrt(dist_sq)
            force = strength / dist_sq
            fx = force * dx / dist
            fy = force * dy / dist
            a.fx -= fx
            a.fy -= fy
            b.fx += fx
            b.fy += fy


def _simulate_basic(
    nodes: list[Node],
    edges: list[Edge],
    opts: LayoutOptions,
    rng: random.Random,
) -> dict[str, _Body]:
    iterations = opts.iterations if opts.iterations is not None else 100
    repulsion = opts.repulsion if opts.repulsion is not None else 5000
    attraction = opts.attraction if opts.attraction is not None else 0.01
    damping = 0.8

    bodies: dict[str, _Body] = {}
    for node in nodes:
        if node.is_pinned:
            x, y = _pinned_center(node)
            bodies[node.id] = _Body(x, y, pinned=True)
        else:
            bodies[node.id] = _Body(400 + rng.random() * 600, 300 + rng.random() * 400)

    for _ in range(iterations):
        for body in bodies.values():
            body.fx = body.fy = 0.0

        _apply_repulsion(nodes, bodies, repulsion, lambda dx, dy: dx * dx + dy * dy + 0.01)

        for edge in edges:
            s = bodies[edge.source]
            t = bodies[edge.target]
            # k·d along the unit vector reduces to k·(dx, dy)
            fx = attraction * (t.x - s.x)
            fy = attraction * (t.y - s.y)
            s.fx += fx
            s.fy += fy
            t.fx -= fx
            t.fy -= fy

        for body in bodies.values():
            if body.pinned:
                continue
            body.vx = (body.vx + body.fx) * damping
            body.vy = (body.vy + body.fy) * damping
            body.x = min(max(body.x + body.vx, 50), 1950)
            body.y = min(max(body.y + body.vy, 50), 1450)

    logger.debug("Force layout (basic) finished after %d iterations", iterations)
    return bodies


def _simulate_enhanced(
    nodes: list[Node],
    edges: list[Edge],
    opts: LayoutOptions,
    rng: random.Random,
) -> dict[str, _Body]:
    iterations = opts.iterations if opts.iterations is not None else 150
    repulsion = opts.repulsion if opts.repulsion is not None else 8000
    attraction = opts.attraction if opts.attraction is not None else 0.015
    cx = opts.center_x if opts.center_x is not None else _ENHANCED_FORCE_CENTER[0]
    cy = opts.center_y if opts.center_y is not None else _ENHANCED_FORCE_CENTER[1]

    bodies: dict[str, _Body] = {}
    count = len(nodes)
    for i, node in enumerate(nodes):
        if node.is_pinned:
            x, y = _pinned_center(node)
            bodies[node.id] = _Body(x, y, pinned=True)
            continue
        angle = 2 * math.pi * i / count
        x = cx + 200 * math.cos(angle)
        y = cy + 200 * math.sin(angle)
        if opts.seed is not None:
            x += rng.uniform(-5, 5)
            y += rng.uniform(-5, 5)
        bodies[node.id] = _Body(x, y)

    temperature = 1.0
    for _ in range(iterations):
        for body in bodies.values():
            body.fx = body.fy = 0.0

        _apply_repulsion(nodes, bodies, repulsion, lambda dx, dy: max(dx * dx + dy * dy, 100.0))

        for edge in edges:
            s = bodies[edge.source]
            t = bodies[edge.target]
            dx = t.x - s.x
            dy = t.y - s.y
            dist = max(math.hypot(dx, dy), 1e-6)
            force = attraction * (dist - opts.ideal_edge_length)
            fx = force * dx / dist
            fy = force * dy / dist
            s.fx += fx
            s.fy += fy
            t.fx -= fx
            t.fy -= fy

        damping = 0.85 * temperature
        for body in bodies.values():
            if body.pinned:
                continue
            body.vx = (body.vx + body.fx * 0.1) * damping
            body.vy = (body.vy + body.fy * 0.1) * damping
            body.x = min(max(body.x + body.vx, 100), 1900)
            body.y = min(max(body.y + body.vy, 100), 1400)
        temperature *= 0.95

    if opts.prevent_overlap:
        _separate_bodies(nodes, bodies, opts.min_spacing)

    logger.debug("Force layout (enhanced) finished after %d iterations", iterations)
    return bodies


def _separate_bodies(
    nodes: list[Node],
    bodies: dict[str, _Body],
    min_spacing: float,
) -> None:
    """Push pairs apart until their centers are (w1 + w2)/2 + min_spacing apart."""
    for _ in range(_OVERLAP_SWEEPS):
        moved = False
        for i in range(len(nodes)):
            for j in range(i + 1, len(nodes)):
                a = bodies[nodes[i].id]
                b = bodies[nodes[j].id]
                if a.pinned and b.pinned:
                    continue
                min_dist = (nodes[i].width + nodes[j].width) / 2 + min_spacing
                dx = b.x - a.x
                dy = b.y - a.y
                dist = math.hypot(dx, dy)
                if dist >= min_dist:
                    continue
                if dist < 1e-6:
                    ux, uy = 1.0, 0.0
                else:
                    ux, uy = dx / dist, dy / dist
                push = min_dist - dist
                if a.pinned:
                    b.x += ux * push
                    b.y += uy * push
                elif b.pinned:
                    a.x -= ux * push
                    a.y -= uy * push
                else:
                    a.x -= ux * push / 2
                    a.y -= uy * push / 2
                    b.x += ux * push / 2
                    b.y += uy * push / 2
                moved = True
        if not moved:
            break


# ---------------------------------------------------------------------------
# Rank-based (dagre-style)
# ---------------------------------------------------------------------------

def assign_ranks(node_ids: list[str], edges: list[Edge]) -> dict[str, int]:
    """Kahn's algorithm; rank = max(rank of predecessors) + 1.

    Nodes never released (they sit on or behind a cycle) get rank 0.
    """
    adj, rev_adj = _adjacency(node_ids, edges)
    in_degree = {n: len(rev_adj[n]) for n in node_ids}
    ranks: dict[str, int] = {n: 0 for n in node_ids if in_degree[n] == 0}
    queue = deque(n for n in node_ids if in_degree[n] == 0)

    while queue:
        node = queue.popleft()
        for child in adj[node]:
            ranks[child] = max(ranks.get(child, 0), ranks[node] + 1)
            in_degree[child] -= 1
            if in_degree[child] == 0:
                queue.append(child)

    unranked = [n for n in node_ids if in_degree[n] > 0]
    if unranked:
        logger.info(
            "Rank-based layout: %d node(s) on cycles placed at rank 0: %s",
            len(unranked), ", ".join(unranked),
        )
        for n in unranked:
            ranks[n] = 0
    return ranks


def rank_based_layout(
    nodes: list[Node],
    edges: list[Edge],
    options: Optional[LayoutOptions] = None,
) -> LayoutResult:
    """Dagre-style layout: topological ranks, barycenter ordering, centered ranks.

    ``rank_direction`` picks the flow (TB/BT/LR/RL).  Ranks are
    ``rank_spacing`` apart and centered on (600, 400) unless a center is
    given.
    """
    opts = options or LayoutOptions()
    nodes = _unique_nodes(nodes)
    node_map = {n.id: n for n in nodes}
    ids = list(node_map)
    usable, skipped = filter_edges(ids, edges)

    ranks = assign_ranks(ids, usable)
    by_rank = _group_by_level(ids, ranks)
    adj, rev_adj = _adjacency(ids, usable)
    _reduce_crossings(by_rank, adj, rev_adj, opts.crossing_passes)

    direction = opts.rank_direction
    if direction.is_vertical:
        cross_center = opts.center_x if opts.center_x is not None else _RANK_CENTER[0]
        main_start = opts.start_y
    else:
        cross_center = opts.center_y if opts.center_y is not None else _RANK_CENTER[1]
        main_start = opts.start_x

    rects = _place_levels(
        by_rank, node_map, direction, cross_center, main_start,
        opts.rank_spacing, opts.spacing,
    )
    return _finish(nodes, rects, skipped)


# ---------------------------------------------------------------------------
# Radial hub-and-spoke
# ---------------------------------------------------------------------------

def radial_layout(
    nodes: list[Node],
    edges: list[Edge],
    options: Optional[LayoutOptions] = None,
) -> LayoutResult:
    """Hubs in the middle, everything else on concentric rings by BFS distance.

    The hubs are the ``min(3, ⌈0.1·n⌉)`` best-connected nodes (ties keep
    input order).  Ring ``i`` sits on radius ``100 + 150·i``; nodes that
    BFS cannot reach share one final ring.
    """
    opts = options or LayoutOptions()
    nodes = _unique_nodes(nodes)
    node_map = {n.id: n for n in nodes}
    ids = list(node_map)
    usable, skipped = filter_edges(ids, edges)
    cx = opts.center_x if opts.center_x is not None else _CIRCLE_CENTER[0]
    cy = opts.center_y if opts.center_y is not None else _CIRCLE_CENTER[1]

    if not nodes:
        return _finish(nodes, {}, skipped)

    neighbors: dict[str, list[str]] = {n: [] for n in ids}
    degree: dict[str, int] = {n: 0 for n in ids}
    for edge in usable:
        degree[edge.source] += 1
        degree[edge.target] += 1
        neighbors[edge.source].append(edge.target)
        neighbors[edge.target].append(edge.source)

    hub_count = min(3, math.ceil(len(ids) * 0.1))
    hubs = sorted(ids, key=lambda n: -degree[n])[:hub_count]

    rings: list[list[str]] = [hubs]
    visited = set(hubs)
    frontier = hubs
    while len(visited) < len(ids):
        next_ring: list[str] = []
        for n in frontier:
            for m in neighbors[n]:
                if m not in visited and m not in next_ring:
                    next_ring.append(m)
        if not next_ring:
            next_ring = [n for n in ids if n not in visited]
        visited.update(next_ring)
        rings.append(next_ring)
        frontier = next_ring

    rects: dict[str, Rect] = {}
    for ring_index, ring in enumerate(rings):
        count = len(ring)
        for i, n in enumerate(ring):
            node = node_map[n]
            if ring_index == 0:
                hub_radius = 30 if count > 1 else 0
                angle = 2 * math.pi * i / count if count > 1 else 0.0
            else:
                hub_radius = 100 + 150 * ring_index
                angle = 2 * math.pi * i / count - math.pi / 2
            rects[n] = _centered_rect(
                node,
                cx + hub_radius * math.cos(angle),
                cy + hub_radius * math.sin(angle),
            )
    return _finish(nodes, rects, skipped)


# ---------------------------------------------------------------------------
# Dispatch / inspection
# ---------------------------------------------------------------------------

_ALGORITHMS: dict[LayoutAlgorithm, Callable[..., LayoutResult]] = {
    LayoutAlgorithm.TREE: tree_layout,
    LayoutAlgorithm.CIRCULAR: circular_layout,
    LayoutAlgorithm.GRID: grid_layout,
    LayoutAlgorithm.FORCE_DIRECTED: force_directed_layout,
    LayoutAlgorithm.RADIAL: radial_layout,
    LayoutAlgorithm.RANK_BASED: rank_based_layout,
}


def layout(
    nodes: list[Node],
    edges: list[Edge],
    algorithm: LayoutAlgorithm | str = LayoutAlgorithm.TREE,
    options: Optional[LayoutOptions] = None,
) -> LayoutResult:
    """Run the requested layout algorithm.

    Raises ``ConfigurationError`` for an unknown algorithm name.
    """
    algorithm = validate_choice(
        algorithm, "algorithm", LayoutAlgorithm, error=ConfigurationError,
    )
    return _ALGORITHMS[algorithm](nodes, edges, options)


def detect_collisions(result: LayoutResult) -> int:
    """Number of node pairs whose rects overlap (touching does not count)."""
    rects = list(result.positions.values())
    count = 0
    for i in range(len(rects)):
        for j in range(i + 1, len(rects)):
            if rects[i].intersects(rects[j]):
                count += 1
    return count
