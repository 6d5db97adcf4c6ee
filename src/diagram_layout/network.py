"""
Network topology layouts: star, ring, mesh, tree and bus.

Star and tree need an anchor node (hub / root).  A missing or unknown
anchor is a caller mistake and raises ``ConfigurationError``.
"""

from __future__ import annotations

import logging
import math
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from diagram_layout.layout import LayoutOptions, filter_edges, force_directed_layout
from diagram_layout.models import (
    Edge,
    LayoutResult,
    Node,
    Rect,
    ShapeBounds,
    ShapeKind,
    compute_bounds,
)
from diagram_layout.validation import (
    ConfigurationError,
    record_choice,
    record_id,
    record_text,
    require_record,
    validate_choice,
    validate_list,
)

logger = logging.getLogger("diagram-layout")


class NetworkTopology(Enum):
    STAR = "star"
    RING = "ring"
    MESH = "mesh"
    TREE = "tree"
    BUS = "bus"


class DeviceKind(Enum):
    SERVER = "server"
    CLIENT = "client"
    ROUTER = "router"
    SWITCH = "switch"
    DATABASE = "database"
    CLOUD = "cloud"
    DEVICE = "device"


_DEVICE_SHAPES: dict[DeviceKind, ShapeKind] = {
    DeviceKind.SERVER: ShapeKind.RECTANGLE,
    DeviceKind.CLIENT: ShapeKind.ELLIPSE,
    DeviceKind.ROUTER: ShapeKind.DIAMOND,
    DeviceKind.SWITCH: ShapeKind.RECTANGLE,
    DeviceKind.DATABASE: ShapeKind.ELLIPSE,
    DeviceKind.CLOUD: ShapeKind.ELLIPSE,
    DeviceKind.DEVICE: ShapeKind.RECTANGLE,
}


@dataclass
class NetworkNode:
    id: str
    label: str = ""
    kind: DeviceKind = DeviceKind.DEVICE


@dataclass
class NetworkLink:
    source: str
    target: str
    label: str = ""
    bandwidth: str = ""


@dataclass
class NetworkOptions:
    """Configuration for the network topology generator."""
    center_x: float = 500
    center_y: float = 400
    radius: float = 250
    node_size: float = 100
    hub_size: float = 120
    # Tree
    tree_spacing: float = 180
    tree_level_spacing: float = 150
    tree_start_y: float = 100
    # Bus
    bus_start_x: float = 200
    bus_end_x: float = 1800
    bus_y: float = 400
    bus_offset: float = 150
    # Mesh
    mesh_iterations: int = 150
    mesh_repulsion: float = 6000
    mesh_attraction: float = 0.015
    seed: Optional[int] = None


def device_shape(kind: DeviceKind) -> ShapeKind:
    """Outline drawn for a device kind."""
    return _DEVICE_SHAPES[kind]


def _square(cx: float, cy: float, size: float) -> Rect:
    return Rect(cx - size / 2, cy - size / 2, size, size)


def _finish(rects: dict[str, Rect], skipped: Optional[list[Edge]] = None) -> LayoutResult:
    return LayoutResult(
        positions=rects,
        bounds=compute_bounds(list(rects.values())),
        skipped_edges=skipped or [],
    )


def _as_edges(links: list[NetworkLink]) -> list[Edge]:
    return [Edge(link.source, link.target, link.label, kind="line") for link in links]


def _require_anchor(nodes: list[NetworkNode], anchor_id: Optional[str], name: str, topology: str) -> None:
    if not anchor_id:
        raise ConfigurationError(f"'{name}' is required for the {topology} topology.")
    if not any(n.id == anchor_id for n in nodes):
        raise ConfigurationError(f"{name.replace('_', ' ').capitalize()} '{anchor_id}' not found.")


# ---------------------------------------------------------------------------
# Topologies
# ---------------------------------------------------------------------------

def star_topology(
    nodes: list[NetworkNode],
    center_node_id: Optional[str],
    options: Optional[NetworkOptions] = None,
) -> LayoutResult:
    """Hub in the middle, every other node evenly on a circle from 12 o'clock."""
    cfg = options or NetworkOptions()
    _require_anchor(nodes, center_node_id, "center_node_id", "star")

    rects: dict[str, Rect] = {
        center_node_id: _square(cfg.center_x, cfg.center_y, cfg.hub_size),
    }
    peripheral = [n for n in nodes if n.id != center_node_id]
    for index, node in enumerate(peripheral):
        angle = 2 * math.pi * index / len(peripheral) - math.pi / 2
        rects[node.id] = _square(
            cfg.center_x + cfg.radius * math.cos(angle),
            cfg.center_y + cfg.radius * math.sin(angle),
            cfg.node_size,
        )
    return _finish(rects)


def ring_topology(
    nodes: list[NetworkNode],
    options: Optional[NetworkOptions] = None,
) -> LayoutResult:
    cfg = options or NetworkOptions()
    rects: dict[str, Rect] = {}
    for index, node in enumerate(nodes):
        angle = 2 * math.pi * index / len(nodes) - math.pi / 2
        rects[node.id] = _square(
            cfg.center_x + cfg.radius * math.cos(angle),
            cfg.center_y + cfg.radius * math.sin(angle),
            cfg.node_size,
        )
    return _finish(rects)


def mesh_topology(
    nodes: list[NetworkNode],
    links: list[NetworkLink],
    options: Optional[NetworkOptions] = None,
) -> LayoutResult:
    """Force-directed placement with constants tuned for dense meshes."""
    cfg = options or NetworkOptions()
    layout_nodes = [Node(n.id, n.label, width=cfg.node_size, height=cfg.node_size) for n in nodes]
    return force_directed_layout(
        layout_nodes,
        _as_edges(links),
        LayoutOptions(
            iterations=cfg.mesh_iterations,
            repulsion=cfg.mesh_repulsion,
            attraction=cfg.mesh_attraction,
            seed=cfg.seed,
        ),
    )


def tree_topology(
    nodes: list[NetworkNode],
    links: list[NetworkLink],
    root_node_id: Optional[str],
    options: Optional[NetworkOptions] = None,
) -> LayoutResult:
    """BFS levels from the root, each level centered on ``center_x``.

    Nodes the root cannot reach are collected into one extra bottom level.
    """
    cfg = options or NetworkOptions()
    _require_anchor(nodes, root_node_id, "root_node_id", "tree")
    usable, skipped = filter_edges((n.id for n in nodes), _as_edges(links))

    children: dict[str, list[str]] = {n.id: [] for n in nodes}
    for edge in usable:
        children[edge.source].append(edge.target)

    levels: list[list[str]] = []
    visited = {root_node_id}
    queue: deque[tuple[str, int]] = deque([(root_node_id, 0)])
    while queue:
        node_id, level = queue.popleft()
        if level == len(levels):
            levels.append([])
        levels[level].append(node_id)
        for child in children[node_id]:
            if child not in visited:
                visited.add(child)
                queue.append((child, level + 1))

    unreached = [n.id for n in nodes if n.id not in visited]
    if unreached:
        logger.warning(
            "Tree topology: %d node(s) not reachable from '%s': %s",
            len(unreached), root_node_id, ", ".join(unreached),
        )
        levels.append(unreached)

    rects: dict[str, Rect] = {}
    for level, ids in enumerate(levels):
        y = cfg.tree_start_y + level * cfg.tree_level_spacing
        start_x = cfg.center_x - len(ids) * cfg.tree_spacing / 2
        for index, node_id in enumerate(ids):
            rects[node_id] = Rect(start_x + index * cfg.tree_spacing, y, cfg.node_size, cfg.node_size)
    return _finish(rects, skipped)


def bus_topology(
    nodes: list[NetworkNode],
    options: Optional[NetworkOptions] = None,
) -> LayoutResult:
    """Nodes evenly spaced above a horizontal backbone."""
    cfg = options or NetworkOptions()
    step = (cfg.bus_end_x - cfg.bus_start_x) / max(len(nodes) - 1, 1)
    y = cfg.bus_y - cfg.bus_offset
    rects = {
        node.id: _square(cfg.bus_start_x + index * step, y, cfg.node_size)
        for index, node in enumerate(nodes)
    }
    result = _finish(rects)
    result.bounds.width = max(result.bounds.width, cfg.bus_end_x + 100)
    result.bounds.height = cfg.bus_y + 100
    return result


def network_layout(
    topology: NetworkTopology | str,
    nodes: list[NetworkNode],
    links: Optional[list[NetworkLink]] = None,
    *,
    center_node_id: Optional[str] = None,
    root_node_id: Optional[str] = None,
    options: Optional[NetworkOptions] = None,
) -> LayoutResult:
    """Dispatch to one of the five topologies."""
    topology = validate_choice(topology, "topology", NetworkTopology, error=ConfigurationError)
    links = links or []

    if topology == NetworkTopology.STAR:
        return star_topology(nodes, center_node_id, options)
    if topology == NetworkTopology.RING:
        return ring_topology(nodes, options)
    if topology == NetworkTopology.MESH:
        return mesh_topology(nodes, links, options)
    if topology == NetworkTopology.TREE:
        return tree_topology(nodes, links, root_node_id, options)
    return bus_topology(nodes, options)


def network_shapes(result: LayoutResult, nodes: list[NetworkNode]) -> dict[str, ShapeBounds]:
    """Lookup table of router shapes (outline picked from each device kind)."""
    shapes: dict[str, ShapeBounds] = {}
    for node in nodes:
        rect = result.positions.get(node.id)
        if rect is None:
            continue
        shapes[node.id] = ShapeBounds(
            rect.x, rect.y, rect.width, rect.height, kind=device_shape(node.kind),
        )
    return shapes


# ---------------------------------------------------------------------------
# Boundary conversion
# ---------------------------------------------------------------------------

def parse_network_nodes(records: Any) -> list[NetworkNode]:
    nodes: list[NetworkNode] = []
    for i, r in enumerate(validate_list(records, "nodes")):
        record = require_record(r, "Network node", i)
        if "kind" not in record and "type" in record:
            record = {**record, "kind": record["type"]}
        nodes.append(NetworkNode(
            id=record_id(record, "Network node", i),
            label=record_text(record, "label", "Network node", i),
            kind=record_choice(record, "kind", "Network node", i, DeviceKind, DeviceKind.DEVICE),
        ))
    return nodes


def parse_network_links(records: Any) -> list[NetworkLink]:
    links: list[NetworkLink] = []
    for i, r in enumerate(validate_list(records, "links")):
        record = require_record(r, "Link", i)
        source_key = "source" if "source" in record else "from"
        target_key = "target" if "target" in record else "to"
        links.append(NetworkLink(
            source=record_id(record, "Link", i, source_key),
            target=record_id(record, "Link", i, target_key),
            label=record_text(record, "label", "Link", i),
            bandwidth=record_text(record, "bandwidth", "Link", i),
        ))
    return links
