"""
Layout engine for network graphs.

Lays out every container (the graph itself and each subgraph) on its
own, innermost first, so that a subgraph is sized by its members before
its parent arranges it as a single block.

Within a container, members are ordered with networkx: when the links
between members form a DAG, topological generations give the layers;
otherwise a seeded spring layout is folded into a grid. Either way the
result is reproducible for identical input.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import networkx as nx
import numpy as np

from ...shared.config.settings import Settings, get_settings
from ...shared.exceptions import LayoutError
from ...shared.infrastructure.monitoring import get_logger, timed_operation
from ...shared.models import (
    Bounds, LayoutLink, LayoutNode, LayoutPort, LayoutResult, LayoutSubgraph,
    NetworkGraph, Node, Position, Size, endpoint_node, endpoint_port,
)

CHAR_WIDTH = 7
LABEL_LINE_HEIGHT = 16
ICON_BLOCK_HEIGHT = 48
SUBGRAPH_HEADER = 24
DIAGRAM_MARGIN = 40
PORT_SIZE = 8

Point = Tuple[float, float]


@dataclass
class _Block:
    """A member of a container: a node or a laid-out subgraph."""

    id: str
    is_subgraph: bool
    width: float
    height: float
    offsets: Dict[str, Point] = field(default_factory=dict)


class LayoutEngine:
    """
    Computes positions for nodes, subgraphs, ports and link routes.

    Args:
        settings: Sizes, spacing and seed (defaults to the global settings)
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.logger = get_logger(__name__)

    @timed_operation("layout_duration")
    def layout(self, graph: NetworkGraph) -> LayoutResult:
        """
        Lay out a graph.

        Args:
            graph: Graph to position

        Returns:
            Layout with node centers, subgraph bounds, ports and link points

        Raises:
            LayoutError: If the networkx layout fails
        """
        config = self.settings.layout_config
        spacing = graph.settings.node_spacing or config['node_spacing']
        rank_spacing = graph.settings.rank_spacing or config['rank_spacing']
        padding = graph.settings.subgraph_padding or config['subgraph_padding']
        direction = graph.settings.direction or "TB"

        context = _LayoutContext(graph, self.settings, spacing, rank_spacing, padding, direction)
        try:
            root = context.measure(None)
        except nx.NetworkXException as e:
            raise LayoutError(f"Layout failed: {e}") from e

        result = LayoutResult(metadata={'direction': direction, 'seed': self.settings.layout_seed})
        context.place(root, 0.0, 0.0, result)

        self._add_ports_and_links(graph, result)
        result.bounds = self._bounds(result)

        self.logger.debug(
            f"Laid out {len(result.nodes)} nodes, {len(result.subgraphs)} subgraphs "
            f"and {len(result.links)} links"
        )
        return result

    # === Links and ports ===

    def _add_ports_and_links(self, graph: NetworkGraph, result: LayoutResult) -> None:
        for index, link in enumerate(graph.links):
            from_id = endpoint_node(link.from_)
            to_id = endpoint_node(link.to)
            start_box = self._box(result, from_id)
            end_box = self._box(result, to_id)
            if start_box is None or end_box is None:
                self.logger.debug(f"Skipping link {link.id or index}: unknown endpoint")
                continue

            start_side = _facing_side(start_box, end_box)
            end_side = _facing_side(end_box, start_box)
            start = self._attach(result, from_id, endpoint_port(link.from_), start_side, start_box)
            end = self._attach(result, to_id, endpoint_port(link.to), end_side, end_box)

            link_id = link.id or f"link-{index}"
            result.links[link_id] = LayoutLink(
                id=link_id,
                from_=from_id,
                to=to_id,
                from_endpoint=link.from_,
                to_endpoint=link.to,
                points=[Position(x=x, y=y) for x, y in self._route(start, end, start_side, graph)],
                link=link,
            )

        self._spread_ports(result)

    @staticmethod
    def _box(result: LayoutResult, element_id: str) -> Optional[Bounds]:
        node = result.nodes.get(element_id)
        if node is not None:
            return Bounds(
                x=node.position.x - node.size.width / 2,
                y=node.position.y - node.size.height / 2,
                width=node.size.width,
                height=node.size.height,
            )
        subgraph = result.subgraphs.get(element_id)
        return subgraph.bounds if subgraph is not None else None

    def _attach(self, result: LayoutResult, element_id: str, port_name: Optional[str],
                side: str, box: Bounds) -> Point:
        """Anchor point of a link end; registers a port box when a port is named."""
        if port_name:
            ports = self._ports_of(result, element_id)
            port = ports.get(port_name)
            if port is None:
                side = self._declared_side(result, element_id, port_name) or side
                port = LayoutPort(id=port_name, label=port_name, position=_side_center(box, side),
                                  size=Size(width=PORT_SIZE, height=PORT_SIZE), side=side)
                ports[port_name] = port
            center = box.center
            return center.x + port.position.x, center.y + port.position.y

        center = box.center
        offset = _side_center(box, side)
        return center.x + offset.x, center.y + offset.y

    @staticmethod
    def _ports_of(result: LayoutResult, element_id: str) -> Dict[str, LayoutPort]:
        if element_id in result.nodes:
            return result.nodes[element_id].ports
        return result.subgraphs[element_id].ports

    @staticmethod
    def _declared_side(result: LayoutResult, element_id: str, port_name: str) -> Optional[str]:
        subgraph = result.subgraphs.get(element_id)
        if subgraph is None:
            return None
        pin = subgraph.subgraph.get_pin(port_name)
        if pin is not None and pin.position in ("top", "bottom", "left", "right"):
            return pin.position
        return None

    @staticmethod
    def _spread_ports(result: LayoutResult) -> None:
        """Distribute ports sharing a side evenly along it."""
        owners = [(n.size.width, n.size.height, n.ports) for n in result.nodes.values()]
        owners += [(s.bounds.width, s.bounds.height, s.ports) for s in result.subgraphs.values()]
        for width, height, ports in owners:
            by_side: Dict[str, List[LayoutPort]] = {}
            for port in ports.values():
                by_side.setdefault(port.side, []).append(port)
            for side, group in by_side.items():
                if len(group) < 2:
                    continue
                length = width if side in ("top", "bottom") else height
                for i, port in enumerate(group):
                    along = -length / 2 + length * (i + 1) / (len(group) + 1)
                    if side in ("top", "bottom"):
                        port.position = Position(x=along, y=port.position.y)
                    else:
                        port.position = Position(x=port.position.x, y=along)
        # Spreading moves port anchors; link ends follow them
        for layout_link in result.links.values():
            for attr, index in (("from_endpoint", 0), ("to_endpoint", -1)):
                endpoint = getattr(layout_link, attr)
                owner = layout_link.from_ if index == 0 else layout_link.to
                port_name = endpoint_port(endpoint)
                if not port_name:
                    continue
                anchor = LayoutEngine._port_anchor(result, owner, port_name)
                if anchor is None:
                    continue
                points = list(layout_link.points)
                points[index] = Position(x=anchor[0], y=anchor[1])
                layout_link.points = _reroute(points)

    @staticmethod
    def _port_anchor(result: LayoutResult, owner: str, port_name: str) -> Optional[Point]:
        box = LayoutEngine._box(result, owner)
        port = LayoutEngine._ports_of(result, owner).get(port_name) if box else None
        if port is None:
            return None
        center = box.center
        return center.x + port.position.x, center.y + port.position.y

    @staticmethod
    def _route(start: Point, end: Point, start_side: str, graph: NetworkGraph) -> List[Point]:
        if graph.settings.edge_style == "straight":
            return [start, end]
        if math.isclose(start[0], end[0]) or math.isclose(start[1], end[1]):
            return [start, end]
        if start_side in ("left", "right"):
            mid_x = (start[0] + end[0]) / 2
            return [start, (mid_x, start[1]), (mid_x, end[1]), end]
        mid_y = (start[1] + end[1]) / 2
        return [start, (start[0], mid_y), (end[0], mid_y), end]

    @staticmethod
    def _bounds(result: LayoutResult) -> Bounds:
        boxes = [
            (n.position.x - n.size.width / 2, n.position.y - n.size.height / 2,
             n.position.x + n.size.width / 2, n.position.y + n.size.height / 2)
            for n in result.nodes.values()
        ]
        boxes += [
            (s.bounds.x, s.bounds.y, s.bounds.x + s.bounds.width, s.bounds.y + s.bounds.height)
            for s in result.subgraphs.values()
        ]
        if not boxes:
            return Bounds(x=0, y=0, width=800, height=600)

        extents = np.array(boxes, dtype=float)
        min_x, min_y = extents[:, 0].min(), extents[:, 1].min()
        max_x, max_y = extents[:, 2].max(), extents[:, 3].max()
        return Bounds(
            x=float(min_x) - DIAGRAM_MARGIN,
            y=float(min_y) - DIAGRAM_MARGIN,
            width=float(max_x - min_x) + DIAGRAM_MARGIN * 2,
            height=float(max_y - min_y) + DIAGRAM_MARGIN * 2,
        )


class _LayoutContext:
    """Per-call state: containment tree, member ordering and block sizes."""

    def __init__(self, graph: NetworkGraph, settings: Settings, spacing: float,
                 rank_spacing: float, padding: float, direction: str):
        self.graph = graph
        self.settings = settings
        self.spacing = spacing
        self.rank_spacing = rank_spacing
        self.padding = padding
        self.direction = direction

        self.subgraphs = {s.id: s for s in graph.subgraphs}
        self.nodes = {n.id: n for n in graph.nodes}
        self.members: Dict[Optional[str], List[Tuple[str, bool]]] = {}
        for subgraph in graph.subgraphs:
            parent = subgraph.parent if subgraph.parent in self.subgraphs else None
            self.members.setdefault(parent, []).append((subgraph.id, True))
        for node in graph.nodes:
            parent = node.parent if node.parent in self.subgraphs else None
            self.members.setdefault(parent, []).append((node.id, False))

        self.chains = {element_id: self._chain(element_id) for element_id in [*self.subgraphs, *self.nodes]}
        self.blocks: Dict[str, _Block] = {}

    def _chain(self, element_id: str) -> List[str]:
        """The element followed by its containing subgraphs, innermost first."""
        chain = [element_id]
        element = self.nodes.get(element_id) or self.subgraphs.get(element_id)
        parent = element.parent if element is not None else None
        while parent in self.subgraphs and parent not in chain:
            chain.append(parent)
            parent = self.subgraphs[parent].parent
        return chain

    def _member_of(self, element_id: str, container: Optional[str]) -> Optional[str]:
        chain = self.chains.get(element_id)
        if not chain:
            return None
        if container is None:
            return chain[-1]
        if container not in chain[1:]:
            return None
        return chain[chain.index(container) - 1]

    # === Measuring ===

    def measure(self, container: Optional[str], visiting: Tuple[str, ...] = ()) -> _Block:
        blocks: List[_Block] = []
        for member_id, is_subgraph in self.members.get(container, []):
            if is_subgraph:
                if member_id in visiting:
                    continue
                block = self.measure(member_id, visiting + (member_id,))
            else:
                width, height = self.node_size(self.nodes[member_id])
                block = _Block(id=member_id, is_subgraph=False, width=width, height=height)
            self.blocks[member_id] = block
            blocks.append(block)

        content_w, content_h, offsets = self._arrange(container, blocks)

        if container is None:
            return _Block(id="", is_subgraph=True, width=content_w, height=content_h, offsets=offsets)

        if not blocks:
            content_w = self.settings.node_width
            content_h = self.settings.node_height / 2
        inset_top = self.padding + SUBGRAPH_HEADER
        shifted = {k: (x + self.padding, y + inset_top) for k, (x, y) in offsets.items()}
        return _Block(
            id=container,
            is_subgraph=True,
            width=content_w + self.padding * 2,
            height=content_h + self.padding + inset_top,
            offsets=shifted,
        )

    def node_size(self, node: Node) -> Tuple[float, float]:
        lines = node.label_lines
        longest = max((len(line) for line in lines), default=0)
        width = max(self.settings.node_width, longest * CHAR_WIDTH + 24)
        icon = ICON_BLOCK_HEIGHT if (node.type or node.icon) and not node.is_export else 0
        height = max(self.settings.node_height, icon + len(lines) * LABEL_LINE_HEIGHT + 24)
        if node.is_export:
            height = max(40.0, len(lines) * LABEL_LINE_HEIGHT + 16)
        return float(width), float(height)

    def _arrange(self, container: Optional[str], blocks: List[_Block]) -> Tuple[float, float, Dict[str, Point]]:
        """Place blocks in rows; returns content size and top-left offsets."""
        if not blocks:
            return 0.0, 0.0, {}

        rows = self._rows(container, blocks)
        horizontal = self.direction in ("LR", "RL")
        if self.direction in ("BT", "RL"):
            rows = list(reversed(rows))

        # Measure along the row (main) and across rows (cross) axes
        def along(b: _Block) -> float:
            return b.height if horizontal else b.width

        def across(b: _Block) -> float:
            return b.width if horizontal else b.height

        row_lengths = np.array([sum(along(b) for b in row) + self.spacing * (len(row) - 1) for row in rows])
        row_depths = np.array([max(across(b) for b in row) for row in rows])
        content_along = float(row_lengths.max())
        content_across = float(row_depths.sum() + self.rank_spacing * (len(rows) - 1))

        offsets: Dict[str, Point] = {}
        cursor_across = 0.0
        for row, length, depth in zip(rows, row_lengths, row_depths):
            cursor_along = (content_along - float(length)) / 2
            for block in row:
                a = cursor_along
                c = cursor_across + (float(depth) - across(block)) / 2
                offsets[block.id] = (c, a) if horizontal else (a, c)
                cursor_along += along(block) + self.spacing
            cursor_across += float(depth) + self.rank_spacing

        if horizontal:
            return content_across, content_along, offsets
        return content_along, content_across, offsets

    def _rows(self, container: Optional[str], blocks: List[_Block]) -> List[List[_Block]]:
        if len(blocks) == 1:
            return [blocks]

        by_id = {b.id: b for b in blocks}
        digraph = nx.DiGraph()
        digraph.add_nodes_from(by_id)
        for link in self.graph.links:
            source = self._member_of(endpoint_node(link.from_), container)
            target = self._member_of(endpoint_node(link.to), container)
            if source in by_id and target in by_id and source != target:
                digraph.add_edge(source, target)

        positions = nx.spring_layout(digraph.to_undirected(), seed=self.settings.layout_seed)
        order = {member: float(positions[member][0]) for member in by_id}

        if digraph.number_of_edges() and nx.is_directed_acyclic_graph(digraph):
            generations = list(nx.topological_generations(digraph))
            return [[by_id[m] for m in sorted(gen, key=lambda m: (order[m], m))] for gen in generations]

        columns = math.ceil(math.sqrt(len(blocks)))
        coords = np.array([positions[b.id] for b in blocks])
        by_y = np.lexsort((coords[:, 0], coords[:, 1]))
        ordered = [blocks[i] for i in by_y]
        rows = [ordered[i:i + columns] for i in range(0, len(ordered), columns)]
        return [sorted(row, key=lambda b: (order[b.id], b.id)) for row in rows]

    # === Placing ===

    def place(self, block: _Block, x: float, y: float, result: LayoutResult) -> None:
        """Write absolute positions for ``block`` (top-left at x, y) and its members."""
        for member_id, (dx, dy) in block.offsets.items():
            member = self.blocks[member_id]
            left, top = x + dx, y + dy
            if member.is_subgraph:
                result.subgraphs[member_id] = LayoutSubgraph(
                    id=member_id,
                    bounds=Bounds(x=left, y=top, width=member.width, height=member.height),
                    subgraph=self.subgraphs[member_id],
                )
                self.place(member, left, top, result)
            else:
                result.nodes[member_id] = LayoutNode(
                    id=member_id,
                    position=Position(x=left + member.width / 2, y=top + member.height / 2),
                    size=Size(width=member.width, height=member.height),
                    node=self.nodes[member_id],
                )


def _facing_side(box: Bounds, other: Bounds) -> str:
    """Side of ``box`` that faces ``other``."""
    a, b = box.center, other.center
    dx, dy = b.x - a.x, b.y - a.y
    if abs(dx) > abs(dy):
        return "right" if dx > 0 else "left"
    return "bottom" if dy >= 0 else "top"


def _side_center(box: Bounds, side: str) -> Position:
    """Midpoint of a side, relative to the box center."""
    return {
        "top": Position(x=0, y=-box.height / 2),
        "bottom": Position(x=0, y=box.height / 2),
        "left": Position(x=-box.width / 2, y=0),
        "right": Position(x=box.width / 2, y=0),
    }[side]


def _reroute(points: List[Position]) -> List[Position]:
    """Keep a four-point orthogonal route orthogonal after its ends moved."""
    if len(points) != 4:
        return points
    start, first, second, end = points
    if math.isclose(first.y, second.y):
        return [start, Position(x=start.x, y=first.y), Position(x=end.x, y=second.y), end]
    return [start, Position(x=first.x, y=start.y), Position(x=second.x, y=end.y), end]
