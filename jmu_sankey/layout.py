"""Sankey layout: column assignment, node ordering, and link routing.

Given nodes, weighted directed links, a canvas extent and a node
width/padding/alignment policy, returns each node's rectangle and each
link's band width and vertical offsets. The steps are:

1. Resolve link endpoints by node id and build a networkx DiGraph.
2. Node value = max(sum of incoming, sum of outgoing) link values.
3. Depth (longest path from any source) and height (longest path to any
   sink), computed over a topological order. Cycles are rejected.
4. Column assignment from the alignment policy, x positions spread evenly.
5. Initial breadths: nodes stacked per column, heights scaled by the
   smallest per-column factor so every column fits the extent.
6. A few relaxation passes (right-to-left then left-to-right) pull nodes
   toward the weighted centre of their neighbours, then resolve overlaps.
7. Link breadths: each link gets a y offset at its source and target end.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

import networkx as nx
from pydantic import BaseModel, ConfigDict

from jmu_sankey.config import Config
from jmu_sankey.errors import DiagramConstructionError, LayoutError
from jmu_sankey.models import Diagram, Node, NodeAlign

logger = logging.getLogger(__name__)

Extent = tuple[tuple[float, float], tuple[float, float]]

# Movements smaller than this are ignored when resolving collisions
_EPSILON = 1e-6


def _node_name(node: Node) -> str:
    return node.name


class LayoutPolicy(BaseModel):
    """How the layout positions nodes on the canvas."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    node_id: Callable[[Node], str] = _node_name
    align: NodeAlign = NodeAlign.JUSTIFY
    node_width: float = 15
    node_padding: float = 10
    extent: Extent = ((1, 5), (927, 595))
    iterations: int = 6

    @classmethod
    def from_config(cls, config: Config) -> "LayoutPolicy":
        return cls(
            align=config.layout.align,
            node_width=config.layout.node_width,
            node_padding=config.layout.node_padding,
            extent=config.canvas.extent,
            iterations=config.layout.iterations,
        )


# --- Positioned output ---


@dataclass(eq=False)
class PositionedNode:
    name: str
    title: str
    category: str
    index: int
    value: float = 0.0
    depth: int = 0
    height: int = 0
    layer: int = 0
    x0: float = 0.0
    x1: float = 0.0
    y0: float = 0.0
    y1: float = 0.0
    source_links: list["PositionedLink"] = field(default_factory=list, repr=False)  # outgoing
    target_links: list["PositionedLink"] = field(default_factory=list, repr=False)  # incoming


@dataclass(eq=False)
class PositionedLink:
    source: PositionedNode = field(repr=False)
    target: PositionedNode = field(repr=False)
    value: float
    index: int
    width: float = 0.0
    y0: float = 0.0  # band centre at the source end
    y1: float = 0.0  # band centre at the target end

    @property
    def uid(self) -> str:
        """Identifier for this link's gradient definition."""
        return f"link-{self.index}"


@dataclass
class PositionedDiagram:
    nodes: list[PositionedNode]
    links: list[PositionedLink]
    extent: Extent
    columns: int = 0


# --- Alignment ---


def _align_left(node: PositionedNode, n: int) -> int:
    return node.depth


def _align_right(node: PositionedNode, n: int) -> int:
    return n - 1 - node.height


def _align_justify(node: PositionedNode, n: int) -> int:
    return node.depth if node.source_links else n - 1


def _align_center(node: PositionedNode, n: int) -> int:
    if node.target_links:
        return node.depth
    if node.source_links:
        return min(link.target.depth for link in node.source_links) - 1
    return 0


ALIGNERS: dict[NodeAlign, Callable[[PositionedNode, int], int]] = {
    NodeAlign.LEFT: _align_left,
    NodeAlign.RIGHT: _align_right,
    NodeAlign.JUSTIFY: _align_justify,
    NodeAlign.CENTER: _align_center,
}


# --- Graph construction ---


def _build_graph(
    diagram: Diagram,
    node_id: Callable[[Node], str],
) -> tuple[list[PositionedNode], list[PositionedLink], nx.DiGraph]:
    nodes: list[PositionedNode] = []
    by_id: dict[str, PositionedNode] = {}
    for i, node in enumerate(diagram.nodes):
        key = node_id(node)
        if key in by_id:
            raise DiagramConstructionError(f"duplicate node id: {key}")
        pn = PositionedNode(name=node.name, title=node.title, category=node.category, index=i)
        nodes.append(pn)
        by_id[key] = pn

    graph = nx.DiGraph()
    graph.add_nodes_from(range(len(nodes)))

    links: list[PositionedLink] = []
    for i, link in enumerate(diagram.links):
        for end in (link.source, link.target):
            if end not in by_id:
                raise DiagramConstructionError(f"missing: {end} (link {i})")
        source = by_id[link.source]
        target = by_id[link.target]
        pl = PositionedLink(source=source, target=target, value=link.value, index=i)
        source.source_links.append(pl)
        target.target_links.append(pl)
        links.append(pl)
        graph.add_edge(source.index, target.index)

    return nodes, links, graph


def _compute_node_values(nodes: list[PositionedNode]) -> None:
    for node in nodes:
        node.value = max(
            sum(link.value for link in node.source_links),
            sum(link.value for link in node.target_links),
        )


def _compute_depths_and_heights(nodes: list[PositionedNode], graph: nx.DiGraph) -> None:
    if not nx.is_directed_acyclic_graph(graph):
        cycle = nx.find_cycle(graph)
        path = " -> ".join(nodes[u].name for u, _ in cycle) + f" -> {nodes[cycle[0][0]].name}"
        raise LayoutError(f"circular link: {path}")

    order = list(nx.topological_sort(graph))
    for idx in order:
        nodes[idx].depth = max((nodes[p].depth + 1 for p in graph.predecessors(idx)), default=0)
    for idx in reversed(order):
        nodes[idx].height = max((nodes[s].height + 1 for s in graph.successors(idx)), default=0)


# --- Positioning ---


def _compute_layers(
    nodes: list[PositionedNode],
    policy: LayoutPolicy,
) -> list[list[PositionedNode]]:
    (x0, _), (x1, _) = policy.extent
    n = max((node.depth for node in nodes), default=0) + 1
    kx = (x1 - x0 - policy.node_width) / (n - 1) if n > 1 else 0.0
    align = ALIGNERS[policy.align]

    columns: list[list[PositionedNode]] = [[] for _ in range(n)]
    for node in nodes:
        layer = max(0, min(n - 1, int(align(node, n))))
        node.layer = layer
        node.x0 = x0 + layer * kx
        node.x1 = node.x0 + policy.node_width
        columns[layer].append(node)

    return [c for c in columns if c]


def _source_sort_key(link: PositionedLink) -> tuple[float, int]:
    return (link.source.y0, link.index)


def _target_sort_key(link: PositionedLink) -> tuple[float, int]:
    return (link.target.y0, link.index)


def _reorder_links(nodes: list[PositionedNode]) -> None:
    for node in nodes:
        node.source_links.sort(key=_target_sort_key)
        node.target_links.sort(key=_source_sort_key)


def _reorder_node_links(node: PositionedNode) -> None:
    """Re-sort the neighbours' link lists after ``node`` moved."""
    for link in node.target_links:
        link.source.source_links.sort(key=_target_sort_key)
    for link in node.source_links:
        link.target.target_links.sort(key=_source_sort_key)


class _Breadths:
    """Vertical placement state for one layout run."""

    def __init__(self, columns: list[list[PositionedNode]], policy: LayoutPolicy) -> None:
        (_, self.y0), (_, self.y1) = policy.extent
        self.columns = columns
        self.iterations = policy.iterations
        longest = max(len(c) for c in columns)
        span = self.y1 - self.y0
        self.py = min(policy.node_padding, span / (longest - 1)) if longest > 1 else policy.node_padding

    def run(self) -> None:
        self._initialize()
        for i in range(self.iterations):
            alpha = 0.99 ** i
            beta = max(1 - alpha, (i + 1) / self.iterations)
            self._relax_right_to_left(alpha, beta)
            self._relax_left_to_right(alpha, beta)

    def _initialize(self) -> None:
        scales: list[float] = []
        for column in self.columns:
            total = sum(node.value for node in column)
            if total > 0:
                scales.append((self.y1 - self.y0 - (len(column) - 1) * self.py) / total)
        if not scales:
            raise LayoutError("diagram has no positive flow to lay out")
        ky = min(scales)
        if ky <= 0:
            raise LayoutError(
                f"extent height {self.y1 - self.y0} too small for node padding {self.py}"
            )

        for column in self.columns:
            y = self.y0
            for node in column:
                node.y0 = y
                node.y1 = y + node.value * ky
                y = node.y1 + self.py
                for link in node.source_links:
                    link.width = link.value * ky
            # Spread the leftover space evenly between the nodes
            y = (self.y1 - y + self.py) / (len(column) + 1)
            for i, node in enumerate(column):
                node.y0 += y * (i + 1)
                node.y1 += y * (i + 1)
            _reorder_links(column)

    def _relax_left_to_right(self, alpha: float, beta: float) -> None:
        for column in self.columns[1:]:
            for target in column:
                y = 0.0
                w = 0.0
                for link in target.target_links:
                    v = link.value * (target.layer - link.source.layer)
                    y += self._target_top(link.source, target) * v
                    w += v
                if not w > 0:
                    continue
                dy = (y / w - target.y0) * alpha
                target.y0 += dy
                target.y1 += dy
                _reorder_node_links(target)
            column.sort(key=lambda n: n.y0)
            self._resolve_collisions(column, beta)

    def _relax_right_to_left(self, alpha: float, beta: float) -> None:
        for column in reversed(self.columns[:-1]):
            for source in column:
                y = 0.0
                w = 0.0
                for link in source.source_links:
                    v = link.value * (link.target.layer - source.layer)
                    y += self._source_top(source, link.target) * v
                    w += v
                if not w > 0:
                    continue
                dy = (y / w - source.y0) * alpha
                source.y0 += dy
                source.y1 += dy
                _reorder_node_links(source)
            column.sort(key=lambda n: n.y0)
            self._resolve_collisions(column, beta)

    def _resolve_collisions(self, nodes: list[PositionedNode], alpha: float) -> None:
        i = len(nodes) >> 1
        subject = nodes[i]
        self._push_up(nodes, subject.y0 - self.py, i - 1, alpha)
        self._push_down(nodes, subject.y1 + self.py, i + 1, alpha)
        self._push_up(nodes, self.y1, len(nodes) - 1, alpha)
        self._push_down(nodes, self.y0, 0, alpha)

    def _push_down(self, nodes: list[PositionedNode], y: float, i: int, alpha: float) -> None:
        for node in nodes[i:]:
            dy = (y - node.y0) * alpha
            if dy > _EPSILON:
                node.y0 += dy
                node.y1 += dy
            y = node.y1 + self.py

    def _push_up(self, nodes: list[PositionedNode], y: float, i: int, alpha: float) -> None:
        for node in reversed(nodes[:i + 1]):
            dy = (node.y1 - y) * alpha
            if dy > _EPSILON:
                node.y0 -= dy
                node.y1 -= dy
            y = node.y0 - self.py

    def _target_top(self, source: PositionedNode, target: PositionedNode) -> float:
        """Where a link from source would sit on target, if target were centred."""
        y = source.y0 - (len(source.source_links) - 1) * self.py / 2
        for link in source.source_links:
            if link.target is target:
                break
            y += link.width + self.py
        for link in target.target_links:
            if link.source is source:
                break
            y -= link.width
        return y

    def _source_top(self, source: PositionedNode, target: PositionedNode) -> float:
        """Where a link to target would sit on source, if source were centred."""
        y = target.y0 - (len(target.target_links) - 1) * self.py / 2
        for link in target.target_links:
            if link.source is source:
                break
            y += link.width + self.py
        for link in source.source_links:
            if link.target is target:
                break
            y -= link.width
        return y


def _compute_link_breadths(nodes: list[PositionedNode]) -> None:
    for node in nodes:
        y0 = node.y0
        y1 = node.y0
        for link in node.source_links:
            link.y0 = y0 + link.width / 2
            y0 += link.width
        for link in node.target_links:
            link.y1 = y1 + link.width / 2
            y1 += link.width


# --- Entry points ---


def compute_layout(diagram: Diagram, policy: LayoutPolicy | None = None) -> PositionedDiagram:
    """Position a diagram's nodes and links.

    Raises:
        DiagramConstructionError: duplicate node id or a link to an unknown node.
        LayoutError: cycle, degenerate extent, or no positive flow.
    """
    policy = policy or LayoutPolicy()
    (x0, y0), (x1, y1) = policy.extent
    if x1 - x0 < policy.node_width or y1 <= y0:
        raise LayoutError(f"degenerate extent {policy.extent} for node width {policy.node_width}")

    nodes, links, graph = _build_graph(diagram, policy.node_id)
    if not nodes:
        return PositionedDiagram(nodes=[], links=[], extent=policy.extent)

    _compute_node_values(nodes)
    _compute_depths_and_heights(nodes, graph)
    columns = _compute_layers(nodes, policy)
    _Breadths(columns, policy).run()
    _compute_link_breadths(nodes)

    logger.debug(
        "Layout: %d nodes in %d columns, %d links", len(nodes), len(columns), len(links),
    )
    return PositionedDiagram(nodes=nodes, links=links, extent=policy.extent, columns=len(columns))


class SankeyLayout:
    """A configured layout, applied once per render."""

    def __init__(self, policy: LayoutPolicy | None = None) -> None:
        self.policy = policy or LayoutPolicy()

    def __call__(self, diagram: Diagram) -> PositionedDiagram:
        return compute_layout(diagram, self.policy)
