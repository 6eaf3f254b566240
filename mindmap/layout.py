"""
Automatic top-down tree layout.

The directed graph is treated as a tree hung from a single root. The layout
is a two-pass process:

  1. compute_subtree_widths: depth-first, bottom-up. Every node gets the
     horizontal space its subtree needs and the spanning tree is recorded.
  2. assign_positions: top-down. Each node is centred on its parent's slot,
     children are laid left to right inside the parent's width.

The graph is not guaranteed acyclic. Both passes keep a visited set: a node
is counted and positioned once, by the first traversal path that reaches it
in connection order, and a revisit is skipped. Nodes never reached keep their
current position.

Spacing constants:
  - Leaf width: 150
  - Padding between sibling subtrees: 30
  - Vertical distance between depth levels: 150
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from mindmap.graph_store import GraphStore
from mindmap.geometry import Point

logger = logging.getLogger(__name__)


BASE_WIDTH = 150
PADDING = 30
VERTICAL_SPACING = 150
ORIGIN_Y = 50


@dataclass
class LayoutSettings:
    base_width: float = BASE_WIDTH
    padding: float = PADDING
    vertical_spacing: float = VERTICAL_SPACING
    origin_y: float = ORIGIN_Y
    # Extra advance between siblings during placement. Pass 1 already
    # includes the padding in the parent's width, so the default leaves the
    # right-hand margin wider than the left one.
    placement_gap: float = 0.0


@dataclass
class LayoutAmbiguity:
    """Non-fatal report that the graph has no single root.

    reason is 'no_roots' (every node has an incoming edge, i.e. a cycle) or
    'multiple_roots' (a forest or disconnected graph).
    """
    reason: str
    candidates: List[str]
    fallback_root: str


@dataclass
class LayoutResult:
    root: Optional[str] = None
    positions: Dict[str, Point] = field(default_factory=dict)
    ambiguity: Optional[LayoutAmbiguity] = None
    unpositioned: List[str] = field(default_factory=list)


class LayoutEngine:
    """Runs the two-pass tree layout against a GraphStore."""

    def __init__(self, store: GraphStore, settings: Optional[LayoutSettings] = None):
        self.store = store
        self.settings = settings or LayoutSettings()
        self.last_ambiguity: Optional[LayoutAmbiguity] = None
        # parent id -> children in placement order, recorded by pass 1
        self._tree_children: Dict[str, List[str]] = {}
        self._widths: Dict[str, float] = {}

    # --- Root finding ---

    def find_root(self) -> Optional[str]:
        """
        Pick the layout root.

        The root is the only node with no incoming edge. With zero or several
        such nodes the first-created node is used instead, and the ambiguity
        is recorded in `last_ambiguity` and logged as a warning.
        """
        self.last_ambiguity = None
        nodes = self.store.list_nodes()
        if not nodes:
            return None

        G = self.store.to_networkx()
        roots = [n for n, degree in G.in_degree() if degree == 0]
        if len(roots) == 1:
            return roots[0]

        fallback = nodes[0].id
        reason = 'no_roots' if not roots else 'multiple_roots'
        self.last_ambiguity = LayoutAmbiguity(reason=reason, candidates=roots, fallback_root=fallback)
        logger.warning(
            f"Mind map has {len(roots)} root candidates ({reason}); "
            f"using first node {fallback[:8]} as layout root"
        )
        return fallback

    # --- Pass 1 ---

    def compute_subtree_widths(self, root_id: str) -> Dict[str, float]:
        """
        Compute the horizontal space each node's subtree requires.

        A node with no unvisited children gets base_width. A node with k
        children gets the sum of their widths plus (k - 1) * padding, floored
        at base_width. The traversal uses an explicit stack so long chains do
        not hit the recursion limit.
        """
        base = self.settings.base_width
        padding = self.settings.padding
        self._tree_children = {}
        self._widths = {}

        root = self.store.get_node(root_id)
        if root is None:
            return {}

        visited = {root_id}
        self._tree_children[root_id] = []
        stack = [(root_id, iter(root.connections))]

        while stack:
            node_id, pending = stack[-1]
            for child_id in pending:
                child = self.store.get_node(child_id)
                if child is None or child_id in visited:
                    continue
                visited.add(child_id)
                self._tree_children[node_id].append(child_id)
                self._tree_children[child_id] = []
                stack.append((child_id, iter(child.connections)))
                break
            else:
                stack.pop()
                children = self._tree_children[node_id]
                if not children:
                    width = base
                else:
                    width = sum(self._widths[c] for c in children) + (len(children) - 1) * padding
                    width = max(width, base)
                self._widths[node_id] = width
                self.store.get_node(node_id).subtree_width = width

        return dict(self._widths)

    # --- Pass 2 ---

    def assign_positions(self, root_id: str, x: float, y: float,
                         total_width: float) -> Dict[str, Point]:
        """
        Position the root at (x, y) and its subtree below it.

        Children start at x - total_width / 2; each child is centred on the
        running offset plus half its own subtree width, then the offset
        advances by that width (plus placement_gap).
        """
        if root_id not in self._widths:
            self.compute_subtree_widths(root_id)
        if root_id not in self._widths:
            return {}

        spacing = self.settings.vertical_spacing
        gap = self.settings.placement_gap
        positions: Dict[str, Point] = {}
        stack: List[Tuple[str, float, float, float]] = [(root_id, x, y, total_width)]

        while stack:
            node_id, node_x, node_y, width = stack.pop()
            if node_id in positions:
                continue
            positions[node_id] = (node_x, node_y)

            offset = node_x - width / 2
            for child_id in self._tree_children.get(node_id, []):
                child_width = self._widths[child_id]
                stack.append((child_id, offset + child_width / 2, node_y + spacing, child_width))
                offset += child_width + gap

        return positions

    # --- Entry point ---

    def run(self, origin_x: float, origin_y: Optional[float] = None) -> LayoutResult:
        """Lay out the whole graph with the root at (origin_x, origin_y)."""
        if origin_y is None:
            origin_y = self.settings.origin_y

        root_id = self.find_root()
        if root_id is None:
            return LayoutResult()

        widths = self.compute_subtree_widths(root_id)
        positions = self.assign_positions(root_id, origin_x, origin_y, widths[root_id])

        for node_id, position in positions.items():
            self.store.set_position(node_id, position)

        unpositioned = [n.id for n in self.store.list_nodes() if n.id not in positions]
        if unpositioned:
            logger.info(f"Layout left {len(unpositioned)} unreachable node(s) in place")

        self.store.events.emit('layout_computed', {'root': root_id, 'positions': dict(positions)})
        return LayoutResult(
            root=root_id,
            positions=positions,
            ambiguity=self.last_ambiguity,
            unpositioned=unpositioned,
        )
