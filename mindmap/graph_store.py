"""
In-memory graph store for the mind map.

Structure:
- nodes: insertion-ordered dict id -> Node. Insertion order is creation order
  and drives every iteration (export, layout fallback root, edge scans).
- edges: implicit in each node's ordered `connections` list (directed,
  duplicates permitted).

Operations on an unknown id are no-ops, so stale references coming from a
deferred click or a repeated delete never raise. Every mutation is announced
on `self.events`.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import networkx as nx

from mindmap.events import GraphEvents
from mindmap.geometry import Point

logger = logging.getLogger(__name__)


@dataclass
class Node:
    """A labelled point in the diagram with its outgoing connections."""
    id: str
    x: float
    y: float
    label: str = ""
    connections: List[str] = field(default_factory=list)
    # Scratch value, only meaningful during a layout pass
    subtree_width: float = 0.0
    selected: bool = False

    @property
    def position(self) -> Point:
        return (self.x, self.y)


class GraphStore:
    """
    Owns the nodes, their directed connections and the single selection.

    Usage:
        store = GraphStore()
        a = store.add_node((0, 0), "Root")
        b = store.add_node((0, 150), "Child")
        store.add_edge(a, b)
        store.remove_node(a)        # also strips a -> b
    """

    def __init__(self, events: Optional[GraphEvents] = None):
        self.events = events or GraphEvents()
        self._nodes: Dict[str, Node] = {}
        self._selected_id: Optional[str] = None

    # --- Lookup ---

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id) -> bool:
        return node_id in self._nodes

    def has_node(self, node_id: Optional[str]) -> bool:
        return node_id in self._nodes

    def get_node(self, node_id: Optional[str]) -> Optional[Node]:
        return self._nodes.get(node_id)

    def list_nodes(self) -> List[Node]:
        """Nodes in creation order."""
        return list(self._nodes.values())

    def list_edges(self) -> List[Tuple[str, str]]:
        """Flattened (source, target) pairs in node-then-connection order."""
        return [(node.id, target) for node in self._nodes.values() for target in node.connections]

    def has_edge(self, source_id: str, target_id: str) -> bool:
        node = self._nodes.get(source_id)
        return node is not None and target_id in node.connections

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    # --- Node operations ---

    def add_node(self, position: Point, label: str = "") -> str:
        """Create a node at `position` and return its id."""
        node_id = str(uuid.uuid4())
        x, y = position
        node = Node(id=node_id, x=float(x), y=float(y), label=str(label))
        self._nodes[node_id] = node
        logger.debug(f"Added node {node_id[:8]} at ({node.x}, {node.y})")
        self.events.emit('node_added', {'id': node_id, 'x': node.x, 'y': node.y, 'text': node.label})
        return node_id

    def remove_node(self, node_id: str) -> None:
        """
        Remove a node and every connection entry that targets it.

        The node and all references to it are gone before the first event is
        emitted, so subscribers never observe a dangling edge.
        """
        node = self._nodes.pop(node_id, None)
        if node is None:
            logger.debug(f"remove_node: unknown id {node_id}")
            return

        removed_edges = [(node_id, target) for target in node.connections]
        for other in self._nodes.values():
            if node_id in other.connections:
                removed_edges.extend((other.id, node_id) for t in other.connections if t == node_id)
                other.connections = [t for t in other.connections if t != node_id]

        was_selected = self._selected_id == node_id
        if was_selected:
            self._selected_id = None

        logger.debug(f"Removed node {node_id[:8]} and {len(removed_edges)} connection(s)")
        for source, target in removed_edges:
            self.events.emit('edge_removed', {'source': source, 'target': target})
        self.events.emit('node_removed', {'id': node_id})
        if was_selected:
            self.events.emit('selection_changed', {'id': None})

    def set_label(self, node_id: str, label: str) -> None:
        node = self._nodes.get(node_id)
        if node is None:
            logger.debug(f"set_label: unknown id {node_id}")
            return
        node.label = str(label)
        self.events.emit('node_relabeled', {'id': node_id, 'text': node.label})

    def set_position(self, node_id: str, position: Point) -> None:
        node = self._nodes.get(node_id)
        if node is None:
            logger.debug(f"set_position: unknown id {node_id}")
            return
        node.x, node.y = float(position[0]), float(position[1])
        self.events.emit('node_moved', {'id': node_id, 'x': node.x, 'y': node.y})

    # --- Edge operations ---

    def add_edge(self, source_id: str, target_id: str) -> None:
        """Append target to source's connections (duplicates allowed)."""
        source = self._nodes.get(source_id)
        if source is None or target_id not in self._nodes:
            logger.debug(f"add_edge: unknown endpoint {source_id} -> {target_id}")
            return
        source.connections.append(target_id)
        self.events.emit('edge_added', {'source': source_id, 'target': target_id})

    def remove_edge(self, source_id: str, target_id: str) -> None:
        """Remove the first matching connection entry, if any."""
        source = self._nodes.get(source_id)
        if source is None or target_id not in source.connections:
            logger.debug(f"remove_edge: no edge {source_id} -> {target_id}")
            return
        source.connections.remove(target_id)
        self.events.emit('edge_removed', {'source': source_id, 'target': target_id})

    # --- Selection ---

    def select(self, node_id: str) -> None:
        """Select a node, deselecting the previous one."""
        if node_id not in self._nodes or node_id == self._selected_id:
            return
        previous = self._nodes.get(self._selected_id)
        if previous is not None:
            previous.selected = False
        self._nodes[node_id].selected = True
        self._selected_id = node_id
        self.events.emit('selection_changed', {'id': node_id})

    def deselect(self) -> None:
        if self._selected_id is None:
            return
        previous = self._nodes.get(self._selected_id)
        if previous is not None:
            previous.selected = False
        self._selected_id = None
        self.events.emit('selection_changed', {'id': None})

    # --- Whole-graph operations ---

    def clear(self) -> None:
        self._nodes = {}
        self._selected_id = None
        self.events.emit('graph_cleared', {})

    def replace(self, nodes: Sequence[Tuple[float, float, str]],
                connections: Iterable[Tuple[int, int]]) -> List[str]:
        """
        Replace the whole graph with already-validated plain data.

        nodes: (x, y, label) triples in creation order.
        connections: (i, j) index pairs into `nodes`.

        Returns the newly assigned ids, in the same order as `nodes`.
        """
        self.clear()
        ids = [self.add_node((x, y), label) for x, y, label in nodes]
        for i, j in connections:
            self.add_edge(ids[i], ids[j])
        logger.info(f"Graph replaced: {len(ids)} nodes, {len(self.list_edges())} connections")
        return ids

    def seed_root(self, position: Point, label: str = "Root") -> Optional[str]:
        """Create the initial root node if the store is empty."""
        if self._nodes:
            return None
        return self.add_node(position, label)

    def to_networkx(self) -> nx.MultiDiGraph:
        """Snapshot as a MultiDiGraph; duplicate connections stay parallel edges."""
        G = nx.MultiDiGraph()
        for node in self._nodes.values():
            G.add_node(node.id, label=node.label, x=node.x, y=node.y)
        G.add_edges_from(self.list_edges())
        return G
