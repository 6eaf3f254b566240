"""
Edit Actions Module

Executes graph mutations decided by the InteractionController.
Every method tolerates stale ids: a node or edge that vanished since the
gesture started turns the action into a no-op.
"""

import logging
from typing import Optional

from mindmap.geometry import Point
from mindmap.graph_store import GraphStore
from mindmap.edit.constants import NEW_NODE_LABEL

logger = logging.getLogger(__name__)


class EditActions:
    """
    Handles execution of editing actions against a GraphStore.
    """

    def __init__(self, store: GraphStore, new_node_label: str = NEW_NODE_LABEL):
        self.store = store
        self.new_node_label = new_node_label

    def create_node(self, position: Point, label: Optional[str] = None,
                    parent_id: Optional[str] = None) -> str:
        """
        Create a new node at the specified position.

        Args:
            position: (x, y) in content-local coordinates
            label: Node label text, defaults to the configured new-node label
            parent_id: Node to connect from (parent -> new), or None

        Returns:
            Created node ID
        """
        node_id = self.store.add_node(position, self.new_node_label if label is None else label)
        if parent_id is not None and self.store.has_node(parent_id):
            self.store.add_edge(parent_id, node_id)
        return node_id

    def create_child_of_selection(self, position: Point) -> str:
        """Create a node, connected from the selected node if there is one."""
        return self.create_node(position, parent_id=self.store.selected_id)

    def split_edge(self, source_id: str, target_id: str, position: Point) -> Optional[str]:
        """
        Insert a new node into the edge source -> target.

        Before: source -> target
        After:  source -> new -> target, with new placed at `position`
        """
        if not self.store.has_edge(source_id, target_id):
            logger.debug(f"split_edge: edge {source_id} -> {target_id} no longer exists")
            return None
        self.store.remove_edge(source_id, target_id)
        new_id = self.store.add_node(position, self.new_node_label)
        self.store.add_edge(source_id, new_id)
        self.store.add_edge(new_id, target_id)
        logger.debug(f"Split edge {source_id[:8]} -> {target_id[:8]} with {new_id[:8]}")
        return new_id

    def delete_node(self, node_id: str) -> bool:
        """Delete a node and all connections to and from it."""
        if not self.store.has_node(node_id):
            return False
        self.store.remove_node(node_id)
        return True

    def select_node(self, node_id: str) -> bool:
        if not self.store.has_node(node_id):
            return False
        self.store.select(node_id)
        return True

    def move_node(self, node_id: str, position: Point) -> bool:
        if not self.store.has_node(node_id):
            return False
        self.store.set_position(node_id, position)
        return True

    def rename_node(self, node_id: str, label: str) -> bool:
        if not self.store.has_node(node_id):
            logger.debug(f"rename_node: node {node_id} was removed before the edit completed")
            return False
        self.store.set_label(node_id, label)
        return True
