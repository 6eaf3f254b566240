"""
Graph event bus.

The store and the interaction controller announce every change here; a
renderer subscribes and redraws shapes, labels, lines and the selection
outline. Callbacks receive a single dict payload.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


GRAPH_EVENTS = (
    'node_added',
    'node_removed',
    'node_moved',
    'node_relabeled',
    'edge_added',
    'edge_removed',
    'selection_changed',
    'layout_computed',
    'graph_cleared',
    'drag_started',
    'drag_ended',
    'label_edit_requested',
    'view_panned',
)


class GraphEvents:
    """
    Callback registry keyed by event name.

    Event types:
    - 'node_added': {id, x, y, text}
    - 'node_removed': {id}
    - 'node_moved': {id, x, y}
    - 'node_relabeled': {id, text}
    - 'edge_added' / 'edge_removed': {source, target}
    - 'selection_changed': {id} (id is None when nothing is selected)
    - 'layout_computed': {root, positions}
    - 'graph_cleared': {}
    - 'drag_started' / 'drag_ended': {id}
    - 'label_edit_requested': {id, text}
    - 'view_panned': {dx, dy}
    """

    def __init__(self):
        self._callbacks: Dict[str, List[Callable]] = {name: [] for name in GRAPH_EVENTS}

    def on(self, event: str, callback: Callable) -> None:
        """Register a callback for an event type."""
        if event not in self._callbacks:
            raise ValueError(f"Unknown graph event '{event}'. Valid: {', '.join(GRAPH_EVENTS)}")
        self._callbacks[event].append(callback)

    def off(self, event: str, callback: Callable) -> None:
        """Remove a callback for an event type."""
        if event in self._callbacks and callback in self._callbacks[event]:
            self._callbacks[event].remove(callback)

    def emit(self, event: str, data: Dict[str, Any] = None) -> None:
        """Emit an event to all registered callbacks."""
        payload = data if data is not None else {}
        for callback in list(self._callbacks.get(event, [])):
            try:
                result = callback(payload)
                # Handle async callbacks
                if asyncio.iscoroutine(result):
                    asyncio.ensure_future(result)
            except Exception as e:
                logger.error(f"Error in callback for {event}: {e}")
