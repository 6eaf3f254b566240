"""
Interaction Controller - gesture classification for the mind-map canvas.

Raw pointer input comes in, one classified gesture goes out as a graph
mutation through EditActions:

- double-click on background: new node (connected from the selection)
- double-click on a node: request inline label editing
- single-click on background (debounced): deselect, split a nearby edge
- drag on a node: move it
- drag on the background: pan the view (no single-click effect)
- pointer-up on a node without moving it: select it
- secondary button on a node: delete it

A pointer-down is a double-click when it lands within the double-click
window and radius of the previous pointer-down. Anything else schedules a
deferred single-click that fires once the window has passed unmatched.
Only one deferred click exists at a time.
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable, Optional, Tuple

from mindmap.geometry import Point, distance_sq, is_near_segment
from mindmap.graph_store import GraphStore
from mindmap.edit.actions import EditActions
from mindmap.edit.constants import (
    DOUBLE_CLICK_WINDOW_MS,
    DOUBLE_CLICK_RADIUS,
    EDGE_HIT_THRESHOLD,
    PRIMARY_BUTTON,
    SECONDARY_BUTTON,
)
from mindmap.edit.scheduler import DeferredCall, Scheduler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PointerEvent:
    """A pointer event with its target already resolved by the renderer.

    target is a node id, or None for the empty background. `local` is in
    content coordinates (after pan/zoom), `screen` in viewport pixels.
    """
    target: Optional[str]
    local: Point
    screen: Point
    timestamp_ms: float
    button: int = PRIMARY_BUTTON


@dataclass(frozen=True)
class PendingClick:
    local: Point
    screen: Point
    timestamp_ms: float


@dataclass(frozen=True)
class EditState:
    """Immutable snapshot of current gesture state."""
    last_down_ms: Optional[float] = None
    last_down_screen: Optional[Point] = None
    pending_click: Optional[PendingClick] = None
    dragging_node_id: Optional[str] = None
    drag_origin: Optional[Point] = None
    drag_moved: bool = False
    pan_last: Optional[Point] = None
    last_gesture: Optional[str] = None

    @property
    def is_dragging(self) -> bool:
        return self.dragging_node_id is not None

    @property
    def is_panning(self) -> bool:
        return self.pan_last is not None


class InteractionController:
    """Classifies pointer input and applies the matching graph mutation."""

    def __init__(
        self,
        store: GraphStore,
        scheduler: Scheduler,
        actions: Optional[EditActions] = None,
        node_hit_test: Optional[Callable[[Point], Optional[str]]] = None,
        double_click_window_ms: float = DOUBLE_CLICK_WINDOW_MS,
        double_click_radius: float = DOUBLE_CLICK_RADIUS,
        edge_hit_threshold: float = EDGE_HIT_THRESHOLD,
    ):
        self.store = store
        self.actions = actions or EditActions(store)
        self._scheduler = scheduler
        self._node_hit_test = node_hit_test
        self.double_click_window_ms = double_click_window_ms
        self.double_click_radius = double_click_radius
        self.edge_hit_threshold = edge_hit_threshold

        self._state = EditState()
        self._deferred: Optional[DeferredCall] = None
        self._on_state_change: Optional[Callable[[EditState], None]] = None

    @property
    def state(self) -> EditState:
        return self._state

    def set_on_state_change(self, callback: Callable[[EditState], None]):
        self._on_state_change = callback

    def reset(self) -> None:
        """Drop all gesture state, e.g. after a file load replaced the graph."""
        self._cancel_deferred()
        self._set_state(EditState())

    # --- Input ---

    def pointer_down(self, event: PointerEvent) -> Optional[str]:
        """Classify a pointer-down. Returns the name of the gesture it started."""
        if event.button == SECONDARY_BUTTON:
            return 'delete_node' if self.secondary_down(event.target) else None

        target = event.target if self.store.has_node(event.target) else None

        if self._is_double_click(event):
            self._cancel_deferred()
            # A third rapid click is judged fresh
            self._set_state(replace(self._state, last_down_ms=None, last_down_screen=None,
                                    pending_click=None))
            if target is None:
                self.actions.create_child_of_selection(event.local)
                return self._gesture('double_click_background')
            node = self.store.get_node(target)
            self.store.events.emit('label_edit_requested', {'id': target, 'text': node.label})
            return self._gesture('double_click_node')

        self._flush_deferred()
        self._set_state(replace(self._state, last_down_ms=event.timestamp_ms,
                                last_down_screen=event.screen))

        if target is not None:
            node = self.store.get_node(target)
            self._set_state(replace(self._state, dragging_node_id=target,
                                    drag_origin=node.position, drag_moved=False))
            self.store.events.emit('drag_started', {'id': target})
            return self._gesture('drag_start')

        pending = PendingClick(local=event.local, screen=event.screen,
                               timestamp_ms=event.timestamp_ms)
        self._set_state(replace(self._state, pending_click=pending, pan_last=event.screen))
        self._deferred = self._scheduler.call_later(
            self.double_click_window_ms / 1000.0,
            lambda: self._fire_single_click(pending),
        )
        return self._gesture('click_pending')

    def pointer_move(self, event: PointerEvent) -> None:
        if self._state.is_dragging:
            node_id = self._state.dragging_node_id
            if not self.actions.move_node(node_id, event.local):
                # Node deleted mid-drag
                self._set_state(replace(self._state, dragging_node_id=None, drag_origin=None,
                                        drag_moved=False))
                return
            if not self._state.drag_moved:
                self._set_state(replace(self._state, drag_moved=True))
        elif self._state.is_panning:
            last_x, last_y = self._state.pan_last
            dx, dy = event.screen[0] - last_x, event.screen[1] - last_y
            self._set_state(replace(self._state, pan_last=event.screen))
            if dx or dy:
                self.store.events.emit('view_panned', {'dx': dx, 'dy': dy})
            pending = self._state.pending_click
            if (pending is not None
                    and distance_sq(event.screen, pending.screen) > self.double_click_radius ** 2):
                # Moved past the click radius: the press is a pan, not a click
                self._cancel_deferred()
                self._set_state(replace(self._state, pending_click=None,
                                        last_down_ms=None, last_down_screen=None))

    def pointer_up(self, event: PointerEvent) -> None:
        moved = self._end_drag()
        self._set_state(replace(self._state, pan_last=None))
        if event.button == PRIMARY_BUTTON and not moved and self.store.has_node(event.target):
            self.actions.select_node(event.target)

    def pointer_leave(self, event: Optional[PointerEvent] = None) -> None:
        self._end_drag()
        self._set_state(replace(self._state, pan_last=None))

    def secondary_down(self, node_id: Optional[str]) -> bool:
        """
        Delete the node under a secondary-button press.

        Returns True when the press was consumed by a node, so background
        handlers must not see it.
        """
        if not self.store.has_node(node_id):
            return False
        if self._state.dragging_node_id == node_id:
            self._set_state(replace(self._state, dragging_node_id=None, drag_origin=None,
                                    drag_moved=False))
        self.actions.delete_node(node_id)
        self._gesture('delete_node')
        return True

    def text_edit_completed(self, node_id: str, text: str) -> None:
        self.actions.rename_node(node_id, text)

    # --- Classification helpers ---

    def _is_double_click(self, event: PointerEvent) -> bool:
        last_ms = self._state.last_down_ms
        last_pos = self._state.last_down_screen
        if last_ms is None or last_pos is None:
            return False
        if event.timestamp_ms - last_ms >= self.double_click_window_ms:
            return False
        return distance_sq(event.screen, last_pos) <= self.double_click_radius ** 2

    def _gesture(self, name: str) -> str:
        self._set_state(replace(self._state, last_gesture=name))
        logger.debug(f"Gesture: {name}")
        return name

    def _end_drag(self) -> bool:
        node_id = self._state.dragging_node_id
        if node_id is None:
            return False
        moved = self._state.drag_moved
        self._set_state(replace(self._state, dragging_node_id=None, drag_origin=None,
                                drag_moved=False))
        if self.store.has_node(node_id):
            self.store.events.emit('drag_ended', {'id': node_id})
        return moved

    # --- Deferred single click ---

    def _cancel_deferred(self) -> None:
        if self._deferred is not None:
            self._deferred.cancel()
            self._deferred = None

    def _flush_deferred(self) -> None:
        """Run a still-pending single click now, ahead of the next gesture."""
        pending = self._state.pending_click
        self._cancel_deferred()
        if pending is not None:
            self._fire_single_click(pending)

    def _fire_single_click(self, pending: PendingClick) -> None:
        if self._state.pending_click is not pending:
            # Superseded or cancelled after the timer was already queued
            return
        self._deferred = None
        self._set_state(replace(self._state, pending_click=None))

        if self._node_hit_test is not None and self._node_hit_test(pending.local) is not None:
            logger.debug("Deferred click landed on a node; ignoring")
            return

        self.store.deselect()
        edge = self._find_edge_at(pending.local)
        if edge is not None:
            self.actions.split_edge(edge[0], edge[1], pending.local)
            self._gesture('split_edge')
        else:
            self._gesture('click_background')

    def _find_edge_at(self, point: Point) -> Optional[Tuple[str, str]]:
        """First edge, in store order, within the hit threshold of `point`."""
        for source_id, target_id in self.store.list_edges():
            source = self.store.get_node(source_id)
            target = self.store.get_node(target_id)
            if source is None or target is None:
                continue
            if is_near_segment(point, source.position, target.position, self.edge_hit_threshold):
                return source_id, target_id
        return None

    def _set_state(self, state: EditState) -> None:
        self._state = state
        if self._on_state_change:
            self._on_state_change(self._state)
