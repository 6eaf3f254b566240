"""
Interactive editing for the mind-map canvas.

This package turns raw pointer input into graph mutations:
- InteractionController: gesture classification state machine
- EditActions: graph mutation execution
- Scheduler / AsyncioScheduler: the cancellable single-click timer

Usage:
    from mindmap.edit import InteractionController, PointerEvent, AsyncioScheduler
"""

from mindmap.edit.constants import (
    DOUBLE_CLICK_WINDOW_MS,
    DOUBLE_CLICK_RADIUS,
    EDGE_HIT_THRESHOLD,
    NODE_WIDTH,
    NODE_HEIGHT,
    PRIMARY_BUTTON,
    SECONDARY_BUTTON,
)
from mindmap.edit.controller import InteractionController, EditState, PointerEvent, PendingClick
from mindmap.edit.actions import EditActions
from mindmap.edit.scheduler import Scheduler, DeferredCall, AsyncioScheduler

__all__ = [
    'InteractionController',
    'EditState',
    'PointerEvent',
    'PendingClick',
    'EditActions',
    'Scheduler',
    'DeferredCall',
    'AsyncioScheduler',
    'DOUBLE_CLICK_WINDOW_MS',
    'DOUBLE_CLICK_RADIUS',
    'EDGE_HIT_THRESHOLD',
    'NODE_WIDTH',
    'NODE_HEIGHT',
    'PRIMARY_BUTTON',
    'SECONDARY_BUTTON',
]
