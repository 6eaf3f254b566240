"""
Shared constants for the gesture classifier.

Distances are in pixels: DOUBLE_CLICK_RADIUS in screen space,
EDGE_HIT_THRESHOLD in content-local space. The SVG renderer draws nodes
with the same NODE_WIDTH / NODE_HEIGHT, keep them in sync!
"""

# Two pointer-downs closer than this (in time and space) form a double-click
DOUBLE_CLICK_WINDOW_MS = 300
DOUBLE_CLICK_RADIUS = 10

# A background click this close to an edge splits it
EDGE_HIT_THRESHOLD = 5

# Node shape used for hit resolution and rendering
NODE_WIDTH = 80
NODE_HEIGHT = 40

NEW_NODE_LABEL = 'New Node'
ROOT_LABEL = 'Root'

# Opacity of a node while it is being dragged
DRAG_ALPHA = 0.5

PRIMARY_BUTTON = 0
SECONDARY_BUTTON = 2
