"""
Graph visualizer that renders the mind map as SVG markup for NiceGUI's
interactive_image, and resolves which node a canvas point falls on.

The store holds plain data only; everything visual (shape size, colours,
drag opacity, pan offset and zoom) lives here.

Drawing order: connection lines first, then nodes (rounded rectangles with a
centred label) so lines never cover a node.
"""

from html import escape
from typing import Dict, Optional, Tuple

from mindmap.geometry import Point, point_in_rect
from mindmap.graph_store import GraphStore
from mindmap.edit.constants import NODE_WIDTH, NODE_HEIGHT, DRAG_ALPHA

NODE_FILL = "#de3249"
NODE_RADIUS = 10
SELECTED_STROKE = "#ffffff"
SELECTED_STROKE_WIDTH = 2
LINE_COLOR = "#ffffff"
LINE_WIDTH = 2
LABEL_COLOR = "#ffffff"
LABEL_SIZE = 14
BACKGROUND = "#1099bb"

# Wheel zoom step per notch
ZOOM_IN = 1.1
ZOOM_OUT = 0.9


class GraphVisualizer:
    """
    Build SVG content for a GraphStore.

    `offset` is the current pan translation in screen pixels and `scale` the
    zoom factor; content-local coordinates map to screen as
    local * scale + offset.
    """

    def __init__(self, node_width: float = NODE_WIDTH, node_height: float = NODE_HEIGHT):
        self.node_width = node_width
        self.node_height = node_height
        self.offset: Point = (0.0, 0.0)
        self.scale: float = 1.0
        self._alpha: Dict[str, float] = {}

    # --- View state driven by controller events ---

    def set_dragging(self, node_id: str, dragging: bool) -> None:
        if dragging:
            self._alpha[node_id] = DRAG_ALPHA
        else:
            self._alpha.pop(node_id, None)

    def pan(self, dx: float, dy: float) -> None:
        self.offset = (self.offset[0] + dx, self.offset[1] + dy)

    def zoom(self, factor: float, anchor: Point) -> None:
        """Scale the view by `factor`, keeping the content under `anchor` (screen) fixed."""
        lx, ly = self.to_local(anchor)
        self.scale *= factor
        self.offset = (anchor[0] - lx * self.scale, anchor[1] - ly * self.scale)

    def reset_view(self) -> None:
        self.offset = (0.0, 0.0)
        self.scale = 1.0
        self._alpha.clear()

    def to_local(self, screen: Point) -> Point:
        return ((screen[0] - self.offset[0]) / self.scale,
                (screen[1] - self.offset[1]) / self.scale)

    # --- Hit resolution ---

    def node_at(self, store: GraphStore, point: Point) -> Optional[str]:
        """
        Return the id of the node whose shape contains `point` (content-local).

        Nodes drawn later sit on top, so the last matching node wins.
        """
        hit = None
        for node in store.list_nodes():
            if point_in_rect(point, node.position, self.node_width, self.node_height):
                hit = node.id
        return hit

    # --- Rendering ---

    def _line(self, a: Tuple[float, float], b: Tuple[float, float]) -> str:
        return (f'<line x1="{a[0]:.1f}" y1="{a[1]:.1f}" x2="{b[0]:.1f}" y2="{b[1]:.1f}" '
                f'stroke="{LINE_COLOR}" stroke-width="{LINE_WIDTH}" />')

    def generate_svg(self, store: GraphStore) -> str:
        """Return SVG elements for all connections and nodes."""
        ox, oy = self.offset
        parts = [f'<g transform="translate({ox:.1f},{oy:.1f}) scale({self.scale:.4g})">']

        for source_id, target_id in store.list_edges():
            source = store.get_node(source_id)
            target = store.get_node(target_id)
            parts.append(self._line(source.position, target.position))

        w, h = self.node_width, self.node_height
        for node in store.list_nodes():
            stroke = ''
            if node.selected:
                stroke = f' stroke="{SELECTED_STROKE}" stroke-width="{SELECTED_STROKE_WIDTH}"'
            opacity = self._alpha.get(node.id, 1.0)
            parts.append(
                f'<g data-node-id="{node.id}" opacity="{opacity}">'
                f'<rect x="{node.x - w / 2:.1f}" y="{node.y - h / 2:.1f}" width="{w}" height="{h}" '
                f'rx="{NODE_RADIUS}" fill="{NODE_FILL}"{stroke} />'
                f'<text x="{node.x:.1f}" y="{node.y:.1f}" fill="{LABEL_COLOR}" font-size="{LABEL_SIZE}" '
                f'text-anchor="middle" dominant-baseline="middle">{escape(node.label)}</text>'
                f'</g>'
            )

        parts.append('</g>')
        return ''.join(parts)
