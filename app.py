"""
Main NiceGUI application for the mind-map editor.

Renders the GraphStore as SVG inside ui.interactive_image, forwards raw mouse
events to the InteractionController, and provides the toolbar (layout, save,
load, help). Everything visual is driven by GraphEvents subscriptions; the
page never mutates the graph directly.
"""

import logging
import sys
import time

from dotenv import load_dotenv
load_dotenv()

from nicegui import ui, events

from mindmap import codec
from mindmap.config import load_settings
from mindmap.errors import LoadFormatError
from mindmap.graph_store import GraphStore
from mindmap.graph_viz import GraphVisualizer, BACKGROUND, ZOOM_IN, ZOOM_OUT
from mindmap.layout import LayoutEngine
from mindmap.edit import EditActions, InteractionController, PointerEvent

settings = load_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
logger = logging.getLogger(__name__)

REDRAW_EVENTS = (
    'node_added', 'node_removed', 'node_moved', 'node_relabeled',
    'edge_added', 'edge_removed', 'selection_changed', 'layout_computed',
    'graph_cleared',
)

HELP_TEXT = [
    ('Double-click background', 'Add a node (connected from the selected node)'),
    ('Double-click node', 'Edit its label'),
    ('Click node', 'Select it'),
    ('Drag node', 'Move it'),
    ('Drag background', 'Pan the view'),
    ('Mouse wheel', 'Zoom around the cursor'),
    ('Click a line', 'Insert a node into the connection'),
    ('Right-click node', 'Delete it with its connections'),
]


class NiceGUIScheduler:
    """Deferred calls on NiceGUI's one-shot timer; ui.timer already has cancel()."""

    def call_later(self, delay_s, callback):
        return ui.timer(delay_s, callback, once=True)


@ui.page('/')
def main_page():
    # Per-client session state: initialized here, discarded with the client
    store = GraphStore()
    viz = GraphVisualizer()
    engine = LayoutEngine(store, settings.layout_settings())
    controller = InteractionController(
        store,
        NiceGUIScheduler(),
        actions=EditActions(store, new_node_label=settings.new_node_label),
        node_hit_test=lambda point: viz.node_at(store, point),
        double_click_window_ms=settings.double_click_ms,
        double_click_radius=settings.double_click_radius,
        edge_hit_threshold=settings.edge_hit_threshold,
    )

    # Last pointer position over the canvas, used as the zoom anchor
    pointer_at = {'screen': (settings.canvas_width / 2, settings.canvas_height / 2)}

    def handle_mouse(e: events.MouseEventArguments):
        screen = (e.image_x, e.image_y)
        pointer_at['screen'] = screen
        local = viz.to_local(screen)
        pointer = PointerEvent(
            target=viz.node_at(store, local),
            local=local,
            screen=screen,
            timestamp_ms=time.monotonic() * 1000,
            button=e.button,
        )
        if e.type == 'mousedown':
            controller.pointer_down(pointer)
        elif e.type == 'mousemove':
            controller.pointer_move(pointer)
        elif e.type == 'mouseup':
            controller.pointer_up(pointer)
        elif e.type == 'mouseout':
            controller.pointer_leave(pointer)

    # --- Toolbar ---
    with ui.row().classes('items-center gap-2 p-2'):
        ui.label('Mind Map').classes('text-lg font-bold')
        ui.button('Layout', on_click=lambda: do_layout()).props('flat dense icon=account_tree')
        ui.button('Save', on_click=lambda: do_save()).props('flat dense icon=download')
        ui.upload(label='Load', auto_upload=True, on_upload=lambda e: do_load(e)) \
            .props('flat dense accept=.json max-files=1').classes('w-48')
        ui.button('Help', on_click=lambda: help_dialog.open()).props('flat dense icon=help')

    canvas = ui.interactive_image(
        size=(settings.canvas_width, settings.canvas_height),
        on_mouse=handle_mouse,
        events=['mousedown', 'mousemove', 'mouseup', 'mouseout'],
        cross=False,
    ).style(f'background-color: {BACKGROUND}')
    # Right button deletes nodes; keep the browser menu out of the way
    canvas.on('contextmenu.prevent', lambda: None)

    def handle_wheel(e: events.GenericEventArguments):
        factor = ZOOM_OUT if e.args.get('deltaY', 0) > 0 else ZOOM_IN
        viz.zoom(factor, pointer_at['screen'])
        redraw()

    canvas.on('wheel.prevent', handle_wheel, ['deltaY'])

    # --- Label editor (external inline-edit widget) ---
    edit_target = {'id': None}
    with ui.dialog() as label_dialog, ui.card():
        label_input = ui.input('Label').props('autofocus')

    def open_label_editor(data):
        edit_target['id'] = data['id']
        label_input.value = data['text']
        label_dialog.open()

    def commit_label():
        node_id = edit_target['id']
        if node_id is None:
            return
        edit_target['id'] = None
        controller.text_edit_completed(node_id, label_input.value or '')
        label_dialog.close()

    label_input.on('keydown.enter', commit_label)
    label_input.on('blur', commit_label)

    with ui.dialog() as help_dialog, ui.card():
        ui.label('Controls').classes('text-lg font-bold')
        for gesture, effect in HELP_TEXT:
            with ui.row().classes('gap-4'):
                ui.label(gesture).classes('font-medium w-48')
                ui.label(effect)
        ui.button('Close', on_click=help_dialog.close).props('flat')

    # --- Rendering subscriptions ---
    def redraw(_=None):
        canvas.content = viz.generate_svg(store)

    def on_drag(dragging):
        def handler(data):
            viz.set_dragging(data['id'], dragging)
            redraw()
        return handler

    def on_pan(data):
        viz.pan(data['dx'], data['dy'])
        redraw()

    for event_name in REDRAW_EVENTS:
        store.events.on(event_name, redraw)
    store.events.on('drag_started', on_drag(True))
    store.events.on('drag_ended', on_drag(False))
    store.events.on('view_panned', on_pan)
    store.events.on('label_edit_requested', open_label_editor)

    # --- Actions ---
    def do_layout():
        if len(store) == 0:
            return
        result = engine.run(origin_x=settings.canvas_width / 2)
        viz.reset_view()
        redraw()
        if result.ambiguity:
            ui.notify('Mind map has multiple roots or is disconnected. '
                      'Using the first node as the root for layout.',
                      type='warning', position='bottom')

    def do_save():
        ui.download(codec.dumps(store).encode('utf-8'), codec.DEFAULT_FILENAME)

    def do_load(e: events.UploadEventArguments):
        try:
            codec.loads(store, e.content.read())
        except LoadFormatError as err:
            logger.warning(f"Load rejected: {err}")
            ui.notify(f'Could not load {e.name}: {err}', type='negative', position='bottom')
            return
        controller.reset()
        viz.reset_view()
        redraw()
        ui.notify(f'Loaded {e.name}', type='positive', position='bottom', timeout=1000)

    store.seed_root((settings.canvas_width / 2, settings.canvas_height / 2), settings.root_label)
    redraw()


if __name__ in {"__main__", "__mp_main__"}:
    ui.run(
        title='Mind Map',
        port=8080,
        reload=not getattr(sys, 'frozen', False),
    )
