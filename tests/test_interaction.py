"""
Tests for gesture classification in InteractionController.

Pointer events are fed in directly with explicit timestamps and the
single-click timer runs on the ManualScheduler from conftest, so no gesture test
depends on wall-clock time.
"""

import asyncio

import pytest

from mindmap.edit import AsyncioScheduler, EditActions, InteractionController, PointerEvent
from mindmap.graph_viz import GraphVisualizer


def _event(target, pos, t, button=0):
    return PointerEvent(target=target, local=pos, screen=pos, timestamp_ms=t, button=button)


@pytest.fixture
def viz():
    return GraphVisualizer()


@pytest.fixture
def controller(store, scheduler, viz):
    return InteractionController(
        store,
        scheduler,
        actions=EditActions(store),
        node_hit_test=lambda point: viz.node_at(store, point),
    )


@pytest.fixture
def root(store):
    node_id = store.add_node((400, 400), "Root")
    store.select(node_id)
    return node_id


def _click(controller, target, pos, t):
    gesture = controller.pointer_down(_event(target, pos, t))
    controller.pointer_up(_event(target, pos, t + 20))
    return gesture


class TestDoubleClick:
    def test_double_click_background_adds_connected_node(self, store, scheduler, controller,
                                                         root, recorder):
        """Two downs 100 ms apart at the same spot: one node, selection kept."""
        assert _click(controller, None, (100, 100), 0) == 'click_pending'
        assert _click(controller, None, (100, 100), 100) == 'double_click_background'
        scheduler.advance(1.0)

        assert len(store) == 2
        new_id = store.list_nodes()[1].id
        assert store.get_node(new_id).position == (100.0, 100.0)
        assert store.get_node(new_id).label == "New Node"
        assert store.list_edges() == [(root, new_id)]
        assert store.selected_id == root
        assert {'id': None} not in recorder.of('selection_changed')

    def test_double_click_without_selection_creates_isolated_node(self, store, scheduler,
                                                                  controller):
        _click(controller, None, (100, 100), 0)
        _click(controller, None, (100, 100), 100)
        assert len(store) == 1
        assert store.list_edges() == []

    def test_outside_window_is_two_single_clicks(self, store, scheduler, controller, root):
        _click(controller, None, (100, 100), 0)
        scheduler.advance(0.31)
        assert _click(controller, None, (100, 100), 400) == 'click_pending'
        assert len(store) == 1

    def test_outside_radius_is_not_double(self, store, controller, root):
        _click(controller, None, (100, 100), 0)
        assert _click(controller, None, (111, 100), 100) == 'click_pending'
        assert len(store) == 1

    def test_window_boundary_is_not_double(self, store, scheduler, controller, root):
        """At exactly the window length the single-click timer is due, so the press is fresh."""
        _click(controller, None, (100, 100), 0)
        assert _click(controller, None, (100, 100), 300) == 'click_pending'
        scheduler.advance(1.0)
        assert len(store) == 1

    def test_third_rapid_click_is_fresh(self, store, controller, root):
        _click(controller, None, (100, 100), 0)
        _click(controller, None, (100, 100), 100)
        assert _click(controller, None, (100, 100), 200) == 'click_pending'
        assert len(store) == 2

    def test_double_click_node_requests_label_edit(self, store, controller, root, recorder):
        _click(controller, root, (400, 400), 0)
        assert controller.pointer_down(_event(root, (400, 400), 100)) == 'double_click_node'

        assert recorder.of('label_edit_requested') == [{'id': root, 'text': "Root"}]
        assert not controller.state.is_dragging
        assert len(store) == 1


class TestSingleClick:
    @pytest.fixture
    def edge(self, store):
        a = store.add_node((0, 0), "A")
        b = store.add_node((200, 0), "B")
        store.add_edge(a, b)
        return a, b

    def test_click_near_edge_splits_it(self, store, scheduler, controller, edge):
        a, b = edge
        _click(controller, None, (100, 4), 0)
        assert store.list_edges() == [(a, b)]

        scheduler.advance(0.31)
        new_id = store.list_nodes()[2].id
        assert store.list_edges() == [(a, new_id), (new_id, b)]
        assert store.get_node(new_id).position == (100.0, 4.0)
        assert controller.state.last_gesture == 'split_edge'

    def test_click_beyond_threshold_only_deselects(self, store, scheduler, controller, edge):
        a, b = edge
        store.select(a)
        _click(controller, None, (100, 6), 0)
        scheduler.advance(0.31)

        assert store.list_edges() == [(a, b)]
        assert store.selected_id is None
        assert controller.state.last_gesture == 'click_background'

    def test_deferred_click_on_deleted_edge_is_noop(self, store, scheduler, controller, edge):
        a, b = edge
        _click(controller, None, (100, 4), 0)
        assert controller.pointer_down(_event(a, (0, 0), 50, button=2)) == 'delete_node'
        scheduler.advance(0.31)

        assert [n.id for n in store.list_nodes()] == [b]
        assert store.list_edges() == []

    def test_node_under_deferred_click_takes_precedence(self, store, scheduler, controller, edge):
        a, b = edge
        store.select(b)
        _click(controller, None, (100, 4), 0)
        store.set_position(b, (100, 10))
        scheduler.advance(0.31)

        assert len(store) == 2
        assert store.selected_id == b

    def test_pending_click_flushed_before_next_gesture(self, store, scheduler, controller, root,
                                                       recorder):
        """A background click followed quickly by a node click must not deselect afterwards."""
        other = store.add_node((200, 200), "Other")
        _click(controller, None, (100, 100), 0)
        _click(controller, other, (200, 200), 100)
        scheduler.advance(1.0)

        assert store.selected_id == other
        assert recorder.of('selection_changed')[-2:] == [{'id': None}, {'id': other}]
        assert scheduler.pending == []


class TestDrag:
    def test_drag_moves_node_without_selecting(self, store, controller, root, recorder):
        store.deselect()
        assert controller.pointer_down(_event(root, (400, 400), 0)) == 'drag_start'
        controller.pointer_move(_event(root, (450, 420), 20))
        controller.pointer_up(_event(root, (450, 420), 40))

        assert store.get_node(root).position == (450.0, 420.0)
        assert store.selected_id is None
        assert recorder.of('drag_started') == [{'id': root}]
        assert recorder.of('drag_ended') == [{'id': root}]
        assert not controller.state.is_dragging

    def test_click_node_selects_on_release(self, store, controller, root):
        other = store.add_node((200, 200), "Other")
        _click(controller, other, (200, 200), 0)
        assert store.selected_id == other

    def test_leave_ends_drag(self, store, controller, root, recorder):
        controller.pointer_down(_event(root, (400, 400), 0))
        controller.pointer_leave()
        assert recorder.of('drag_ended') == [{'id': root}]
        assert not controller.state.is_dragging

    def test_delete_during_drag_stops_quietly(self, store, controller, root, recorder):
        controller.pointer_down(_event(root, (400, 400), 0))
        assert controller.secondary_down(root)
        controller.pointer_move(_event(root, (450, 450), 20))
        controller.pointer_up(_event(root, (450, 450), 40))

        assert len(store) == 0
        assert recorder.of('node_moved') == []
        assert recorder.of('drag_ended') == []


class TestPan:
    def test_background_drag_pans(self, store, controller, recorder):
        controller.pointer_down(_event(None, (10, 10), 0))
        controller.pointer_move(_event(None, (15, 20), 10))
        controller.pointer_move(_event(None, (15, 20), 20))
        controller.pointer_up(_event(None, (15, 20), 30))
        controller.pointer_move(_event(None, (50, 50), 40))

        assert recorder.of('view_panned') == [{'dx': 5, 'dy': 10}]
        assert not controller.state.is_panning

    @pytest.fixture
    def edge(self, store):
        a = store.add_node((0, 0), "A")
        b = store.add_node((200, 0), "B")
        store.add_edge(a, b)
        store.select(a)
        return a, b

    def test_pan_drops_pending_click(self, store, scheduler, controller, edge):
        a, b = edge
        controller.pointer_down(_event(None, (100, 4), 0))
        controller.pointer_move(_event(None, (130, 4), 20))
        controller.pointer_up(_event(None, (130, 4), 40))
        scheduler.advance(1.0)

        assert store.list_edges() == [(a, b)]
        assert store.selected_id == a
        assert controller.state.pending_click is None
        assert scheduler.pending == []

    def test_jitter_within_radius_still_clicks(self, store, scheduler, controller, edge):
        controller.pointer_down(_event(None, (100, 4), 0))
        controller.pointer_move(_event(None, (102, 5), 20))
        controller.pointer_up(_event(None, (102, 5), 40))
        scheduler.advance(1.0)

        assert len(store) == 3
        assert store.selected_id is None


class TestDeleteAndRename:
    def test_secondary_press_deletes_node_and_connections(self, store, controller, root):
        child = store.add_node((400, 550), "Child")
        store.add_edge(root, child)
        controller.pointer_down(_event(root, (400, 400), 0, button=2))

        assert [n.id for n in store.list_nodes()] == [child]
        assert store.list_edges() == []
        assert store.selected_id is None

    def test_secondary_press_on_background_is_ignored(self, store, scheduler, controller, root):
        assert controller.pointer_down(_event(None, (10, 10), 0, button=2)) is None
        assert scheduler.pending == []
        assert len(store) == 1

    def test_text_edit_completed_sets_label(self, store, controller, root):
        controller.text_edit_completed(root, "Renamed")
        assert store.get_node(root).label == "Renamed"

    def test_text_edit_on_deleted_node_is_noop(self, store, controller, root, recorder):
        store.remove_node(root)
        controller.text_edit_completed(root, "Renamed")
        assert recorder.of('node_relabeled') == []


def test_reset_cancels_pending_click(store, scheduler, controller, root):
    states = []
    controller.set_on_state_change(states.append)
    _click(controller, None, (100, 100), 0)
    controller.reset()
    scheduler.advance(1.0)

    assert store.selected_id == root
    assert controller.state.pending_click is None
    assert states


def test_asyncio_scheduler_runs_and_cancels():
    fired = []

    async def scenario():
        scheduler = AsyncioScheduler()
        scheduler.call_later(0.01, lambda: fired.append('kept'))
        handle = scheduler.call_later(0.01, lambda: fired.append('cancelled'))
        handle.cancel()
        await asyncio.sleep(0.05)

    asyncio.run(scenario())
    assert fired == ['kept']
