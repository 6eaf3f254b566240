import pytest

from mindmap.events import GRAPH_EVENTS
from mindmap.graph_store import GraphStore


class ManualHandle:
    def __init__(self, due, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Deterministic clock for the single-click timer."""

    def __init__(self):
        self.now = 0.0
        self.handles = []

    def call_later(self, delay_s, callback):
        handle = ManualHandle(self.now + delay_s, callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self):
        return [h for h in self.handles if not h.cancelled]

    def advance(self, seconds):
        self.now += seconds
        due = [h for h in self.pending if h.due <= self.now]
        for handle in due:
            handle.cancelled = True
            handle.callback()


@pytest.fixture
def store():
    return GraphStore()


@pytest.fixture
def scheduler():
    return ManualScheduler()


class EventRecorder:
    def __init__(self, store):
        self.events = []
        for name in GRAPH_EVENTS:
            store.events.on(name, self._make(name))

    def _make(self, name):
        def record(data):
            self.events.append((name, data))
        return record

    def names(self):
        return [name for name, _ in self.events]

    def of(self, name):
        return [data for n, data in self.events if n == name]


@pytest.fixture
def recorder(store):
    return EventRecorder(store)
