"""
Mind-map file codec.

File format (JSON):
{
  "nodes": [{"x": 640.0, "y": 360.0, "text": "Root"}, ...],
  "connections": [[0, 1], ...]      # 0-based indices into "nodes"
}

Nodes are written in store (creation) order and connections as index pairs
into that order. Loading validates the whole document before the store is
touched, then replaces the graph in one step.
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

from mindmap.errors import LoadFormatError
from mindmap.graph_store import GraphStore

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "mindmap.json"


def export_graph(store: GraphStore) -> Dict[str, Any]:
    """Serialize the store to the file-format dict."""
    nodes = store.list_nodes()
    index = {node.id: i for i, node in enumerate(nodes)}
    return {
        "nodes": [{"x": node.x, "y": node.y, "text": node.label} for node in nodes],
        "connections": [[index[source], index[target]] for source, target in store.list_edges()],
    }


def dumps(store: GraphStore) -> str:
    return json.dumps(export_graph(store), indent=2, ensure_ascii=False)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_index(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_document(data: Any) -> Tuple[List[Tuple[float, float, str]], List[Tuple[int, int]]]:
    """
    Check a decoded document and return plain (nodes, connections) data.

    Raises:
        LoadFormatError on the first schema violation.
    """
    if not isinstance(data, dict):
        raise LoadFormatError("document must be a JSON object")
    if not isinstance(data.get("nodes"), list):
        raise LoadFormatError("'nodes' must be a list")
    if not isinstance(data.get("connections"), list):
        raise LoadFormatError("'connections' must be a list")

    nodes: List[Tuple[float, float, str]] = []
    for i, entry in enumerate(data["nodes"]):
        if not isinstance(entry, dict):
            raise LoadFormatError(f"nodes[{i}] must be an object")
        x, y, text = entry.get("x"), entry.get("y"), entry.get("text")
        if not _is_number(x) or not _is_number(y):
            raise LoadFormatError(f"nodes[{i}] needs numeric 'x' and 'y'")
        if not isinstance(text, str):
            raise LoadFormatError(f"nodes[{i}] needs a string 'text'")
        try:
            fx, fy = float(x), float(y)
        except OverflowError as e:
            raise LoadFormatError(f"nodes[{i}] coordinate out of range") from e
        if not (math.isfinite(fx) and math.isfinite(fy)):
            raise LoadFormatError(f"nodes[{i}] coordinate out of range")
        nodes.append((fx, fy, text))

    connections: List[Tuple[int, int]] = []
    for k, pair in enumerate(data["connections"]):
        if not isinstance(pair, (list, tuple)) or len(pair) != 2:
            raise LoadFormatError(f"connections[{k}] must be a [i, j] pair")
        i, j = pair
        if not _is_index(i) or not _is_index(j):
            raise LoadFormatError(f"connections[{k}] indices must be integers")
        if not (0 <= i < len(nodes) and 0 <= j < len(nodes)):
            raise LoadFormatError(f"connections[{k}] index out of range for {len(nodes)} nodes")
        connections.append((i, j))

    return nodes, connections


def import_graph(store: GraphStore, data: Any) -> List[str]:
    """Validate `data` and replace the store's graph with it. Returns the new ids."""
    nodes, connections = validate_document(data)
    return store.replace(nodes, connections)


def loads(store: GraphStore, text: Union[str, bytes]) -> List[str]:
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise LoadFormatError(f"invalid JSON: {e}") from e
    return import_graph(store, data)


def save_file(store: GraphStore, path: Union[str, Path]) -> Path:
    """Write the graph to `path` and return it."""
    path = Path(path)
    path.write_text(dumps(store), encoding="utf-8")
    logger.info(f"Saved mind map to {path}")
    return path


def load_file(store: GraphStore, path: Union[str, Path]) -> List[str]:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise LoadFormatError(f"cannot read file: {e}", path=str(path)) from e
    try:
        return loads(store, text)
    except LoadFormatError as e:
        logger.warning(f"Rejected mind map file {path}: {e}")
        raise LoadFormatError(str(e), path=str(path)) from e
