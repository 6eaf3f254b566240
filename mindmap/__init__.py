"""
Mind-map editor core.

Graph store, tree layout, edge hit-testing, gesture classification and the
JSON file codec. The NiceGUI front end lives in app.py at the project root.
"""

__version__ = "0.1.0"
