"""
Where the editor looks for config.json.

A source checkout keeps it at the repository root, beside app.py. A frozen
build keeps it beside the executable so it can be edited without rebuilding.
"""

import sys
from pathlib import Path

CONFIG_FILENAME = "config.json"


def get_app_dir() -> Path:
    """Directory holding app.py, or the executable when frozen."""
    if getattr(sys, 'frozen', False):
        return Path(sys.executable).parent
    return Path(__file__).resolve().parent.parent


def get_config_path() -> Path:
    return get_app_dir() / CONFIG_FILENAME
