"""
Configuration management for the mind-map editor.

Settings are resolved in this order (later wins):
1. Built-in defaults (gesture and layout constants)
2. The "editor" section of config.json next to the project root
3. Environment variables (a .env file is loaded by app.py)

Config is stored in config.json next to the executable/project root.
"""

import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from mindmap.paths import get_config_path
from mindmap.edit.constants import (
    DOUBLE_CLICK_WINDOW_MS,
    DOUBLE_CLICK_RADIUS,
    EDGE_HIT_THRESHOLD,
    NEW_NODE_LABEL,
    ROOT_LABEL,
)
from mindmap.layout import BASE_WIDTH, PADDING, VERTICAL_SPACING, ORIGIN_Y, LayoutSettings

logger = logging.getLogger(__name__)

ENV_PREFIX = "MINDMAP_"


@dataclass
class EditorSettings:
    double_click_ms: float = DOUBLE_CLICK_WINDOW_MS
    double_click_radius: float = DOUBLE_CLICK_RADIUS
    edge_hit_threshold: float = EDGE_HIT_THRESHOLD
    new_node_label: str = NEW_NODE_LABEL
    root_label: str = ROOT_LABEL
    base_width: float = BASE_WIDTH
    padding: float = PADDING
    vertical_spacing: float = VERTICAL_SPACING
    origin_y: float = ORIGIN_Y
    placement_gap: float = 0.0
    canvas_width: int = 1280
    canvas_height: int = 720
    log_level: str = "INFO"

    def layout_settings(self) -> LayoutSettings:
        return LayoutSettings(
            base_width=self.base_width,
            padding=self.padding,
            vertical_spacing=self.vertical_spacing,
            origin_y=self.origin_y,
            placement_gap=self.placement_gap,
        )


def load_config(config_path: Optional[Path] = None) -> dict:
    """Load configuration from config.json."""
    config_path = config_path or get_config_path()
    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError):
            logger.warning(f"Ignoring unreadable config file {config_path}")
            return {}
    return {}


def save_config(config: dict, config_path: Optional[Path] = None) -> None:
    """Save configuration to config.json."""
    config_path = config_path or get_config_path()
    with open(config_path, 'w', encoding='utf-8') as f:
        json.dump(config, f, indent=2)


def _coerce(value: Any, kind: type) -> Any:
    """Convert a raw config/env value to the declared field type."""
    if kind is str:
        return str(value)
    if kind is int:
        return int(float(value))
    return float(value)


def load_settings(config_path: Optional[Path] = None,
                  environ: Optional[Dict[str, str]] = None) -> EditorSettings:
    """
    Build EditorSettings from defaults, config.json and the environment.

    Unknown keys are ignored; values that cannot be converted are logged
    and the previous value is kept.
    """
    environ = os.environ if environ is None else environ
    settings = EditorSettings()
    section = load_config(config_path).get("editor", {})
    if not isinstance(section, dict):
        section = {}

    for f in fields(EditorSettings):
        current = getattr(settings, f.name)
        sources = [
            (f"config.json editor.{f.name}", section.get(f.name)),
            (f"{ENV_PREFIX}{f.name.upper()}", environ.get(f"{ENV_PREFIX}{f.name.upper()}")),
        ]
        for source, raw in sources:
            if raw is None:
                continue
            try:
                current = _coerce(raw, f.type)
            except (TypeError, ValueError):
                logger.warning(f"Invalid value {raw!r} for {source}; keeping {current!r}")
        setattr(settings, f.name, current)

    return settings


def set_editor_setting(name: str, value: Any, config_path: Optional[Path] = None) -> None:
    """Persist one editor setting to config.json."""
    if name not in {f.name for f in fields(EditorSettings)}:
        raise KeyError(f"Unknown editor setting: {name}")
    config = load_config(config_path)
    config.setdefault("editor", {})[name] = value
    save_config(config, config_path)
