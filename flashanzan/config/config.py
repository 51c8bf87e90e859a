from __future__ import annotations

"""Configuration loading and validation for Flash Anzan.

This module loads YAML configuration, applies defaults, and clamps values
to what the front ends can offer (mode choices, the 0..10 s interval
slider with 0.1 s steps).
"""

import math
from pathlib import Path
from typing import Any, Dict, Optional

import sys

import yaml

from ..app.schema import MODES


INTERVAL_MIN_S = 0.0
INTERVAL_MAX_S = 10.0
INTERVAL_STEP_S = 0.1
DEFAULT_INTERVAL_S = 1.0
DEFAULT_FONT_SIZE = 72
MIN_FONT_SIZE = 8


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        print(f"ERROR: Config file not found: {path}", file=sys.stderr)
        sys.exit(1)
    except yaml.YAMLError as e:
        print(f"ERROR: Invalid YAML in {path}: {e}", file=sys.stderr)
        sys.exit(1)
    if not isinstance(data, dict):
        print(f"ERROR: Config file {path} must contain a mapping.", file=sys.stderr)
        sys.exit(1)
    return data


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML or defaults.

    Args:
        path: Optional path to a YAML config. If None, use package defaults.

    Returns:
        A dictionary with configuration values.
    """
    if path:
        cfg = _load_yaml(Path(path))
    else:
        default_path = Path(__file__).with_name("defaults.yml")
        cfg = _load_yaml(default_path)
    return cfg


def clamp_interval(value: Any) -> float:
    """Coerce an interval to the slider range and step."""
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        seconds = math.nan
    if math.isnan(seconds):
        print(f"WARNING: Interval '{value}' is not a number, using {DEFAULT_INTERVAL_S}s.")
        return DEFAULT_INTERVAL_S
    if seconds < INTERVAL_MIN_S or seconds > INTERVAL_MAX_S:
        clamped = min(INTERVAL_MAX_S, max(INTERVAL_MIN_S, seconds))
        print(f"WARNING: Interval {seconds}s outside {INTERVAL_MIN_S:g}..{INTERVAL_MAX_S:g}s, using {clamped:g}s.")
        seconds = clamped
    stepped = round(round(seconds / INTERVAL_STEP_S) * INTERVAL_STEP_S, 1)
    if abs(stepped - seconds) > 1e-9:
        print(f"WARNING: Interval {seconds}s rounded to {stepped}s.")
    return stepped


def validate_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Apply defaults and validate configuration values.

    Args:
        cfg: The raw configuration dictionary.

    Returns:
        The validated and merged configuration dictionary.
    """
    # Shallow defaults for missing sections
    if not isinstance(cfg.get("session"), dict):
        cfg["session"] = {}
    if not isinstance(cfg.get("gui"), dict):
        cfg["gui"] = {}
    cfg.setdefault("explain", False)

    session = cfg["session"]
    gui = cfg["gui"]

    session.setdefault("mode", "home")
    session.setdefault("interval_s", DEFAULT_INTERVAL_S)

    gui.setdefault("title", "Flash Anzan")
    gui.setdefault("font_size", DEFAULT_FONT_SIZE)

    mode = session.get("mode")
    if mode not in MODES:
        print(f"WARNING: Unsupported mode '{mode}', using 'home'.")
        session["mode"] = "home"

    session["interval_s"] = clamp_interval(session.get("interval_s"))

    try:
        font_size = int(gui.get("font_size"))
    except (TypeError, ValueError):
        font_size = 0
    if font_size < MIN_FONT_SIZE:
        print(f"WARNING: Unsupported font_size '{gui.get('font_size')}', using {DEFAULT_FONT_SIZE}.")
        font_size = DEFAULT_FONT_SIZE
    gui["font_size"] = font_size

    cfg["explain"] = bool(cfg.get("explain"))
    return cfg
