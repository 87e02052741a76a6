from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

HOME_ENV = "FILLETKIT_HOME"
CONFIG_NAME = "filletkit.cfg"
DEFAULT_CONFIG: Dict[str, Any] = {
    "_comment": (
        "Valid units: millimeters (default), meters, inches. "
        "angular_tolerance is in degrees, linear_tolerance and epsilon in model units."
    ),
    "units": "millimeters",
    "angular_tolerance": 12.0,
    "linear_tolerance": 2.0,
    "max_segments": 1024,
    "epsilon": 0.01,
}
_UNIT_INFO: Dict[str, Dict[str, Any]] = {
    "millimeters": {"label": "mm", "scale_to_mm": 1.0},
    "meters": {"label": "m", "scale_to_mm": 1000.0},
    "inches": {"label": "in", "scale_to_mm": 25.4},
}
_UNIT_ALIASES = {
    "millimeter": "millimeters",
    "mm": "millimeters",
    "meter": "meters",
    "m": "meters",
    "inch": "inches",
    "in": "inches",
}


@dataclass(frozen=True)
class UnitSettings:
    """Resolved units from filletkit.cfg."""

    name: str
    label: str
    scale_to_mm: float


@dataclass(frozen=True)
class ToleranceSettings:
    """Global tessellation tolerances and the box-wrap seam overlap."""

    angular_tolerance: float
    linear_tolerance: float
    max_segments: int
    epsilon: float


def config_dir() -> Path:
    override = os.environ.get(HOME_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".filletkit"


def config_file() -> Path:
    return config_dir() / CONFIG_NAME


def ensure_user_config() -> None:
    """Ensure filletkit.cfg exists with sane defaults."""

    directory = config_dir()
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError:
        return

    path = directory / CONFIG_NAME
    if path.exists():
        return

    try:
        path.write_text(json.dumps(DEFAULT_CONFIG, indent=2) + "\n")
    except OSError:
        return


def load_user_config() -> Dict[str, Any]:
    ensure_user_config()
    try:
        raw = json.loads(config_file().read_text())
    except (OSError, json.JSONDecodeError):
        return DEFAULT_CONFIG.copy()
    if not isinstance(raw, dict):
        return DEFAULT_CONFIG.copy()
    return {**DEFAULT_CONFIG, **raw}


def _normalize_units(value: str) -> str | None:
    key = value.strip().lower()
    if key in _UNIT_INFO:
        return key
    return _UNIT_ALIASES.get(key)


def _positive(raw: Any, fallback: float) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return fallback
    if value != value or value <= 0:
        return fallback
    return value


def get_unit_settings() -> UnitSettings:
    """Return the configured units and the conversion to millimeters."""

    raw_config = load_user_config()
    raw_units = str(raw_config.get("units", DEFAULT_CONFIG["units"]))
    normalized = _normalize_units(raw_units)
    if normalized is None:
        normalized = DEFAULT_CONFIG["units"]

    info = _UNIT_INFO[normalized]
    return UnitSettings(name=normalized, label=info["label"], scale_to_mm=info["scale_to_mm"])


def get_tolerance_settings() -> ToleranceSettings:
    """Return the global tessellation tolerances, falling back per key on bad values."""

    raw = load_user_config()
    epsilon = raw.get("epsilon", DEFAULT_CONFIG["epsilon"])
    try:
        epsilon = float(epsilon)
    except (TypeError, ValueError):
        epsilon = DEFAULT_CONFIG["epsilon"]
    if epsilon != epsilon or epsilon < 0:
        epsilon = DEFAULT_CONFIG["epsilon"]
    return ToleranceSettings(
        angular_tolerance=_positive(raw.get("angular_tolerance"), DEFAULT_CONFIG["angular_tolerance"]),
        linear_tolerance=_positive(raw.get("linear_tolerance"), DEFAULT_CONFIG["linear_tolerance"]),
        max_segments=max(int(_positive(raw.get("max_segments"), DEFAULT_CONFIG["max_segments"])), 5),
        epsilon=epsilon,
    )
