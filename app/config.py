# SPDX-License-Identifier: GPL-3.0-or-later
"""
goal: configuration loader for the probe. settings come from TMPROBE_* environment variables, then
      data/config.json, then built-in defaults. a frozen (PyInstaller) probe reads its data/ folder
      next to the executable. returns a frozen Config dataclass; a broken config file or a bad value
      never stops a run, it just falls back to the default.
"""

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from agent.profiles import Deployment, get_deployment
from algorithm.health import DEFAULT_THRESHOLD_DAYS

ENV_PREFIX = "TMPROBE_"


def _resolve_base_dir() -> Path:
    if getattr(sys, "frozen", False):  # tmprobe.exe, data/ sits beside it
        return Path(sys.executable).parent
    return Path(__file__).resolve().parents[1]  # app/config.py -> project root


@dataclass(frozen=True)
class Config:
    base_dir: Path  # root directory of the project
    threshold_days: float = DEFAULT_THRESHOLD_DAYS  # signatures older than this are outdated
    deployment: Deployment = field(default_factory=lambda: get_deployment(None))
    service_names: tuple[str, ...] = ()  # empty means the deployment's own service set
    warning_bucket: bool = False  # collapse soft verdicts into WARNING


def _to_bool(raw, default: bool) -> bool:
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off", ""):
        return False
    return default


def _to_names(raw) -> tuple[str, ...]:
    # accepts a JSON list or a comma-separated string
    if isinstance(raw, str):
        parts = raw.split(",")
    elif isinstance(raw, (list, tuple)):
        parts = [str(p) for p in raw]
    else:
        return ()
    return tuple(p.strip() for p in parts if p.strip())


def _get(obj: dict, key: str, default):
    """TMPROBE_<KEY> beats obj[key] beats default. env text is coerced to the default's type."""
    env = os.getenv(f"{ENV_PREFIX}{key.upper()}")
    if env is None:
        return obj.get(key, default)
    if isinstance(default, bool):  # before int, bool is an int subclass
        return _to_bool(env, default)
    if isinstance(default, (int, float)):
        try:
            return type(default)(env)
        except ValueError:
            return default
    return env  # text settings (deployment name, comma-separated service names)


def _threshold(obj: dict) -> float:
    raw = _get(obj, "threshold_days", DEFAULT_THRESHOLD_DAYS)
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return DEFAULT_THRESHOLD_DAYS
    return value if value >= 0 else DEFAULT_THRESHOLD_DAYS


def _read_file(path: Path) -> dict:
    """data/config.json as a dict; missing, unreadable or non-object content gives {}."""
    if not path.exists():
        return {}
    try:
        obj = json.loads(path.read_text(encoding="utf-8") or "{}")
    except (OSError, ValueError):
        return {}
    return obj if isinstance(obj, dict) else {}


def load_config() -> Config:
    base = Path(os.getenv(f"{ENV_PREFIX}BASE_DIR") or _resolve_base_dir())
    obj = _read_file(base / "data" / "config.json")
    return Config(
        base_dir=base,
        threshold_days=_threshold(obj),
        deployment=get_deployment(str(_get(obj, "deployment", "universal"))),
        service_names=_to_names(_get(obj, "service_names", "")),
        warning_bucket=_to_bool(_get(obj, "warning_bucket", False), False),
    )
