# calgrid/config.py
from __future__ import annotations

import os
from typing import Any, Dict

from .util.tz import normalize_tz_name

CalendarConfig = Dict[str, Any]

DEFAULT_COLOR = "#EF4444"

DEFAULT_CFG: CalendarConfig = {
    "tz": "local",
    "week_start": 0,  # 0=Monday .. 6=Sunday
    "snap_min": 15,
    "min_drag_min": 15,
    "hour_height_px": 60,
    "base_offset_px": 30,
    "row_height_px": 20,
    "row_spacing_px": 2,
    "cell_padding_px": 4,
    "week_height_px": 140,
    "min_block_min": 30,
    "all_day_default_min": 60,
    "zero_duration_default_min": 30,
    "default_color": DEFAULT_COLOR,
}

# Keys where zero is a meaningful value.
_NON_NEGATIVE_KEYS = {"week_start", "base_offset_px", "row_spacing_px", "cell_padding_px"}


def _coerce_int(v: Any) -> int | None:
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, int):
        return v
    if isinstance(v, float):
        if v != v or v in (float("inf"), float("-inf")):
            return None
        return int(v)
    if isinstance(v, str):
        s = v.strip()
        if not s:
            return None
        try:
            return int(s)
        except ValueError:
            return None
    return None


def normalize_cfg(cfg: Any = None) -> CalendarConfig:
    """Return a complete config dict (new object; input is not mutated).

    Policy:
      - Missing or invalid values fall back to DEFAULT_CFG.
      - cfg.tz, when not explicitly provided, defaults from env CALGRID_TZ or "local".
      - Unknown keys are preserved as-is.
    """
    src = dict(cfg) if isinstance(cfg, dict) else {}
    out: CalendarConfig = dict(src)

    tz_explicit = isinstance(src.get("tz"), str) and bool(str(src.get("tz")).strip())
    out["tz"] = normalize_tz_name(str(src["tz"]).strip() if tz_explicit else os.getenv("CALGRID_TZ", "local"))

    for key, default in DEFAULT_CFG.items():
        if key == "tz":
            continue
        if isinstance(default, str):
            v = src.get(key)
            out[key] = v.strip() if isinstance(v, str) and v.strip() else default
            continue
        iv = _coerce_int(src.get(key))
        if iv is None or iv < 0 or (iv == 0 and key not in _NON_NEGATIVE_KEYS):
            iv = int(default)
        out[key] = iv

    if out["week_start"] > 6:
        out["week_start"] = int(DEFAULT_CFG["week_start"])
    return out
