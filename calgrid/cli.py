from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List

from .config import normalize_cfg
from .convert import merge_events_and_tasks
from .export import month_layout_to_dict, range_layout_to_dict
from .month import layout_month
from .rows import layout_range
from .util.timeparse import parse_date_yyyy_mm_dd, parse_month_yyyy_mm
from .util.tz import normalize_tz_name, resolve_tz


def _die(msg: str, rc: int = 2) -> int:
    print(f"[calgrid] ERROR: {msg}", file=sys.stderr)
    return rc


def _load_json(path: Path) -> Dict[str, Any]:
    obj = json.loads(path.read_text(encoding="utf-8", errors="replace"))
    if not isinstance(obj, dict):
        raise ValueError(f"input must be a JSON object; got {type(obj).__name__}")
    return obj


def _as_list(v: Any) -> List[Any]:
    return v if isinstance(v, list) else []


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog="calgrid",
        description="Compute calendar lane layouts from scheduled tasks and events.",
    )
    ap.add_argument("--in", dest="in_json", required=True, help="Input JSON with tasks/projects/events/cfg")
    ap.add_argument("--out", default=None, help="Write JSON here instead of stdout")
    ap.add_argument(
        "--tz",
        default=None,
        help="Timezone for day boundaries (default: input cfg.tz, then env CALGRID_TZ, then 'local')",
    )
    sub = ap.add_subparsers(dest="cmd", required=True)

    p_range = sub.add_parser("layout", help="Row layout for a day range (week view lanes)")
    p_range.add_argument("--start", required=True, help="First day YYYY-MM-DD")
    p_range.add_argument("--end", required=True, help="Last day YYYY-MM-DD (inclusive)")
    p_range.add_argument("--all-day-only", action="store_true", help="Only lay out all-day events")

    p_month = sub.add_parser("month", help="6-week month grid layout")
    p_month.add_argument("--month", required=True, help="Month YYYY-MM")
    p_month.add_argument("--week-start", type=int, default=None, help="0=Monday .. 6=Sunday")

    ns = ap.parse_args(argv)

    in_path = Path(ns.in_json)
    if not in_path.exists():
        return _die(f"Missing input JSON: {in_path}")
    try:
        data = _load_json(in_path)
    except (OSError, ValueError) as e:
        return _die(f"Failed to load JSON: {in_path} ({e})")

    cfg_in = data.get("cfg") if isinstance(data.get("cfg"), dict) else {}
    if ns.tz:
        cfg_in = {**cfg_in, "tz": normalize_tz_name(ns.tz)}
    if ns.cmd == "month" and ns.week_start is not None:
        cfg_in = {**cfg_in, "week_start": ns.week_start}
    cfg = normalize_cfg(cfg_in)

    try:
        tz = resolve_tz(cfg["tz"])
    except ValueError as e:
        return _die(f"Invalid --tz value: {e}")

    events = merge_events_and_tasks(
        _as_list(data.get("tasks")),
        _as_list(data.get("projects")),
        _as_list(data.get("events")),
        tz=tz,
    )

    try:
        if ns.cmd == "layout":
            start = parse_date_yyyy_mm_dd(ns.start)
            end = parse_date_yyyy_mm_dd(ns.end)
            if end < start:
                return _die("--end must not be before --start")
            out = range_layout_to_dict(layout_range(events, start, end, cfg, all_day_only=ns.all_day_only))
        else:
            year, month = parse_month_yyyy_mm(ns.month)
            out = month_layout_to_dict(layout_month(events, year, month, cfg))
    except ValueError as e:
        return _die(str(e))

    text = json.dumps(out, ensure_ascii=False, sort_keys=True, indent=2)
    if ns.out:
        dst = Path(ns.out).expanduser()
        dst.parent.mkdir(parents=True, exist_ok=True)
        dst.write_text(text + "\n", encoding="utf-8", newline="\n")
    else:
        print(text)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
