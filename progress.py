from __future__ import annotations

import logging
import time
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from config import CFG

# ------------------------------
# Search event log
# ------------------------------

def _init_logger() -> logging.Logger:
    logger = logging.getLogger("solver.search_log")
    if logger.handlers or not CFG.SEARCH_LOG:
        return logger

    log_path = Path(CFG.SEARCH_LOG)
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError:
        # The search must keep running without its event log.
        return logger
    handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger


SEARCH_LOGGER = _init_logger()


def _fmt_seconds(seconds: Optional[float]) -> Optional[str]:
    if seconds is None:
        return None
    return f"{float(seconds):.2f}s"


def _emit_log(event: str, **fields: Any) -> None:
    extras = [
        f"{key}={value}"
        for key, value in fields.items()
        if value is not None and value != ""
    ]
    if extras:
        SEARCH_LOGGER.info("%s | %s", event, " ".join(extras))
    else:
        SEARCH_LOGGER.info("%s", event)


def log_event(event: str, **fields: Any) -> None:
    _emit_log(event, **fields)

# ------------------------------
# Thread-safe global progress state
# ------------------------------

PROGRESS_LOCK = threading.Lock()

PROGRESS: Dict[str, Any] = {
    "status": "Idle",          # Idle | Solving | Solved | Error
    "phase": "",               # attributes | placement
    "requirement_sets": 0,     # multiplicity vectors handed to the placement search
    "skipped_sets": 0,         # vectors dropped before the placement search
    "solutions": 0,            # solutions yielded so far
    "nodes": 0,                # placement attempts across all searches
    "memo_hits": 0,            # branches skipped by the board memo
    "elapsed_start": None,     # t0 (float) when solving started
    "elapsed": 0.0,            # seconds snapshot
    "message": "",
    "done": False,
    "ok": None,
    "run_id": 0,
}

_COUNTERS = ("requirement_sets", "skipped_sets", "solutions", "nodes", "memo_hits")

_PHASE_START: Dict[str, Optional[float]] = {"t": None}

# ------------------------------
# Helpers
# ------------------------------

def _now() -> float:
    return time.time()

def _fmt_elapsed(seconds: float) -> str:
    seconds = max(0.0, float(seconds))
    if seconds < 60:
        return f"{int(seconds)}s"
    m, s = divmod(int(seconds), 60)
    if m < 60:
        return f"{m}m {s}s"
    h, m = divmod(m, 60)
    return f"{h}h {m}m"

def _touch_elapsed_locked() -> None:
    t0 = PROGRESS.get("elapsed_start")
    if t0 is not None:
        PROGRESS["elapsed"] = _now() - float(t0)

def reset() -> None:
    with PROGRESS_LOCK:
        PROGRESS.update({
            "status": "Idle",
            "phase": "",
            "elapsed_start": None,
            "elapsed": 0.0,
            "message": "",
            "done": False,
            "ok": None,
            "run_id": int(PROGRESS.get("run_id", 0)) + 1,
        })
        for key in _COUNTERS:
            PROGRESS[key] = 0
        _PHASE_START["t"] = None
        _emit_log("Progress reset", run_id=PROGRESS["run_id"])

def start_timer() -> None:
    with PROGRESS_LOCK:
        PROGRESS["elapsed_start"] = _now()
        PROGRESS["elapsed"] = 0.0
        PROGRESS["status"] = "Solving"
        _emit_log("Run started", run_id=PROGRESS["run_id"])

# ------------------------------
# Setters
# ------------------------------

def set_phase(v: Any) -> None:
    with PROGRESS_LOCK:
        phase = "" if v is None else str(v)
        prev = PROGRESS["phase"]
        if phase == prev:
            return
        now = _now()
        if prev and _PHASE_START["t"] is not None:
            _emit_log("Phase finished", phase=prev, duration=_fmt_seconds(now - _PHASE_START["t"]))
        PROGRESS["phase"] = phase
        _PHASE_START["t"] = now if phase else None
        if phase:
            _emit_log("Phase started", phase=phase)

def set_message(msg: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["message"] = "" if msg is None else str(msg)

def bump(counter: str, n: int = 1) -> None:
    with PROGRESS_LOCK:
        PROGRESS[counter] = int(PROGRESS.get(counter, 0)) + int(n)
        _touch_elapsed_locked()

def record_stats(stats: Dict[str, Any]) -> None:
    """Fold the statistics of one placement search into the run counters."""
    with PROGRESS_LOCK:
        PROGRESS["nodes"] += int(stats.get("nodes", 0))
        PROGRESS["memo_hits"] += int(stats.get("memo_hits", 0))
        _touch_elapsed_locked()
        _emit_log(
            "Placement search finished",
            requirements=stats.get("requirements"),
            nodes=stats.get("nodes"),
            clipped=stats.get("clipped"),
            clobbered=stats.get("clobbered"),
            memo_hits=stats.get("memo_hits"),
            solutions=stats.get("solutions"),
            reason=stats.get("reason"),
        )

def set_done(ok: Any = None, *, message: Any = None) -> None:
    with PROGRESS_LOCK:
        _touch_elapsed_locked()
        ok_flag = True if ok is None else bool(ok)
        PROGRESS["status"] = "Solved" if ok_flag else "Error"
        PROGRESS["ok"] = ok_flag
        PROGRESS["done"] = True
        if message is not None:
            PROGRESS["message"] = str(message)
        _emit_log(
            "Run finished",
            status=PROGRESS["status"],
            duration=_fmt_seconds(PROGRESS["elapsed"]),
            requirement_sets=PROGRESS["requirement_sets"],
            solutions=PROGRESS["solutions"],
            message=PROGRESS["message"],
        )

# ------------------------------
# Snapshots
# ------------------------------

def snapshot() -> Dict[str, Any]:
    with PROGRESS_LOCK:
        _touch_elapsed_locked()
        snap = dict(PROGRESS)
        snap.pop("elapsed_start", None)
        snap["elapsed_str"] = _fmt_elapsed(PROGRESS["elapsed"])
        return snap
