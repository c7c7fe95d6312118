"""
Liftlog Analytics — Export Client

Loads the app's JSON backup (file or URL) and flattens sessions into the
set-level DataFrame every analytics module works from.
"""
import json
import math
import re
import time

import pandas as pd
import requests

from src.config import EXERCISE_DB, EXPORT_VERSION, LIFTLOG_API_TOKEN, LIFTLOG_EXPORT_SOURCE
from src.scoring import is_placeholder, one_rep_max, round_half_up, set_volume

HEADERS = {"accept": "application/json"}
if LIFTLOG_API_TOKEN:
    HEADERS["Authorization"] = f"Bearer {LIFTLOG_API_TOKEN}"

RATE_LIMIT_DELAY = 0.35  # seconds between requests
MAX_RETRIES = 3
RETRY_BACKOFF = 2  # exponential backoff multiplier

SET_COLUMNS = [
    "session_pos",
    "session_id",
    "routine_id",
    "routine_name",
    "started_at",
    "ended_at",
    "is_completed",
    "exercise_log_id",
    "exercise_id",
    "exercise_name",
    "log_order",
    "set_index",
    "side",
    "weight",
    "reps",
    "volume",
    "e1rm",
    "is_placeholder",
]

SESSION_COLUMNS = [
    "session_pos",
    "session_id",
    "routine_id",
    "routine_name",
    "started_at",
    "ended_at",
    "is_completed",
    "n_exercise_logs",
    "duration_sec",
]


def _get(url: str, params: dict = None) -> dict:
    """GET a JSON document with retry and rate limiting."""
    time.sleep(RATE_LIMIT_DELAY)
    for attempt in range(1, MAX_RETRIES + 1):
        try:
            r = requests.get(url, headers=HEADERS, params=params or {}, timeout=15)
            if r.status_code == 429:
                wait = RETRY_BACKOFF ** attempt
                print(f"  ⏳ Rate limited, retrying in {wait}s (attempt {attempt}/{MAX_RETRIES})")
                time.sleep(wait)
                continue
            r.raise_for_status()
            return r.json()
        except requests.exceptions.Timeout:
            if attempt < MAX_RETRIES:
                print(f"  ⏳ Timeout, retrying (attempt {attempt}/{MAX_RETRIES})")
                time.sleep(RETRY_BACKOFF ** attempt)
            else:
                raise
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else 0
            if attempt < MAX_RETRIES and status >= 500:
                print(f"  ⏳ HTTP {status}, retrying (attempt {attempt}/{MAX_RETRIES})")
                time.sleep(RETRY_BACKOFF ** attempt)
            else:
                raise
    raise requests.exceptions.RetryError(f"Export fetch failed after {MAX_RETRIES} attempts")


def _snake(key: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def normalize_keys(obj):
    """Recursively convert camelCase dict keys to snake_case."""
    if isinstance(obj, dict):
        return {_snake(k): normalize_keys(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [normalize_keys(v) for v in obj]
    return obj


def to_timestamp(value) -> pd.Timestamp:
    """ISO string / datetime / Timestamp → tz-aware UTC Timestamp (NaT if missing)."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return pd.NaT
    ts = pd.Timestamp(value)
    if pd.isna(ts):
        return pd.NaT
    return ts.tz_localize("UTC") if ts.tzinfo is None else ts.tz_convert("UTC")


def resolve_now(now=None) -> pd.Timestamp:
    """Evaluation time for trailing windows; defaults to the current UTC time."""
    if now is None:
        return pd.Timestamp.now(tz="UTC")
    return to_timestamp(now)


def load_export(source: str = None) -> dict:
    """
    Load an app export from a path or http(s) URL.

    Returns {version, export_date, exercises, routines, sessions} with
    snake_case keys throughout. Raises ValueError if there is no sessions list.
    """
    source = source or LIFTLOG_EXPORT_SOURCE
    if re.match(r"^https?://", source):
        raw = _get(source)
    else:
        with open(source, encoding="utf-8") as f:
            raw = json.load(f)

    data = normalize_keys(raw)
    if not isinstance(data, dict) or not isinstance(data.get("sessions"), list):
        raise ValueError(f"Export at {source} has no 'sessions' list")

    version = data.get("version")
    if version and version != EXPORT_VERSION:
        print(f"  ⚠️  Export version {version} (expected {EXPORT_VERSION}), loading anyway")

    return {
        "version": version,
        "export_date": to_timestamp(data.get("export_date")),
        "exercises": data.get("exercises") or [],
        "routines": data.get("routines") or [],
        "sessions": data["sessions"],
    }


def index_exercises(exercises=None) -> dict:
    """Exercise list or {id: exercise} mapping → {id: exercise}. None → seed catalog."""
    if exercises is None:
        return {eid: {"id": eid, **e} for eid, e in EXERCISE_DB.items()}
    if isinstance(exercises, dict):
        return dict(exercises)
    return {e["id"]: e for e in exercises}


# ═══════════════════════════════════════════════════════════════════════
# UNILATERAL PAIRING
# ═══════════════════════════════════════════════════════════════════════

def _pair_slot(group: list[dict]) -> list[dict]:
    """Collapse the left/right sets sharing one set_index into logical sets."""
    real = [s for s in group if not is_placeholder(s["weight"], s["reps"])]
    if not real:
        return [{**group[0], "weight": 0, "reps": 0}]

    lefts = [s for s in real if s["side"] == "left"]
    rights = [s for s in real if s["side"] == "right"]
    if not lefts or not rights:
        return real

    left, right = lefts[0], rights[0]
    pair = {
        "set_index": left["set_index"],
        "side": "both",
        "weight": (left["weight"] + right["weight"]) / 2,
        "reps": round_half_up((left["reps"] + right["reps"]) / 2),
    }
    return [pair] + lefts[1:] + rights[1:]


def pair_unilateral_sets(set_logs: list[dict]) -> list[dict]:
    """
    Turn raw set logs into logical sets.

    Sided sets (left/right) at the same set_index are averaged into one
    logical set: mean weight, half-up rounded mean reps. A placeholder side is
    dropped first, so a lone real side is scored on its own. Unsided sets pass
    through in order.
    """
    slots = {}
    for pos, s in enumerate(set_logs):
        idx = s.get("set_index")
        if idx is None:
            idx = pos
        side = s.get("side")
        entry = {
            "set_index": idx,
            "side": side,
            "weight": s.get("weight") or 0,
            "reps": s.get("reps") or 0,
        }
        key = ("side", idx) if side in ("left", "right") else ("set", pos)
        slots.setdefault(key, []).append(entry)

    logical = []
    for (kind, _), group in slots.items():
        if kind == "set":
            logical.extend(group)
        else:
            logical.extend(_pair_slot(group))
    return logical


# ═══════════════════════════════════════════════════════════════════════
# FLATTENING
# ═══════════════════════════════════════════════════════════════════════

def _typed_sets(df: pd.DataFrame) -> pd.DataFrame:
    df = df.astype({
        "session_pos": int,
        "is_completed": bool,
        "is_placeholder": bool,
        "weight": float,
        "reps": int,
        "volume": float,
        "e1rm": float,
        "set_index": "Int64",
    })
    df["started_at"] = pd.to_datetime(df["started_at"], utc=True)
    df["ended_at"] = pd.to_datetime(df["ended_at"], utc=True)
    return df


def sessions_to_dataframe(sessions: list[dict]) -> pd.DataFrame:
    """
    Flatten sessions to a pandas DataFrame.
    One row per logical set (after unilateral pairing).

    Placeholder sets are kept and flagged; an exercise log without any set
    becomes a single placeholder row so its presence is not lost.
    session_pos is the session's position in the input list; per-session
    grouping keys on it because ids may be missing.
    """
    rows = []
    for session_pos, s in enumerate(sessions):
        base = {
            "session_pos": session_pos,
            "session_id": s.get("id"),
            "routine_id": s.get("routine_id"),
            "routine_name": s.get("routine_name", ""),
            "started_at": to_timestamp(s.get("started_at")),
            "ended_at": to_timestamp(s.get("ended_at")),
            "is_completed": bool(s.get("is_completed")),
        }
        for pos, log in enumerate(s.get("exercise_logs") or []):
            log_base = {
                "exercise_log_id": log.get("id"),
                "exercise_id": log.get("exercise_id"),
                "exercise_name": log.get("exercise_name", ""),
                "log_order": log.get("order", pos),
            }
            logical = pair_unilateral_sets(log.get("set_logs") or [])
            if not logical:
                logical = [{"set_index": None, "side": None, "weight": 0, "reps": 0}]

            for ls in logical:
                placeholder = is_placeholder(ls["weight"], ls["reps"])
                rows.append({
                    **base,
                    **log_base,
                    **ls,
                    "volume": 0.0 if placeholder else set_volume(ls["weight"], ls["reps"]),
                    "e1rm": 0.0 if placeholder else one_rep_max(ls["weight"], ls["reps"]),
                    "is_placeholder": placeholder,
                })

    return _typed_sets(pd.DataFrame(rows, columns=SET_COLUMNS))


def sessions_frame(sessions: list[dict]) -> pd.DataFrame:
    """One row per session, with whole-second duration where an end time exists."""
    rows = []
    for session_pos, s in enumerate(sessions):
        started = to_timestamp(s.get("started_at"))
        ended = to_timestamp(s.get("ended_at"))
        if pd.isna(started) or pd.isna(ended):
            duration = None
        else:
            duration = math.floor((ended - started).total_seconds())
        rows.append({
            "session_pos": session_pos,
            "session_id": s.get("id"),
            "routine_id": s.get("routine_id"),
            "routine_name": s.get("routine_name", ""),
            "started_at": started,
            "ended_at": ended,
            "is_completed": bool(s.get("is_completed")),
            "n_exercise_logs": len(s.get("exercise_logs") or []),
            "duration_sec": duration,
        })

    df = pd.DataFrame(rows, columns=SESSION_COLUMNS)
    df = df.astype({"session_pos": int, "is_completed": bool, "n_exercise_logs": int, "duration_sec": float})
    df["started_at"] = pd.to_datetime(df["started_at"], utc=True)
    df["ended_at"] = pd.to_datetime(df["ended_at"], utc=True)
    return df
