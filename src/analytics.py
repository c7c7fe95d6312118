"""
Liftlog Analytics — Progress Aggregator

All exercise matching uses exercise_id, never display names.
Every function takes the raw session list; flattening happens once per
call through export_client. Placeholder sets (0 weight or 0 reps) never
count toward sets, reps, volume or e1RM.
"""
import numpy as np
import pandas as pd

from src.config import TIME_FILTERS
from src.export_client import resolve_now, sessions_frame, sessions_to_dataframe

PROGRESS_COLUMNS = ["date", "max_weight", "total_volume", "estimated_one_rep_max"]


def filter_sessions_by_time(sessions: list[dict], time_filter: str = "all", now=None) -> list[dict]:
    """Keep sessions started strictly after now − window ("1m", "3m", "6m", "1y" or "all")."""
    if time_filter not in TIME_FILTERS:
        raise ValueError(f"Unknown time filter: {time_filter!r}")
    months = TIME_FILTERS[time_filter]
    if months is None:
        return list(sessions)

    cutoff = resolve_now(now) - pd.DateOffset(months=months)
    frame = sessions_frame(sessions)
    keep = frame.index[frame["started_at"] > cutoff]
    return [sessions[i] for i in keep]


def _completed_sets(sessions: list[dict]) -> pd.DataFrame:
    sets = sessions_to_dataframe(sessions)
    return sets[sets["is_completed"]]


# ═══════════════════════════════════════════════════════════════════════
# 1. WORKOUT LEVEL
# ═══════════════════════════════════════════════════════════════════════

def workout_stats(sessions: list[dict]) -> dict:
    frame = sessions_frame(sessions)
    completed = frame[frame["is_completed"]]
    sets = _completed_sets(sessions)
    valid = sets[~sets["is_placeholder"]]
    return {
        "total_workouts": len(completed),
        "total_duration": int(completed["duration_sec"].sum()),
        "total_sets": len(valid),
        "total_reps": int(valid["reps"].sum()),
        "total_volume": float(valid["volume"].sum()),
        "unique_exercises": int(sets["exercise_id"].nunique()),
    }


def session_summary(sessions: list[dict]) -> pd.DataFrame:
    """One row per session, newest first."""
    frame = sessions_frame(sessions)
    if frame.empty:
        return pd.DataFrame()

    sets = sessions_to_dataframe(sessions)
    per_session = (
        sets[~sets["is_placeholder"]]
        .groupby("session_pos")
        .agg(total_sets=("weight", "size"), total_volume=("volume", "sum"))
        .reset_index()
    )
    summary = frame.merge(per_session, on="session_pos", how="left")
    summary["total_sets"] = summary["total_sets"].fillna(0).astype(int)
    summary["total_volume"] = summary["total_volume"].fillna(0.0)

    minutes = (summary["ended_at"] - summary["started_at"]).dt.total_seconds() / 60
    summary["duration_min"] = np.floor(minutes + 0.5)

    return (
        summary.rename(columns={"started_at": "date", "n_exercise_logs": "exercise_count"})[
            ["session_id", "date", "routine_name", "is_completed", "exercise_count",
             "total_sets", "total_volume", "duration_min"]
        ]
        .sort_values("date", ascending=False, kind="stable")
        .reset_index(drop=True)
    )


# ═══════════════════════════════════════════════════════════════════════
# 2. EXERCISE LEVEL
# ═══════════════════════════════════════════════════════════════════════

def exercise_stats(exercise_id: str, sessions: list[dict]) -> dict | None:
    """Lifetime stats for one exercise over completed sessions. None when nothing was lifted."""
    sets = _completed_sets(sessions)
    sets = sets[sets["exercise_id"] == exercise_id]
    valid = sets[~sets["is_placeholder"]]
    if valid.empty:
        return None

    # idxmax keeps the first set on volume ties
    best = valid.loc[valid["volume"].idxmax()]
    return {
        "exercise_id": exercise_id,
        "exercise_name": sets["exercise_name"].iloc[0],
        "total_sets": len(valid),
        "total_reps": int(valid["reps"].sum()),
        "total_volume": float(valid["volume"].sum()),
        "max_weight": float(valid["weight"].max()),
        "best_set": {
            "weight": float(best["weight"]),
            "reps": int(best["reps"]),
            "volume": float(best["volume"]),
        },
        "estimated_one_rep_max": float(valid["e1rm"].max()),
        "sessions": int(sets["session_pos"].nunique()),
    }


def exercise_progress(exercise_id: str, sessions: list[dict]) -> pd.DataFrame:
    """Per-session progress points for charting, oldest first."""
    sets = _completed_sets(sessions)
    valid = sets[(sets["exercise_id"] == exercise_id) & ~sets["is_placeholder"]]
    if valid.empty:
        return pd.DataFrame(columns=PROGRESS_COLUMNS)

    return (
        valid.groupby("session_pos", sort=False)
        .agg(
            date=("started_at", "first"),
            max_weight=("weight", "max"),
            total_volume=("volume", "sum"),
            estimated_one_rep_max=("e1rm", "max"),
        )
        .sort_values("date", kind="stable")
        .reset_index(drop=True)[PROGRESS_COLUMNS]
    )


def performed_exercises(sessions: list[dict]) -> pd.DataFrame:
    """Exercises with at least one real set, most recently performed first."""
    sets = _completed_sets(sessions)
    valid = sets[~sets["is_placeholder"]]
    if valid.empty:
        return pd.DataFrame(columns=["exercise_id", "exercise_name", "last_performed"])

    latest = valid.loc[valid.groupby("exercise_id", sort=False)["started_at"].idxmax()]
    return (
        latest.rename(columns={"started_at": "last_performed"})[
            ["exercise_id", "exercise_name", "last_performed"]
        ]
        .sort_values("last_performed", ascending=False, kind="stable")
        .reset_index(drop=True)
    )
