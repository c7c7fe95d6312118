"""
Liftlog Analytics — Muscle-Load Model

Turns raw lifting performance into a per-muscle training-load signal that is
comparable across exercises with very different absolute loads:

    set score = volume × rep_range_factor(reps) × intensity_factor(e1RM, recent best)

Each set's score is split between the exercise's primary (75%) and secondary
(25%) muscle groups, or goes 100% to the primary when there is no secondary.
Levels normalise a session's score against the muscle's 90-day peak.

"Recent best e1RM" is indexed once per call (exercise_id → best e1RM in the
90 days before `now`) instead of rescanning history for every set.
"""
import numpy as np
import pandas as pd

from src.config import (
    MUSCLE_GROUPS,
    MUSCLE_GROUP_LABELS,
    PRIMARY_ONLY_SHARE,
    PRIMARY_WITH_SECONDARY_SHARE,
    SECONDARY_SHARE,
    RECENT_WINDOW_DAYS,
    MUSCLE_STATS_LOOKBACK,
    RECENT_AVERAGE_SESSIONS,
    TREND_UP_RATIO,
    TREND_DOWN_RATIO,
)
from src.export_client import index_exercises, resolve_now, sessions_frame, sessions_to_dataframe
from src.scoring import round_half_up, set_score

CREDIT_COLUMNS = ["session_pos", "muscle", "score"]


def _muscle_universe(catalog: dict) -> list[str]:
    """Known muscle groups first, then any custom ones the catalog introduces."""
    muscles = list(MUSCLE_GROUPS)
    for e in catalog.values():
        for m in (e.get("primary_muscle_group"), e.get("secondary_muscle_group")):
            if m and m not in muscles:
                muscles.append(m)
    return muscles


def _same_session(a: dict, b: dict) -> bool:
    # id-less sessions only match themselves
    return a is b or (a.get("id") is not None and a.get("id") == b.get("id"))


def _window_start(now: pd.Timestamp) -> pd.Timestamp:
    return now - pd.Timedelta(days=RECENT_WINDOW_DAYS)


# ═══════════════════════════════════════════════════════════════════════
# 1. RECENT BEST e1RM INDEX
# ═══════════════════════════════════════════════════════════════════════

def _recent_best_index(sets: pd.DataFrame, now: pd.Timestamp) -> dict:
    """exercise_id → best e1RM among completed, non-placeholder sets inside the window."""
    mask = sets["is_completed"] & ~sets["is_placeholder"] & (sets["started_at"] >= _window_start(now))
    return sets[mask].groupby("exercise_id")["e1rm"].max().to_dict()


def _fold_in(index: dict, own_sets: pd.DataFrame, now: pd.Timestamp) -> dict:
    """Add the scored session's own sets (it may still be in progress)."""
    own = own_sets[~own_sets["is_placeholder"] & (own_sets["started_at"] >= _window_start(now))]
    if own.empty:
        return index
    merged = dict(index)
    for eid, best in own.groupby("exercise_id")["e1rm"].max().items():
        merged[eid] = max(merged.get(eid, 0.0), best)
    return merged


def recent_best_e1rm(exercise_id: str, all_sessions: list[dict], current_session: dict = None, now=None) -> float:
    """Best e1RM for the exercise over the last 90 days of completed sessions (+ the current one)."""
    now = resolve_now(now)
    history = [
        s for s in all_sessions
        if s.get("is_completed") and (current_session is None or not _same_session(s, current_session))
    ]
    index = _recent_best_index(sessions_to_dataframe(history), now)
    if current_session is not None:
        index = _fold_in(index, sessions_to_dataframe([current_session]), now)
    return float(index.get(exercise_id, 0.0))


# ═══════════════════════════════════════════════════════════════════════
# 2. SET SCORES → MUSCLE CREDITS
# ═══════════════════════════════════════════════════════════════════════

def _credits(sets: pd.DataFrame, recent_best: dict, catalog: dict) -> pd.DataFrame:
    """One row per (set, muscle) credit. Exercises missing from the catalog earn nothing."""
    valid = sets[~sets["is_placeholder"] & sets["exercise_id"].isin(list(catalog))]
    rows = []
    for session_pos, eid, weight, reps in zip(
        valid["session_pos"], valid["exercise_id"], valid["weight"], valid["reps"]
    ):
        score = set_score(weight, reps, recent_best.get(eid, 0.0))
        if score == 0:
            continue
        exercise = catalog[eid]
        primary = exercise.get("primary_muscle_group")
        secondary = exercise.get("secondary_muscle_group")
        if secondary:
            rows.append({"session_pos": session_pos, "muscle": primary, "score": score * PRIMARY_WITH_SECONDARY_SHARE})
            rows.append({"session_pos": session_pos, "muscle": secondary, "score": score * SECONDARY_SHARE})
        else:
            rows.append({"session_pos": session_pos, "muscle": primary, "score": score * PRIMARY_ONLY_SHARE})
    return pd.DataFrame(rows, columns=CREDIT_COLUMNS)


def session_muscle_scores(session: dict, all_sessions: list[dict], exercises=None, now=None) -> dict:
    """
    Muscle scores for one session (completed or in progress).

    Returns {"muscle_scores": {muscle: score}, "total_score": float}; every
    known muscle group is present, zero when untouched.
    """
    now = resolve_now(now)
    catalog = index_exercises(exercises)

    history = [s for s in all_sessions if s.get("is_completed") and not _same_session(s, session)]
    own_sets = sessions_to_dataframe([session])
    recent_best = _fold_in(_recent_best_index(sessions_to_dataframe(history), now), own_sets, now)

    scores = {m: 0.0 for m in _muscle_universe(catalog)}
    credits = _credits(own_sets, recent_best, catalog)
    for muscle, score in credits.groupby("muscle", sort=False)["score"].sum().items():
        scores[muscle] = scores.get(muscle, 0.0) + float(score)

    return {"muscle_scores": scores, "total_score": float(sum(scores.values()))}


def muscle_score_table(sessions: list[dict], exercises=None, now=None) -> pd.DataFrame:
    """
    Score matrix over completed sessions, oldest first.
    Columns: session_id, date, one column per muscle group, total.
    """
    now = resolve_now(now)
    catalog = index_exercises(exercises)
    muscles = _muscle_universe(catalog)

    frame = sessions_frame(sessions)
    completed = frame[frame["is_completed"]]
    if completed.empty:
        return pd.DataFrame(columns=["session_id", "date", *muscles, "total"])

    sets = sessions_to_dataframe(sessions)
    completed_sets = sets[sets["is_completed"]]
    credits = _credits(completed_sets, _recent_best_index(sets, now), catalog)

    table = completed[["session_pos", "session_id", "started_at"]].rename(columns={"started_at": "date"})
    if not credits.empty:
        per_muscle = credits.pivot_table(index="session_pos", columns="muscle", values="score", aggfunc="sum")
        table = table.merge(per_muscle, left_on="session_pos", right_index=True, how="left")
    table = table.reindex(columns=["session_id", "date", *muscles])
    table[muscles] = table[muscles].astype(float).fillna(0.0)
    table["total"] = table[muscles].sum(axis=1)

    return table.sort_values("date", kind="stable").reset_index(drop=True)


# ═══════════════════════════════════════════════════════════════════════
# 3. TREND & LEVEL
# ═══════════════════════════════════════════════════════════════════════

def classify_trend(scores: list[float]) -> str:
    """Scores newest first. Needs two sessions; ±10% around the previous score is stable."""
    if len(scores) < 2:
        return "stable"
    last, previous = scores[0], scores[1]
    if last > previous * TREND_UP_RATIO:
        return "up"
    if last < previous * TREND_DOWN_RATIO:
        return "down"
    return "stable"


def muscle_trend(muscle: str, sessions: list[dict], exercises=None, now=None) -> pd.DataFrame:
    """(date, score, level) per completed session; level = score as % of the 90-day peak."""
    now = resolve_now(now)
    table = muscle_score_table(sessions, exercises, now)
    if table.empty:
        return pd.DataFrame(columns=["date", "score", "level"])

    scores = table[muscle] if muscle in table.columns else pd.Series(0.0, index=table.index)
    recent = scores[table["date"] >= _window_start(now)]
    peak = max(1.0, float(recent.max())) if not recent.empty else 1.0

    return pd.DataFrame({
        "date": table["date"],
        "score": scores.astype(float),
        "level": np.floor(scores / peak * 100 + 0.5).astype(int),
    })


def muscle_stats(sessions: list[dict], exercises=None, now=None) -> pd.DataFrame:
    """
    Summary row per muscle group: last session score, recent average,
    level (0-100 vs 90-day peak) and trend (up/down/stable).
    """
    now = resolve_now(now)
    muscles = _muscle_universe(index_exercises(exercises))
    table = muscle_score_table(sessions, exercises, now)

    if table.empty:
        return pd.DataFrame([
            {
                "muscle_group": m,
                "label": MUSCLE_GROUP_LABELS.get(m, m.title()),
                "last_session_score": 0.0,
                "recent_average": 0.0,
                "level": 0,
                "trend": "stable",
            }
            for m in muscles
        ])

    lookback = table.sort_values("date", ascending=False, kind="stable").head(MUSCLE_STATS_LOOKBACK)
    window = table[table["date"] >= _window_start(now)]

    rows = []
    for m in muscles:
        scores = lookback[m].tolist()
        last = scores[0]
        recent = scores[:RECENT_AVERAGE_SESSIONS]
        peak = float(window[m].max()) if not window.empty else 0.0
        peak = peak or 1.0
        rows.append({
            "muscle_group": m,
            "label": MUSCLE_GROUP_LABELS.get(m, m.title()),
            "last_session_score": float(last),
            "recent_average": float(sum(recent) / len(recent)),
            "level": min(100, round_half_up(last / peak * 100)),
            "trend": classify_trend(scores),
        })
    return pd.DataFrame(rows)
