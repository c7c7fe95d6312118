"""
Liftlog Analytics — PR Detection

Live feedback while a set is being edited: is it a new personal record,
a match of the current one, or neither? All functions are read-only
queries over the supplied sessions; only completed sessions count.

PRs are ranked by weight × reps, not e1RM. The muscle-load model has its
own e1RM-based scoring.
"""
import pandas as pd

from src.export_client import sessions_frame, sessions_to_dataframe


def _contains_exercise(session: dict, exercise_id: str) -> bool:
    return any(log.get("exercise_id") == exercise_id for log in session.get("exercise_logs") or [])


def _history_sets(exercise_id: str, sessions: list[dict]) -> pd.DataFrame:
    """Non-placeholder logical sets of one exercise across completed sessions, input order."""
    relevant = [s for s in sessions if s.get("is_completed") and _contains_exercise(s, exercise_id)]
    sets = sessions_to_dataframe(relevant)
    mask = sets["is_completed"] & ~sets["is_placeholder"] & (sets["exercise_id"] == exercise_id)
    return sets[mask].reset_index(drop=True)


def _best_set(history: pd.DataFrame) -> pd.Series:
    # idxmax keeps the first occurrence on ties
    return history.loc[history["volume"].idxmax()]


def _newest_completed_first(sessions: list[dict]) -> list[dict]:
    frame = sessions_frame(sessions)
    order = (
        frame[frame["is_completed"]]
        .sort_values("started_at", ascending=False, kind="stable", na_position="last")
        .index
    )
    return [sessions[i] for i in order]


def detect_pr(weight: float, reps: int, exercise_id: str, previous_sessions: list[dict]) -> dict:
    """
    Compare a candidate set against the best historical set for the exercise.

    Returns {is_pr, is_match, previous_best}. An exercise's first-ever set is
    never a PR: with no history both flags are False and previous_best is None.
    """
    history = _history_sets(exercise_id, previous_sessions)
    if history.empty:
        return {"is_pr": False, "is_match": False, "previous_best": None}

    best = _best_set(history)
    best_weight = float(best["weight"])
    best_reps = int(best["reps"])

    is_pr = weight * reps > best_weight * best_reps
    is_match = not is_pr and weight == best_weight and reps == best_reps

    return {
        "is_pr": is_pr,
        "is_match": is_match,
        "previous_best": {
            "weight": best_weight,
            "reps": best_reps,
            "date": best["started_at"],
        },
    }


def compare_sets(set1: dict, set2: dict) -> int:
    """1 if set1 is better, -1 if set2 is better, 0 on a true draw. Higher weight breaks score ties."""
    score1 = set1["weight"] * set1["reps"]
    score2 = set2["weight"] * set2["reps"]

    if score1 > score2:
        return 1
    if score1 < score2:
        return -1
    if set1["weight"] > set2["weight"]:
        return 1
    if set1["weight"] < set2["weight"]:
        return -1
    return 0


def get_previous_set(
    exercise_id: str,
    set_index: int,
    previous_sessions: list[dict],
    side: str = None,
) -> dict | None:
    """
    What was lifted at this set slot last time?

    Walks completed sessions newest first and returns the first
    non-placeholder set of the exercise at set_index (and side, for
    unilateral exercises) as {weight, reps}.
    """
    for session in _newest_completed_first(previous_sessions):
        for log in session.get("exercise_logs") or []:
            if log.get("exercise_id") != exercise_id:
                continue
            for pos, s in enumerate(log.get("set_logs") or []):
                idx = s.get("set_index")
                if idx is None:
                    idx = pos
                if idx != set_index or (side is not None and s.get("side") != side):
                    continue
                weight, reps = s.get("weight") or 0, s.get("reps") or 0
                if weight > 0 and reps > 0:
                    return {"weight": weight, "reps": reps}
    return None


def get_previous_session(exercise_id: str, previous_sessions: list[dict]) -> dict | None:
    """Most recent completed session that logged the exercise."""
    for session in _newest_completed_first(previous_sessions):
        if _contains_exercise(session, exercise_id):
            return session
    return None


def get_exercise_pr(exercise_id: str, sessions: list[dict]) -> dict | None:
    """Best-ever set for the exercise as {weight, reps, date}, or None."""
    history = _history_sets(exercise_id, sessions)
    if history.empty:
        return None
    best = _best_set(history)
    return {
        "weight": float(best["weight"]),
        "reps": int(best["reps"]),
        "date": best["started_at"],
    }


def pr_table(sessions: list[dict]) -> pd.DataFrame:
    """One row per exercise with its PR set, ranked by weight × reps."""
    sets = sessions_to_dataframe(sessions)
    valid = sets[sets["is_completed"] & ~sets["is_placeholder"]]
    if valid.empty:
        return pd.DataFrame()
    idx = valid.groupby("exercise_id", sort=False)["volume"].idxmax()
    prs = valid.loc[idx, ["exercise_id", "exercise_name", "weight", "reps", "volume", "e1rm", "started_at"]]
    prs = prs.rename(columns={"volume": "score", "started_at": "date"})
    prs = prs.sort_values("score", ascending=False, kind="stable").reset_index(drop=True)
    prs.index = prs.index + 1
    return prs
