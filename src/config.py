"""
Liftlog Analytics — Configuration

ALL exercise matching uses the exercise id, never the display name.
Names are only used for display, never for lookup.

The seed catalog below mirrors the sample exercises the app ships with.
Real catalogs come from the export file and take precedence.
"""
import os

# ── Data source ──────────────────────────────────────────────────────
LIFTLOG_EXPORT_SOURCE = os.environ.get("LIFTLOG_EXPORT_SOURCE", "liftlog_export.json")
LIFTLOG_API_TOKEN = os.environ.get("LIFTLOG_API_TOKEN", "")
LIFTLOG_TIME_FILTER = os.environ.get("LIFTLOG_TIME_FILTER", "all")

EXPORT_VERSION = "1.0.0"

# ── Scoring constants ────────────────────────────────────────────────
# (min_reps, max_reps, factor) — anything above the last bracket falls to REP_RANGE_FLOOR
REP_RANGE_FACTORS = [
    (1, 5, 1.0),
    (6, 10, 0.85),
    (11, 15, 0.70),
    (16, 25, 0.50),
]
REP_RANGE_FLOOR = 0.35

INTENSITY_FLOOR = 0.60
INTENSITY_CEILING = 1.20

PRIMARY_ONLY_SHARE = 1.0
PRIMARY_WITH_SECONDARY_SHARE = 0.75
SECONDARY_SHARE = 0.25

RECENT_WINDOW_DAYS = 90
MUSCLE_STATS_LOOKBACK = 10  # sessions examined for last/previous/average
RECENT_AVERAGE_SESSIONS = 3
TREND_UP_RATIO = 1.10
TREND_DOWN_RATIO = 0.90

# Trailing windows in calendar months; None = unbounded
TIME_FILTERS = {
    "all": None,
    "1m": 1,
    "3m": 3,
    "6m": 6,
    "1y": 12,
}

# ── Domain tables ────────────────────────────────────────────────────
MUSCLE_GROUPS = (
    "chest",
    "back",
    "shoulders",
    "biceps",
    "triceps",
    "quads",
    "hamstrings",
    "glutes",
    "calves",
    "abs",
)

MUSCLE_GROUP_LABELS = {
    "chest": "Chest",
    "back": "Back",
    "shoulders": "Shoulders",
    "biceps": "Biceps",
    "triceps": "Triceps",
    "quads": "Quads",
    "hamstrings": "Hamstrings",
    "glutes": "Glutes",
    "calves": "Calves",
    "abs": "Abs",
}

MUSCLE_GROUP_COLORS = {
    "chest": "#ef4444",
    "back": "#3b82f6",
    "shoulders": "#f97316",
    "biceps": "#d946ef",
    "triceps": "#f59e0b",
    "quads": "#22c55e",
    "hamstrings": "#15803d",
    "glutes": "#16a34a",
    "calves": "#4ade80",
    "abs": "#64748b",
}

EXERCISE_CATEGORIES = ("chest", "back", "shoulders", "arms", "legs", "core", "cardio", "other")
EQUIPMENT = ("barbell", "dumbbell", "machine", "cable", "bodyweight", "kettlebell", "other")

# ═════════════════════════════════════════════════════════════════════
# EXERCISE DATABASE — keyed by exercise id
#
# Fallback catalog used when the caller supplies none. Same shape as an
# exported exercise entity (snake_case).
# ═════════════════════════════════════════════════════════════════════

EXERCISE_DB = {
    "bench-press": {
        "name": "Bench Press",
        "category": "chest",
        "equipment": "barbell",
        "primary_muscle_group": "chest",
        "secondary_muscle_group": "triceps",
    },
    "squat": {
        "name": "Squat",
        "category": "legs",
        "equipment": "barbell",
        "primary_muscle_group": "quads",
        "secondary_muscle_group": "glutes",
    },
    "deadlift": {
        "name": "Deadlift",
        "category": "back",
        "equipment": "barbell",
        "primary_muscle_group": "back",
        "secondary_muscle_group": "hamstrings",
    },
    "overhead-press": {
        "name": "Overhead Press",
        "category": "shoulders",
        "equipment": "barbell",
        "primary_muscle_group": "shoulders",
        "secondary_muscle_group": "triceps",
    },
    "barbell-row": {
        "name": "Barbell Row",
        "category": "back",
        "equipment": "barbell",
        "primary_muscle_group": "back",
        "secondary_muscle_group": "biceps",
    },
    "pull-ups": {
        "name": "Pull-ups",
        "category": "back",
        "equipment": "bodyweight",
        "primary_muscle_group": "back",
        "secondary_muscle_group": "biceps",
    },
    "dips": {
        "name": "Dips",
        "category": "chest",
        "equipment": "bodyweight",
        "primary_muscle_group": "triceps",
        "secondary_muscle_group": "chest",
    },
    "dumbbell-curl": {
        "name": "Dumbbell Curl",
        "category": "arms",
        "equipment": "dumbbell",
        "primary_muscle_group": "biceps",
        "is_unilateral": True,
    },
    "tricep-extension": {
        "name": "Tricep Extension",
        "category": "arms",
        "equipment": "dumbbell",
        "primary_muscle_group": "triceps",
    },
    "leg-press": {
        "name": "Leg Press",
        "category": "legs",
        "equipment": "machine",
        "primary_muscle_group": "quads",
        "secondary_muscle_group": "glutes",
    },
    "lat-pulldown": {
        "name": "Lat Pulldown",
        "category": "back",
        "equipment": "cable",
        "primary_muscle_group": "back",
        "secondary_muscle_group": "biceps",
    },
    "romanian-deadlift": {
        "name": "Romanian Deadlift",
        "category": "legs",
        "equipment": "barbell",
        "primary_muscle_group": "hamstrings",
        "secondary_muscle_group": "glutes",
    },
    "cable-fly": {
        "name": "Cable Fly",
        "category": "chest",
        "equipment": "cable",
        "primary_muscle_group": "chest",
    },
    "plank": {
        "name": "Plank",
        "category": "core",
        "equipment": "bodyweight",
        "primary_muscle_group": "abs",
    },
}

# Template routines the app seeds on first launch
SAMPLE_ROUTINES = {
    "push-day": {
        "name": "Push Day",
        "notes": "Chest, shoulders, and triceps workout",
        "exercises": [
            {"exercise_id": "bench-press", "default_sets": 4, "rep_range": (6, 8)},
            {"exercise_id": "overhead-press", "default_sets": 4, "rep_range": (8, 10)},
            {"exercise_id": "cable-fly", "default_sets": 3, "rep_range": (10, 12)},
            {"exercise_id": "tricep-extension", "default_sets": 3, "rep_range": (10, 12)},
            {"exercise_id": "dips", "default_sets": 3, "rep_range": (8, 12), "notes": "To failure"},
        ],
    },
    "pull-day": {
        "name": "Pull Day",
        "notes": "Back and biceps workout",
        "exercises": [
            {"exercise_id": "deadlift", "default_sets": 3, "rep_range": (5, 8)},
            {"exercise_id": "barbell-row", "default_sets": 4, "rep_range": (8, 10)},
            {"exercise_id": "pull-ups", "default_sets": 3, "rep_range": (6, 10), "notes": "To failure if needed"},
            {"exercise_id": "lat-pulldown", "default_sets": 3, "rep_range": (10, 12)},
            {"exercise_id": "dumbbell-curl", "default_sets": 3, "rep_range": (10, 12)},
        ],
    },
}


def get_muscle_groups(exercise_id: str) -> tuple[str | None, str | None]:
    """Get (primary, secondary) muscle groups for a catalog exercise."""
    entry = EXERCISE_DB.get(exercise_id)
    if not entry:
        return None, None
    return entry["primary_muscle_group"], entry.get("secondary_muscle_group")


def get_unilateral_ids() -> set:
    """Get set of exercise ids tracked per side."""
    return {eid for eid, e in EXERCISE_DB.items() if e.get("is_unilateral")}
