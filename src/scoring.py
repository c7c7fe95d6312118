"""
Liftlog Analytics — Scoring Primitives

Pure formulas shared by the PR detector, the progress aggregator and the
muscle-load model. Nothing here rounds unless the function says so.
"""
import math

from src.config import (
    REP_RANGE_FACTORS,
    REP_RANGE_FLOOR,
    INTENSITY_FLOOR,
    INTENSITY_CEILING,
)


def is_placeholder(weight: float, reps: int) -> bool:
    """A set with no weight or no reps was never performed."""
    return not weight or not reps


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (Math.round semantics)."""
    return int(math.floor(value + 0.5))


def one_rep_max(weight: float, reps: int) -> float:
    """Epley estimate: weight × (1 + reps/30). A single is its own max."""
    if reps == 1:
        return weight
    if weight == 0 or reps == 0:
        return 0
    return weight * (1 + reps / 30)


def set_volume(weight: float, reps: int) -> float:
    return weight * reps


def rep_range_factor(reps: int) -> float:
    for lo, hi, factor in REP_RANGE_FACTORS:
        if lo <= reps <= hi:
            return factor
    return REP_RANGE_FLOOR


def intensity_factor(e1rm: float, recent_best: float) -> float:
    """e1RM relative to the recent best, clamped to [0.60, 1.20]. No history → 1.0."""
    if recent_best == 0:
        return 1.0
    return max(INTENSITY_FLOOR, min(INTENSITY_CEILING, e1rm / recent_best))


def set_score(weight: float, reps: int, recent_best: float) -> float:
    """Muscle-load score of one set: volume × rep-range factor × intensity factor."""
    if is_placeholder(weight, reps):
        return 0.0
    e1rm = one_rep_max(weight, reps)
    return (
        set_volume(weight, reps)
        * rep_range_factor(reps)
        * intensity_factor(e1rm, recent_best)
    )


# ═══════════════════════════════════════════════════════════════════════
# MULTI-SET HELPERS — sets are {"weight": ..., "reps": ...} dicts
# ═══════════════════════════════════════════════════════════════════════

def total_volume(sets: list[dict]) -> float:
    return sum(set_volume(s["weight"], s["reps"]) for s in sets)


def average_weight(sets: list[dict]) -> int:
    if not sets:
        return 0
    return round_half_up(sum(s["weight"] for s in sets) / len(sets))


def average_reps(sets: list[dict]) -> int:
    if not sets:
        return 0
    return round_half_up(sum(s["reps"] for s in sets) / len(sets))


def best_e1rm(sets: list[dict]) -> float:
    if not sets:
        return 0
    return max(one_rep_max(s["weight"], s["reps"]) for s in sets)


def top_set(sets: list[dict]) -> dict | None:
    """Heaviest set; more reps wins at equal weight, first one wins a full tie."""
    if not sets:
        return None
    best = sets[0]
    for s in sets[1:]:
        if s["weight"] > best["weight"]:
            best = s
        elif s["weight"] == best["weight"] and s["reps"] > best["reps"]:
            best = s
    return best


def percentage_increase(old_value: float, new_value: float) -> int:
    if old_value == 0:
        return 0
    return round_half_up((new_value - old_value) / old_value * 100)


# ═══════════════════════════════════════════════════════════════════════
# DISPLAY FORMATTING
# ═══════════════════════════════════════════════════════════════════════

def format_duration(seconds: int) -> str:
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_volume(volume: float) -> str:
    if volume >= 1_000_000:
        return f"{volume / 1_000_000:.2f}M"
    if volume >= 1_000:
        return f"{volume / 1_000:.2f}K"
    return f"{volume:.0f}"
