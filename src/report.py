"""
Liftlog Analytics — Report Orchestrator
Run manually: python -m src.report [SOURCE] [--filter=3m] [--exercise=ID]
"""
import sys
from datetime import datetime

from src.analytics import exercise_progress, exercise_stats, filter_sessions_by_time, workout_stats
from src.config import LIFTLOG_TIME_FILTER
from src.export_client import load_export
from src.muscle_load import muscle_stats
from src.pr_detection import pr_table
from src.scoring import format_duration, format_volume

TREND_ICONS = {"up": "↗️", "down": "↘️", "stable": "➖"}


def run_report(source: str = None, time_filter: str = LIFTLOG_TIME_FILTER, exercise_id: str = None, now=None) -> dict:
    """
    Full report pipeline:
    1. Load export (file or URL)
    2. Workout stats over the time window
    3. Lifetime PRs
    4. Muscle levels (90-day normalised)
    5. Optional single-exercise drill-down
    """
    print("📊 Liftlog Report — Starting...")
    print(f"   {datetime.now().isoformat()}")

    # 1. Load
    print("\n📥 Loading export...")
    export = load_export(source)
    sessions = export["sessions"]
    exercises = export["exercises"] or None  # fall back to the seed catalog
    print(f"   Found {len(sessions)} sessions, {len(export['exercises'])} exercises")

    filtered = filter_sessions_by_time(sessions, time_filter, now)
    print(f"   {len(filtered)} sessions in window '{time_filter}'")

    # 2. Workouts
    stats = workout_stats(filtered)
    print(f"\n{'='*50}")
    print("🏋️ Workout Summary:")
    print(f"   Workouts: {stats['total_workouts']}")
    print(f"   Time trained: {format_duration(stats['total_duration'])}")
    print(f"   Sets: {stats['total_sets']} | Reps: {stats['total_reps']}")
    print(f"   Volume: {format_volume(stats['total_volume'])} kg")
    print(f"   Exercises: {stats['unique_exercises']}")

    # 3. PRs
    prs = pr_table(sessions)
    if not prs.empty:
        print("\n🏆 Top PRs:")
        for _, row in prs.head(5).iterrows():
            print(f"   {row['exercise_name']}: {row['weight']:g}kg x{row['reps']} (e1RM {row['e1rm']:.1f})")

    # 4. Muscles
    muscles = muscle_stats(sessions, exercises, now)
    print("\n💪 Muscle Levels:")
    for _, row in muscles.sort_values("level", ascending=False, kind="stable").iterrows():
        icon = TREND_ICONS.get(row["trend"], "")
        print(f"   {row['label']:<11} {row['level']:>3} {icon}")

    # 5. Exercise drill-down
    exercise = None
    if exercise_id:
        ex_stats = exercise_stats(exercise_id, filtered)
        progress = exercise_progress(exercise_id, filtered)
        exercise = {"stats": ex_stats, "progress": progress}
        print(f"\n📈 Exercise {exercise_id}:")
        if ex_stats is None:
            print("   No data in this window.")
        else:
            best = ex_stats["best_set"]
            print(f"   {ex_stats['exercise_name']} — {ex_stats['sessions']} sessions, {ex_stats['total_sets']} sets")
            print(f"   Best set: {best['weight']:g}kg x{best['reps']} | Max weight: {ex_stats['max_weight']:g}kg")
            print(f"   e1RM: {ex_stats['estimated_one_rep_max']:.1f} kg")
            for _, point in progress.tail(5).iterrows():
                print(f"   📅 {point['date'].date()} | {point['max_weight']:g}kg | e1RM {point['estimated_one_rep_max']:.1f}")

    return {"workouts": stats, "prs": prs, "muscles": muscles, "exercise": exercise}


def _flag(name: str, default: str = None) -> str:
    for arg in sys.argv[1:]:
        if arg.startswith(f"--{name}="):
            return arg.split("=", 1)[1]
    return default


if __name__ == "__main__":
    positional = [a for a in sys.argv[1:] if not a.startswith("--")]
    try:
        run_report(
            source=positional[0] if positional else None,
            time_filter=_flag("filter", LIFTLOG_TIME_FILTER),
            exercise_id=_flag("exercise"),
        )
    except Exception as e:
        print(f"\n❌ Report FAILED: {e}")
        sys.exit(1)

    print("\nDone.")
