"""
Tests for the progress aggregator — time filters, workout and exercise stats.
Run: pytest tests/ -v
"""
import pandas as pd
import pytest

from factories import NOW, make_log, make_session


# ═══════════════════════════════════════════════════════════════════════
# TIME FILTER
# ═══════════════════════════════════════════════════════════════════════

class TestFilterSessionsByTime:

    def _sessions(self):
        return [
            make_session(f"s{d}", d, [make_log("squat", [(100, 5)])])
            for d in (10, 40, 100, 400)
        ]

    @pytest.mark.parametrize("time_filter,expected", [
        ("1m", ["s10"]),
        ("3m", ["s10", "s40"]),
        ("6m", ["s10", "s40", "s100"]),
        ("1y", ["s10", "s40", "s100"]),
        ("all", ["s10", "s40", "s100", "s400"]),
    ])
    def test_calendar_windows(self, time_filter, expected):
        from src.analytics import filter_sessions_by_time
        kept = filter_sessions_by_time(self._sessions(), time_filter, now=NOW)
        assert [s["id"] for s in kept] == expected

    def test_cutoff_is_exclusive(self):
        from src.analytics import filter_sessions_by_time
        session = make_session("edge", 0, [])
        session["started_at"] = (NOW - pd.DateOffset(months=1)).isoformat()
        assert filter_sessions_by_time([session], "1m", now=NOW) == []

    def test_unknown_filter(self):
        from src.analytics import filter_sessions_by_time
        with pytest.raises(ValueError):
            filter_sessions_by_time([], "2w", now=NOW)


# ═══════════════════════════════════════════════════════════════════════
# WORKOUT LEVEL
# ═══════════════════════════════════════════════════════════════════════

class TestWorkoutStats:

    def _sessions(self):
        return [
            make_session("s1", 5, [make_log("squat", [(50, 10), (0, 0)])]),
            make_session("s2", 2, [make_log("squat", [(50, 10), (0, 0)])]),
            make_session("live", 0, [make_log("bench-press", [(100, 5)])], completed=False),
        ]

    def test_totals_skip_placeholders_and_incomplete(self):
        from src.analytics import workout_stats
        stats = workout_stats(self._sessions())
        assert stats == {
            "total_workouts": 2,
            "total_duration": 7200,
            "total_sets": 2,
            "total_reps": 20,
            "total_volume": 1000.0,
            "unique_exercises": 1,
        }

    def test_single_session(self):
        from src.analytics import workout_stats
        stats = workout_stats(self._sessions()[:1])
        assert stats["total_sets"] == 1
        assert stats["total_volume"] == 500

    def test_empty(self):
        from src.analytics import workout_stats
        stats = workout_stats([])
        assert stats["total_workouts"] == 0
        assert stats["total_volume"] == 0


class TestSessionSummary:

    def test_newest_first(self):
        from src.analytics import session_summary
        sessions = [
            make_session("old", 9, [make_log("squat", [(100, 5), (0, 0)])], duration_min=45),
            make_session("new", 1, [make_log("squat", [(100, 5)]), make_log("bench-press", [(80, 8)])]),
        ]
        summary = session_summary(sessions)
        assert summary["session_id"].tolist() == ["new", "old"]
        assert summary["exercise_count"].tolist() == [2, 1]
        assert summary["total_sets"].tolist() == [2, 1]
        assert summary["total_volume"].tolist() == [1140.0, 500.0]
        assert summary["duration_min"].tolist() == [60, 45]

    def test_sessions_without_id(self):
        from src.analytics import session_summary
        sessions = [
            make_session("a", 9, [make_log("squat", [(100, 5)])]),
            make_session("b", 1, [make_log("squat", [(100, 5), (100, 5)])]),
        ]
        for s in sessions:
            del s["id"]
        assert session_summary(sessions)["total_sets"].tolist() == [2, 1]

    def test_empty(self):
        from src.analytics import session_summary
        assert session_summary([]).empty


# ═══════════════════════════════════════════════════════════════════════
# EXERCISE LEVEL
# ═══════════════════════════════════════════════════════════════════════

class TestExerciseStats:

    def _sessions(self):
        return [
            make_session("s1", 10, [make_log("bench-press", [(100, 5), (50, 10)])]),
            make_session("s2", 3, [make_log("bench-press", [(105, 5), (0, 0)])]),
        ]

    def test_lifetime_stats(self):
        from src.analytics import exercise_stats
        stats = exercise_stats("bench-press", self._sessions())
        assert stats["exercise_name"] == "Bench Press"
        assert stats["total_sets"] == 3
        assert stats["total_reps"] == 20
        assert stats["total_volume"] == 1525
        assert stats["max_weight"] == 105
        assert stats["best_set"] == {"weight": 105, "reps": 5, "volume": 525}
        assert stats["estimated_one_rep_max"] == pytest.approx(122.5)
        assert stats["sessions"] == 2

    def test_unknown_exercise(self):
        from src.analytics import exercise_stats
        assert exercise_stats("squat", self._sessions()) is None

    def test_only_placeholders(self):
        from src.analytics import exercise_stats
        sessions = [make_session("s1", 1, [make_log("squat", [(0, 0)])])]
        assert exercise_stats("squat", sessions) is None


class TestExerciseProgress:

    def test_oldest_first(self):
        from src.analytics import exercise_progress
        sessions = [
            make_session("new", 5, [make_log("bench-press", [(110, 3)])]),
            make_session("old", 20, [make_log("bench-press", [(100, 5), (90, 8)])]),
        ]
        progress = exercise_progress("bench-press", sessions)
        assert list(progress.columns) == ["date", "max_weight", "total_volume", "estimated_one_rep_max"]
        assert progress["max_weight"].tolist() == [100, 110]
        assert progress["total_volume"].tolist() == [1220, 330]
        assert progress["estimated_one_rep_max"].iloc[0] == pytest.approx(116.6666667)
        assert progress["estimated_one_rep_max"].iloc[1] == pytest.approx(121)

    def test_sessions_without_id(self):
        from src.analytics import exercise_progress, exercise_stats, workout_stats
        sessions = [
            make_session("a", 10, [make_log("bench-press", [(100, 5)])]),
            make_session("b", 5, [make_log("bench-press", [(110, 3)])]),
        ]
        for s in sessions:
            del s["id"]
        assert workout_stats(sessions)["total_sets"] == 2
        assert exercise_stats("bench-press", sessions)["sessions"] == 2
        progress = exercise_progress("bench-press", sessions)
        assert progress["max_weight"].tolist() == [100, 110]

    def test_empty(self):
        from src.analytics import exercise_progress
        progress = exercise_progress("bench-press", [])
        assert progress.empty
        assert "estimated_one_rep_max" in progress.columns


class TestPerformedExercises:

    def test_most_recent_first(self):
        from src.analytics import performed_exercises
        sessions = [
            make_session("s1", 10, [make_log("squat", [(100, 5)]), make_log("bench-press", [(80, 5)])]),
            make_session("s2", 2, [make_log("bench-press", [(85, 5)]), make_log("plank", [])]),
        ]
        performed = performed_exercises(sessions)
        assert performed["exercise_id"].tolist() == ["bench-press", "squat"]
        assert performed["last_performed"].iloc[0] == NOW - pd.Timedelta(days=2)


class TestIdempotence:

    def test_repeat_calls_match_and_leave_input_alone(self):
        import copy
        from src.analytics import exercise_stats, workout_stats
        sessions = [
            make_session("s1", 10, [make_log("bench-press", [(100, 5), (0, 0)])]),
            make_session("s2", 3, [make_log("bench-press", [(105, 5)])]),
        ]
        before = copy.deepcopy(sessions)
        assert workout_stats(sessions) == workout_stats(sessions)
        assert exercise_stats("bench-press", sessions) == exercise_stats("bench-press", sessions)
        assert sessions == before
