"""
Tests for live PR detection and previous-performance lookups.
"""
import pandas as pd

from factories import NOW, make_log, make_session, make_set


def _bench_history():
    return [make_session("s1", 7, [make_log("bench-press", [(100, 5), (90, 5)])])]


class TestDetectPR:

    def test_beats_best_score(self):
        from src.pr_detection import detect_pr
        result = detect_pr(105, 5, "bench-press", _bench_history())
        assert result["is_pr"]
        assert not result["is_match"]
        assert result["previous_best"]["weight"] == 100
        assert result["previous_best"]["reps"] == 5

    def test_exact_match(self):
        from src.pr_detection import detect_pr
        result = detect_pr(100, 5, "bench-press", _bench_history())
        assert not result["is_pr"]
        assert result["is_match"]

    def test_below_best(self):
        from src.pr_detection import detect_pr
        result = detect_pr(90, 5, "bench-press", _bench_history())
        assert not result["is_pr"]
        assert not result["is_match"]

    def test_equal_score_different_set_is_neither(self):
        from src.pr_detection import detect_pr
        result = detect_pr(50, 10, "bench-press", _bench_history())
        assert not result["is_pr"]
        assert not result["is_match"]

    def test_first_ever_set_is_not_pr(self):
        from src.pr_detection import detect_pr
        result = detect_pr(200, 10, "squat", _bench_history())
        assert result == {"is_pr": False, "is_match": False, "previous_best": None}

    def test_incomplete_sessions_ignored(self):
        from src.pr_detection import detect_pr
        sessions = [make_session("s1", 1, [make_log("bench-press", [(150, 5)])], completed=False)]
        assert detect_pr(60, 5, "bench-press", sessions)["previous_best"] is None

    def test_placeholders_ignored(self):
        from src.pr_detection import detect_pr
        sessions = [make_session("s1", 1, [make_log("bench-press", [(0, 0), (200, 0)])])]
        assert detect_pr(60, 5, "bench-press", sessions)["previous_best"] is None

    def test_best_found_regardless_of_order(self):
        from src.pr_detection import detect_pr
        sessions = [
            make_session("old", 30, [make_log("bench-press", [(50, 10)])]),
            make_session("new", 3, [make_log("bench-press", [(100, 5)])]),
        ]
        best = detect_pr(60, 5, "bench-press", sessions)["previous_best"]
        # 50 × 10 ties 100 × 5; the first one seen wins
        assert best["weight"] == 50
        assert best["date"] == NOW - pd.Timedelta(days=30)


class TestCompareSets:

    def test_score_decides(self):
        from src.pr_detection import compare_sets
        assert compare_sets({"weight": 100, "reps": 6}, {"weight": 100, "reps": 5}) == 1
        assert compare_sets({"weight": 80, "reps": 5}, {"weight": 100, "reps": 5}) == -1

    def test_weight_breaks_ties(self):
        from src.pr_detection import compare_sets
        assert compare_sets({"weight": 100, "reps": 5}, {"weight": 50, "reps": 10}) == 1
        assert compare_sets({"weight": 50, "reps": 10}, {"weight": 100, "reps": 5}) == -1

    def test_draw(self):
        from src.pr_detection import compare_sets
        assert compare_sets({"weight": 100, "reps": 5}, {"weight": 100, "reps": 5}) == 0


class TestPreviousPerformance:

    def _sessions(self):
        return [
            make_session("s_old", 10, [make_log("bench-press", [(80, 5), (80, 5), (80, 5)])]),
            make_session("s_new", 3, [make_log("bench-press", [(90, 5), (0, 0)])]),
            make_session("s_live", 0, [make_log("bench-press", [(120, 5)])], completed=False),
        ]

    def test_previous_set_newest_first(self):
        from src.pr_detection import get_previous_set
        assert get_previous_set("bench-press", 0, self._sessions()) == {"weight": 90, "reps": 5}

    def test_previous_set_skips_placeholder(self):
        from src.pr_detection import get_previous_set
        assert get_previous_set("bench-press", 1, self._sessions()) == {"weight": 80, "reps": 5}

    def test_previous_set_missing_index(self):
        from src.pr_detection import get_previous_set
        assert get_previous_set("bench-press", 5, self._sessions()) is None

    def test_previous_set_by_side(self):
        from src.pr_detection import get_previous_set
        sessions = [make_session("s1", 2, [make_log("dumbbell-curl", [
            make_set(20, 10, 0, "left"),
            make_set(22, 8, 0, "right"),
        ])])]
        assert get_previous_set("dumbbell-curl", 0, sessions, side="right") == {"weight": 22, "reps": 8}

    def test_previous_session(self):
        from src.pr_detection import get_previous_session
        assert get_previous_session("bench-press", self._sessions())["id"] == "s_new"
        assert get_previous_session("squat", self._sessions()) is None


class TestExercisePR:

    def test_best_ever_set(self):
        from src.pr_detection import get_exercise_pr
        sessions = [
            make_session("s1", 20, [make_log("bench-press", [(100, 5)])]),
            make_session("s2", 5, [make_log("bench-press", [(90, 8)])]),
        ]
        pr = get_exercise_pr("bench-press", sessions)
        assert (pr["weight"], pr["reps"]) == (90, 8)
        assert pr["date"] == NOW - pd.Timedelta(days=5)

    def test_none_without_history(self):
        from src.pr_detection import get_exercise_pr
        assert get_exercise_pr("bench-press", []) is None


class TestPRTable:

    def test_ranked_by_score(self):
        from src.pr_detection import pr_table
        sessions = [
            make_session("s1", 5, [
                make_log("bench-press", [(100, 5), (105, 3)]),
                make_log("squat", [(140, 5)]),
            ]),
        ]
        prs = pr_table(sessions)
        assert prs["exercise_id"].tolist() == ["squat", "bench-press"]
        assert prs.loc[1, "score"] == 700
        assert prs.loc[2, "weight"] == 100
        assert list(prs.index) == [1, 2]

    def test_empty(self):
        from src.pr_detection import pr_table
        assert pr_table([]).empty
