"""Tests for the pure scoring engine: lock gate, leaderboard, matchup stats."""
import random
from datetime import datetime, timedelta, timezone

import pytest

from app.utils.scoring import (
    compute_leaderboard,
    compute_matchup_stats,
    find_tiebreak_matchup,
    is_locked,
    normalize_name,
    round_sort_key,
    score_entries,
    tiebreak_total,
)


def entry(entry_id, first, last, guess=None):
    return {"id": entry_id, "first_name": first, "last_name": last, "tiebreak_guess": guess}


def matchup(matchup_id, round_name="Wild Card", winner=None, score_a=None, score_b=None, game_order=1):
    return {
        "id": matchup_id,
        "round_name": round_name,
        "game_order": game_order,
        "team_a": "Bills",
        "team_b": "Chiefs",
        "winner": winner,
        "score_a": score_a,
        "score_b": score_b,
    }


def pick(entry_id, matchup_id, picked):
    return {"entry_id": entry_id, "matchup_id": matchup_id, "picked": picked}


ALICE = entry(1, "Alice", "Adams")
BOB = entry(2, "Bob", "Baker")


# Lock gate


def test_is_locked_past_and_future():
    """One hour in the past is locked, one hour in the future is open."""
    now = datetime.now(timezone.utc)
    assert is_locked(now - timedelta(hours=1)) is True
    assert is_locked(now + timedelta(hours=1)) is False


def test_is_locked_accepts_iso_strings():
    """ISO strings, including a Z suffix, are compared against now."""
    now = datetime(2026, 1, 10, 18, 0, tzinfo=timezone.utc)
    assert is_locked("2026-01-10T17:59:59Z", now=now) is True
    assert is_locked("2026-01-10T18:00:00+00:00", now=now) is True
    assert is_locked("2026-01-10T12:30:00-05:00", now=now) is True
    assert is_locked("2026-01-10T18:00:01Z", now=now) is False


def test_is_locked_naive_timestamps_are_utc():
    """Naive datetimes are read as UTC."""
    now = datetime(2026, 1, 10, 18, 0, tzinfo=timezone.utc)
    assert is_locked(datetime(2026, 1, 10, 17, 0), now=now) is True
    assert is_locked("2026-01-10T19:00:00", now=now) is False


@pytest.mark.parametrize("value", [None, "", "not a date", "2026-13-45T99:00", "   "])
def test_is_locked_fails_open(value):
    """Absent and unparseable lock times never lock the round."""
    assert is_locked(value) is False


# Scoring engine


def test_score_entries_counts_only_decided_matches():
    """Correct picks on decided games score; undecided games score nothing."""
    matchups = [matchup(10, winner="A"), matchup(11, winner=None), matchup(12, winner="B")]
    picks = [pick(1, 10, "A"), pick(1, 11, "A"), pick(1, 12, "B"), pick(2, 10, "B")]

    assert score_entries([ALICE, BOB], matchups, picks) == {1: 2, 2: 0}


def test_score_entries_ignores_unknown_rows():
    """Picks for unknown games or entries are skipped."""
    picks = [pick(1, 99, "A"), pick(42, 10, "A"), pick(1, 10, "A")]
    points = score_entries([ALICE], [matchup(10, winner="A")], picks)
    assert points == {1: 1}


def test_entry_without_picks_scores_zero():
    rows = compute_leaderboard([ALICE, BOB], [matchup(10, winner="A")], [pick(1, 10, "A")])
    assert [(r["name"], r["points"]) for r in rows] == [("Alice Adams", 1), ("Bob Baker", 0)]


# Leaderboard scenarios


def test_scenario_decided_game():
    """Alice picked the winner, Bob did not."""
    rows = compute_leaderboard(
        [BOB, ALICE], [matchup(10, winner="A")], [pick(1, 10, "A"), pick(2, 10, "B")]
    )
    assert [(r["name"], r["points"]) for r in rows] == [("Alice Adams", 1), ("Bob Baker", 0)]


def test_scenario_undecided_game_falls_back_to_name():
    rows = compute_leaderboard(
        [BOB, ALICE], [matchup(10)], [pick(1, 10, "A"), pick(2, 10, "B")]
    )
    assert [(r["name"], r["points"]) for r in rows] == [("Alice Adams", 0), ("Bob Baker", 0)]


def test_scenario_tiebreak_closest_guess_wins():
    """Tied on points, the guess closest to the final total ranks first."""
    entries = [entry(1, "Zed", "Zimmer", guess=40), entry(2, "Amy", "Archer", guess=50)]
    matchups = [
        matchup(10, winner="A"),
        matchup(20, round_name="Super Bowl", score_a=24, score_b=20),
    ]
    picks = [pick(1, 10, "A"), pick(2, 10, "A")]

    rows = compute_leaderboard(entries, matchups, picks)

    assert [r["name"] for r in rows] == ["Zed Zimmer", "Amy Archer"]
    assert [r["difference"] for r in rows] == [4, 6]
    assert all(r["tiebreak_active"] for r in rows)


def test_scenario_tiebreak_inactive_without_scores():
    """Until both final scores exist the tie-break has no effect."""
    entries = [entry(1, "Zed", "Zimmer", guess=40), entry(2, "Amy", "Archer", guess=50)]
    matchups = [
        matchup(10, winner="A"),
        matchup(20, round_name="Super Bowl", score_a=24, score_b=None),
    ]
    picks = [pick(1, 10, "A"), pick(2, 10, "A")]

    rows = compute_leaderboard(entries, matchups, picks)

    assert [r["name"] for r in rows] == ["Amy Archer", "Zed Zimmer"]
    assert all(r["difference"] is None for r in rows)
    assert not any(r["tiebreak_active"] for r in rows)
    assert [r["guess"] for r in rows] == [50, 40]


def test_tiebreak_missing_guess_sorts_last_among_ties():
    entries = [
        entry(1, "Aaron", "Able"),
        entry(2, "Cara", "Cole", guess="41"),
        entry(3, "Beth", "Bond", guess="abc"),
    ]
    matchups = [matchup(20, round_name="Super Bowl", winner="A", score_a=21, score_b=20)]

    rows = compute_leaderboard(entries, matchups, [])

    assert [r["name"] for r in rows] == ["Cara Cole", "Aaron Able", "Beth Bond"]
    assert rows[0]["guess"] == 41 and rows[0]["difference"] == 0
    assert rows[2]["guess"] is None and rows[2]["difference"] is None


def test_tiebreak_never_overrides_points():
    entries = [entry(1, "Perfect", "Guess", guess=44), entry(2, "More", "Points", guess=10)]
    matchups = [
        matchup(10, winner="B"),
        matchup(20, round_name="Super Bowl", score_a=24, score_b=20),
    ]
    rows = compute_leaderboard(entries, matchups, [pick(2, 10, "B")])
    assert [r["name"] for r in rows] == ["More Points", "Perfect Guess"]


def test_tiebreak_round_is_configurable():
    entries = [entry(1, "Zed", "Zimmer", guess=30), entry(2, "Amy", "Archer", guess=10)]
    matchups = [matchup(20, round_name="Final", score_a=14, score_b=17)]

    default = compute_leaderboard(entries, matchups, [])
    custom = compute_leaderboard(entries, matchups, [], tiebreak_round="Final")

    assert [r["name"] for r in default] == ["Amy Archer", "Zed Zimmer"]
    assert [r["name"] for r in custom] == ["Zed Zimmer", "Amy Archer"]


def test_tiebreak_total_requires_both_scores():
    assert tiebreak_total([matchup(20, round_name="Super Bowl", score_a=31)]) is None
    assert tiebreak_total([matchup(20, round_name="Super Bowl", score_a=31, score_b=0)]) == 31
    assert tiebreak_total([matchup(10, score_a=31, score_b=3)]) is None


def test_tiebreak_reference_game_uses_numeric_id_order():
    """Games sharing an order fall back to the lower id, compared as numbers."""
    matchups = [
        matchup(10, round_name="Super Bowl", score_a=30, score_b=30),
        matchup(9, round_name="Super Bowl", score_a=20, score_b=17),
    ]
    assert find_tiebreak_matchup(matchups)["id"] == 9
    assert tiebreak_total(matchups) == 37


def test_leaderboard_is_independent_of_input_order():
    """Shuffled input produces the same ordering every time."""
    entries = [entry(i, f"Player{i % 4}", f"Last{i}", guess=30 + i) for i in range(1, 13)]
    matchups = [matchup(m, winner=("A" if m % 2 else "B")) for m in range(100, 105)]
    matchups.append(matchup(200, round_name="Super Bowl", score_a=20, score_b=17))
    picks = [
        pick(e["id"], m["id"], "A" if (e["id"] + m["id"]) % 3 else "B")
        for e in entries
        for m in matchups
    ]

    expected = compute_leaderboard(entries, matchups, picks)
    rng = random.Random(7)
    for _ in range(5):
        rng.shuffle(entries)
        rng.shuffle(matchups)
        rng.shuffle(picks)
        assert compute_leaderboard(entries, matchups, picks) == expected


def test_leaderboard_row_shape():
    rows = compute_leaderboard([ALICE], [], [])
    assert rows == [
        {
            "entry_id": 1,
            "name": "Alice Adams",
            "points": 0,
            "guess": None,
            "difference": None,
            "tiebreak_active": False,
        }
    ]


# Matchup statistics


def test_stats_three_to_one():
    entries = [entry(i, f"First{i}", "Last") for i in range(1, 5)]
    picks = [pick(1, 10, "A"), pick(2, 10, "A"), pick(3, 10, "A"), pick(4, 10, "B")]

    stats = compute_matchup_stats(matchup(10), entries, picks)

    assert (stats["a_pct"], stats["b_pct"]) == (75, 25)
    assert (stats["a_count"], stats["b_count"]) == (3, 1)


def test_stats_without_picks():
    stats = compute_matchup_stats(matchup(10), [ALICE, BOB], [])
    assert stats == {
        "a_pct": 0,
        "b_pct": 0,
        "a_count": 0,
        "b_count": 0,
        "a_pickers": [],
        "b_pickers": [],
    }


def test_stats_round_each_side_independently():
    """1/8 and 7/8 round half-up to 13 and 88, summing to 101."""
    entries = [entry(i, f"P{i}", "X") for i in range(8)]
    picks = [pick(0, 10, "A")] + [pick(i, 10, "B") for i in range(1, 8)]

    stats = compute_matchup_stats(matchup(10), entries, picks)

    assert (stats["a_pct"], stats["b_pct"]) == (13, 88)


def test_stats_thirds_sum_to_99():
    entries = [entry(i, f"P{i}", "X") for i in range(3)]
    picks = [pick(0, 10, "A"), pick(1, 10, "B"), pick(2, 10, "B")]
    stats = compute_matchup_stats(matchup(10), entries, picks)
    assert (stats["a_pct"], stats["b_pct"]) == (33, 67)


def test_stats_pickers_sorted_and_exact():
    entries = [entry(1, "carl", "Cole"), entry(2, "Ann", "Able"), entry(3, "Bea", "Best")]
    picks = [pick(1, 10, "A"), pick(2, 10, "A"), pick(3, 10, "B")]

    stats = compute_matchup_stats(matchup(10), entries, picks)

    assert stats["a_pickers"] == ["Ann Able", "carl Cole"]
    assert stats["b_pickers"] == ["Bea Best"]


def test_stats_only_count_this_matchup():
    """Picks for other games, unknown entries and bad sides are excluded."""
    picks = [pick(1, 10, "A"), pick(2, 11, "B"), pick(99, 10, "B"), pick(2, 10, "C")]
    stats = compute_matchup_stats(matchup(10), [ALICE, BOB], picks)
    assert (stats["a_count"], stats["b_count"]) == (1, 0)
    assert (stats["a_pct"], stats["b_pct"]) == (100, 0)


def test_stats_guess_suffix_only_for_final_round():
    entries = [entry(1, "Davis", "Engle", guess=47), entry(2, "Eve", "Ford")]
    picks = [pick(1, 20, "A"), pick(2, 20, "B")]
    final = matchup(20, round_name="Super Bowl")

    with_guess = compute_matchup_stats(final, entries, picks, include_guess=True)
    without = compute_matchup_stats(final, entries, picks)
    other_round = compute_matchup_stats(
        matchup(20, round_name="Divisional"), entries, picks, include_guess=True
    )

    assert with_guess["a_pickers"] == ["Davis Engle (47)"]
    assert with_guess["b_pickers"] == ["Eve Ford"]
    assert without["a_pickers"] == ["Davis Engle"]
    assert other_round["a_pickers"] == ["Davis Engle"]


def test_functions_are_idempotent():
    entries = [ALICE, BOB]
    matchups = [matchup(10, winner="A")]
    picks = [pick(1, 10, "A"), pick(2, 10, "B")]

    assert compute_leaderboard(entries, matchups, picks) == compute_leaderboard(
        entries, matchups, picks
    )
    assert compute_matchup_stats(matchups[0], entries, picks) == compute_matchup_stats(
        matchups[0], entries, picks
    )


# Helpers


def test_normalize_name():
    assert normalize_name("  Alice ", "ADAMS") == "alice adams"
    assert normalize_name("Alice", None) == "alice"


def test_round_sort_key_orders_playoff_rounds():
    rounds = ["Super Bowl", "Bonus", "Wild Card", "Conference", "Divisional", "Appendix"]
    assert sorted(rounds, key=round_sort_key) == [
        "Wild Card",
        "Divisional",
        "Conference",
        "Super Bowl",
        "Appendix",
        "Bonus",
    ]
