"""
Contest views built on the scoring engine

Loads a contest's rows once and hands plain dicts to the pure functions in
app.utils.scoring. Routes and the CLI both consume these helpers.
"""

from flask import current_app

from app.models import Entry, Matchup, Pick
from app.utils.logging_config import get_logger
from app.utils.scoring import compute_leaderboard, compute_matchup_stats

logger = get_logger(__name__)


def _tiebreak_round():
    return current_app.config.get("TIEBREAK_ROUND_NAME", "Super Bowl")


def load_rows(contest):
    """Fetch entries, matchups and picks of a contest as row dicts

    Returns:
        tuple: (entries, matchups, picks)
    """
    entries = [
        e.to_dict()
        for e in Entry.query.filter_by(contest_id=contest.id).order_by(Entry.id)
    ]
    matchups = [
        m.to_dict()
        for m in Matchup.query.filter_by(contest_id=contest.id).order_by(
            Matchup.round_name, Matchup.game_order, Matchup.id
        )
    ]
    picks = [p.to_dict() for p in Pick.query.filter_by(contest_id=contest.id)]
    return entries, matchups, picks


def get_leaderboard(contest):
    """Ordered leaderboard rows for a contest

    Guesses can still be edited while the current round is open, so they
    are only published once it locks.
    """
    entries, matchups, picks = load_rows(contest)
    rows = compute_leaderboard(entries, matchups, picks, _tiebreak_round())
    if not contest.is_locked:
        for row in rows:
            row["guess"] = None
    return rows


def get_round_stats(contest, round_name, include_guess=True):
    """Per-matchup pick statistics for a round

    Stats for the current round stay hidden until it locks; the matchups
    are still listed.
    """
    hidden = not contest.is_round_public(round_name)
    # Guess suffixes follow the same rule as the leaderboard
    include_guess = include_guess and contest.is_locked
    entries, matchups, picks = load_rows(contest)

    picks_by_matchup = {}
    for pick in picks:
        picks_by_matchup.setdefault(pick["matchup_id"], []).append(pick)

    round_matchups = sorted(
        (m for m in matchups if m["round_name"] == round_name),
        key=lambda m: (m["game_order"], m["id"]),
    )

    games = []
    for matchup in round_matchups:
        game = dict(matchup)
        if not hidden:
            game["stats"] = compute_matchup_stats(
                matchup,
                entries,
                picks_by_matchup.get(matchup["id"], []),
                include_guess=include_guess,
                tiebreak_round=_tiebreak_round(),
            )
        games.append(game)

    return {"round_name": round_name, "hidden": hidden, "matchups": games}


def get_entry_round_picks(entry, round_name):
    """An entry's picks for one round with their outcome

    correct is None while the game is undecided; a decided game without a
    pick counts as incorrect.
    """
    picks = entry.get_pick_map()
    results = []
    for matchup in Matchup.get_for_round(entry.contest_id, round_name):
        picked = picks.get(matchup.id)
        correct = None
        if matchup.winner:
            correct = picked == matchup.winner
        results.append(
            {
                "matchup": matchup.to_dict(),
                "picked": picked,
                "picked_team": matchup.team_for_side(picked),
                "correct": correct,
                "points": 1 if correct else 0,
            }
        )
    return results


def get_submitted_picks(contest, round_name):
    """Submitted picks for a round grouped by entry, for the admin panel

    Entries are sorted by name and each entry's picks by game order.
    """
    matchups = Matchup.get_for_round(contest.id, round_name)
    order_by_id = {m.id: (m.game_order, m.id) for m in matchups}
    if not order_by_id:
        return []

    picks = Pick.query.filter(
        Pick.contest_id == contest.id, Pick.matchup_id.in_(list(order_by_id))
    ).all()

    by_entry = {}
    for pick in picks:
        by_entry.setdefault(pick.entry_id, []).append(pick)

    entries = {}
    if by_entry:
        entries = {
            e.id: e for e in Entry.query.filter(Entry.id.in_(list(by_entry))).all()
        }

    rows = []
    for entry_id, entry_picks in by_entry.items():
        entry = entries.get(entry_id)
        entry_picks.sort(key=lambda p: order_by_id[p.matchup_id])
        rows.append(
            {
                "entry_id": entry_id,
                "name": entry.full_name if entry else "Unknown",
                "picks": [p.to_dict() for p in entry_picks],
            }
        )

    rows.sort(key=lambda r: (r["name"].casefold(), r["name"], r["entry_id"]))
    logger.debug(f"Loaded {len(picks)} submitted picks for round {round_name}")
    return rows
