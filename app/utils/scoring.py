"""
Scoring Engine for NFL Playoff Picks

Pure functions over plain row mappings (the ``to_dict()`` shape of the
models): the lock gate, per-entry scoring, the leaderboard with its
final-round tie-break, and per-game pick statistics. Nothing here touches
the database or the request; callers fetch the rows and pass them in.
"""

import math
from datetime import datetime, timezone

DEFAULT_TIEBREAK_ROUND = "Super Bowl"
ROUND_ORDER = ["Wild Card", "Divisional", "Conference", "Super Bowl"]
SIDES = ("A", "B")


def _as_number(value):
    """Coerce a stored number-ish value, returning None when it isn't one"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if isinstance(value, float) and math.isnan(value) else value

    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    return None if math.isnan(number) else number


def _id_key(value):
    # Numeric ids sort numerically, anything else after them as text
    number = _as_number(value)
    if number is not None:
        return (0, number, "")
    return (1, 0, str(value))


def _parse_timestamp(value):
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None

    # Naive timestamps are stored as UTC
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_locked(lock_timestamp, now=None):
    """
    Check whether the round lock time has been reached.

    Args:
        lock_timestamp: datetime, ISO 8601 string, or None (never locked)
        now: Optional "current" time, defaults to the UTC wall clock

    Returns:
        True when now is at or past the lock time. Missing or unparseable
        lock times are treated as unlocked.
    """
    if lock_timestamp is None or lock_timestamp == "":
        return False

    lock_time = _parse_timestamp(lock_timestamp)
    if lock_time is None:
        return False

    current = _parse_timestamp(now) if now is not None else None
    if current is None:
        current = datetime.now(timezone.utc)

    return current >= lock_time


def normalize_name(first, last):
    """Case-insensitive identity key used to prevent duplicate registration"""
    f = (first or "").strip().lower()
    l = (last or "").strip().lower()
    return f"{f} {l}".strip()


def display_name(entry):
    """Full display name for an entry row"""
    first = entry.get("first_name") or ""
    last = entry.get("last_name") or ""
    return f"{first} {last}".strip()


def round_sort_key(round_name, order=ROUND_ORDER):
    """Playoff rounds in bracket order, anything unknown after them"""
    try:
        return (order.index(round_name), "")
    except ValueError:
        return (len(order), round_name or "")


def score_entries(entries, matchups, picks):
    """
    Count correct picks per entry.

    Each pick whose side matches its matchup's recorded winner is worth one
    point. Undecided matchups, unknown matchups and unknown entries add
    nothing; every entry starts at zero.

    Returns:
        dict: {entry_id: points}
    """
    points = {entry.get("id"): 0 for entry in entries or []}
    winners = {
        matchup.get("id"): matchup.get("winner") for matchup in matchups or []
    }

    for pick in picks or []:
        entry_id = pick.get("entry_id")
        if entry_id not in points:
            continue
        winner = winners.get(pick.get("matchup_id"))
        if winner and pick.get("picked") == winner:
            points[entry_id] += 1

    return points


def find_tiebreak_matchup(matchups, round_name=DEFAULT_TIEBREAK_ROUND):
    """The reference game of the tie-break round (lowest game order wins)"""
    candidates = [m for m in matchups or [] if m.get("round_name") == round_name]
    if not candidates:
        return None
    return min(
        candidates,
        key=lambda m: (_as_number(m.get("game_order")) or 0, _id_key(m.get("id"))),
    )


def tiebreak_total(matchups, round_name=DEFAULT_TIEBREAK_ROUND):
    """Combined final score of the reference game, or None until both are set"""
    matchup = find_tiebreak_matchup(matchups, round_name)
    if matchup is None:
        return None

    score_a = _as_number(matchup.get("score_a"))
    score_b = _as_number(matchup.get("score_b"))
    if score_a is None or score_b is None:
        return None
    return score_a + score_b


def compute_leaderboard(entries, matchups, picks, tiebreak_round=DEFAULT_TIEBREAK_ROUND):
    """
    Build the ordered leaderboard.

    Ordering is points (descending), then - only once the tie-break game
    has both scores - distance between the entry's guess and the actual
    combined score (ascending, no guess sorts last), then name.

    Returns:
        list of dicts with entry_id, name, points, guess, difference and
        tiebreak_active
    """
    points = score_entries(entries, matchups, picks)
    actual_total = tiebreak_total(matchups, tiebreak_round)
    tiebreak_active = actual_total is not None

    rows = []
    for entry in entries or []:
        guess = _as_number(entry.get("tiebreak_guess"))
        difference = None
        if tiebreak_active and guess is not None:
            difference = abs(guess - actual_total)

        rows.append(
            {
                "entry_id": entry.get("id"),
                "name": display_name(entry),
                "points": points.get(entry.get("id"), 0),
                "guess": guess,
                "difference": difference,
                "tiebreak_active": tiebreak_active,
            }
        )

    def sort_key(row):
        if tiebreak_active:
            distance = math.inf if row["difference"] is None else row["difference"]
        else:
            distance = 0
        return (
            -row["points"],
            distance,
            row["name"].casefold(),
            row["name"],
            _id_key(row["entry_id"]),
        )

    rows.sort(key=sort_key)
    return rows


def _percent(count, total):
    # Half-up rounding in integer arithmetic
    if not total:
        return 0
    return (200 * count + total) // (2 * total)


def _format_guess(guess):
    if isinstance(guess, float) and guess.is_integer():
        return str(int(guess))
    return str(guess)


def compute_matchup_stats(
    matchup,
    entries,
    picks,
    include_guess=False,
    tiebreak_round=DEFAULT_TIEBREAK_ROUND,
):
    """
    Summarize how the field picked one matchup.

    Args:
        matchup: Matchup row
        entries: Entry rows used to resolve picker names
        picks: Picks for this matchup (picks for other matchups are ignored)
        include_guess: Append each picker's tie-break guess, e.g.
            "Davis Engle (47)", when the matchup is in the tie-break round
        tiebreak_round: Name of the round whose guesses may be shown

    Returns:
        dict with a_pct, b_pct, a_count, b_count, a_pickers, b_pickers.
        Percentages are rounded independently and may not sum to 100.
    """
    matchup = matchup or {}
    entry_by_id = {entry.get("id"): entry for entry in entries or []}
    matchup_id = matchup.get("id")
    show_guess = include_guess and matchup.get("round_name") == tiebreak_round

    pickers = {"A": [], "B": []}

    for pick in picks or []:
        if matchup_id is not None and pick.get("matchup_id") != matchup_id:
            continue
        side = pick.get("picked")
        if side not in SIDES:
            continue
        entry = entry_by_id.get(pick.get("entry_id"))
        if entry is None:
            continue

        name = display_name(entry)
        if show_guess:
            guess = _as_number(entry.get("tiebreak_guess"))
            if guess is not None:
                name = f"{name} ({_format_guess(guess)})"
        pickers[side].append(name)

    a_count = len(pickers["A"])
    b_count = len(pickers["B"])
    total = a_count + b_count

    return {
        "a_pct": _percent(a_count, total),
        "b_pct": _percent(b_count, total),
        "a_count": a_count,
        "b_count": b_count,
        "a_pickers": sorted(pickers["A"], key=lambda n: (n.casefold(), n)),
        "b_pickers": sorted(pickers["B"], key=lambda n: (n.casefold(), n)),
    }
