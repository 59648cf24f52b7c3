import logging

from flask import abort, g, jsonify, request
from sqlalchemy.exc import IntegrityError

from app import db, limiter
from app.forms.picks import MakePickForm, RegistrationForm, TiebreakGuessForm
from app.models import Contest, Entry, Matchup, Pick
from app.routes.api import bp
from app.services.contest_service import (
    get_entry_round_picks,
    get_leaderboard,
    get_round_stats,
)
from app.utils.auth import create_entry_token, entry_token_required
from app.utils.cache_utils import cached_route, invalidate_contest_cache

logger = logging.getLogger(__name__)


def _get_current_contest():
    contest = Contest.get_current_contest()
    if contest is None:
        abort(404)
    return contest


def _get_owned_entry(entry_id):
    """Entry addressed by the URL, which must match the caller's entry token"""
    entry = db.get_or_404(Entry, entry_id)
    if g.entry_token.get("entry_id") != entry.id:
        logger.warning(
            f"Entry token for {g.entry_token.get('entry_id')} used on entry {entry.id}"
        )
        abort(403)
    return entry


@bp.route("/health")
def health():
    return jsonify({"status": "ok"})


@bp.route("/contest")
def contest():
    """Get the current contest, its round state and round list"""
    return jsonify(_get_current_contest().to_dict())


@bp.route("/rounds/<round_name>/matchups")
def round_matchups(round_name):
    """Get the games of a round in order"""
    contest = _get_current_contest()
    matchups = Matchup.get_for_round(contest.id, round_name)
    return jsonify([matchup.to_dict() for matchup in matchups])


@bp.route("/entries", methods=["POST"])
@limiter.limit("20 per minute")
def register():
    """Register by name, or resume an existing entry with the same name"""
    form = RegistrationForm.from_request()
    if not form.validate():
        return jsonify(form.error_payload("Enter first and last name.")), 400

    contest = _get_current_contest()

    try:
        entry, created = Entry.find_or_create(
            contest, form.first_name.data, form.last_name.data
        )
        db.session.commit()
    except IntegrityError:
        # Same name registered concurrently
        db.session.rollback()
        entry, created = Entry.find_or_create(
            contest, form.first_name.data, form.last_name.data
        )

    if created:
        logger.info(f"Registered entry {entry.id} ({entry.full_name})")
        invalidate_contest_cache("entry registered")

    payload = {
        "entry": entry.to_dict(),
        "picks": {str(k): v for k, v in entry.get_pick_map().items()},
        "token": create_entry_token(entry),
        "created": created,
    }
    return jsonify(payload), 201 if created else 200


@bp.route("/entries/<int:entry_id>/picks")
@entry_token_required
def entry_picks(entry_id):
    """Get an entry's picks for a round (default: current round)"""
    entry = _get_owned_entry(entry_id)
    round_name = request.args.get("round") or entry.contest.current_round_name

    return jsonify(
        {
            "entry": entry.to_dict(),
            "round_name": round_name,
            "picks": get_entry_round_picks(entry, round_name) if round_name else [],
        }
    )


@bp.route("/entries/<int:entry_id>/guess", methods=["PUT"])
@entry_token_required
def update_guess(entry_id):
    """Set the final round total points guess"""
    entry = _get_owned_entry(entry_id)

    if entry.contest.is_locked:
        return jsonify({"error": "Locked - picks can't be changed."}), 423

    form = TiebreakGuessForm.from_request()
    if not form.validate():
        return jsonify(form.error_payload()), 400

    entry.tiebreak_guess = form.tiebreak_guess.data
    db.session.commit()
    invalidate_contest_cache("tiebreak guess updated")

    return jsonify({"entry": entry.to_dict()})


@bp.route("/picks", methods=["POST"])
@entry_token_required
def make_pick():
    """Create or change the caller's pick for a game in the current round"""
    form = MakePickForm.from_request()
    if not form.validate():
        return jsonify(form.error_payload()), 400

    entry = db.session.get(Entry, g.entry_token["entry_id"])
    if entry is None:
        return jsonify({"error": "Entry not found"}), 401

    body = request.get_json(silent=True) or {}
    if "entry_id" in body and str(body["entry_id"]) != str(entry.id):
        logger.warning(f"Entry {entry.id} tried to pick for entry {body['entry_id']}")
        return jsonify({"error": "Picks can only be made for your own entry"}), 403

    matchup = db.session.get(Matchup, form.matchup_id.data)
    if matchup is None or matchup.contest_id != entry.contest_id:
        abort(404)

    contest = entry.contest
    if matchup.round_name != contest.current_round_name:
        return jsonify({"error": "Game is not in the current round"}), 409

    if contest.is_locked:
        logger.info(f"Rejected pick from entry {entry.id}: round locked")
        return jsonify({"error": "Locked - picks can't be changed."}), 423

    pick, created = Pick.upsert(entry, matchup, form.picked.data)
    invalidate_contest_cache("pick saved")

    return jsonify({"pick": pick.to_dict(), "created": created}), 201 if created else 200


@bp.route("/leaderboard")
@cached_route(key_prefix="leaderboard")
def leaderboard():
    """Get the ordered leaderboard for the current contest"""
    contest = _get_current_contest()
    return {"contest_id": contest.id, "rows": get_leaderboard(contest)}


# Hidden payloads expire with the lock time, not with a write
@bp.route("/rounds/<round_name>/stats")
@cached_route(key_prefix="round_stats", response_filter=lambda data: not data["hidden"])
def round_stats(round_name):
    """Get pick percentages and pickers for every game of a round"""
    contest = _get_current_contest()
    include_guess = request.args.get("guesses", "1") not in ("0", "false")
    return get_round_stats(contest, round_name, include_guess=include_guess)
