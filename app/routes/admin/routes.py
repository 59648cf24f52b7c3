import logging

from flask import abort, current_app, jsonify, request

from app import db, limiter
from app.forms.admin import (
    AdminLoginForm,
    ContestForm,
    MatchupForm,
    ResultForm,
    RoundSettingsForm,
)
from app.models import AdminAction, Contest, Matchup
from app.models.matchup import PLACEHOLDER_TEAM_A, PLACEHOLDER_TEAM_B
from app.routes.admin import bp
from app.services.contest_service import get_submitted_picks
from app.utils.auth import admin_required, check_admin_password, create_admin_token
from app.utils.cache_utils import invalidate_contest_cache
from app.utils.timezone_utils import isoformat_utc

logger = logging.getLogger(__name__)


def _get_current_contest():
    contest = Contest.get_current_contest()
    if contest is None:
        abort(404)
    return contest


def _get_contest_matchup(matchup_id):
    matchup = db.get_or_404(Matchup, matchup_id)
    if matchup.contest_id != _get_current_contest().id:
        abort(404)
    return matchup


def _commit_admin_change(contest, action_type, description, matchup_id=None, metadata=None):
    """Write the audit record, commit, and drop cached views"""
    AdminAction.log_action(
        contest.id,
        action_type,
        description,
        matchup_id=matchup_id,
        action_metadata=metadata,
    )
    db.session.commit()
    invalidate_contest_cache(action_type)
    logger.info(f"Admin: {description}")


@bp.route("/login", methods=["POST"])
@limiter.limit("10 per minute")
def login():
    """Exchange the admin password for an admin token"""
    if not current_app.config.get("ADMIN_PASSWORD"):
        return jsonify({"error": "Admin password is not configured"}), 503

    form = AdminLoginForm.from_request()
    if not form.validate():
        return jsonify(form.error_payload()), 400

    if not check_admin_password(form.password.data):
        logger.warning(f"Failed admin login from {request.remote_addr}")
        return jsonify({"error": "Wrong admin password"}), 401

    return jsonify(
        {
            "token": create_admin_token(),
            "expires_in": current_app.config.get("ADMIN_TOKEN_MAX_AGE"),
        }
    )


@bp.route("/session")
@admin_required
def check_session():
    """Check that the admin token is still valid"""
    return jsonify({"authenticated": True})


@bp.route("/contest", methods=["POST"])
@admin_required
def create_contest():
    """Start a new contest; the newest contest is the current one"""
    form = ContestForm.from_request()
    if not form.validate():
        return jsonify(form.error_payload()), 400

    contest = Contest.create_contest(
        (form.name.data or "").strip() or None,
        (form.current_round_name.data or "").strip() or None,
    )
    db.session.flush()

    _commit_admin_change(contest, "create_contest", f"Created contest {contest.name}")
    return jsonify(contest.to_dict()), 201


@bp.route("/contest", methods=["PUT"])
@admin_required
def update_round_settings():
    """Set the current round and its lock time"""
    contest = _get_current_contest()

    form = RoundSettingsForm.from_request()
    if not form.validate():
        return jsonify(form.error_payload()), 400

    previous = {
        "current_round_name": contest.current_round_name,
        "round_lock_utc": isoformat_utc(contest.round_lock_utc),
    }
    contest.set_round(form.current_round_name.data.strip(), form.lock_time)

    _commit_admin_change(
        contest,
        "update_round",
        f"Set current round to {contest.current_round_name}, "
        f"lock {isoformat_utc(contest.round_lock_utc) or 'cleared'}",
        metadata={"previous": previous},
    )
    return jsonify(contest.to_dict())


@bp.route("/rounds/<round_name>/matchups", methods=["POST"])
@admin_required
def add_matchup(round_name):
    """Add a game at the end of a round"""
    contest = _get_current_contest()

    form = MatchupForm.from_request()
    if not form.validate():
        return jsonify(form.error_payload()), 400

    matchup = Matchup(
        contest_id=contest.id,
        round_name=round_name,
        game_order=form.game_order.data
        or Matchup.next_game_order(contest.id, round_name),
        team_a=(form.team_a.data or "").strip() or PLACEHOLDER_TEAM_A,
        team_b=(form.team_b.data or "").strip() or PLACEHOLDER_TEAM_B,
    )
    db.session.add(matchup)
    db.session.flush()

    _commit_admin_change(
        contest,
        "add_matchup",
        f"Added {matchup.title} to {round_name}",
        matchup_id=matchup.id,
    )
    return jsonify(matchup.to_dict()), 201


@bp.route("/matchups/<int:matchup_id>", methods=["PUT"])
@admin_required
def update_matchup(matchup_id):
    """Edit a game's order and teams"""
    matchup = _get_contest_matchup(matchup_id)

    form = MatchupForm.from_request()
    if not form.validate():
        return jsonify(form.error_payload()), 400

    matchup.game_order = form.game_order.data or 1
    matchup.team_a = (form.team_a.data or "").strip() or PLACEHOLDER_TEAM_A
    matchup.team_b = (form.team_b.data or "").strip() or PLACEHOLDER_TEAM_B

    _commit_admin_change(
        matchup.contest,
        "update_matchup",
        f"Updated game {matchup.id}: {matchup.title} (#{matchup.game_order})",
        matchup_id=matchup.id,
    )
    return jsonify(matchup.to_dict())


@bp.route("/matchups/<int:matchup_id>/result", methods=["PUT"])
@admin_required
def update_result(matchup_id):
    """Record or correct a game's winner and final scores"""
    matchup = _get_contest_matchup(matchup_id)

    form = ResultForm.from_request()
    if not form.validate():
        return jsonify(form.error_payload()), 400

    previous = {
        "winner": matchup.winner,
        "score_a": matchup.score_a,
        "score_b": matchup.score_b,
    }
    matchup.update_result(form.winner.data, form.score_a.data, form.score_b.data)

    _commit_admin_change(
        matchup.contest,
        "update_result",
        f"Result for {matchup.title}: winner {matchup.winning_team or 'undecided'} "
        f"({matchup.score_a}-{matchup.score_b})",
        matchup_id=matchup.id,
        metadata={"previous": previous},
    )
    return jsonify(matchup.to_dict())


@bp.route("/matchups/<int:matchup_id>", methods=["DELETE"])
@admin_required
def delete_matchup(matchup_id):
    """Delete a game together with its picks"""
    matchup = _get_contest_matchup(matchup_id)
    contest = matchup.contest
    pick_count = matchup.picks.count()
    description = f"Deleted {matchup.title} from {matchup.round_name} ({pick_count} picks)"

    db.session.delete(matchup)
    _commit_admin_change(
        contest,
        "delete_matchup",
        description,
        matchup_id=matchup_id,
        metadata={"pick_count": pick_count},
    )
    return jsonify({"deleted": matchup_id})


@bp.route("/rounds/<round_name>/picks")
@admin_required
def submitted_picks(round_name):
    """Get every submitted pick of a round grouped by entry"""
    contest = _get_current_contest()
    return jsonify(
        {"round_name": round_name, "entries": get_submitted_picks(contest, round_name)}
    )


@bp.route("/actions")
@admin_required
def actions():
    """Get the recent admin audit log"""
    contest = _get_current_contest()
    limit = min(request.args.get("limit", 50, type=int), 200)
    return jsonify([a.to_dict() for a in AdminAction.get_recent(contest.id, limit)])
