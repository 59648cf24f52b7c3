#!/usr/bin/env python3
"""
NFL Playoff Picks Management CLI

This script provides command-line management functionality for the contest:
rounds, lock times, games, results and the leaderboard.
"""

import logging
import os
from datetime import datetime, timezone

import click
from flask.cli import with_appcontext
from flask_migrate import migrate, upgrade
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app import create_app, db
from app.models import AdminAction, Contest, Entry, Matchup, Pick
from app.services.contest_service import get_leaderboard
from app.utils.timezone_utils import format_lock_time, parse_lock_time

app = create_app()


def _require_contest():
    contest = Contest.get_current_contest()
    if contest is None:
        raise click.ClickException("No contest found! Create one with 'contest create'.")
    return contest


def _commit(contest, action_type, description, matchup_id=None):
    """Audit and commit a CLI change, rolling back on database errors"""
    try:
        AdminAction.log_action(
            contest.id,
            action_type,
            description,
            matchup_id=matchup_id,
            action_metadata={"source": "cli"},
        )
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logging.error(f"{action_type} failed - SQL error: {e}")
        raise click.ClickException(f"Database error: {e}")
    click.echo(f"✅ {description}")


@click.group()
def cli():
    """NFL Playoff Picks Management CLI"""
    pass


# Contest Commands
@cli.group()
def contest():
    """Contest and round commands"""
    pass


@contest.command("create")
@click.option("--name", help="Contest name (default: DEFAULT_CONTEST_NAME)")
@click.option("--round", "round_name", help="Initial current round")
@with_appcontext
def create_contest(name, round_name):
    """Create a new contest (it becomes the current one)"""
    new_contest = Contest.create_contest(name, round_name)
    db.session.flush()
    _commit(new_contest, "create_contest", f"Created contest {new_contest.name}")


@contest.command("show")
@with_appcontext
def show_contest():
    """Show the current contest state"""
    current = _require_contest()
    status = "🔒 LOCKED" if current.is_locked else "🟢 OPEN"

    click.echo(f"Contest: {current.name}")
    click.echo(f"  Current round: {current.current_round_name or 'Not set'}")
    click.echo(f"  Locks: {format_lock_time(current.round_lock_utc)} - {status}")
    click.echo(f"  Rounds: {', '.join(current.get_rounds()) or 'none'}")


@contest.command("set-round")
@click.argument("round_name")
@click.option("--lock", "lock", help="Lock time, ISO 8601 (no offset = app timezone)")
@with_appcontext
def set_round(round_name, lock):
    """Set the current round and its lock time"""
    current = _require_contest()
    try:
        lock_time = parse_lock_time(lock)
    except ValueError:
        raise click.BadParameter(f"Not a valid date and time: {lock}", param_hint="--lock")

    current.set_round(round_name, lock_time)
    _commit(
        current,
        "update_round",
        f"Set current round to {round_name}, locks {format_lock_time(lock_time)}",
    )


@contest.command("lock")
@with_appcontext
def lock_round():
    """Lock the current round now"""
    current = _require_contest()
    current.round_lock_utc = datetime.now(timezone.utc)
    _commit(current, "update_round", f"Locked {current.current_round_name}")


@contest.command("unlock")
@with_appcontext
def unlock_round():
    """Clear the lock time so picks reopen"""
    current = _require_contest()
    current.round_lock_utc = None
    _commit(current, "update_round", f"Reopened {current.current_round_name}")


# Matchup Commands
@cli.group()
def matchup():
    """Game management commands"""
    pass


@matchup.command("add")
@click.argument("round_name")
@click.argument("team_a")
@click.argument("team_b")
@click.option("--order", type=int, help="Game order (default: next in round)")
@with_appcontext
def add_matchup(round_name, team_a, team_b, order):
    """Add a game to a round"""
    current = _require_contest()
    game = Matchup(
        contest_id=current.id,
        round_name=round_name,
        game_order=order or Matchup.next_game_order(current.id, round_name),
        team_a=team_a,
        team_b=team_b,
    )
    db.session.add(game)
    db.session.flush()
    _commit(current, "add_matchup", f"Added {game.title} to {round_name}", game.id)


@matchup.command("result")
@click.argument("matchup_id", type=int)
@click.argument("winner", type=click.Choice(["A", "B", "none"], case_sensitive=False))
@click.option("--score-a", type=int, help="Final score for team A")
@click.option("--score-b", type=int, help="Final score for team B")
@with_appcontext
def set_result(matchup_id, winner, score_a, score_b):
    """Record a game's winner (A, B or none) and final scores"""
    current = _require_contest()
    game = db.session.get(Matchup, matchup_id)
    if game is None or game.contest_id != current.id:
        raise click.ClickException(f"Game {matchup_id} not found!")

    game.update_result(winner.upper(), score_a, score_b)
    _commit(
        current,
        "update_result",
        f"Result for {game.title}: winner {game.winning_team or 'undecided'}",
        game.id,
    )


@matchup.command("list")
@click.argument("round_name", required=False)
@with_appcontext
def list_matchups(round_name):
    """List games of a round (default: current round)"""
    current = _require_contest()
    round_name = round_name or current.current_round_name
    if not round_name:
        raise click.ClickException("No round given and no current round set.")

    games = Matchup.get_for_round(current.id, round_name)
    if not games:
        click.echo(f"No games found for {round_name}.")
        return

    click.echo(f"{round_name}:")
    for game in games:
        result = ""
        if game.winning_team:
            result = f" - winner {game.winning_team}"
            if game.total_score is not None:
                result += f" ({game.score_a}-{game.score_b})"
        click.echo(f"  [{game.id}] #{game.game_order} {game.title}{result}")


@cli.command()
@click.option("--limit", type=int, default=20, help="Number of rows to show")
@with_appcontext
def leaderboard(limit):
    """Print the leaderboard"""
    current = _require_contest()
    rows = get_leaderboard(current)

    if not rows:
        click.echo("No entries yet.")
        return

    for position, row in enumerate(rows[:limit], start=1):
        tiebreak = ""
        if row["tiebreak_active"] and row["difference"] is not None:
            tiebreak = f"  (off by {row['difference']})"
            if row["guess"] is not None:
                tiebreak = f"  (guess {row['guess']}, off by {row['difference']})"
        click.echo(f"{position:>3}. {row['name']:<30} {row['points']:>3}{tiebreak}")


# Database Commands
@cli.group()
def db_cmd():
    """Database commands"""
    pass


@db_cmd.command()
@with_appcontext
def init_db():
    """Initialize database tables"""
    try:
        db.create_all()
        click.echo("✅ Database tables created successfully!")
    except SQLAlchemyError as e:
        raise click.ClickException(f"Error initializing database: {e}")


@db_cmd.command()
@with_appcontext
def reset():
    """⚠️  DANGER: Drop and recreate all tables"""
    if not click.confirm("This will DELETE ALL DATA. Are you sure?"):
        click.echo("Cancelled.")
        return

    try:
        db.drop_all()
        db.create_all()
        click.echo("✅ Database reset successfully!")
    except SQLAlchemyError as e:
        raise click.ClickException(f"Error resetting database: {e}")


# Database Migration Commands
@cli.group()
def db_migrate():
    """Database migration commands"""
    pass


@db_migrate.command()
@with_appcontext
def init_migrations():
    """Initialize migrations repository"""
    if os.path.exists("migrations"):
        click.echo("❌ Migrations directory already exists!")
        return

    from flask_migrate import init as flask_migrate_init

    flask_migrate_init()
    click.echo("✅ Migrations repository initialized!")


@db_migrate.command()
@click.option("-m", "--message", required=True, help="Migration message")
@with_appcontext
def create_migration(message):
    """Create a new migration"""
    migrate(message=message)
    click.echo(f"✅ Migration created: {message}")


@db_migrate.command()
@click.option("--revision", default="head", help="Revision to upgrade to")
@with_appcontext
def apply_migrations(revision):
    """Apply migrations to database"""
    upgrade(revision=revision)
    click.echo(f"✅ Migrations applied to {revision}")


@cli.command()
@with_appcontext
def status():
    """Show application status"""
    click.echo("🏈 NFL Playoff Picks Status")
    click.echo("=" * 40)

    try:
        db.session.execute(text("SELECT 1"))
        click.echo("✅ Database: Connected")
    except SQLAlchemyError as e:
        click.echo(f"❌ Database: Error - {e}")
        return

    current = Contest.get_current_contest()
    if current is None:
        click.echo("⚠️  Contest: None created")
        return

    state = "LOCKED" if current.is_locked else "OPEN"
    click.echo(f"✅ Contest: {current.name}")
    click.echo(f"🏈 Current round: {current.current_round_name or 'Not set'} ({state})")
    click.echo(f"👥 Entries: {Entry.query.filter_by(contest_id=current.id).count()}")

    game_count = Matchup.query.filter_by(contest_id=current.id).count()
    decided = Matchup.query.filter(
        Matchup.contest_id == current.id, Matchup.winner.isnot(None)
    ).count()
    click.echo(f"🎯 Games: {decided}/{game_count} decided")
    click.echo(f"📝 Picks: {Pick.query.filter_by(contest_id=current.id).count()}")


if __name__ == "__main__":
    with app.app_context():
        cli()
