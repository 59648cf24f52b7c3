"""Tests for the manage.py contest and game commands."""
import pytest

from app.models import AdminAction, Contest, Matchup
from manage import cli


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


def test_show_without_contest(runner):
    result = runner.invoke(cli, ["contest", "show"])
    assert result.exit_code == 1
    assert "No contest found" in result.output


def test_create_and_set_round(runner):
    result = runner.invoke(cli, ["contest", "create", "--name", "CLI Playoffs", "--round", "Wild Card"])
    assert result.exit_code == 0, result.output

    result = runner.invoke(
        cli, ["contest", "set-round", "Divisional", "--lock", "2026-01-17T16:30:00Z"]
    )
    assert result.exit_code == 0, result.output

    contest = Contest.get_current_contest()
    assert contest.name == "CLI Playoffs"
    assert contest.current_round_name == "Divisional"
    assert contest.is_locked
    assert AdminAction.query.filter_by(contest_id=contest.id).count() == 2


def test_set_round_rejects_bad_lock(runner, contest):
    result = runner.invoke(cli, ["contest", "set-round", "Divisional", "--lock", "soon"])
    assert result.exit_code == 2
    assert Contest.get_current_contest().current_round_name == "Wild Card"


def test_add_list_and_score_games(runner, contest):
    result = runner.invoke(cli, ["matchup", "add", "Wild Card", "Bills", "Chiefs"])
    assert result.exit_code == 0, result.output

    game = Matchup.query.filter_by(contest_id=contest.id).one()
    assert game.game_order == 1

    result = runner.invoke(
        cli, ["matchup", "result", str(game.id), "b", "--score-a", "17", "--score-b", "24"]
    )
    assert result.exit_code == 0, result.output

    result = runner.invoke(cli, ["matchup", "list"])
    assert "Bills at Chiefs - winner Chiefs (17-24)" in result.output


def test_result_for_unknown_game(runner, contest):
    result = runner.invoke(cli, ["matchup", "result", "404", "A"])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_leaderboard_output(runner, client, register, add_matchup):
    game = add_matchup("Bills", "Chiefs", winner="A")
    register("Bob", "Baker")
    assert runner.invoke(cli, ["leaderboard"]).output.strip().startswith("1. Bob Baker")
    assert game.winning_team == "Bills"


def test_leaderboard_empty(runner, contest):
    result = runner.invoke(cli, ["leaderboard"])
    assert "No entries yet." in result.output
