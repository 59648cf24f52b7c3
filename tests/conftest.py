"""Pytest configuration and fixtures for API tests."""
import os
from datetime import datetime, timedelta, timezone

# Set test env BEFORE any imports that use config
os.environ["FLASK_CONFIG"] = "testing"
os.environ.setdefault("SECRET_KEY", "testing-secret-key")

import pytest

from app import create_app, db
from app.models import Contest, Matchup


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """HTTP client for testing the API."""
    return app.test_client()


@pytest.fixture
def contest(app):
    """Current contest on the Wild Card round with no lock time."""
    contest = Contest(name="Test Playoffs", current_round_name="Wild Card")
    db.session.add(contest)
    db.session.commit()
    return contest


@pytest.fixture
def add_matchup(contest):
    """Factory for games in the current contest."""

    def _add(team_a, team_b, round_name="Wild Card", game_order=None, **result):
        order = game_order or Matchup.next_game_order(contest.id, round_name)
        matchup = Matchup(
            contest_id=contest.id,
            round_name=round_name,
            game_order=order,
            team_a=team_a,
            team_b=team_b,
            **result,
        )
        db.session.add(matchup)
        db.session.commit()
        return matchup

    return _add


@pytest.fixture
def register(client, contest):
    """Register an entry and return (entry_id, headers carrying its token)."""

    def _register(first_name, last_name):
        r = client.post(
            "/api/entries", json={"first_name": first_name, "last_name": last_name}
        )
        assert r.status_code in (200, 201), r.get_json()
        data = r.get_json()
        return data["entry"]["id"], {"X-Entry-Token": data["token"]}

    return _register


@pytest.fixture
def admin_headers(client):
    """Login as admin and return Authorization headers for protected endpoints."""
    r = client.post("/admin/login", json={"password": "testpass123"})
    assert r.status_code == 200, f"Login failed: {r.get_data(as_text=True)}"
    return {"Authorization": f"Bearer {r.get_json()['token']}"}


@pytest.fixture
def set_lock(contest):
    """Move the contest lock time relative to now (None clears it)."""

    def _set(hours_from_now):
        if hours_from_now is None:
            contest.round_lock_utc = None
        else:
            contest.round_lock_utc = datetime.now(timezone.utc) + timedelta(
                hours=hours_from_now
            )
        db.session.commit()

    return _set
