from datetime import datetime, timezone

from app import db

PLACEHOLDER_TEAM_A = "Team A"
PLACEHOLDER_TEAM_B = "Team B"


class Matchup(db.Model):
    __tablename__ = "matchups"

    id = db.Column(db.Integer, primary_key=True)
    contest_id = db.Column(db.Integer, db.ForeignKey("contests.id"), nullable=False)

    # Game identification
    round_name = db.Column(db.String(50), nullable=False)
    game_order = db.Column(db.Integer, nullable=False, default=1)

    # Teams
    team_a = db.Column(db.String(80), nullable=False, default=PLACEHOLDER_TEAM_A)
    team_b = db.Column(db.String(80), nullable=False, default=PLACEHOLDER_TEAM_B)

    # Result - set by the admin, may be corrected at any time
    winner = db.Column(db.String(1))  # "A", "B" or NULL while undecided
    score_a = db.Column(db.Integer)
    score_b = db.Column(db.Integer)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    picks = db.relationship(
        "Pick", backref="matchup", lazy="dynamic", cascade="all, delete-orphan"
    )

    # Indexes
    __table_args__ = (
        db.Index("idx_matchup_contest_round", "contest_id", "round_name"),
        db.CheckConstraint("winner IN ('A', 'B') OR winner IS NULL", name="valid_winner"),
    )

    def __repr__(self):
        return f"<Matchup {self.title} ({self.round_name} #{self.game_order})>"

    @property
    def title(self):
        return f"{self.team_a} at {self.team_b}"

    @property
    def winning_team(self):
        """Get the winning team name (None while undecided)"""
        if self.winner == "A":
            return self.team_a
        if self.winner == "B":
            return self.team_b
        return None

    @property
    def total_score(self):
        """Get total combined score"""
        if self.score_a is None or self.score_b is None:
            return None
        return self.score_a + self.score_b

    def team_for_side(self, side):
        if side == "A":
            return self.team_a
        if side == "B":
            return self.team_b
        return None

    def update_result(self, winner, score_a=None, score_b=None):
        """Record (or clear) the game result"""
        self.winner = winner if winner in ("A", "B") else None
        self.score_a = score_a
        self.score_b = score_b

    @staticmethod
    def get_for_round(contest_id, round_name):
        """Get all matchups of a round in game order"""
        return (
            Matchup.query.filter_by(contest_id=contest_id, round_name=round_name)
            .order_by(Matchup.game_order, Matchup.id)
            .all()
        )

    @staticmethod
    def next_game_order(contest_id, round_name):
        """Game order for a game appended to the round"""
        current_max = (
            db.session.query(db.func.max(Matchup.game_order))
            .filter_by(contest_id=contest_id, round_name=round_name)
            .scalar()
        )
        return (current_max or 0) + 1

    def to_dict(self):
        """Convert matchup to dictionary for API responses"""
        return {
            "id": self.id,
            "contest_id": self.contest_id,
            "round_name": self.round_name,
            "game_order": self.game_order,
            "team_a": self.team_a,
            "team_b": self.team_b,
            "title": self.title,
            "winner": self.winner,
            "winning_team": self.winning_team,
            "score_a": self.score_a,
            "score_b": self.score_b,
        }
