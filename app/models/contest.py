from datetime import datetime, timezone

from flask import current_app

from app import db


class Contest(db.Model):
    __tablename__ = "contests"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)

    # Round state - the lock time governs the whole current round
    current_round_name = db.Column(db.String(50))
    round_lock_utc = db.Column(db.DateTime(timezone=True))

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    entries = db.relationship(
        "Entry", backref="contest", lazy="dynamic", cascade="all, delete-orphan"
    )
    matchups = db.relationship(
        "Matchup", backref="contest", lazy="dynamic", cascade="all, delete-orphan"
    )

    __table_args__ = (db.Index("idx_contest_created", "created_at"),)

    def __repr__(self):
        return f"<Contest {self.name} round={self.current_round_name}>"

    @staticmethod
    def get_current_contest():
        """Get the most recently created contest"""
        return Contest.query.order_by(Contest.created_at.desc(), Contest.id.desc()).first()

    @staticmethod
    def create_contest(name=None, current_round_name=None):
        """Create a new contest"""
        contest = Contest(
            name=name or current_app.config.get("DEFAULT_CONTEST_NAME"),
            current_round_name=current_round_name,
        )
        db.session.add(contest)
        return contest

    @property
    def is_locked(self):
        """Whether the current round's picks are closed"""
        from app.utils.scoring import is_locked

        return is_locked(self.round_lock_utc)

    def is_round_public(self, round_name):
        """Pick statistics stay hidden for the open current round"""
        return round_name != self.current_round_name or self.is_locked

    def get_rounds(self):
        """Distinct round names in bracket order, current round included"""
        from app.utils.scoring import round_sort_key

        from .matchup import Matchup

        names = {
            row[0]
            for row in db.session.query(Matchup.round_name)
            .filter(Matchup.contest_id == self.id)
            .distinct()
        }
        if self.current_round_name:
            names.add(self.current_round_name)

        order = current_app.config.get("ROUND_ORDER")
        return sorted(names, key=lambda name: round_sort_key(name, order))

    def set_round(self, round_name, lock_time):
        """Move the current round pointer and its lock time"""
        self.current_round_name = round_name or None
        self.round_lock_utc = lock_time

    def to_dict(self):
        """Convert contest to dictionary for API responses"""
        from app.utils.timezone_utils import format_lock_time, isoformat_utc

        return {
            "id": self.id,
            "name": self.name,
            "current_round_name": self.current_round_name,
            "round_lock_utc": isoformat_utc(self.round_lock_utc),
            "lock_label": format_lock_time(self.round_lock_utc),
            "locked": self.is_locked,
            "rounds": self.get_rounds(),
        }
