import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError

from app import db

logger = logging.getLogger(__name__)


class Pick(db.Model):
    __tablename__ = "picks"

    id = db.Column(db.Integer, primary_key=True)

    # Pick identification
    contest_id = db.Column(db.Integer, db.ForeignKey("contests.id"), nullable=False)
    matchup_id = db.Column(db.Integer, db.ForeignKey("matchups.id"), nullable=False)
    entry_id = db.Column(db.Integer, db.ForeignKey("entries.id"), nullable=False)

    # Pick details
    picked = db.Column(db.String(1), nullable=False)  # "A" or "B"

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Constraints and indexes
    __table_args__ = (
        db.UniqueConstraint("entry_id", "matchup_id", name="unique_entry_matchup_pick"),
        db.CheckConstraint("picked IN ('A', 'B')", name="valid_picked_side"),
        db.Index("idx_pick_contest", "contest_id"),
        db.Index("idx_pick_matchup", "matchup_id"),
    )

    def __repr__(self):
        return f"<Pick entry_id={self.entry_id} matchup_id={self.matchup_id} picked={self.picked}>"

    @staticmethod
    def upsert(entry, matchup, picked):
        """Create or overwrite the entry's pick for a matchup

        Returns:
            tuple: (pick, created)
        """
        pick = Pick.query.filter_by(entry_id=entry.id, matchup_id=matchup.id).first()
        if pick:
            pick.picked = picked
            db.session.commit()
            return pick, False

        pick = Pick(
            contest_id=matchup.contest_id,
            matchup_id=matchup.id,
            entry_id=entry.id,
            picked=picked,
        )
        db.session.add(pick)
        try:
            db.session.commit()
            return pick, True
        except IntegrityError:
            # Another request inserted the same (entry, matchup) first
            db.session.rollback()
            logger.info(
                f"Concurrent pick insert for entry {entry.id} matchup {matchup.id}, updating instead"
            )
            pick = Pick.query.filter_by(entry_id=entry.id, matchup_id=matchup.id).one()
            pick.picked = picked
            db.session.commit()
            return pick, False

    def to_dict(self):
        """Convert pick to dictionary for API responses"""
        return {
            "id": self.id,
            "contest_id": self.contest_id,
            "matchup_id": self.matchup_id,
            "entry_id": self.entry_id,
            "picked": self.picked,
        }
