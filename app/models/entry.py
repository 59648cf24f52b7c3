from datetime import datetime, timezone

from app import db


class Entry(db.Model):
    __tablename__ = "entries"

    id = db.Column(db.Integer, primary_key=True)
    contest_id = db.Column(db.Integer, db.ForeignKey("contests.id"), nullable=False)

    # Identity
    first_name = db.Column(db.String(50), nullable=False)
    last_name = db.Column(db.String(50), nullable=False)
    name_key = db.Column(db.String(101), nullable=False)  # lowercased "first last"

    # Final round total points prediction
    tiebreak_guess = db.Column(db.Integer)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    picks = db.relationship(
        "Pick", backref="entry", lazy="dynamic", cascade="all, delete-orphan"
    )

    __table_args__ = (
        db.UniqueConstraint("contest_id", "name_key", name="unique_contest_name_key"),
        db.Index("idx_entry_contest", "contest_id"),
    )

    def __repr__(self):
        return f"<Entry {self.full_name}>"

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @staticmethod
    def find_or_create(contest, first_name, last_name):
        """Get the entry registered under this name, creating it if needed

        Returns:
            tuple: (entry, created)
        """
        from app.utils.scoring import normalize_name

        first_name = (first_name or "").strip()
        last_name = (last_name or "").strip()
        name_key = normalize_name(first_name, last_name)

        entry = Entry.query.filter_by(contest_id=contest.id, name_key=name_key).first()
        if entry:
            return entry, False

        entry = Entry(
            contest_id=contest.id,
            first_name=first_name,
            last_name=last_name,
            name_key=name_key,
        )
        db.session.add(entry)
        return entry, True

    def get_pick_map(self):
        """Get this entry's picks as {matchup_id: side}"""
        return {pick.matchup_id: pick.picked for pick in self.picks}

    def to_dict(self):
        """Convert entry to dictionary for API responses"""
        return {
            "id": self.id,
            "contest_id": self.contest_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "name_key": self.name_key,
            "tiebreak_guess": self.tiebreak_guess,
        }
