from datetime import datetime, timezone

from app import db


class AdminAction(db.Model):
    __tablename__ = "admin_actions"

    id = db.Column(db.Integer, primary_key=True)
    contest_id = db.Column(db.Integer, db.ForeignKey("contests.id"), nullable=False)

    # Action type and details
    action_type = db.Column(
        db.String(50), nullable=False
    )  # 'update_round', 'add_matchup', 'update_result', etc.
    action_description = db.Column(db.String(500), nullable=False)

    # Deleted matchups keep their id here without a foreign key
    matchup_id = db.Column(db.Integer, nullable=True)

    # Additional context data (JSON)
    action_metadata = db.Column(db.JSON, nullable=True)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    contest = db.relationship(
        "Contest", backref=db.backref("admin_actions", cascade="all, delete-orphan")
    )

    # Indexes
    __table_args__ = (
        db.Index("idx_admin_action_contest", "contest_id"),
        db.Index("idx_admin_action_type", "action_type"),
        db.Index("idx_admin_action_created", "created_at"),
    )

    def __repr__(self):
        return f"<AdminAction {self.action_type} in contest {self.contest_id}>"

    @staticmethod
    def log_action(contest_id, action_type, description, matchup_id=None, action_metadata=None):
        """Log an admin action"""
        action = AdminAction(
            contest_id=contest_id,
            action_type=action_type,
            action_description=description,
            matchup_id=matchup_id,
            action_metadata=action_metadata or {},
        )

        db.session.add(action)
        return action

    @staticmethod
    def get_recent(contest_id, limit=50):
        """Get recent admin actions for a contest"""
        return (
            AdminAction.query.filter_by(contest_id=contest_id)
            .order_by(AdminAction.created_at.desc(), AdminAction.id.desc())
            .limit(limit)
            .all()
        )

    def to_dict(self):
        """Convert admin action to dictionary for API responses"""
        return {
            "id": self.id,
            "action_type": self.action_type,
            "description": self.action_description,
            "matchup_id": self.matchup_id,
            "metadata": self.action_metadata,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
