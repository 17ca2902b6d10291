from datetime import datetime
from sqlalchemy import UniqueConstraint
from app.extensions import db

class JudgeTeamConflict(db.Model):
    __tablename__ = "judge_team_conflicts"

    id = db.Column(db.Integer, primary_key=True)

    judge_profile_id = db.Column(
        db.Integer,
        db.ForeignKey("judge_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tournament_id = db.Column(
        db.Integer,
        db.ForeignKey("tournaments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    registration_id = db.Column(
        db.Integer,
        db.ForeignKey("tournament_registrations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # "school", "coach", "family", "other"
    conflict_type = db.Column(db.String(20), nullable=False, default="other")

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("judge_profile_id", "registration_id", name="uq_judge_conflict_registration"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "judge_profile_id": self.judge_profile_id,
            "tournament_id": self.tournament_id,
            "registration_id": self.registration_id,
            "conflict_type": self.conflict_type,
        }
