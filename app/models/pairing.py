from datetime import datetime
from typing import Optional
from app.extensions import db
from app.helpers.time import iso

# needs_judge -> assigned -> in_progress -> completed
PAIRING_STATUSES = ("needs_judge", "assigned", "in_progress", "completed")

class Pairing(db.Model):
    __tablename__ = "pairings"

    id = db.Column(db.Integer, primary_key=True)

    tournament_id = db.Column(
        db.Integer,
        db.ForeignKey("tournaments.id"),
        nullable=False,
        index=True,
    )

    round_id = db.Column(
        db.Integer,
        db.ForeignKey("rounds.id"),
        nullable=False,
        index=True,
    )

    aff_registration_id = db.Column(
        db.Integer,
        db.ForeignKey("tournament_registrations.id"),
        nullable=False,
        index=True,
    )

    neg_registration_id = db.Column(
        db.Integer,
        db.ForeignKey("tournament_registrations.id"),
        nullable=False,
        index=True,
    )

    # Chair judge (judge_profiles.id); panel members live in pairing_judge_assignments
    judge_id = db.Column(
        db.Integer,
        db.ForeignKey("judge_profiles.id"),
        nullable=True,
        index=True,
    )

    room = db.Column(db.String(255), nullable=True)
    scheduled_time = db.Column(db.DateTime, nullable=True)

    status = db.Column(db.String(20), nullable=False, default="needs_judge")

    # Ballot payload once the round is decided
    result = db.Column(db.JSON, nullable=True)

    # Hidden from competitors until the admin releases the round
    released = db.Column(db.Boolean, nullable=False, default=False)

    # Locked sides cannot be swapped
    side_locked = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    tournament = db.relationship("Tournament")
    round = db.relationship("Round", back_populates="pairings")
    aff_registration = db.relationship("Registration", foreign_keys=[aff_registration_id])
    neg_registration = db.relationship("Registration", foreign_keys=[neg_registration_id])
    judge = db.relationship("JudgeProfile")

    def side_for_account(self, account_id: Optional[int]) -> Optional[str]:
        """Return "aff" / "neg" for the owning account of either team, else None."""
        if not account_id:
            return None
        if self.aff_registration and self.aff_registration.account_id == account_id:
            return "aff"
        if self.neg_registration and self.neg_registration.account_id == account_id:
            return "neg"
        return None

    def registration_for_side(self, side: str):
        return self.aff_registration if side == "aff" else self.neg_registration

    def to_dict(self):
        return {
            "id": self.id,
            "tournament_id": self.tournament_id,
            "round_id": self.round_id,
            "round_name": self.round.name if self.round else None,
            "aff_registration_id": self.aff_registration_id,
            "neg_registration_id": self.neg_registration_id,
            "aff_team": self.aff_registration.team_name if self.aff_registration else None,
            "neg_team": self.neg_registration.team_name if self.neg_registration else None,
            "judge_id": self.judge_id,
            "judge_name": self.judge.name if self.judge else None,
            "room": self.room,
            "scheduled_time": iso(self.scheduled_time),
            "status": self.status,
            "result": self.result,
            "released": self.released,
            "side_locked": self.side_locked,
        }
