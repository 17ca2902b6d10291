from datetime import datetime
from app.extensions import db
from app.helpers.time import iso

class PairingJudgeAssignment(db.Model):
    __tablename__ = "pairing_judge_assignments"

    id = db.Column(db.Integer, primary_key=True)

    pairing_id = db.Column(
        db.Integer,
        db.ForeignKey("pairings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    judge_profile_id = db.Column(
        db.Integer,
        db.ForeignKey("judge_profiles.id"),
        nullable=False,
        index=True,
    )

    # "chair" or "panelist"
    role = db.Column(db.String(20), nullable=False, default="chair")
    # "volunteered", "assigned", "removed"
    status = db.Column(db.String(20), nullable=False, default="assigned")
    notes = db.Column(db.Text, nullable=True)

    assigned_by = db.Column(db.Integer, db.ForeignKey("account.id"), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    pairing = db.relationship("Pairing")
    judge_profile = db.relationship("JudgeProfile")

    def to_dict(self):
        return {
            "id": self.id,
            "pairing_id": self.pairing_id,
            "judge_profile_id": self.judge_profile_id,
            "role": self.role,
            "status": self.status,
            "notes": self.notes,
            "assigned_by": self.assigned_by,
            "created_at": iso(self.created_at),
        }
