from datetime import datetime
from app.extensions import db
from app.helpers.time import iso

class ScheduleProposal(db.Model):
    __tablename__ = "schedule_proposals"

    id = db.Column(db.Integer, primary_key=True)

    pairing_id = db.Column(
        db.Integer,
        db.ForeignKey("pairings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    proposer_id = db.Column(db.Integer, db.ForeignKey("account.id"), nullable=False)

    proposed_time = db.Column(db.DateTime, nullable=True)
    proposed_room = db.Column(db.String(255), nullable=True)
    note = db.Column(db.Text, nullable=True)

    # "pending", "accepted", "rejected"
    status = db.Column(db.String(20), nullable=False, default="pending")

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    pairing = db.relationship("Pairing")

    def to_dict(self):
        return {
            "id": self.id,
            "pairing_id": self.pairing_id,
            "proposer_user_id": self.proposer_id,
            "proposer_side": self.pairing.side_for_account(self.proposer_id) if self.pairing else None,
            "proposed_time": iso(self.proposed_time),
            "proposed_room": self.proposed_room,
            "note": self.note,
            "status": self.status,
            "created_at": iso(self.created_at),
        }
