from datetime import datetime
from app.extensions import db
from app.helpers.time import iso

class CompetitorNotification(db.Model):
    __tablename__ = "competitor_notifications"

    id = db.Column(db.Integer, primary_key=True)

    registration_id = db.Column(
        db.Integer,
        db.ForeignKey("tournament_registrations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tournament_id = db.Column(db.Integer, db.ForeignKey("tournaments.id"), nullable=True)
    round_id = db.Column(db.Integer, db.ForeignKey("rounds.id"), nullable=True)
    pairing_id = db.Column(db.Integer, db.ForeignKey("pairings.id"), nullable=True)

    # e.g. "judge_volunteer", "judge_assigned", "pairing_updated", "schedule_proposal"
    type = db.Column(db.String(40), nullable=False)
    title = db.Column(db.String(160), nullable=False)
    message = db.Column(db.Text, nullable=False)
    is_read = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "registration_id": self.registration_id,
            "tournament_id": self.tournament_id,
            "round_id": self.round_id,
            "pairing_id": self.pairing_id,
            "type": self.type,
            "title": self.title,
            "message": self.message,
            "is_read": self.is_read,
            "created_at": iso(self.created_at),
        }
