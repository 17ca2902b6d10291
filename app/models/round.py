from datetime import datetime
from sqlalchemy import UniqueConstraint
from app.extensions import db
from app.helpers.time import iso

class Round(db.Model):
    __tablename__ = "rounds"

    id = db.Column(db.Integer, primary_key=True)

    tournament_id = db.Column(
        db.Integer,
        db.ForeignKey("tournaments.id"),
        nullable=False,
        index=True,
    )

    name = db.Column(db.String(120), nullable=False)
    round_number = db.Column(db.Integer, nullable=False)

    # "upcoming", "in_progress", "completed"
    status = db.Column(db.String(20), nullable=False, default="upcoming")
    scheduled_date = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    tournament = db.relationship("Tournament", back_populates="rounds")
    pairings = db.relationship("Pairing", back_populates="round", lazy=True)

    __table_args__ = (
        UniqueConstraint("tournament_id", "round_number", name="uq_round_tournament_number"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "tournament_id": self.tournament_id,
            "name": self.name,
            "round_number": self.round_number,
            "status": self.status,
            "scheduled_date": iso(self.scheduled_date),
        }
