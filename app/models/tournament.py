from datetime import datetime
from app.extensions import db
from app.helpers.time import iso

TOURNAMENT_STATUSES = ("upcoming", "in_progress", "completed")

class Tournament(db.Model):
    __tablename__ = "tournaments"

    id = db.Column(db.Integer, primary_key=True)

    # Public-facing name, e.g. "Ziggy Spring Open"
    name = db.Column(db.String(160), nullable=False)
    slug = db.Column(db.String(160), nullable=False, unique=True)

    description = db.Column(db.Text, nullable=True)
    location = db.Column(db.String(160), nullable=False, default="Online")

    # Debate format, e.g. "LD", "PF", "Policy"
    format = db.Column(db.String(40), nullable=False, default="LD")

    start_date = db.Column(db.DateTime, nullable=True)
    end_date = db.Column(db.DateTime, nullable=True)

    status = db.Column(db.String(20), nullable=False, default="upcoming")
    registration_open = db.Column(db.Boolean, nullable=False, default=True)
    max_participants = db.Column(db.Integer, nullable=False, default=64)

    created_by = db.Column(db.Integer, db.ForeignKey("account.id"), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    rounds = db.relationship(
        "Round",
        back_populates="tournament",
        lazy=True,
        order_by="Round.round_number",
    )

    registrations = db.relationship(
        "Registration",
        back_populates="tournament",
        lazy=True,
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "location": self.location,
            "format": self.format,
            "start_date": iso(self.start_date),
            "end_date": iso(self.end_date),
            "status": self.status,
            "registration_open": self.registration_open,
            "max_participants": self.max_participants,
        }
