from datetime import datetime
from app.extensions import db

class Registration(db.Model):
    __tablename__ = "tournament_registrations"

    id = db.Column(db.Integer, primary_key=True)

    tournament_id = db.Column(
        db.Integer,
        db.ForeignKey("tournaments.id"),
        nullable=False,
        index=True,
    )

    # The account that owns this entry (the team's "user")
    account_id = db.Column(
        db.Integer,
        db.ForeignKey("account.id"),
        nullable=False,
        index=True,
    )

    participant_name = db.Column(db.String(160), nullable=False)
    participant_email = db.Column(db.String(255), nullable=False)
    partner_name = db.Column(db.String(160), nullable=True)
    school_organization = db.Column(db.String(160), nullable=True)

    seed = db.Column(db.Integer, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    # "pending", "paid", "waived"
    payment_status = db.Column(db.String(20), nullable=False, default="pending")

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    tournament = db.relationship("Tournament", back_populates="registrations")
    account = db.relationship("Account", back_populates="registrations")

    @property
    def team_name(self) -> str:
        if self.partner_name:
            return f"{self.participant_name} / {self.partner_name}"
        return self.participant_name

    def to_dict(self):
        return {
            "id": self.id,
            "tournament_id": self.tournament_id,
            "user_id": self.account_id,
            "participant_name": self.participant_name,
            "participant_email": self.participant_email,
            "partner_name": self.partner_name,
            "school_organization": self.school_organization,
            "team_name": self.team_name,
            "seed": self.seed,
            "is_active": self.is_active,
            "payment_status": self.payment_status,
        }
