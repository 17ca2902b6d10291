from datetime import datetime
from app.extensions import db
from app.helpers.time import iso

class SponsorInvitation(db.Model):
    __tablename__ = "pending_sponsor_invitations"

    id = db.Column(db.Integer, primary_key=True)

    email = db.Column(db.String(255), nullable=False, index=True)
    organization_name = db.Column(db.String(160), nullable=False)
    suggested_tier = db.Column(db.String(20), nullable=False, default="bronze")
    personal_message = db.Column(db.Text, nullable=True)

    tournament_id = db.Column(db.Integer, db.ForeignKey("tournaments.id"), nullable=True)
    invited_by = db.Column(db.Integer, db.ForeignKey("account.id"), nullable=True)

    # Only the sha256 of the emailed token is stored
    token_hash = db.Column(db.String(64), nullable=False, unique=True)
    expires_at = db.Column(db.DateTime, nullable=True)

    claimed_at = db.Column(db.DateTime, nullable=True)
    claimed_by = db.Column(db.Integer, db.ForeignKey("account.id"), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    tournament = db.relationship("Tournament")

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "organization_name": self.organization_name,
            "suggested_tier": self.suggested_tier,
            "personal_message": self.personal_message,
            "tournament_id": self.tournament_id,
            "expires_at": iso(self.expires_at),
            "claimed_at": iso(self.claimed_at),
        }
