from datetime import datetime
from app.extensions import db
from app.helpers.time import iso

class SponsorApplication(db.Model):
    __tablename__ = "sponsor_applications"

    id = db.Column(db.Integer, primary_key=True)

    sponsor_profile_id = db.Column(
        db.Integer,
        db.ForeignKey("sponsor_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tournament_id = db.Column(
        db.Integer,
        db.ForeignKey("tournaments.id"),
        nullable=False,
        index=True,
    )

    tier = db.Column(db.String(20), nullable=False)
    offerings = db.Column(db.Text, nullable=True)
    requests = db.Column(db.Text, nullable=True)

    # "pending", "approved", "rejected"
    status = db.Column(db.String(20), nullable=False, default="pending")
    approved_by = db.Column(db.Integer, db.ForeignKey("account.id"), nullable=True)
    approved_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    sponsor_profile = db.relationship("SponsorProfile", back_populates="applications")
    tournament = db.relationship("Tournament")

    def to_dict(self):
        return {
            "id": self.id,
            "sponsor_profile_id": self.sponsor_profile_id,
            "sponsor_name": self.sponsor_profile.name if self.sponsor_profile else None,
            "tournament_id": self.tournament_id,
            "tournament_name": self.tournament.name if self.tournament else None,
            "tier": self.tier,
            "offerings": self.offerings,
            "requests": self.requests,
            "status": self.status,
            "approved_at": iso(self.approved_at),
            "created_at": iso(self.created_at),
        }
