from datetime import datetime
from app.extensions import db
from app.helpers.time import iso

SPONSOR_TIERS = ("bronze", "silver", "gold", "platinum")

# Blog posts a sponsor may publish per approved tier
TIER_BLOG_POST_LIMITS = {
    "bronze": 0,
    "silver": 1,
    "gold": 3,
    "platinum": 6,
}

class SponsorProfile(db.Model):
    __tablename__ = "sponsor_profiles"

    id = db.Column(db.Integer, primary_key=True)

    account_id = db.Column(
        db.Integer,
        db.ForeignKey("account.id"),
        nullable=False,
        unique=True,
        index=True,
    )

    name = db.Column(db.String(160), nullable=False)
    description = db.Column(db.Text, nullable=True)
    website = db.Column(db.String(255), nullable=True)
    logo_url = db.Column(db.String(500), nullable=True)

    is_approved = db.Column(db.Boolean, nullable=False, default=False)
    approved_tier = db.Column(db.String(20), nullable=True)
    approved_by = db.Column(db.Integer, db.ForeignKey("account.id"), nullable=True)
    approved_at = db.Column(db.DateTime, nullable=True)

    is_platform_partner = db.Column(db.Boolean, nullable=False, default=False)
    partnership_notes = db.Column(db.Text, nullable=True)

    blog_posts_limit = db.Column(db.Integer, nullable=False, default=0)
    blog_posts_used = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    applications = db.relationship("SponsorApplication", back_populates="sponsor_profile", lazy=True)

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.account_id,
            "name": self.name,
            "description": self.description,
            "website": self.website,
            "logo_url": self.logo_url,
            "is_approved": self.is_approved,
            "approved_tier": self.approved_tier,
            "approved_at": iso(self.approved_at),
            "is_platform_partner": self.is_platform_partner,
            "partnership_notes": self.partnership_notes,
            "blog_posts_limit": self.blog_posts_limit,
            "blog_posts_used": self.blog_posts_used,
        }
