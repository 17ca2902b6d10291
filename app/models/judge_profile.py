from datetime import datetime
from app.extensions import db

class JudgeProfile(db.Model):
    __tablename__ = "judge_profiles"

    id = db.Column(db.Integer, primary_key=True)

    # Nullable: admins can add judges who have not signed in yet
    account_id = db.Column(
        db.Integer,
        db.ForeignKey("account.id"),
        nullable=True,
        unique=True,
        index=True,
    )

    name = db.Column(db.String(160), nullable=False)
    email = db.Column(db.String(255), nullable=False, index=True)
    phone = db.Column(db.String(40), nullable=True)
    bio = db.Column(db.Text, nullable=True)

    # "novice", "intermediate", "experienced", "expert"
    experience_level = db.Column(db.String(20), nullable=False, default="novice")
    experience_years = db.Column(db.Integer, nullable=False, default=0)
    alumni = db.Column(db.Boolean, nullable=False, default=False)

    # "pending", "approved", "inactive"
    status = db.Column(db.String(20), nullable=False, default="approved")

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    account = db.relationship("Account", back_populates="judge_profile")

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.account_id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "bio": self.bio,
            "experience_level": self.experience_level,
            "experience_years": self.experience_years,
            "alumni": self.alumni,
            "status": self.status,
        }
