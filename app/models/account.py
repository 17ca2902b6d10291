from datetime import datetime
from app.extensions import db

class Account(db.Model):
    __tablename__ = "account"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)

    first_name = db.Column(db.String(120), nullable=True)
    last_name = db.Column(db.String(120), nullable=True)

    # "user" or "admin"
    role = db.Column(db.String(20), nullable=False, default="user")

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    registrations = db.relationship("Registration", back_populates="account")
    login_codes = db.relationship("LoginCode", back_populates="account")
    judge_profile = db.relationship("JudgeProfile", back_populates="account", uselist=False)

    @property
    def display_name(self) -> str:
        name = " ".join(p for p in (self.first_name, self.last_name) if p)
        return name or self.email

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "role": self.role,
        }
