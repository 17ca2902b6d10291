from datetime import datetime
from sqlalchemy import UniqueConstraint
from app.extensions import db

class BallotTemplate(db.Model):
    __tablename__ = "ballot_templates"

    id = db.Column(db.Integer, primary_key=True)

    # NULL = global template available to every tournament
    tournament_id = db.Column(db.Integer, db.ForeignKey("tournaments.id"), nullable=True, index=True)

    template_key = db.Column(db.String(80), nullable=False)
    event_style = db.Column(db.String(40), nullable=False, default="LD")

    # {"fields": [{"key": "aff_speaks", "label": "...", "type": "number", "required": true, "min": 25, "max": 30}, ...]}
    schema = db.Column(db.JSON, nullable=False, default=dict)
    html = db.Column(db.Text, nullable=True)
    is_default = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("tournament_id", "template_key", name="uq_ballot_template_key"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "tournament_id": self.tournament_id,
            "template_key": self.template_key,
            "event_style": self.event_style,
            "schema": self.schema or {"fields": []},
            "html": self.html,
            "is_default": self.is_default,
        }
