from datetime import datetime
from app.extensions import db
from app.helpers.time import iso

class PairingEditHistory(db.Model):
    __tablename__ = "pairing_edit_history"

    id = db.Column(db.Integer, primary_key=True)

    pairing_id = db.Column(
        db.Integer,
        db.ForeignKey("pairings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    changed_by = db.Column(db.Integer, db.ForeignKey("account.id"), nullable=True)

    # "swap_sides", "team_replacement", "room", "scheduled_time", "status", "judge"
    field_changed = db.Column(db.String(40), nullable=False)
    old_value = db.Column(db.JSON, nullable=True)
    new_value = db.Column(db.JSON, nullable=True)
    change_reason = db.Column(db.Text, nullable=True)

    changed_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "pairing_id": self.pairing_id,
            "changed_by": self.changed_by,
            "field_changed": self.field_changed,
            "old_value": self.old_value,
            "new_value": self.new_value,
            "change_reason": self.change_reason,
            "changed_at": iso(self.changed_at),
        }
