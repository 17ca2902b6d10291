from datetime import datetime
from app.extensions import db
from app.helpers.time import iso

class PairingChatMessage(db.Model):
    __tablename__ = "pairing_chat_messages"

    id = db.Column(db.Integer, primary_key=True)

    pairing_id = db.Column(
        db.Integer,
        db.ForeignKey("pairings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sender_id = db.Column(db.Integer, db.ForeignKey("account.id"), nullable=True)

    message = db.Column(db.Text, nullable=False)
    # "text" or "system"
    message_type = db.Column(db.String(20), nullable=False, default="text")
    # "metadata" is reserved on declarative models
    extra = db.Column("metadata", db.JSON, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)

    sender = db.relationship("Account")

    def to_dict(self, viewer_account_id=None):
        return {
            "id": self.id,
            "pairing_id": self.pairing_id,
            "sender_id": self.sender_id,
            "sender_name": self.sender.display_name if self.sender else None,
            "message": self.message,
            "message_type": self.message_type,
            "metadata": self.extra,
            "is_own_message": viewer_account_id is not None and self.sender_id == viewer_account_id,
            "created_at": iso(self.created_at),
        }
