from datetime import datetime
from app.extensions import db
from app.helpers.time import iso

class PairingEvidence(db.Model):
    __tablename__ = "pairing_evidence"

    id = db.Column(db.Integer, primary_key=True)

    pairing_id = db.Column(
        db.Integer,
        db.ForeignKey("pairings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    uploader_id = db.Column(db.Integer, db.ForeignKey("account.id"), nullable=False)

    file_name = db.Column(db.String(255), nullable=False)
    # Stored name on disk, relative to UPLOAD_FOLDER/<pairing_id>/
    storage_name = db.Column(db.String(255), nullable=False)
    file_url = db.Column(db.String(500), nullable=False)
    file_size = db.Column(db.Integer, nullable=True)
    file_type = db.Column(db.String(120), nullable=True)
    description = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "pairing_id": self.pairing_id,
            "uploader_id": self.uploader_id,
            "file_name": self.file_name,
            "file_url": self.file_url,
            "file_size": self.file_size,
            "file_type": self.file_type,
            "description": self.description,
            "created_at": iso(self.created_at),
        }
