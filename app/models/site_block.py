from datetime import datetime
from app.extensions import db

BLOCK_TYPES = ("hero", "heading", "text", "image", "button", "gallery", "cards", "video", "html", "section")

class SiteBlock(db.Model):
    __tablename__ = "site_blocks"

    id = db.Column(db.Integer, primary_key=True)

    page_id = db.Column(
        db.Integer,
        db.ForeignKey("site_pages.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    parent_block_id = db.Column(db.Integer, db.ForeignKey("site_blocks.id"), nullable=True)

    type = db.Column(db.String(40), nullable=False)
    content = db.Column(db.JSON, nullable=False, default=dict)
    position = db.Column(db.Integer, nullable=False, default=0)
    visible = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    page = db.relationship("SitePage", back_populates="blocks")

    def to_dict(self):
        return {
            "id": self.id,
            "page_id": self.page_id,
            "parent_block_id": self.parent_block_id,
            "type": self.type,
            "content": self.content or {},
            "position": self.position,
            "visible": self.visible,
        }
