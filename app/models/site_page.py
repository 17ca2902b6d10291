from datetime import datetime
from app.extensions import db
from app.helpers.time import iso

class SitePage(db.Model):
    __tablename__ = "site_pages"

    id = db.Column(db.Integer, primary_key=True)

    # Path-style slug, e.g. "/about"
    slug = db.Column(db.String(160), nullable=False, unique=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)

    # {"meta_title": ..., "meta_description": ..., "focus_keyword": ...}
    seo = db.Column(db.JSON, nullable=False, default=dict)

    # "draft" or "published"
    status = db.Column(db.String(20), nullable=False, default="draft")
    published_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    blocks = db.relationship(
        "SiteBlock",
        back_populates="page",
        lazy=True,
        order_by="SiteBlock.position",
        cascade="all, delete-orphan",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "slug": self.slug,
            "title": self.title,
            "description": self.description,
            "seo": self.seo or {},
            "status": self.status,
            "published_at": iso(self.published_at),
            "updated_at": iso(self.updated_at),
        }
