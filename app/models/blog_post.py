from datetime import datetime
from app.extensions import db
from app.helpers.time import iso

class BlogPost(db.Model):
    __tablename__ = "blog_posts"

    id = db.Column(db.Integer, primary_key=True)

    author_id = db.Column(db.Integer, db.ForeignKey("account.id"), nullable=False)
    # Set when a sponsor writes the post (counts against their tier allowance)
    sponsor_id = db.Column(db.Integer, db.ForeignKey("sponsor_profiles.id"), nullable=True, index=True)

    title = db.Column(db.String(200), nullable=False)
    slug = db.Column(db.String(200), nullable=False, unique=True)
    excerpt = db.Column(db.Text, nullable=True)
    content = db.Column(db.Text, nullable=True)
    cover_image_url = db.Column(db.String(500), nullable=True)
    tags = db.Column(db.JSON, nullable=False, default=list)

    # "draft" or "published"
    status = db.Column(db.String(20), nullable=False, default="draft")
    featured = db.Column(db.Boolean, nullable=False, default=False)
    published_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "author_id": self.author_id,
            "sponsor_id": self.sponsor_id,
            "title": self.title,
            "slug": self.slug,
            "excerpt": self.excerpt,
            "content": self.content,
            "cover_image_url": self.cover_image_url,
            "tags": self.tags or [],
            "status": self.status,
            "featured": self.featured,
            "published_at": iso(self.published_at),
        }
