import logging
from datetime import datetime

from app.extensions import db
from app.errors import ConflictError, NotFound, PermissionDenied, ValidationError
from app.models import BlogPost, SiteBlock, SitePage
from app.models.site_block import BLOCK_TYPES
from app.helpers.session import Viewer, require_account, require_account_or_admin, require_admin
from app.helpers.sponsors import consume_blog_post, sponsor_profile_for
from app.helpers.url import slugify

logger = logging.getLogger(__name__)


def normalize_page_slug(raw: str) -> str:
    """Page slugs are path-like: "About Us" -> "/about-us", "/" stays "/"."""
    raw = (raw or "").strip()
    if raw in ("", "/"):
        return "/"
    parts = [slugify(p, fallback="") for p in raw.strip("/").split("/")]
    parts = [p for p in parts if p]
    return "/" + "/".join(parts) if parts else "/"


def get_page_or_404(page_id: int) -> SitePage:
    page = db.session.get(SitePage, page_id)
    if not page:
        raise NotFound("Page not found.")
    return page


def get_block_or_404(block_id: int) -> SiteBlock:
    block = db.session.get(SiteBlock, block_id)
    if not block:
        raise NotFound("Block not found.")
    return block


# --- Pages ---

def _ensure_unique_slug(slug: str, exclude_id=None):
    q = SitePage.query.filter(SitePage.slug == slug)
    if exclude_id:
        q = q.filter(SitePage.id != exclude_id)
    if q.first():
        raise ConflictError(f"A page already uses the slug '{slug}'.")


def create_page(viewer: Viewer, data: dict) -> SitePage:
    require_admin(viewer)
    title = (data.get("title") or "").strip() or "New Page"
    slug = normalize_page_slug(data.get("slug") or title)
    _ensure_unique_slug(slug)

    seo = data.get("seo") or {}
    if not isinstance(seo, dict):
        raise ValidationError("SEO settings must be an object.")

    page = SitePage(title=title, slug=slug, description=data.get("description"), seo=seo, status="draft")
    db.session.add(page)
    db.session.commit()
    return page


def update_page(viewer: Viewer, page: SitePage, data: dict) -> SitePage:
    require_admin(viewer)
    if "title" in data:
        title = (data.get("title") or "").strip()
        if not title:
            raise ValidationError("Page title is required.")
        page.title = title
    if "slug" in data:
        slug = normalize_page_slug(data.get("slug"))
        _ensure_unique_slug(slug, exclude_id=page.id)
        page.slug = slug
    if "description" in data:
        page.description = data.get("description")
    if "seo" in data:
        if not isinstance(data["seo"], dict):
            raise ValidationError("SEO settings must be an object.")
        page.seo = {**(page.seo or {}), **data["seo"]}
    db.session.commit()
    return page


def set_page_published(viewer: Viewer, page: SitePage, published: bool) -> SitePage:
    require_admin(viewer)
    if published:
        page.status = "published"
        page.published_at = datetime.utcnow()
    else:
        page.status = "draft"
    db.session.commit()
    logger.info("[SITE] Page %s %s", page.slug, page.status)
    return page


def delete_page(viewer: Viewer, page: SitePage):
    require_admin(viewer)
    db.session.delete(page)
    db.session.commit()


def published_page_by_slug(slug: str):
    """Public render: the page plus its visible blocks in order."""
    page = SitePage.query.filter_by(slug=normalize_page_slug(slug), status="published").first()
    if not page:
        raise NotFound("Page not found.")
    blocks = [b for b in page.blocks if b.visible]
    return page, blocks


# --- Blocks ---

def _check_block_type(block_type: str) -> str:
    if block_type not in BLOCK_TYPES:
        raise ValidationError(f"Block type must be one of {', '.join(BLOCK_TYPES)}.")
    return block_type


def add_block(viewer: Viewer, page: SitePage, data: dict) -> SiteBlock:
    """New blocks go to the end unless a position is given."""
    require_admin(viewer)
    content = data.get("content") or {}
    if not isinstance(content, dict):
        raise ValidationError("Block content must be an object.")

    parent_id = data.get("parent_block_id")
    if parent_id:
        parent = get_block_or_404(parent_id)
        if parent.page_id != page.id:
            raise ValidationError("Parent block belongs to another page.")

    position = data.get("position")
    if position is None:
        position = max((b.position for b in page.blocks), default=-1) + 1

    block = SiteBlock(
        page_id=page.id,
        parent_block_id=parent_id or None,
        type=_check_block_type(data.get("type")),
        content=content,
        position=int(position),
        visible=bool(data.get("visible", True)),
    )
    db.session.add(block)
    db.session.commit()
    return block


def update_block(viewer: Viewer, block: SiteBlock, data: dict) -> SiteBlock:
    require_admin(viewer)
    if "type" in data:
        block.type = _check_block_type(data["type"])
    if "content" in data:
        if not isinstance(data["content"], dict):
            raise ValidationError("Block content must be an object.")
        block.content = data["content"]
    if "visible" in data:
        block.visible = bool(data["visible"])
    db.session.commit()
    return block


def delete_block(viewer: Viewer, block: SiteBlock):
    require_admin(viewer)
    page = block.page
    remaining = sorted((b for b in page.blocks if b.id != block.id), key=lambda b: b.position)
    for b in remaining:
        if b.parent_block_id == block.id:
            b.parent_block_id = None
    db.session.delete(block)
    db.session.flush()
    # close the gap
    for i, b in enumerate(remaining):
        b.position = i
    db.session.commit()


def reorder_blocks(viewer: Viewer, page: SitePage, block_ids) -> list:
    """`block_ids` must list every block on the page exactly once."""
    require_admin(viewer)
    blocks = {b.id: b for b in page.blocks}
    try:
        ordered = [int(x) for x in (block_ids or [])]
    except (TypeError, ValueError):
        raise ValidationError("Block ids must be numbers.")

    if sorted(ordered) != sorted(blocks.keys()):
        raise ValidationError("Reorder must include every block on the page exactly once.")

    for i, block_id in enumerate(ordered):
        blocks[block_id].position = i
    db.session.commit()
    return [blocks[i] for i in ordered]


# --- Blog ---

def _unique_post_slug(title: str, exclude_id=None) -> str:
    base = slugify(title, fallback="post")
    slug, n = base, 2
    while True:
        q = BlogPost.query.filter(BlogPost.slug == slug)
        if exclude_id:
            q = q.filter(BlogPost.id != exclude_id)
        if not q.first():
            return slug
        slug = f"{base}-{n}"
        n += 1


def _check_tags(tags) -> list:
    if tags is None:
        return []
    if isinstance(tags, str):
        tags = [t.strip() for t in tags.split(",")]
    if not isinstance(tags, list):
        raise ValidationError("Tags must be a list.")
    return [str(t).strip() for t in tags if str(t).strip()]


def create_post(viewer: Viewer, data: dict) -> BlogPost:
    """
    Admins post freely; sponsors post within their tier allowance.
    """
    account_id = require_account(viewer)
    sponsor = None
    if not viewer.is_admin:
        sponsor = sponsor_profile_for(viewer)
        if not sponsor:
            raise PermissionDenied("Only admins and sponsors can write blog posts.")
        consume_blog_post(sponsor)

    title = (data.get("title") or "").strip()
    if not title:
        raise ValidationError("Post title is required.")

    post = BlogPost(
        author_id=account_id,
        sponsor_id=sponsor.id if sponsor else None,
        title=title,
        slug=_unique_post_slug(data.get("slug") or title),
        excerpt=data.get("excerpt"),
        content=data.get("content"),
        cover_image_url=data.get("cover_image_url"),
        tags=_check_tags(data.get("tags")),
        featured=bool(data.get("featured", False)) and viewer.is_admin,
    )
    db.session.add(post)
    db.session.commit()
    return post


def _ensure_can_edit_post(viewer: Viewer, post: BlogPost):
    require_account_or_admin(viewer)
    if not viewer.is_admin and post.author_id != viewer.account_id:
        raise PermissionDenied("You can only edit your own posts.")


def update_post(viewer: Viewer, post: BlogPost, data: dict) -> BlogPost:
    _ensure_can_edit_post(viewer, post)
    if "title" in data:
        title = (data.get("title") or "").strip()
        if not title:
            raise ValidationError("Post title is required.")
        post.title = title
    if "slug" in data:
        post.slug = _unique_post_slug(data.get("slug") or post.title, exclude_id=post.id)
    for key in ("excerpt", "content", "cover_image_url"):
        if key in data:
            setattr(post, key, data[key])
    if "tags" in data:
        post.tags = _check_tags(data["tags"])
    if "featured" in data and viewer.is_admin:
        post.featured = bool(data["featured"])
    db.session.commit()
    return post


def set_post_published(viewer: Viewer, post: BlogPost, published: bool) -> BlogPost:
    _ensure_can_edit_post(viewer, post)
    post.status = "published" if published else "draft"
    if published and not post.published_at:
        post.published_at = datetime.utcnow()
    db.session.commit()
    return post


def delete_post(viewer: Viewer, post: BlogPost):
    _ensure_can_edit_post(viewer, post)
    db.session.delete(post)
    db.session.commit()


def published_posts(tag: str = None, limit: int = 20):
    q = BlogPost.query.filter(BlogPost.status == "published")
    posts = q.order_by(BlogPost.featured.desc(), BlogPost.published_at.desc()).all()
    if tag:
        posts = [p for p in posts if tag in (p.tags or [])]
    return posts[:limit]
